"""Pin assignment report: a fixed-width table of who sits on which pin.

Useful for documentation and for checking a board before flashing.
"""

from __future__ import annotations

from electrasim.pins import pin_label
from electrasim.workspace.models import AssignmentMode, Snapshot
from electrasim.workspace.policy import pin_conflicts


def generate_pin_assignment_report(snapshot: Snapshot, mode: AssignmentMode) -> str:
    """Human-readable report of every peripheral's controller and pin."""
    labels = {c.id: c.label or c.id for c in snapshot.controllers()}
    conflicted = {eid for c in pin_conflicts(snapshot, mode) for eid in c.entity_ids}

    lines = [
        "=" * 60,
        "PIN ASSIGNMENT REPORT",
        "=" * 60,
        "",
        f"{'Component':<20} {'Type':<10} {'Controller':<12} {'Pin':<6} {'Note'}",
        "-" * 60,
    ]

    peripherals = snapshot.peripherals()
    for e in peripherals:
        if mode is AssignmentMode.GLOBAL:
            ctrl = "(board)"
        else:
            ctrl = labels.get(e.owner_id, "unassigned") if e.owner_id else "unassigned"
        note = "CONFLICT" if e.id in conflicted else ""
        lines.append(
            f"{e.id:<20} {e.kind.value:<10} {ctrl:<12} {pin_label(e.pin):<6} {note}".rstrip()
        )

    if not peripherals:
        lines.append("(no peripherals placed)")

    lines.extend([
        "",
        "=" * 60,
        f"Controllers: {', '.join(labels.values()) or 'none'}",
        f"Mode: {mode.value}",
        "=" * 60,
    ])
    return "\n".join(lines)
