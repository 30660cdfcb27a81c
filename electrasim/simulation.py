"""Simulation bridge: which LED does a button press drive?

The visual simulator forwards button press / release events here and gets
back the LED to light (or None).  Mirrors the generated sketch: the first
Button is linked to the first LED on the same controller.
"""

from __future__ import annotations

from dataclasses import dataclass

from electrasim.catalog import ComponentKind
from electrasim.workspace.models import AssignmentMode, Snapshot


@dataclass(frozen=True)
class LedSignal:
    led_id: str
    on: bool


def resolve_activation(
    snapshot: Snapshot,
    peripheral_id: str,
    pressed: bool,
    mode: AssignmentMode,
) -> LedSignal | None:
    """LED driven by activating *peripheral_id*, or None if nothing is linked."""
    source = snapshot.get(peripheral_id)
    if source is None or source.kind is not ComponentKind.BUTTON:
        return None

    if mode is AssignmentMode.GLOBAL:
        candidates = snapshot.peripherals()
    else:
        if source.owner_id is None:
            return None
        candidates = snapshot.owned_by(source.owner_id)

    led = next((e for e in candidates if e.kind is ComponentKind.LED), None)
    if led is None:
        return None
    return LedSignal(led_id=led.id, on=pressed)
