"""Assignment policy: default pins / owners, reassignment and deletion.

Two policies exist and a session uses exactly one of them:

  GLOBAL          Pins are unique across every peripheral.  A new peripheral
                  gets the lowest free pin (or None once the domain is
                  exhausted).  Assigning a taken pin swaps with the holder.

  PER_CONTROLLER  Pins are scoped to the owning controller.  A new
                  peripheral gets the first domain pin and the first
                  controller as owner.  Pins are set as requested; with
                  ``strict=True`` a same-owner duplicate is rejected
                  instead of allowed.

All functions are pure and total: they return a new Snapshot plus an
Outcome and never raise for user-level conditions.
"""

from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from typing import NamedTuple

from electrasim.catalog import ComponentKind, get_template
from electrasim.pins import PIN_DOMAIN, is_valid_pin

from . import store
from .models import (
    AssignmentMode, Connection, Entity, Outcome, PinConflict, RejectReason, Snapshot,
)

log = logging.getLogger("electrasim.policy")


class PolicyResult(NamedTuple):
    snapshot: Snapshot
    outcome: Outcome


# ── Defaults on placement ──────────────────────────────────────────

def next_free_pin(snapshot: Snapshot) -> int | None:
    """Lowest pin-domain member not held by any entity, or None."""
    used = {e.pin for e in snapshot.entities if e.pin is not None}
    for pin in PIN_DOMAIN:
        if pin not in used:
            return pin
    return None


def next_controller_label(snapshot: Snapshot) -> str:
    """Label for the next controller: current controller count + 1.

    Labels are never renumbered after a deletion, so a new label can repeat
    one that is still in use.
    """
    return f"A{len(snapshot.controllers()) + 1}"


def default_assignment(
    snapshot: Snapshot,
    kind: ComponentKind,
    mode: AssignmentMode,
) -> tuple[int | None, str | None]:
    """(pin, owner_id) a freshly placed entity of *kind* starts with."""
    if kind.is_controller:
        return None, None
    if mode is AssignmentMode.GLOBAL:
        return next_free_pin(snapshot), None
    controllers = snapshot.controllers()
    owner = controllers[0].id if controllers else None
    return PIN_DOMAIN[0], owner


def new_entity_id(snapshot: Snapshot, kind: ComponentKind) -> str:
    while True:
        candidate = f"{kind.value}_{uuid.uuid4().hex[:8]}"
        if candidate not in snapshot:
            return candidate


def place(
    snapshot: Snapshot,
    kind: ComponentKind,
    x: float,
    y: float,
    mode: AssignmentMode,
    *,
    value: str | None = None,
) -> tuple[Snapshot, Entity]:
    """Create a new entity of *kind* at (x, y) with default assignments."""
    pin, owner_id = default_assignment(snapshot, kind, mode)
    entity = Entity(
        id=new_entity_id(snapshot, kind),
        kind=kind,
        x=x,
        y=y,
        pin=pin,
        owner_id=owner_id,
        label=next_controller_label(snapshot) if kind.is_controller else None,
        value=value if value is not None else get_template(kind).default_value,
    )
    if entity.is_peripheral and pin is None:
        log.warning("Pin domain exhausted, %s placed without a pin", entity.id)
    return store.insert(snapshot, entity), entity


# ── Reassignment ───────────────────────────────────────────────────

def reassign_pin(
    snapshot: Snapshot,
    entity_id: str,
    pin: int | None,
    mode: AssignmentMode,
    *,
    strict: bool = False,
) -> PolicyResult:
    """Move a peripheral to *pin* (None clears the assignment)."""
    target = snapshot.get(entity_id)
    if target is None or target.is_controller:
        return PolicyResult(snapshot, Outcome.noop(entity_id))
    if pin is not None and not is_valid_pin(pin):
        return PolicyResult(snapshot, Outcome.reject(RejectReason.INVALID_PIN, entity_id))
    if target.pin == pin:
        return PolicyResult(snapshot, Outcome.noop(entity_id))

    if mode is AssignmentMode.GLOBAL:
        return _reassign_pin_with_swap(snapshot, target, pin)

    if strict and pin is not None and target.owner_id is not None:
        holders = _pin_holders(snapshot, pin, target.owner_id, exclude=target.id)
        if holders:
            log.warning(
                "Pin D%d already used by %s on %s; rejecting %s",
                pin, holders[0].id, target.owner_id, target.id,
            )
            return PolicyResult(snapshot, Outcome.reject(RejectReason.PIN_CONFLICT, entity_id))

    return PolicyResult(
        store.update_fields(snapshot, entity_id, pin=pin),
        Outcome.ok(entity_id),
    )


def _reassign_pin_with_swap(snapshot: Snapshot, target: Entity, pin: int | None) -> PolicyResult:
    holder = None
    if pin is not None:
        holder = next(
            (e for e in snapshot.entities if e.pin == pin and e.id != target.id),
            None,
        )
    if holder is None:
        return PolicyResult(
            store.update_fields(snapshot, target.id, pin=pin),
            Outcome.ok(target.id),
        )

    log.debug("Swapping pins: %s -> D%s, %s -> D%s", target.id, pin, holder.id, target.pin)
    swapped = store.update_many(snapshot, {
        target.id: {"pin": pin},
        holder.id: {"pin": target.pin},
    })
    return PolicyResult(swapped, Outcome.ok(target.id))


def reassign_owner(
    snapshot: Snapshot,
    entity_id: str,
    owner_id: str | None,
    mode: AssignmentMode,
    *,
    strict: bool = False,
) -> PolicyResult:
    """Attach a peripheral to a controller (None detaches it).

    The pin is kept as is.  Owners are only tracked in PER_CONTROLLER mode;
    in GLOBAL mode this is a no-op.
    """
    target = snapshot.get(entity_id)
    if target is None or target.is_controller or mode is AssignmentMode.GLOBAL:
        return PolicyResult(snapshot, Outcome.noop(entity_id))
    if owner_id is not None and not snapshot.is_controller_id(owner_id):
        return PolicyResult(snapshot, Outcome.reject(RejectReason.INVALID_OWNER, entity_id))
    if target.owner_id == owner_id:
        return PolicyResult(snapshot, Outcome.noop(entity_id))

    if strict and owner_id is not None and target.pin is not None:
        if _pin_holders(snapshot, target.pin, owner_id, exclude=target.id):
            return PolicyResult(snapshot, Outcome.reject(RejectReason.PIN_CONFLICT, entity_id))

    return PolicyResult(
        store.update_fields(snapshot, entity_id, owner_id=owner_id),
        Outcome.ok(entity_id),
    )


def _pin_holders(snapshot: Snapshot, pin: int, owner_id: str, *, exclude: str) -> list[Entity]:
    return snapshot.query(
        lambda e: e.is_peripheral and e.id != exclude and e.pin == pin and e.owner_id == owner_id
    )


# ── Deletion & wiring ──────────────────────────────────────────────

def delete(snapshot: Snapshot, entity_id: str) -> PolicyResult:
    """Remove an entity; owned peripherals are detached in the same step."""
    result = store.remove(snapshot, entity_id)
    if result is snapshot:
        return PolicyResult(snapshot, Outcome.noop(entity_id))
    return PolicyResult(result, Outcome.ok(entity_id))


def connect(snapshot: Snapshot, connection: Connection) -> PolicyResult:
    """Add a wire after checking both terminals exist on their templates."""
    src = snapshot.get(connection.from_id)
    dst = snapshot.get(connection.to_id)
    if src is None or dst is None:
        return PolicyResult(snapshot, Outcome.noop())
    if not get_template(src.kind).has_terminal(connection.from_terminal) \
            or not get_template(dst.kind).has_terminal(connection.to_terminal):
        return PolicyResult(snapshot, Outcome.reject(RejectReason.INVALID_TERMINAL))
    result = store.add_connection(snapshot, connection)
    if result is snapshot:
        return PolicyResult(snapshot, Outcome.noop())
    return PolicyResult(result, Outcome.ok())


def disconnect(snapshot: Snapshot, connection: Connection) -> PolicyResult:
    """Remove a wire; unknown wires are a no-op."""
    result = store.remove_connection(snapshot, connection)
    if result is snapshot:
        return PolicyResult(snapshot, Outcome.noop())
    return PolicyResult(result, Outcome.ok())


# ── Conflict report ────────────────────────────────────────────────

def pin_conflicts(snapshot: Snapshot, mode: AssignmentMode) -> list[PinConflict]:
    """Peripherals sharing a pin within the same scope.

    GLOBAL scope is the whole board.  PER_CONTROLLER scope is one owner;
    unowned peripherals are not wired to any board and never conflict.
    """
    groups: dict[tuple[str | None, int], list[str]] = defaultdict(list)
    for e in snapshot.peripherals():
        if e.pin is None:
            continue
        if mode is AssignmentMode.GLOBAL:
            groups[(None, e.pin)].append(e.id)
        elif e.owner_id is not None:
            groups[(e.owner_id, e.pin)].append(e.id)

    return [
        PinConflict(pin=pin, owner_id=owner, entity_ids=tuple(ids))
        for (owner, pin), ids in groups.items()
        if len(ids) > 1
    ]
