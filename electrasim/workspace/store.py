"""Entity store: total, copy-on-write operations over a Snapshot.

Every function takes a Snapshot and returns a Snapshot.  When nothing
changes (unknown id, no-op update) the input object itself is returned,
so ``result is snapshot`` means "no mutation happened".
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable

from .models import Connection, Entity, Snapshot

log = logging.getLogger("electrasim.store")

UPDATABLE_FIELDS = frozenset({"x", "y", "pin", "owner_id", "label", "value"})
_PERIPHERAL_ONLY = frozenset({"pin", "owner_id"})


def insert(snapshot: Snapshot, entity: Entity) -> Snapshot:
    """Append *entity*.  Inserting an id that already exists is a no-op."""
    if entity.id in snapshot:
        log.warning("Refusing duplicate entity id %s", entity.id)
        return snapshot
    if entity.is_controller and (entity.pin is not None or entity.owner_id is not None):
        entity = dataclasses.replace(entity, pin=None, owner_id=None)
    return dataclasses.replace(snapshot, entities=snapshot.entities + (entity,))


def update_fields(snapshot: Snapshot, entity_id: str, **fields: Any) -> Snapshot:
    """Replace the given fields on one entity.

    Raises TypeError for fields that are not updatable (``id``, ``kind`` or
    unknown names).  Pin / owner changes on a controller are dropped.
    """
    unknown = set(fields) - UPDATABLE_FIELDS
    if unknown:
        raise TypeError(f"Cannot update field(s): {', '.join(sorted(unknown))}")

    current = snapshot.get(entity_id)
    if current is None:
        return snapshot

    if current.is_controller:
        fields = {k: v for k, v in fields.items() if k not in _PERIPHERAL_ONLY}

    changes = {k: v for k, v in fields.items() if getattr(current, k) != v}
    if not changes:
        return snapshot

    updated = dataclasses.replace(current, **changes)
    return _replace_entities(snapshot, {entity_id: updated})


def update_many(snapshot: Snapshot, updates: dict[str, dict[str, Any]]) -> Snapshot:
    """Apply several field updates as one new snapshot (used for pin swaps)."""
    result = snapshot
    for entity_id, fields in updates.items():
        result = update_fields(result, entity_id, **fields)
    return result


def remove(snapshot: Snapshot, entity_id: str) -> Snapshot:
    """Delete an entity and everything that referenced it.

    In the same step every peripheral owned by the removed entity gets its
    owner cleared, and every connection touching it is dropped.
    """
    if entity_id not in snapshot:
        return snapshot

    entities: list[Entity] = []
    orphaned = 0
    for e in snapshot.entities:
        if e.id == entity_id:
            continue
        if e.owner_id == entity_id:
            e = dataclasses.replace(e, owner_id=None)
            orphaned += 1
        entities.append(e)

    connections = tuple(c for c in snapshot.connections if not c.touches(entity_id))
    if orphaned:
        log.debug("Removed %s, cleared owner on %d peripheral(s)", entity_id, orphaned)
    return Snapshot(entities=tuple(entities), connections=connections)


def query(snapshot: Snapshot, predicate: Callable[[Entity], bool]) -> list[Entity]:
    return snapshot.query(predicate)


def add_connection(snapshot: Snapshot, connection: Connection) -> Snapshot:
    """Append a connection.  Both endpoints must exist; duplicates are no-ops."""
    if connection.from_id not in snapshot or connection.to_id not in snapshot:
        return snapshot
    if connection in snapshot.connections:
        return snapshot
    return dataclasses.replace(snapshot, connections=snapshot.connections + (connection,))


def remove_connection(snapshot: Snapshot, connection: Connection) -> Snapshot:
    if connection not in snapshot.connections:
        return snapshot
    return dataclasses.replace(
        snapshot,
        connections=tuple(c for c in snapshot.connections if c != connection),
    )


def _replace_entities(snapshot: Snapshot, replacements: dict[str, Entity]) -> Snapshot:
    return dataclasses.replace(
        snapshot,
        entities=tuple(replacements.get(e.id, e) for e in snapshot.entities),
    )
