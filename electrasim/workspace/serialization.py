"""Snapshot serialization: JSON conversion for the web API."""

from __future__ import annotations

from electrasim.catalog import ComponentKind

from .models import Connection, Entity, PinConflict, Snapshot


def entity_to_dict(e: Entity) -> dict:
    """Serialize one Entity.  Controller-only / peripheral-only keys are omitted."""
    d: dict = {
        "id": e.id,
        "type": e.kind.value,
        "x": e.x,
        "y": e.y,
    }
    if e.is_controller:
        d["label"] = e.label
    else:
        d["pin"] = e.pin
        d["owner_id"] = e.owner_id
    if e.value is not None:
        d["value"] = e.value
    return d


def connection_to_dict(c: Connection) -> dict:
    return {
        "from_id": c.from_id,
        "from_terminal": c.from_terminal,
        "to_id": c.to_id,
        "to_terminal": c.to_terminal,
    }


def snapshot_to_dict(snapshot: Snapshot) -> dict:
    """Serialize a Snapshot to a JSON-safe dict."""
    return {
        "components": [entity_to_dict(e) for e in snapshot.entities],
        "connections": [connection_to_dict(c) for c in snapshot.connections],
    }


def conflicts_to_list(conflicts: list[PinConflict]) -> list[dict]:
    return [
        {"pin": c.pin, "owner_id": c.owner_id, "ids": list(c.entity_ids)}
        for c in conflicts
    ]


def parse_snapshot(data: dict) -> Snapshot:
    """Parse a snapshot_to_dict() payload back into a Snapshot."""
    entities = tuple(
        Entity(
            id=c["id"],
            kind=ComponentKind.parse(c["type"]),
            x=float(c.get("x", 0.0)),
            y=float(c.get("y", 0.0)),
            pin=c.get("pin"),
            owner_id=c.get("owner_id"),
            label=c.get("label"),
            value=c.get("value"),
        )
        for c in data.get("components", [])
    )
    connections = tuple(
        Connection(
            from_id=c["from_id"],
            from_terminal=c["from_terminal"],
            to_id=c["to_id"],
            to_terminal=c["to_terminal"],
        )
        for c in data.get("connections", [])
    )
    return Snapshot(entities=entities, connections=connections)
