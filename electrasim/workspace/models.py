"""Workspace dataclasses: entities, connections, snapshots and outcomes.

A Snapshot is an immutable view of the whole board.  Every mutation
produces a new Snapshot; entities are never changed in place, so a caller
can detect a change with a plain identity check (``new is not old``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Iterator

from electrasim.catalog.models import ComponentKind


class AssignmentMode(Enum):
    """Pin / owner assignment policy, fixed for the lifetime of a session.

    GLOBAL:          single-controller legacy mode.  Pins are unique across
                     all peripherals; conflicts are resolved by swapping.
    PER_CONTROLLER:  multi-controller mode.  Pins are scoped to the owning
                     controller; no swap, no auto-numbering.
    """

    GLOBAL = "global"
    PER_CONTROLLER = "per_controller"

    @classmethod
    def parse(cls, value: str) -> "AssignmentMode":
        text = str(value).strip().lower().replace("-", "_")
        for mode in cls:
            if text == mode.value or text == mode.name.lower():
                return mode
        raise ValueError(f"Unknown assignment mode '{value}'")


class SessionMode(Enum):
    DESIGNING = auto()
    SIMULATING = auto()


class OutcomeStatus(Enum):
    APPLIED = "applied"
    NOOP = "noop"
    REJECTED = "rejected"


class RejectReason(Enum):
    SIMULATION_ACTIVE = "simulation_active"
    PIN_CONFLICT = "pin_conflict"
    INVALID_PIN = "invalid_pin"
    INVALID_OWNER = "invalid_owner"
    INVALID_TERMINAL = "invalid_terminal"


@dataclass(frozen=True)
class Outcome:
    """Result of a mutating operation."""

    status: OutcomeStatus
    reason: RejectReason | None = None
    entity_id: str | None = None

    @property
    def applied(self) -> bool:
        return self.status is OutcomeStatus.APPLIED

    @property
    def rejected(self) -> bool:
        return self.status is OutcomeStatus.REJECTED

    @classmethod
    def ok(cls, entity_id: str | None = None) -> "Outcome":
        return cls(OutcomeStatus.APPLIED, entity_id=entity_id)

    @classmethod
    def noop(cls, entity_id: str | None = None) -> "Outcome":
        return cls(OutcomeStatus.NOOP, entity_id=entity_id)

    @classmethod
    def reject(cls, reason: RejectReason, entity_id: str | None = None) -> "Outcome":
        return cls(OutcomeStatus.REJECTED, reason=reason, entity_id=entity_id)


@dataclass(frozen=True)
class Entity:
    """A controller board or a peripheral placed on the canvas."""

    id: str
    kind: ComponentKind
    x: float = 0.0
    y: float = 0.0
    pin: int | None = None              # peripherals only
    owner_id: str | None = None         # peripherals only, weak ref to a controller id
    label: str | None = None            # controllers only ("A1", "A2", ...)
    value: str | None = None            # e.g. "220Ω" for resistors

    @property
    def is_controller(self) -> bool:
        return self.kind.is_controller

    @property
    def is_peripheral(self) -> bool:
        return self.kind.is_peripheral


@dataclass(frozen=True)
class Connection:
    """A wire between two terminals, as maintained by the wiring layer."""

    from_id: str
    from_terminal: str
    to_id: str
    to_terminal: str

    def touches(self, entity_id: str) -> bool:
        return self.from_id == entity_id or self.to_id == entity_id


@dataclass(frozen=True)
class PinConflict:
    """Two or more peripherals sharing a pin within the same scope."""

    pin: int
    owner_id: str | None                # None in GLOBAL mode
    entity_ids: tuple[str, ...]


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of the entity store at one instant."""

    entities: tuple[Entity, ...] = ()
    connections: tuple[Connection, ...] = field(default_factory=tuple)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.entities)

    def __len__(self) -> int:
        return len(self.entities)

    def __bool__(self) -> bool:
        # An empty board is still a board.
        return True

    def __contains__(self, entity_id: object) -> bool:
        return any(e.id == entity_id for e in self.entities)

    def get(self, entity_id: str) -> Entity | None:
        for e in self.entities:
            if e.id == entity_id:
                return e
        return None

    def ids(self) -> list[str]:
        return [e.id for e in self.entities]

    def query(self, predicate: Callable[[Entity], bool]) -> list[Entity]:
        return [e for e in self.entities if predicate(e)]

    def controllers(self) -> list[Entity]:
        return self.query(lambda e: e.is_controller)

    def peripherals(self) -> list[Entity]:
        return self.query(lambda e: e.is_peripheral)

    def owned_by(self, controller_id: str) -> list[Entity]:
        """Peripherals whose owner is *controller_id*, in store order."""
        return self.query(lambda e: e.is_peripheral and e.owner_id == controller_id)

    def is_controller_id(self, entity_id: str | None) -> bool:
        e = self.get(entity_id) if entity_id is not None else None
        return e is not None and e.is_controller
