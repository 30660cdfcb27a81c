"""Catalog dataclasses: component kinds, terminals and palette templates."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ComponentKind(Enum):
    """Closed set of entity kinds.  Values are the wire tags used by the UI."""

    CONTROLLER = "uno"
    LED = "led"
    BUTTON = "button"
    BATTERY = "battery"
    RESISTOR = "resistor"
    SWITCH = "switch"
    GROUND = "ground"

    @classmethod
    def parse(cls, value: str) -> "ComponentKind":
        """Parse a wire tag ('led') or member name ('LED').

        Raises ValueError for unknown kinds.
        """
        text = str(value).strip()
        for kind in cls:
            if text == kind.value or text.upper() == kind.name:
                return kind
        raise ValueError(f"Unknown component kind '{value}'")

    @property
    def is_controller(self) -> bool:
        return self is ComponentKind.CONTROLLER

    @property
    def is_peripheral(self) -> bool:
        return self is not ComponentKind.CONTROLLER


@dataclass(frozen=True)
class Terminal:
    id: str
    name: str
    x: float                            # glyph-local, px
    y: float


@dataclass(frozen=True)
class ComponentTemplate:
    kind: ComponentKind
    label: str
    terminals: tuple[Terminal, ...] = field(default_factory=tuple)
    default_value: str | None = None

    @property
    def terminal_ids(self) -> frozenset[str]:
        return frozenset(t.id for t in self.terminals)

    def has_terminal(self, terminal_id: str) -> bool:
        return terminal_id in self.terminal_ids
