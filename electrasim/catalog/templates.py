"""Palette templates: one per ComponentKind.

Terminal coordinates are glyph-local and only used by the wiring layer;
the assignment engine looks at terminal ids when validating connections.
"""

from __future__ import annotations

from electrasim.pins import PIN_DOMAIN, pin_label

from .models import ComponentKind, ComponentTemplate, Terminal


def _controller_terminals() -> tuple[Terminal, ...]:
    # Header row along the top edge of the board glyph, 5V / GND on the left.
    power = (
        Terminal(id="5V", name="5V", x=10, y=60),
        Terminal(id="GND", name="Ground", x=10, y=75),
    )
    digital = tuple(
        Terminal(id=pin_label(p), name=f"Digital {p}", x=40 + 10 * i, y=0)
        for i, p in enumerate(PIN_DOMAIN)
    )
    return power + digital


COMPONENTS: tuple[ComponentTemplate, ...] = (
    ComponentTemplate(
        kind=ComponentKind.CONTROLLER,
        label="Arduino Uno",
        terminals=_controller_terminals(),
    ),
    ComponentTemplate(
        kind=ComponentKind.LED,
        label="Red LED",
        terminals=(
            Terminal(id="anode", name="Anode (+)", x=15, y=35),
            Terminal(id="cathode", name="Cathode (-)", x=25, y=35),
        ),
    ),
    ComponentTemplate(
        kind=ComponentKind.BUTTON,
        label="Push Button",
        terminals=(
            Terminal(id="t1", name="Terminal 1", x=0, y=10),
            Terminal(id="t2", name="Terminal 2", x=40, y=10),
        ),
    ),
    ComponentTemplate(
        kind=ComponentKind.BATTERY,
        label="9V Battery",
        default_value="9V",
        terminals=(
            Terminal(id="pos", name="Positive", x=14, y=5),
            Terminal(id="neg", name="Negative", x=26, y=5),
        ),
    ),
    ComponentTemplate(
        kind=ComponentKind.RESISTOR,
        label="Resistor",
        default_value="220Ω",
        terminals=(
            Terminal(id="t1", name="Terminal 1", x=0, y=10),
            Terminal(id="t2", name="Terminal 2", x=60, y=10),
        ),
    ),
    ComponentTemplate(
        kind=ComponentKind.SWITCH,
        label="Switch",
        terminals=(
            Terminal(id="t1", name="Terminal 1", x=5, y=15),
            Terminal(id="t2", name="Terminal 2", x=35, y=15),
        ),
    ),
    ComponentTemplate(
        kind=ComponentKind.GROUND,
        label="Ground",
        terminals=(
            Terminal(id="gnd", name="Ground", x=15, y=0),
        ),
    ),
)

_BY_KIND: dict[ComponentKind, ComponentTemplate] = {c.kind: c for c in COMPONENTS}


def get_template(kind: ComponentKind) -> ComponentTemplate:
    """Return the palette template for *kind* (every kind has one)."""
    return _BY_KIND[kind]
