"""
Sketch synthesizer: turns a board snapshot into Arduino sketch text.

One sketch is produced per controller (PER_CONTROLLER mode) or a single
sketch for the whole board (GLOBAL mode).  Only LEDs and Buttons take part:

  - LEDs are declared first (``ledPin0``, ``ledPin1``, ...), then Buttons
    (``buttonPin0``, ...), in store order.
  - setup() configures LEDs as OUTPUT and Buttons as INPUT_PULLUP.
  - loop() links the first Button to the first LED: pressed (LOW, given
    the pull-up) drives the LED HIGH, released drives it LOW.  Additional
    LEDs / Buttons are declared but not linked.

Synthesis is a pure function of the snapshot; identical snapshots give
byte-identical text.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Sequence

from electrasim.catalog import ComponentKind
from electrasim.workspace.models import AssignmentMode, Entity, Snapshot

log = logging.getLogger("electrasim.firmware")

GLOBAL_SKETCH_ID = "global"

HEADER_TITLE = "ElectraSim Generated Sketch"
NO_COMPONENTS_ASSIGNED = "// No components assigned to this controller."
NO_COMPONENTS_PLACED = "// No components placed yet."
ADD_LED_AND_BUTTON = "// Add an LED and a Button to see interactive logic!"


def synthesize_sketch(
    peripherals: Sequence[Entity],
    *,
    controller: Entity | None = None,
) -> str:
    """Render one sketch from an ordered list of peripherals.

    Parameters
    ----------
    peripherals : Sequence[Entity]
        Peripherals in store order.  Kinds other than LED / Button are
        ignored.
    controller : Entity, optional
        The controller the sketch is for; named in the header comment.
        Omitted in GLOBAL mode.
    """
    leds = [p for p in peripherals if p.kind is ComponentKind.LED]
    buttons = [p for p in peripherals if p.kind is ComponentKind.BUTTON]

    lines = _header(controller)

    if not leds and not buttons:
        lines.append(NO_COMPONENTS_ASSIGNED if controller is not None else NO_COMPONENTS_PLACED)
        lines.append("")
        lines.extend(["void setup() {", "}", "", "void loop() {", "}"])
        return "\n".join(lines)

    skipped = [p for p in leds + buttons if p.pin is None]
    leds = [p for p in leds if p.pin is not None]
    buttons = [p for p in buttons if p.pin is not None]

    # ── Declarations ──
    for p in skipped:
        lines.append(f"// {p.id} has no pin assigned (skipped)")
    for i, led in enumerate(leds):
        lines.append(f"const int ledPin{i} = {led.pin};")
    for i, btn in enumerate(buttons):
        lines.append(f"const int buttonPin{i} = {btn.pin};")
    lines.append("")

    # ── setup() ──
    lines.append("void setup() {")
    for i in range(len(leds)):
        lines.append(f"  pinMode(ledPin{i}, OUTPUT);")
    for i in range(len(buttons)):
        lines.append(f"  pinMode(buttonPin{i}, INPUT_PULLUP);")
    lines.append("}")
    lines.append("")

    # ── loop() ──
    lines.append("void loop() {")
    if leds and buttons:
        lines.extend(_link_first_button_to_first_led(buttons[0], leds[0]))
    else:
        lines.append(f"  {ADD_LED_AND_BUTTON}")
    lines.append("}")

    return "\n".join(lines)


def synthesize(snapshot: Snapshot, mode: AssignmentMode) -> dict[str, str]:
    """Sketch text keyed by controller id (or GLOBAL_SKETCH_ID in GLOBAL mode)."""
    if mode is AssignmentMode.GLOBAL:
        return {GLOBAL_SKETCH_ID: synthesize_sketch(snapshot.peripherals())}

    return {
        ctrl.id: synthesize_sketch(snapshot.owned_by(ctrl.id), controller=ctrl)
        for ctrl in snapshot.controllers()
    }


def write_sketches(sketches: dict[str, str], output_dir: Path) -> list[Path]:
    """Write each sketch to ``<output_dir>/<id>/<id>.ino`` (Arduino IDE layout)."""
    written: list[Path] = []
    for sketch_id, text in sketches.items():
        path = output_dir / sketch_id / f"{sketch_id}.ino"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text + "\n", encoding="utf-8")
        written.append(path)
        log.info("Sketch written to %s", path)
    return written


def _header(controller: Entity | None) -> list[str]:
    lines = ["/**", f" * {HEADER_TITLE}"]
    if controller is not None:
        lines.append(f" * Controller: {controller.label or '?'} ({controller.id})")
    lines.extend([" */", ""])
    return lines


def _link_first_button_to_first_led(button: Entity, led: Entity) -> Iterable[str]:
    return [
        f"  // Logical Link: If button (Pin {button.pin}) is LOW, turn on LED (Pin {led.pin})",
        "  int state = digitalRead(buttonPin0);",
        "  if (state == LOW) {",
        "    digitalWrite(ledPin0, HIGH);",
        "  } else {",
        "    digitalWrite(ledPin0, LOW);",
        "  }",
    ]
