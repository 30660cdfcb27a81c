"""Pin domain: the ordered set of digital pins a peripheral can be assigned to.

Every member is treated as interchangeable; no PWM / analog capability
checks are made when assigning.
"""

from __future__ import annotations

# Arduino Uno digital pins, D0/D1 reserved for serial.
PIN_DOMAIN: tuple[int, ...] = (2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13)


def is_valid_pin(pin: int | None) -> bool:
    """True if *pin* is a member of the pin domain."""
    return pin in PIN_DOMAIN


def pin_label(pin: int | None) -> str:
    """Display label for a pin (e.g. 9 -> 'D9'); '--' when unassigned."""
    if pin is None:
        return "--"
    return f"D{pin}"
