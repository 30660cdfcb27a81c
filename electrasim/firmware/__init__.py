"""
Firmware module: generates Arduino sketches from the board's pin assignments.
"""

from .sketch import (
    synthesize,
    synthesize_sketch,
    write_sketches,
    GLOBAL_SKETCH_ID,
    NO_COMPONENTS_ASSIGNED,
    NO_COMPONENTS_PLACED,
    ADD_LED_AND_BUTTON,
)
from .report import generate_pin_assignment_report

__all__ = [
    "synthesize",
    "synthesize_sketch",
    "write_sketches",
    "GLOBAL_SKETCH_ID",
    "NO_COMPONENTS_ASSIGNED",
    "NO_COMPONENTS_PLACED",
    "ADD_LED_AND_BUTTON",
    "generate_pin_assignment_report",
]
