"""
Circuit validator: asks an LLM to review the board and never fails the caller.

The request sent to the model is the board's components (id, type, value)
plus terminal-level connections (``"id.terminal"`` pairs).  Any transport,
configuration or parse failure is logged and replaced by FAILED_VALIDATION.
"""

from __future__ import annotations

import json
import logging

from pydantic import BaseModel, Field, ValidationError

from electrasim.workspace.models import Snapshot

from .client import LLMClient

log = logging.getLogger("electrasim.validator")

SYSTEM_INSTRUCTION = (
    "You are an expert electronics engineer. Validate the provided circuit "
    "schematic. Check for short circuits, open loops, missing ground, missing "
    "current limiting resistors for LEDs, and general functionality. Return "
    "ONLY a JSON object with the keys isValid (boolean), message (string) and "
    "suggestions (array of strings)."
)


class ValidationResult(BaseModel):
    isValid: bool
    message: str
    suggestions: list[str] = Field(default_factory=list)


FAILED_VALIDATION = ValidationResult(
    isValid=False,
    message="Unable to validate circuit at this time.",
    suggestions=["Check your internet connection", "Ensure the circuit is not empty"],
)


def build_validation_request(snapshot: Snapshot) -> dict:
    """Circuit payload for the validator."""
    return {
        "components": [
            {"id": e.id, "type": e.kind.value, "value": e.value}
            for e in snapshot.entities
        ],
        "connections": [
            {
                "from": f"{c.from_id}.{c.from_terminal}",
                "to": f"{c.to_id}.{c.to_terminal}",
            }
            for c in snapshot.connections
        ],
    }


class CircuitValidator:
    """Runs the LLM review for a snapshot."""

    def __init__(self, client: LLMClient) -> None:
        self.client = client

    def validate(self, snapshot: Snapshot) -> ValidationResult:
        circuit = build_validation_request(snapshot)
        user = (
            "Analyze this electronic circuit and provide a validation report.\n"
            f"Circuit Data: {json.dumps(circuit, ensure_ascii=False)}"
        )
        try:
            raw = self.client.complete_json(system=SYSTEM_INSTRUCTION, user=user)
            result = ValidationResult.model_validate(raw)
        except ValidationError as exc:
            log.error("Validator returned malformed result: %s", exc)
            return FAILED_VALIDATION.model_copy(deep=True)
        except Exception:
            log.exception("Validation error")
            return FAILED_VALIDATION.model_copy(deep=True)

        log.info("Validation finished: valid=%s, %d suggestion(s)",
                 result.isValid, len(result.suggestions))
        return result
