"""Tests for the LLM circuit validator and client selection.

Validates:
  - the request carries components and terminal-level connections
  - any client failure yields the fixed FAILED_VALIDATION result
  - the offline mock client flags common beginner mistakes
"""

from __future__ import annotations

import json
import unittest

from electrasim.config import Settings
from electrasim.llm import (
    FAILED_VALIDATION, CircuitValidator, GeminiClient, MockLLMClient,
    OpenAICompatibleClient, ValidationResult, build_validation_request, make_client,
)
from electrasim.workspace import store
from electrasim.workspace.models import Connection, Entity, Snapshot
from electrasim.catalog import ComponentKind
from tests.board_fixture import make_single_board_snapshot


class _FixedClient:
    def __init__(self, reply):
        self.reply = reply
        self.calls = []

    def complete_json(self, system: str, user: str) -> dict:
        self.calls.append((system, user))
        return self.reply


class _FailingClient:
    def complete_json(self, system: str, user: str) -> dict:
        raise ConnectionError("network unreachable")


def _wired_snapshot() -> Snapshot:
    snap = make_single_board_snapshot()
    return store.add_connection(snap, Connection("led_0", "anode", "uno_0", "D12"))


class TestBuildRequest(unittest.TestCase):

    def test_request_shape(self):
        request = build_validation_request(_wired_snapshot())
        self.assertEqual(
            request["components"][0], {"id": "uno_0", "type": "uno", "value": None})
        self.assertEqual(len(request["components"]), 3)
        self.assertEqual(request["connections"], [{"from": "led_0.anode", "to": "uno_0.D12"}])

    def test_empty_board(self):
        self.assertEqual(build_validation_request(Snapshot()),
                         {"components": [], "connections": []})


class TestCircuitValidator(unittest.TestCase):

    def test_valid_reply_passes_through(self):
        client = _FixedClient({"isValid": True, "message": "Looks fine.", "suggestions": []})
        result = CircuitValidator(client).validate(_wired_snapshot())
        self.assertEqual(result, ValidationResult(isValid=True, message="Looks fine."))
        system, user = client.calls[0]
        self.assertIn("electronics engineer", system)
        self.assertIn('"led_0.anode"', user)

    def test_transport_failure_returns_fixed_result(self):
        result = CircuitValidator(_FailingClient()).validate(_wired_snapshot())
        self.assertFalse(result.isValid)
        self.assertEqual(result.message, "Unable to validate circuit at this time.")
        self.assertEqual(result.suggestions,
                         ["Check your internet connection", "Ensure the circuit is not empty"])

    def test_malformed_reply_returns_fixed_result(self):
        result = CircuitValidator(_FixedClient({"valid": "maybe"})).validate(Snapshot())
        self.assertEqual(result, FAILED_VALIDATION)

    def test_fixed_result_is_not_shared(self):
        result = CircuitValidator(_FailingClient()).validate(Snapshot())
        result.suggestions.append("mutated")
        self.assertEqual(len(FAILED_VALIDATION.suggestions), 2)

    def test_unconfigured_gemini_degrades(self):
        result = CircuitValidator(GeminiClient(api_key="")).validate(Snapshot())
        self.assertEqual(result, FAILED_VALIDATION)


class TestMockClient(unittest.TestCase):

    def _review(self, snapshot: Snapshot) -> ValidationResult:
        return CircuitValidator(MockLLMClient()).validate(snapshot)

    def test_empty_circuit(self):
        result = self._review(Snapshot())
        self.assertFalse(result.isValid)
        self.assertEqual(result.message, "The circuit is empty.")

    def test_led_without_resistor(self):
        result = self._review(make_single_board_snapshot())
        self.assertFalse(result.isValid)
        self.assertTrue(any("resistor" in s for s in result.suggestions))

    def test_clean_circuit(self):
        snap = make_single_board_snapshot()
        snap = store.insert(snap, Entity(id="r1", kind=ComponentKind.RESISTOR, value="220Ω"))
        result = self._review(snap)
        self.assertTrue(result.isValid)
        self.assertEqual(result.suggestions, [])

    def test_reads_circuit_from_user_text(self):
        user = "Circuit Data: " + json.dumps({
            "components": [{"id": "b", "type": "battery", "value": "9V"}],
            "connections": [],
        })
        reply = MockLLMClient().complete_json(system="", user=user)
        self.assertFalse(reply["isValid"])
        self.assertEqual(len(reply["suggestions"]), 2)


class TestMakeClient(unittest.TestCase):

    def test_provider_selection(self):
        self.assertIsInstance(make_client(Settings()), MockLLMClient)
        self.assertIsInstance(make_client(Settings(llm_provider="openai")),
                              OpenAICompatibleClient)
        client = make_client(Settings(llm_provider="gemini", gemini_model="gemini-x"))
        self.assertIsInstance(client, GeminiClient)
        self.assertEqual(client.model, "gemini-x")


if __name__ == "__main__":
    unittest.main()
