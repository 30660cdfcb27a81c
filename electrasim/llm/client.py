from __future__ import annotations

import json
import logging
import os
import re
import time
from dataclasses import dataclass, field
from typing import Protocol

import requests

from electrasim.config import DEFAULT_GEMINI_MODEL, Settings

log = logging.getLogger("electrasim.llm")


class LLMClient(Protocol):
    def complete_json(self, system: str, user: str) -> dict:
        ...


def _extract_json(content: str) -> dict:
    """First ``{...}`` block in *content*, parsed."""
    found = re.search(r"\{.*\}", content, flags=re.DOTALL)
    if found is None:
        raise ValueError("No JSON object in model reply.")
    return json.loads(found.group(0))


def _env(name: str, default: str = "") -> str:
    return os.environ.get(name, default)


@dataclass
class MockLLMClient:
    """Offline fallback: rule-of-thumb circuit review without a model.

    Reads the circuit JSON embedded in the user message and flags the
    mistakes beginners make most often.
    """

    def complete_json(self, system: str, user: str) -> dict:
        circuit = _extract_json(user)
        components = circuit.get("components", [])
        connections = circuit.get("connections", [])
        types = [c.get("type") for c in components]

        if not components:
            return {
                "isValid": False,
                "message": "The circuit is empty.",
                "suggestions": ["Place a controller and at least one LED or button."],
            }

        suggestions: list[str] = []
        if "led" in types and "resistor" not in types:
            suggestions.append("Add a current limiting resistor (e.g. 220Ω) in series with each LED.")
        if "ground" not in types and "uno" not in types:
            suggestions.append("Connect the circuit to ground.")
        if "battery" in types and not connections:
            suggestions.append("Wire the battery terminals into the circuit.")

        if suggestions:
            return {
                "isValid": False,
                "message": f"Found {len(suggestions)} potential issue(s).",
                "suggestions": suggestions,
            }
        return {
            "isValid": True,
            "message": "No obvious problems found.",
            "suggestions": [],
        }


@dataclass
class OpenAICompatibleClient:
    """Circuit review through any OpenAI-style ``/chat/completions`` endpoint.

    Reads LLM_BASE_URL, LLM_API_KEY and LLM_MODEL from the environment.
    """
    base_url: str = field(default_factory=lambda: _env("LLM_BASE_URL").rstrip("/"))
    api_key: str = field(default_factory=lambda: _env("LLM_API_KEY"))
    model: str = field(default_factory=lambda: _env("LLM_MODEL"))
    timeout_s: float = 60.0

    def complete_json(self, system: str, user: str) -> dict:
        missing = [name for name, v in (
            ("LLM_BASE_URL", self.base_url),
            ("LLM_API_KEY", self.api_key),
            ("LLM_MODEL", self.model),
        ) if not v]
        if missing:
            raise RuntimeError(f"OpenAI-compatible client not configured: {', '.join(missing)}")

        body = {
            "model": self.model,
            "temperature": 0.2,
            "response_format": {"type": "json_object"},
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
        }
        log.debug("Validation request to %s (model %s)", self.base_url, self.model)
        resp = requests.post(
            f"{self.base_url}/chat/completions",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json=body,
            timeout=self.timeout_s,
        )
        resp.raise_for_status()
        choice = resp.json()["choices"][0]
        return _extract_json(choice["message"]["content"])


@dataclass
class GeminiClient:
    """Circuit review through Google AI Studio.

    Reads GEMINI_API_KEY (and GEMINI_MODEL, default gemini-flash-latest).
    Rate-limit errors are retried with exponential backoff.
    """

    api_key: str = field(default_factory=lambda: _env("GEMINI_API_KEY"))
    model: str = field(default_factory=lambda: _env("GEMINI_MODEL", DEFAULT_GEMINI_MODEL))
    max_retries: int = 3
    base_delay: float = 2.0

    def complete_json(self, system: str, user: str) -> dict:
        if not self.api_key:
            raise RuntimeError("Gemini client not configured: GEMINI_API_KEY")

        import google.generativeai as genai
        from google.api_core.exceptions import ResourceExhausted

        genai.configure(api_key=self.api_key)
        reviewer = genai.GenerativeModel(
            self.model,
            system_instruction=system,
            generation_config={"response_mime_type": "application/json"},
        )

        attempt = 0
        while True:
            try:
                reply = reviewer.generate_content(user)
                return _extract_json(reply.text or "")
            except ResourceExhausted:
                if attempt >= self.max_retries:
                    raise
                delay = self.base_delay * (2 ** attempt)
                attempt += 1
                log.warning("Gemini rate limited, retry %d/%d in %.0fs",
                            attempt, self.max_retries, delay)
                time.sleep(delay)


def make_client(settings: Settings) -> LLMClient:
    """Pick the LLM client named by ``settings.llm_provider``."""
    if settings.llm_provider == "gemini":
        return GeminiClient(model=settings.gemini_model)
    if settings.llm_provider == "openai":
        return OpenAICompatibleClient()
    return MockLLMClient()
