"""LLM access: provider clients and the circuit validator built on them."""

from .client import (
    LLMClient, MockLLMClient, OpenAICompatibleClient, GeminiClient, make_client,
)
from .validator import (
    ValidationResult, FAILED_VALIDATION, SYSTEM_INSTRUCTION,
    CircuitValidator, build_validation_request,
)

__all__ = [
    # Clients
    "LLMClient", "MockLLMClient", "OpenAICompatibleClient", "GeminiClient", "make_client",
    # Validator
    "ValidationResult", "FAILED_VALIDATION", "SYSTEM_INSTRUCTION",
    "CircuitValidator", "build_validation_request",
]
