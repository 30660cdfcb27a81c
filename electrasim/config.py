"""Runtime configuration, read from the environment.

``.env`` / ``.env.local`` at the repository root are loaded into
``os.environ`` on import; variables already set in the environment win.

  ELECTRASIM_MODE          global | per_controller   (default per_controller)
  ELECTRASIM_STRICT_PINS   1 / true / yes to reject same-controller pin clashes
  ELECTRASIM_LLM           gemini | openai | mock     (default: gemini if
                           GEMINI_API_KEY is set, else mock)
  GEMINI_API_KEY, GEMINI_MODEL
  LLM_BASE_URL, LLM_API_KEY, LLM_MODEL               (openai-compatible)
  ELECTRASIM_HOST, ELECTRASIM_PORT
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from electrasim.workspace.models import AssignmentMode

log = logging.getLogger("electrasim.config")

ROOT = Path(__file__).resolve().parent.parent

LLM_PROVIDERS = ("gemini", "openai", "mock")
DEFAULT_GEMINI_MODEL = "gemini-flash-latest"


ENV_FILES = (".env", ".env.local")


def read_env_file(path: Path) -> dict[str, str]:
    """``KEY=value`` pairs from a dotenv file; blank lines and ``#`` comments skipped.

    Surrounding quotes are stripped from values.  A missing file reads as empty.
    """
    if not path.is_file():
        return {}
    values: dict[str, str] = {}
    for raw in path.read_text(encoding="utf-8").splitlines():
        entry = raw.strip()
        if not entry or entry.startswith("#") or "=" not in entry:
            continue
        key, _, value = entry.partition("=")
        key = key.strip()
        if key:
            values[key] = value.strip().strip('"').strip("'")
    return values


def _load_env(root: Path = ROOT) -> None:
    # Real environment wins over both files; .env wins over .env.local.
    for name in ENV_FILES:
        for key, value in read_env_file(root / name).items():
            os.environ.setdefault(key, value)


_load_env()


@dataclass(frozen=True)
class Settings:
    """Session and server settings."""

    assignment_mode: AssignmentMode = AssignmentMode.PER_CONTROLLER
    strict_pins: bool = False
    """Reject (instead of allow) two peripherals on the same controller
    sharing a pin.  PER_CONTROLLER mode only."""

    llm_provider: str = "mock"
    gemini_model: str = DEFAULT_GEMINI_MODEL

    host: str = "127.0.0.1"
    port: int = 8000


def _truthy(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Build Settings from *environ* (defaults to ``os.environ``).

    Invalid values are logged and replaced by their defaults.
    """
    env = os.environ if environ is None else environ
    defaults = Settings()

    mode = defaults.assignment_mode
    raw_mode = env.get("ELECTRASIM_MODE")
    if raw_mode:
        try:
            mode = AssignmentMode.parse(raw_mode)
        except ValueError:
            log.warning("Ignoring ELECTRASIM_MODE=%r, using %s", raw_mode, mode.value)

    provider = env.get("ELECTRASIM_LLM", "").strip().lower()
    if not provider:
        provider = "gemini" if env.get("GEMINI_API_KEY") else "mock"
    elif provider not in LLM_PROVIDERS:
        log.warning("Ignoring ELECTRASIM_LLM=%r, using mock", provider)
        provider = "mock"

    port = defaults.port
    raw_port = env.get("ELECTRASIM_PORT")
    if raw_port:
        try:
            port = int(raw_port)
        except ValueError:
            log.warning("Ignoring ELECTRASIM_PORT=%r, using %d", raw_port, port)

    return Settings(
        assignment_mode=mode,
        strict_pins=_truthy(env.get("ELECTRASIM_STRICT_PINS")),
        llm_provider=provider,
        gemini_model=env.get("GEMINI_MODEL") or DEFAULT_GEMINI_MODEL,
        host=env.get("ELECTRASIM_HOST") or defaults.host,
        port=port,
    )
