"""Catalog serialization: convert templates to JSON-safe dicts."""

from __future__ import annotations

from typing import Any

from .models import ComponentTemplate
from .templates import COMPONENTS


def template_to_dict(t: ComponentTemplate) -> dict:
    """Serialize a ComponentTemplate to a JSON-safe dict."""
    d: dict[str, Any] = {
        "type": t.kind.value,
        "label": t.label,
        "terminals": [
            {"id": term.id, "name": term.name, "x": term.x, "y": term.y}
            for term in t.terminals
        ],
    }
    if t.default_value is not None:
        d["default_value"] = t.default_value
    return d


def catalog_to_dict() -> dict:
    """Serialize the full palette for the web API."""
    return {
        "component_count": len(COMPONENTS),
        "components": [template_to_dict(t) for t in COMPONENTS],
    }
