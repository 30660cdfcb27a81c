"""Component catalog: kinds, palette templates and their terminals."""

from .models import ComponentKind, Terminal, ComponentTemplate
from .templates import COMPONENTS, get_template
from .serialization import catalog_to_dict, template_to_dict

__all__ = [
    # Models
    "ComponentKind", "Terminal", "ComponentTemplate",
    # Templates
    "COMPONENTS", "get_template",
    # Serialization
    "catalog_to_dict", "template_to_dict",
]
