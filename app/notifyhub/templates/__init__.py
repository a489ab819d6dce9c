"""Template storage, language resolution and placeholder rendering."""

from .renderer import DEFAULT_FIELD_VALUES, TemplateRenderer
from .resolver import ResolvedTemplate, TemplateResolver
from .store import TemplateStore

__all__ = [
    "DEFAULT_FIELD_VALUES",
    "ResolvedTemplate",
    "TemplateRenderer",
    "TemplateResolver",
    "TemplateStore",
]
