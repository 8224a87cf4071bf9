"""Template and theme registry for resume rendering.

Both registries are built once at import time and never change.  Lookups
are total: an unknown id resolves to the designated default instead of
raising, so the compositor never sees an unresolved key.
"""

from __future__ import annotations

from types import MappingProxyType

from resumify.templates.base import (
    FontFamily,
    FontSize,
    Palette,
    Spacing,
    TemplateDescriptor,
)
from resumify.templates.layouts import LAYOUTS
from resumify.templates.themes import THEMES

__all__ = [
    "DEFAULT_TEMPLATE_SETTINGS",
    "Palette",
    "TemplateDescriptor",
    "is_registered_template",
    "is_registered_theme",
    "list_templates",
    "list_themes",
    "resolve_template",
    "resolve_theme",
]

_TEMPLATES = MappingProxyType({t.id: t for t in LAYOUTS})
_THEMES = MappingProxyType({p.id: p for p in THEMES})

# Second registered template ("modern"), first registered theme ("blue").
DEFAULT_TEMPLATE = LAYOUTS[1]
DEFAULT_THEME = THEMES[0]

DEFAULT_TEMPLATE_SETTINGS: MappingProxyType[str, str] = MappingProxyType(
    {
        "template": DEFAULT_TEMPLATE.id,
        "color_theme": DEFAULT_THEME.id,
        "font_size": FontSize.MEDIUM.value,
        "spacing": Spacing.NORMAL.value,
        "font": FontFamily.SANS_SERIF.value,
    }
)


def resolve_template(template_id: str | None) -> TemplateDescriptor:
    """Return the descriptor registered under *template_id*, or the default."""
    if template_id is None:
        return DEFAULT_TEMPLATE
    return _TEMPLATES.get(template_id, DEFAULT_TEMPLATE)


def resolve_theme(theme_id: str | None) -> Palette:
    """Return the palette registered under *theme_id*, or the default."""
    if theme_id is None:
        return DEFAULT_THEME
    return _THEMES.get(theme_id, DEFAULT_THEME)


def is_registered_template(template_id: str) -> bool:
    return template_id in _TEMPLATES


def is_registered_theme(theme_id: str) -> bool:
    return theme_id in _THEMES


def list_templates() -> list[TemplateDescriptor]:
    """Return all templates in registration order."""
    return list(LAYOUTS)


def list_themes() -> list[Palette]:
    """Return all themes in registration order."""
    return list(THEMES)
