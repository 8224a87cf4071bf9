"""Registered colour themes, in registration order."""

from __future__ import annotations

from resumify.templates.base import Palette

__all__ = ["THEMES"]

_TEXT = "#1e293b"
_BACKGROUND = "#ffffff"

THEMES: tuple[Palette, ...] = (
    Palette("blue", "Professional Blue", "#2563eb", "#dbeafe", "#1e40af", _TEXT, _BACKGROUND),
    Palette("green", "Fresh Green", "#059669", "#d1fae5", "#047857", _TEXT, _BACKGROUND),
    Palette("red", "Bold Red", "#dc2626", "#fee2e2", "#b91c1c", _TEXT, _BACKGROUND),
    Palette("purple", "Royal Purple", "#7c3aed", "#ede9fe", "#6d28d9", _TEXT, _BACKGROUND),
    Palette("orange", "Vibrant Orange", "#ea580c", "#ffedd5", "#c2410c", _TEXT, _BACKGROUND),
    Palette("teal", "Modern Teal", "#0d9488", "#ccfbf1", "#0f766e", _TEXT, _BACKGROUND),
    Palette("gray", "Elegant Gray", "#475569", "#f1f5f9", "#334155", _TEXT, _BACKGROUND),
    Palette("black", "Classic Black", "#171717", "#f5f5f5", "#0a0a0a", _TEXT, _BACKGROUND),
    Palette("maroon", "Deep Maroon", "#881337", "#fce7f3", "#701a32", _TEXT, _BACKGROUND),
)
