"""Descriptor types for resume templates and colour themes.

A template is not code: it is a closed set of visual treatments that the
markup compositor looks up.  Everything here is immutable.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum

__all__ = [
    "FONT_SCALES",
    "FONT_STACKS",
    "SPACING_SCALES",
    "FontFamily",
    "FontSize",
    "HeaderTreatment",
    "Palette",
    "SectionDivider",
    "Spacing",
    "SpacingScale",
    "TemplateDescriptor",
    "TypeScale",
    "format_date_range",
    "format_month_year",
    "strip_protocol",
]


class HeaderTreatment(StrEnum):
    SOLID = "solid"
    BORDERED = "bordered"
    GRADIENT = "gradient"


class SectionDivider(StrEnum):
    UNDERLINE = "underline"
    LEFT_BAR = "left-bar"
    PLAIN = "plain"
    RULE = "rule"
    PANEL = "panel"


class FontFamily(StrEnum):
    SANS_SERIF = "sans-serif"
    SERIF = "serif"
    MONOSPACE = "monospace"


class FontSize(StrEnum):
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"


class Spacing(StrEnum):
    COMPACT = "compact"
    NORMAL = "normal"
    SPACIOUS = "spacious"


@dataclass(frozen=True)
class TemplateDescriptor:
    """Visual treatment for one registered template.

    Attributes:
        id: Registry key stored in ``template_settings.template``.
        name: Display name for the editing client.
        description: One-line blurb for the template picker.
        header: How the name/contact block is set off from the body.
        header_rule: CSS border shorthand used by bordered headers.
        divider: How each section title is set off from its content.
        font_family: Forced font family, or ``None`` to honour the user's choice.
        uppercase_headings: Whether section titles are upper-cased.
        spacing: Forced spacing tier, or ``None`` to honour the user's choice.
    """

    id: str
    name: str
    description: str
    header: HeaderTreatment
    divider: SectionDivider
    header_rule: str = "1px solid"
    font_family: FontFamily | None = None
    uppercase_headings: bool = False
    spacing: Spacing | None = None

    @property
    def inverted_header(self) -> bool:
        """True when header text sits on a filled (coloured) background."""
        return self.header in (HeaderTreatment.SOLID, HeaderTreatment.GRADIENT)


@dataclass(frozen=True)
class Palette:
    """Five named colours applied across a template."""

    id: str
    name: str
    primary: str
    secondary: str
    accent: str
    text: str
    background: str


@dataclass(frozen=True)
class TypeScale:
    base: str
    name: str
    heading: str
    subheading: str


@dataclass(frozen=True)
class SpacingScale:
    section: str
    item: str


FONT_SCALES: dict[FontSize, TypeScale] = {
    FontSize.SMALL: TypeScale(base="10px", name="24px", heading="16px", subheading="12px"),
    FontSize.MEDIUM: TypeScale(base="11px", name="28px", heading="18px", subheading="13px"),
    FontSize.LARGE: TypeScale(base="12px", name="32px", heading="20px", subheading="14px"),
}

SPACING_SCALES: dict[Spacing, SpacingScale] = {
    Spacing.COMPACT: SpacingScale(section="10px", item="6px"),
    Spacing.NORMAL: SpacingScale(section="16px", item="12px"),
    Spacing.SPACIOUS: SpacingScale(section="24px", item="16px"),
}

FONT_STACKS: dict[FontFamily, str] = {
    FontFamily.SANS_SERIF: "'Inter', 'Helvetica', sans-serif",
    FontFamily.SERIF: "'Merriweather', 'Georgia', serif",
    FontFamily.MONOSPACE: "'JetBrains Mono', 'Courier New', monospace",
}

_MONTH_ABBR = [
    "",
    "Jan",
    "Feb",
    "Mar",
    "Apr",
    "May",
    "Jun",
    "Jul",
    "Aug",
    "Sep",
    "Oct",
    "Nov",
    "Dec",
]

_ISO_MONTH = re.compile(r"^\s*(\d{4})-(\d{1,2})")
_PROTOCOL = re.compile(r"^https?://")


def format_month_year(value: str | None) -> str:
    """Return ``Mon YYYY`` for an ISO date/datetime string.

    Anything that does not start with ``YYYY-MM`` (including ``None``)
    yields an empty string instead of raising.
    """
    if not value:
        return ""
    match = _ISO_MONTH.match(str(value))
    if not match:
        return ""
    month = int(match.group(2))
    if not 1 <= month <= 12:
        return ""
    return f"{_MONTH_ABBR[month]} {match.group(1)}"


def format_date_range(start: str | None, end: str | None, is_current: bool = False) -> str:
    """Return ``Jan 2020 - Present`` style ranges.

    A current item always ends in ``Present`` whatever ``end`` holds.
    """
    end_str = "Present" if is_current else format_month_year(end)
    return f"{format_month_year(start)} - {end_str}"


def strip_protocol(url: str) -> str:
    """Remove ``http://`` or ``https://`` for display."""
    return _PROTOCOL.sub("", url)
