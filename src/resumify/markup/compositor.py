"""Markup compositor.

``compose`` maps a resume snapshot, a template descriptor, a palette and
size settings onto a :class:`MarkupTree`.  It performs no I/O, never
raises for missing optional data and is idempotent: the print pipeline
and the live preview call it independently and must agree.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import TYPE_CHECKING, Any

from resumify.exceptions import CompositionError
from resumify.markup.tree import (
    ContactItem,
    Header,
    Item,
    Link,
    MarkupTree,
    Section,
    SectionKind,
    Style,
    TextLine,
)
from resumify.services.resume_data import complete_template_settings
from resumify.templates import resolve_template, resolve_theme
from resumify.templates.base import (
    FONT_SCALES,
    FONT_STACKS,
    SPACING_SCALES,
    FontFamily,
    FontSize,
    Spacing,
    format_date_range,
    format_month_year,
    strip_protocol,
)

if TYPE_CHECKING:
    from resumify.services.resume_data import ResumeData, TemplateSettings
    from resumify.templates.base import Palette, TemplateDescriptor

__all__ = [
    "BULLET_MARKERS",
    "SECTION_TITLES",
    "compose",
    "compose_resume",
    "resolve_style",
    "section_title",
    "split_text",
]

BULLET_MARKERS = ("•", "-")

SECTION_TITLES: dict[SectionKind, str] = {
    SectionKind.SUMMARY: "Professional Summary",
    SectionKind.EXPERIENCE: "Professional Experience",
    SectionKind.EDUCATION: "Education",
    SectionKind.PROJECTS: "Projects",
    SectionKind.COURSEWORK: "Relevant Coursework",
    SectionKind.TECHNICAL_SKILLS: "Technical Skills",
    SectionKind.SKILLS: "Skills",
    SectionKind.LANGUAGES: "Languages",
    SectionKind.ACHIEVEMENTS: "Achievements",
    SectionKind.CERTIFICATIONS: "Certifications",
}

_CONTACT_FIELDS = ("email", "phone", "location", "website", "linkedin", "github")


# ----------------------------------------------------------------------
# Small helpers


def _clean(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _items(values: Any) -> Iterable[Any]:
    # A scalar, string or mapping stored where a list belongs composes as empty.
    if isinstance(values, str | bytes | Mapping) or not isinstance(values, Iterable):
        return ()
    return values


def _strings(values: Any) -> tuple[str, ...]:
    return tuple(s for s in (_clean(v) for v in _items(values)) if s)


def _entries(values: Any) -> list[Mapping[str, Any]]:
    return [v for v in _items(values) if isinstance(v, Mapping)]


def _parse(enum_type: type, value: Any, default: Any) -> Any:
    try:
        return enum_type(value)
    except ValueError:
        return default


def _external_href(url: str) -> str:
    if url.startswith(("http://", "https://")):
        return url
    return f"https://{url}"


def split_text(text: str | None) -> tuple[TextLine, ...]:
    """Split free text on newlines.

    Lines starting with ``•`` or ``-`` are kept verbatim as pre-bulleted
    lines; everything else becomes a paragraph line.  Blank lines drop.
    """
    lines: list[TextLine] = []
    for raw in _clean(text).splitlines():
        line = raw.strip()
        if not line:
            continue
        lines.append(TextLine(text=line, bullet=line.startswith(BULLET_MARKERS)))
    return tuple(lines)


def _joined(*parts: str) -> str:
    return " • ".join(p for p in parts if p)


# ----------------------------------------------------------------------
# Style resolution


def resolve_style(
    descriptor: TemplateDescriptor,
    palette: Palette,
    size_settings: Mapping[str, Any],
) -> Style:
    """Look up fixed type/spacing tiers; templates may force font or spacing."""
    font_size = _parse(FontSize, size_settings.get("font_size"), FontSize.MEDIUM)
    spacing = descriptor.spacing or _parse(Spacing, size_settings.get("spacing"), Spacing.NORMAL)
    font = descriptor.font_family or _parse(
        FontFamily, size_settings.get("font"), FontFamily.SANS_SERIF
    )
    return Style(
        descriptor=descriptor,
        palette=palette,
        type_scale=FONT_SCALES[font_size],
        spacing=SPACING_SCALES[spacing],
        font_stack=FONT_STACKS[font],
    )


# ----------------------------------------------------------------------
# Header


def _compose_header(info: Mapping[str, Any]) -> Header:
    name = " ".join(p for p in (_clean(info.get("first_name")), _clean(info.get("last_name"))) if p)

    contacts: list[ContactItem] = []
    for field in _CONTACT_FIELDS:
        value = _clean(info.get(field))
        if not value:
            continue
        if field == "email":
            contacts.append(ContactItem(field, value, f"mailto:{value}"))
        elif field == "phone":
            contacts.append(ContactItem(field, value, f"tel:{value.replace(' ', '')}"))
        elif field == "location":
            contacts.append(ContactItem(field, value))
        else:
            contacts.append(ContactItem(field, strip_protocol(value), _external_href(value)))

    photo = _clean(info.get("profile_photo_url")) or None
    return Header(name=name, contacts=tuple(contacts), photo_url=photo)


# ----------------------------------------------------------------------
# Sections


def _summary(data: ResumeData) -> dict | None:
    lines = split_text(data.get("summary"))
    return {"lines": lines} if lines else None


def _experience(data: ResumeData) -> dict | None:
    entries = _entries(data.get("experience"))
    if not entries:
        return None
    items = tuple(
        Item(
            title=_clean(e.get("position")),
            subtitle=_joined(_clean(e.get("company")), _clean(e.get("location"))),
            dates=format_date_range(
                e.get("start_date"), e.get("end_date"), bool(e.get("current"))
            ),
            lines=split_text(e.get("description")),
            bullets=_strings(e.get("achievements")),
        )
        for e in entries
    )
    return {"items": items}


def _education(data: ResumeData) -> dict | None:
    entries = _entries(data.get("education"))
    if not entries:
        return None
    items: list[Item] = []
    for e in entries:
        degree = _clean(e.get("degree"))
        field = _clean(e.get("field"))
        gpa = _clean(e.get("gpa"))
        items.append(
            Item(
                title=f"{degree} in {field}" if degree and field else degree or field,
                subtitle=_joined(_clean(e.get("institution")), _clean(e.get("location"))),
                dates=format_date_range(
                    e.get("start_date"), e.get("end_date"), bool(e.get("current"))
                ),
                detail_label="GPA" if gpa else "",
                detail=gpa,
                bullets=_strings(e.get("achievements")),
            )
        )
    return {"items": tuple(items)}


def _project_dates(entry: Mapping[str, Any]) -> str:
    start = format_month_year(entry.get("start_date"))
    if not start:
        return ""
    end = format_month_year(entry.get("end_date"))
    return f"{start} - {end}" if end else start


def _projects(data: ResumeData) -> dict | None:
    entries = _entries(data.get("projects"))
    if not entries:
        return None
    items: list[Item] = []
    for e in entries:
        technologies = ", ".join(_strings(e.get("technologies")))
        links: list[Link] = []
        url = _clean(e.get("url"))
        if url:
            links.append(Link("Live Demo", _external_href(url)))
        github = _clean(e.get("github"))
        if github:
            links.append(Link("GitHub", _external_href(github)))
        items.append(
            Item(
                title=_clean(e.get("name")),
                dates=_project_dates(e),
                lines=split_text(e.get("description")),
                detail_label="Technologies" if technologies else "",
                detail=technologies,
                bullets=_strings(e.get("highlights")),
                links=tuple(links),
            )
        )
    return {"items": tuple(items)}


def _coursework(data: ResumeData) -> dict | None:
    names = _strings(c.get("name") for c in _entries(data.get("coursework")))
    return {"text": ", ".join(names)} if names else None


def _technical_skills(data: ResumeData) -> dict | None:
    entries = _entries(data.get("technical_skills"))
    if not entries:
        return None
    items = tuple(
        Item(
            detail_label=_clean(e.get("category")),
            detail=", ".join(_strings(e.get("items"))),
        )
        for e in entries
    )
    return {"items": items}


def _flat_list(key: str) -> Callable[[ResumeData], dict | None]:
    def build(data: ResumeData) -> dict | None:
        values = _strings(data.get(key))  # type: ignore[arg-type]
        return {"text": ", ".join(values)} if values else None

    return build


def _bullet_list(key: str) -> Callable[[ResumeData], dict | None]:
    def build(data: ResumeData) -> dict | None:
        values = _strings(data.get(key))  # type: ignore[arg-type]
        return {"bullets": values} if values else None

    return build


_SECTION_BUILDERS: tuple[tuple[SectionKind, Callable[[ResumeData], dict | None]], ...] = (
    (SectionKind.SUMMARY, _summary),
    (SectionKind.EXPERIENCE, _experience),
    (SectionKind.EDUCATION, _education),
    (SectionKind.PROJECTS, _projects),
    (SectionKind.COURSEWORK, _coursework),
    (SectionKind.TECHNICAL_SKILLS, _technical_skills),
    (SectionKind.SKILLS, _flat_list("skills")),
    (SectionKind.LANGUAGES, _flat_list("languages")),
    (SectionKind.ACHIEVEMENTS, _bullet_list("achievements")),
    (SectionKind.CERTIFICATIONS, _bullet_list("certifications")),
)


def section_title(kind: SectionKind, descriptor: TemplateDescriptor) -> str:
    title = SECTION_TITLES[kind]
    return title.upper() if descriptor.uppercase_headings else title


# ----------------------------------------------------------------------
# Public API


def compose(
    document: ResumeData,
    descriptor: TemplateDescriptor,
    palette: Palette,
    size_settings: Mapping[str, Any],
) -> MarkupTree:
    """Compose *document* into a :class:`MarkupTree`.

    Sections appear in canonical order and only when their backing data is
    non-empty.  A document without ``personal_info`` still composes, just
    without a header.

    Raises:
        CompositionError: If *document* is not a mapping at all.
    """
    if not isinstance(document, Mapping):
        msg = f"Cannot compose {type(document).__name__}; expected a resume mapping"
        raise CompositionError(msg)

    style = resolve_style(descriptor, palette, size_settings)

    info = document.get("personal_info")
    header = _compose_header(info) if isinstance(info, Mapping) and info else None

    sections: list[Section] = []
    for kind, build in _SECTION_BUILDERS:
        content = build(document)
        if content is None:
            continue
        sections.append(Section(kind=kind, title=section_title(kind, descriptor), **content))

    return MarkupTree(
        title=_clean(document.get("title")) or (header.name if header else ""),
        style=style,
        header=header,
        sections=tuple(sections),
    )


def compose_resume(document: ResumeData) -> MarkupTree:
    """Compose using the template, theme and sizes stored on *document*."""
    if not isinstance(document, Mapping):
        msg = f"Cannot compose {type(document).__name__}; expected a resume mapping"
        raise CompositionError(msg)
    settings: TemplateSettings = complete_template_settings(document.get("template_settings"))
    return compose(
        document,
        resolve_template(settings["template"]),
        resolve_theme(settings["color_theme"]),
        settings,
    )
