"""HTML serialization of a :class:`MarkupTree`.

Per-template treatments are looked up in closed tables keyed by the
descriptor's enums; the Jinja template itself carries no template-id
conditionals.  All styles are inlined so the page is self-contained apart
from the web fonts the render engine waits for.
"""

from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from jinja2 import Environment, PackageLoader, StrictUndefined
from markupsafe import Markup

from resumify.templates.base import HeaderTreatment, SectionDivider

if TYPE_CHECKING:
    from resumify.markup.tree import MarkupTree, Style

__all__ = ["FONT_LINK", "build_stylesheet", "render_fragment", "render_page"]

FONT_LINK = (
    "https://fonts.googleapis.com/css2?family=Inter:wght@400;500;600;700"
    "&family=Merriweather:wght@400;700&family=JetBrains+Mono:wght@400;500;600&display=swap"
)

_TEXT_LIGHT = "#6b7280"
_ON_FILL = "rgba(255,255,255,0.9)"

_HEADER_CSS: dict[HeaderTreatment, str] = {
    HeaderTreatment.SOLID: (
        "background: {primary}; color: #ffffff; padding: 24px; margin: 0 0 20px 0;"
        " text-align: center;"
    ),
    HeaderTreatment.GRADIENT: (
        "background: linear-gradient(135deg, {primary} 0%, {accent} 100%); color: #ffffff;"
        " padding: 24px; margin: 0 0 20px 0; text-align: center;"
    ),
    HeaderTreatment.BORDERED: (
        "text-align: center; padding: 0.5in 0.5in 16px 0.5in;"
        " border-bottom: {rule} {primary}; margin-bottom: 20px;"
    ),
}

_DIVIDER_CSS: dict[SectionDivider, str] = {
    SectionDivider.UNDERLINE: (
        "border-bottom: 1px solid {secondary}; text-decoration: underline;"
        " text-decoration-color: {primary}; text-decoration-thickness: 2px;"
    ),
    SectionDivider.LEFT_BAR: "border-left: 4px solid {primary}; padding-left: 12px;",
    SectionDivider.PLAIN: "font-weight: 600;",
    SectionDivider.RULE: "border-bottom: 1px solid {secondary}; padding-bottom: 6px;",
    SectionDivider.PANEL: (
        "background: {secondary}; padding: 12px; border-left: 4px solid {primary};"
        " border-radius: 4px;"
    ),
}


def build_stylesheet(style: Style) -> Markup:
    """Return the inline stylesheet for *style*.

    Built only from registry constants, so it is marked safe for the
    autoescaping environment.
    """
    d = style.descriptor
    p = style.palette
    ts = style.type_scale
    sp = style.spacing
    colors = {
        "primary": p.primary,
        "secondary": p.secondary,
        "accent": p.accent,
        "rule": d.header_rule,
    }
    header_css = _HEADER_CSS[d.header].format(**colors)
    divider_css = _DIVIDER_CSS[d.divider].format(**colors)
    name_color = "#ffffff" if d.inverted_header else p.primary
    contact_color = _ON_FILL if d.inverted_header else _TEXT_LIGHT
    heading_color = p.text if d.uppercase_headings else p.primary
    heading_case = "text-transform: uppercase; letter-spacing: 2px;" if d.uppercase_headings else ""

    css = f"""
* {{ margin: 0; padding: 0; box-sizing: border-box; }}
body {{ font-family: {style.font_stack}; font-size: {ts.base}; color: {p.text};
  background: {p.background}; line-height: 1.6;
  -webkit-print-color-adjust: exact; print-color-adjust: exact; }}
.container {{ max-width: 8.5in; margin: 0 auto; background: {p.background}; }}
.content-wrapper {{ padding: 0 0.5in 0.5in 0.5in; }}
.header {{ {header_css} }}
.photo {{ width: 96px; height: 96px; border-radius: 50%; object-fit: cover; margin-bottom: 8px; }}
.name {{ font-size: {ts.name}; font-weight: 700; color: {name_color}; margin-bottom: 8px; }}
.contact-info {{ display: flex; justify-content: center; flex-wrap: wrap; gap: 12px;
  color: {contact_color}; }}
.contact-item {{ color: {contact_color}; }}
.contact-item a {{ color: inherit; text-decoration: none; }}
.section {{ margin-bottom: {sp.section}; }}
.section-title {{ font-size: {ts.heading}; font-weight: 700; color: {heading_color};
  margin-bottom: {sp.item}; padding-bottom: 4px; {heading_case} {divider_css} }}
.item {{ margin-bottom: {sp.item}; page-break-inside: avoid; }}
.item-header {{ display: flex; justify-content: space-between; align-items: baseline;
  margin-bottom: 4px; }}
.item-title {{ font-size: {ts.subheading}; font-weight: 600; }}
.item-subtitle, .item-date {{ color: {_TEXT_LIGHT}; font-weight: 500; }}
.item-date {{ white-space: nowrap; }}
.line {{ margin-top: 4px; }}
.line.bullet {{ padding-left: 12px; text-indent: -12px; }}
.detail {{ margin-top: 6px; color: {_TEXT_LIGHT}; }}
.detail strong {{ color: {p.text}; }}
ul.bullets {{ margin-top: 6px; padding-left: 18px; }}
ul.bullets li {{ margin-bottom: 4px; line-height: 1.5; }}
.links {{ margin-top: 6px; display: flex; gap: 12px; }}
.links a {{ color: {p.primary}; text-decoration: none; }}
.flat {{ color: {_TEXT_LIGHT}; }}
@media print {{ .section {{ page-break-inside: avoid; }} }}
"""
    return Markup(css.strip())


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return Environment(
        loader=PackageLoader("resumify", "markup/templates"),
        autoescape=True,
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def _render(tree: MarkupTree, *, standalone: bool) -> str:
    template = _environment().get_template("resume.html.j2")
    return template.render(
        tree=tree,
        stylesheet=build_stylesheet(tree.style),
        standalone=standalone,
        font_link=FONT_LINK,
    )


def render_page(tree: MarkupTree) -> str:
    """Full self-contained HTML page for printing or the public view."""
    return _render(tree, standalone=True)


def render_fragment(tree: MarkupTree) -> str:
    """Body-only HTML for the live preview (no document shell, no font link)."""
    return _render(tree, standalone=False)
