"""Tests for HTML serialization of composed resumes."""

from __future__ import annotations

import pytest
from bs4 import BeautifulSoup

from resumify.markup.compositor import compose
from resumify.markup.html import FONT_LINK, render_fragment, render_page
from resumify.templates import list_templates, list_themes, resolve_template, resolve_theme

SIZES = {"font_size": "medium", "spacing": "normal", "font": "sans-serif"}

DOCUMENT = {
    "title": "My Resume",
    "personal_info": {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@x.com",
        "website": "https://jane.dev",
    },
    "summary": "Line one\n• pre-bulleted",
    "experience": [
        {
            "company": "Acme",
            "position": "Engineer",
            "start_date": "2020-01-01",
            "current": True,
            "achievements": ["Did things"],
        }
    ],
    "skills": ["Python", "SQL"],
}


def _tree(template: str = "modern", theme: str = "blue", document: dict = DOCUMENT):
    return compose(document, resolve_template(template), resolve_theme(theme), SIZES)


def test_page_is_a_full_document_with_fonts() -> None:
    html = render_page(_tree())
    soup = BeautifulSoup(html, "html.parser")
    assert html.lstrip().startswith("<!DOCTYPE html>")
    assert soup.title.string == "My Resume - Resume"
    assert soup.find("link", href=FONT_LINK) is not None
    assert soup.find("style") is not None


def test_fragment_has_no_document_shell() -> None:
    html = render_fragment(_tree())
    soup = BeautifulSoup(html, "html.parser")
    assert soup.find("html") is None
    assert soup.find("link") is None
    assert soup.find("style") is not None
    assert soup.find(class_="name").get_text() == "Jane Doe"


def test_sections_render_in_order_with_titles() -> None:
    soup = BeautifulSoup(render_page(_tree()), "html.parser")
    sections = soup.find_all("section")
    assert [s["data-section"] for s in sections] == ["summary", "experience", "skills"]
    titles = [s.find(class_="section-title").get_text() for s in sections]
    assert titles == ["Professional Summary", "Professional Experience", "Skills"]


def test_header_contacts_are_links() -> None:
    soup = BeautifulSoup(render_page(_tree()), "html.parser")
    email = soup.find(class_="contact-email").find("a")
    assert email["href"] == "mailto:jane@x.com"
    website = soup.find(class_="contact-website").find("a")
    assert website["href"] == "https://jane.dev"
    assert website.get_text() == "jane.dev"


def test_item_content_is_rendered() -> None:
    soup = BeautifulSoup(render_page(_tree()), "html.parser")
    experience = soup.find("section", attrs={"data-section": "experience"})
    assert experience.find(class_="item-title").get_text() == "Engineer"
    assert experience.find(class_="item-date").get_text() == "Jan 2020 - Present"
    assert [li.get_text() for li in experience.find_all("li")] == ["Did things"]

    summary = soup.find("section", attrs={"data-section": "summary"})
    bullet = summary.find(class_="bullet")
    assert bullet.get_text() == "• pre-bulleted"


def test_user_text_is_escaped() -> None:
    document = {"personal_info": {"first_name": "<script>", "last_name": "x"}, "skills": ["<b>"]}
    html = render_page(_tree(document=document))
    assert "<script>" not in html
    assert "&lt;script&gt;" in html
    assert "&lt;b&gt;" in html


def test_theme_colours_reach_the_stylesheet() -> None:
    html = render_page(_tree(theme="maroon"))
    assert resolve_theme("maroon").primary in html
    assert resolve_theme("blue").primary not in html


def test_gradient_header_uses_accent() -> None:
    palette = resolve_theme("green")
    html = render_page(_tree("modern", "green"))
    assert f"linear-gradient(135deg, {palette.primary} 0%, {palette.accent} 100%)" in html
    assert "linear-gradient" not in render_page(_tree("minimal", "green"))


def test_header_only_document_has_no_sections() -> None:
    document = {"personal_info": {"first_name": "Jane", "last_name": "Doe", "email": "jane@x.com"}}
    soup = BeautifulSoup(render_page(_tree(document=document)), "html.parser")
    assert soup.find(attrs={"data-block": "header"}) is not None
    assert soup.find_all("section") == []


@pytest.mark.parametrize("template", [t.id for t in list_templates()])
def test_every_template_renders(template: str) -> None:
    html = render_page(_tree(template))
    assert 'data-section="experience"' in html


def test_every_theme_renders() -> None:
    for palette in list_themes():
        assert palette.primary in render_page(_tree(theme=palette.id))
