"""Tests for the markup compositor."""

from __future__ import annotations

import copy

import pytest

from resumify.exceptions import CompositionError
from resumify.markup.compositor import compose, compose_resume, split_text
from resumify.markup.tree import SectionKind
from resumify.templates import resolve_template, resolve_theme
from resumify.templates.base import FONT_STACKS, SPACING_SCALES, FontFamily, Spacing

SIZES = {"font_size": "medium", "spacing": "normal", "font": "sans-serif"}

FULL_DOCUMENT = {
    "id": "abc123",
    "title": "Engineering Resume",
    "personal_info": {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "jane@x.com",
        "phone": "+1 555 0100",
        "location": "Toronto, ON",
        "website": "https://jane.dev",
        "linkedin": "linkedin.com/in/janedoe",
        "github": "https://github.com/janedoe",
    },
    "summary": "Backend engineer.\n• Ships reliable services\n- Mentors juniors",
    "experience": [
        {
            "company": "Acme",
            "position": "Engineer",
            "location": "Remote",
            "start_date": "2020-01-01",
            "end_date": "2023-06-01",
            "current": False,
            "description": "Built APIs.",
            "achievements": ["Cut latency by 40%"],
        }
    ],
    "education": [
        {
            "institution": "UBC",
            "degree": "BSc",
            "field": "Computer Science",
            "start_date": "2016-09-01",
            "end_date": "2020-05-01",
            "current": False,
            "gpa": "3.9",
            "achievements": ["Dean's list"],
        }
    ],
    "projects": [
        {
            "name": "Resumify",
            "description": "Resume builder.",
            "technologies": ["Python", "FastAPI"],
            "start_date": "2023-01-01",
            "end_date": "2023-04-01",
            "url": "resumify.app",
            "github": "https://github.com/janedoe/resumify",
            "highlights": ["500 users"],
        }
    ],
    "coursework": [{"name": "Algorithms"}, {"name": "Databases"}],
    "technical_skills": [{"category": "Languages", "items": ["Python", "Go"]}],
    "skills": ["Leadership", "Communication"],
    "languages": ["English", "French"],
    "achievements": ["Hackathon winner"],
    "certifications": ["AWS SAA"],
}

SECTION_FIELDS = {
    SectionKind.SUMMARY: "summary",
    SectionKind.EXPERIENCE: "experience",
    SectionKind.EDUCATION: "education",
    SectionKind.PROJECTS: "projects",
    SectionKind.COURSEWORK: "coursework",
    SectionKind.TECHNICAL_SKILLS: "technical_skills",
    SectionKind.SKILLS: "skills",
    SectionKind.LANGUAGES: "languages",
    SectionKind.ACHIEVEMENTS: "achievements",
    SectionKind.CERTIFICATIONS: "certifications",
}


def _compose(document: dict, template: str = "modern", theme: str = "blue", sizes=SIZES):
    return compose(document, resolve_template(template), resolve_theme(theme), sizes)


def _section(tree, kind: SectionKind):
    return next(s for s in tree.sections if s.kind is kind)


def test_full_document_has_all_sections_in_canonical_order() -> None:
    tree = _compose(FULL_DOCUMENT)
    assert tree.section_kinds == tuple(SectionKind)


def test_compose_is_deterministic() -> None:
    first = _compose(FULL_DOCUMENT, "creative", "teal")
    second = _compose(copy.deepcopy(FULL_DOCUMENT), "creative", "teal")
    assert first == second
    assert first.dumps() == second.dumps()
    assert first.dumps(standalone=False) == second.dumps(standalone=False)


@pytest.mark.parametrize("kind", list(SectionKind))
def test_empty_section_is_omitted(kind: SectionKind) -> None:
    document = copy.deepcopy(FULL_DOCUMENT)
    field = SECTION_FIELDS[kind]
    document[field] = None if field == "summary" else []
    tree = _compose(document)
    assert kind not in tree.section_kinds
    assert len(tree.sections) == len(SectionKind) - 1


@pytest.mark.parametrize("kind", list(SectionKind))
def test_populated_section_is_included_alone(kind: SectionKind) -> None:
    field = SECTION_FIELDS[kind]
    document = {"personal_info": FULL_DOCUMENT["personal_info"], field: FULL_DOCUMENT[field]}
    tree = _compose(document)
    assert tree.section_kinds == (kind,)


def test_scenario_header_only_document() -> None:
    document = {"personal_info": {"first_name": "Jane", "last_name": "Doe", "email": "jane@x.com"}}
    tree = compose_resume(document)
    assert tree.header is not None
    assert tree.header.name == "Jane Doe"
    assert [c.kind for c in tree.header.contacts] == ["email"]
    assert tree.header.contacts[0].href == "mailto:jane@x.com"
    assert tree.sections == ()


def test_missing_personal_info_composes_without_header() -> None:
    tree = _compose({"skills": ["Python"]})
    assert tree.header is None
    assert tree.section_kinds == (SectionKind.SKILLS,)


def test_non_mapping_document_raises() -> None:
    with pytest.raises(CompositionError):
        _compose(["not", "a", "resume"])  # type: ignore[arg-type]
    with pytest.raises(CompositionError):
        compose_resume(None)  # type: ignore[arg-type]


def test_current_experience_renders_present_despite_end_date() -> None:
    document = copy.deepcopy(FULL_DOCUMENT)
    document["experience"][0]["current"] = True
    document["experience"][0]["end_date"] = "2021-02-01"
    item = _section(_compose(document), SectionKind.EXPERIENCE).items[0]
    assert item.dates == "Jan 2020 - Present"


def test_past_experience_renders_end_month() -> None:
    item = _section(_compose(FULL_DOCUMENT), SectionKind.EXPERIENCE).items[0]
    assert item.dates == "Jan 2020 - Jun 2023"
    assert item.title == "Engineer"
    assert item.subtitle == "Acme • Remote"
    assert item.bullets == ("Cut latency by 40%",)


def test_contacts_keep_fixed_order_and_links() -> None:
    header = _compose(FULL_DOCUMENT).header
    assert [c.kind for c in header.contacts] == [
        "email",
        "phone",
        "location",
        "website",
        "linkedin",
        "github",
    ]
    by_kind = {c.kind: c for c in header.contacts}
    assert by_kind["phone"].href == "tel:+15550100"
    assert by_kind["location"].href is None
    assert by_kind["website"].text == "jane.dev"
    assert by_kind["linkedin"].href == "https://linkedin.com/in/janedoe"
    assert by_kind["github"].text == "github.com/janedoe"


def test_summary_keeps_pre_bulleted_lines_verbatim() -> None:
    lines = _section(_compose(FULL_DOCUMENT), SectionKind.SUMMARY).lines
    assert [(line.text, line.bullet) for line in lines] == [
        ("Backend engineer.", False),
        ("• Ships reliable services", True),
        ("- Mentors juniors", True),
    ]


def test_split_text_drops_blank_lines() -> None:
    assert split_text("a\n\n  \nb") == split_text("a\nb")
    assert split_text(None) == ()


def test_education_and_project_items() -> None:
    tree = _compose(FULL_DOCUMENT)
    education = _section(tree, SectionKind.EDUCATION).items[0]
    assert education.title == "BSc in Computer Science"
    assert (education.detail_label, education.detail) == ("GPA", "3.9")

    project = _section(tree, SectionKind.PROJECTS).items[0]
    assert project.dates == "Jan 2023 - Apr 2023"
    assert (project.detail_label, project.detail) == ("Technologies", "Python, FastAPI")
    assert [(link.label, link.href) for link in project.links] == [
        ("Live Demo", "https://resumify.app"),
        ("GitHub", "https://github.com/janedoe/resumify"),
    ]


def test_project_without_start_date_has_no_dates() -> None:
    document = {"projects": [{"name": "Side project", "end_date": "2023-01-01"}]}
    item = _section(_compose(document), SectionKind.PROJECTS).items[0]
    assert item.dates == ""


def test_flat_and_bulleted_lists() -> None:
    tree = _compose(FULL_DOCUMENT)
    assert _section(tree, SectionKind.COURSEWORK).text == "Algorithms, Databases"
    assert _section(tree, SectionKind.SKILLS).text == "Leadership, Communication"
    assert _section(tree, SectionKind.CERTIFICATIONS).bullets == ("AWS SAA",)
    row = _section(tree, SectionKind.TECHNICAL_SKILLS).items[0]
    assert (row.detail_label, row.detail) == ("Languages", "Python, Go")


def test_blank_list_entries_do_not_create_sections() -> None:
    tree = _compose({"skills": ["", "   "], "coursework": [{"name": ""}]})
    assert tree.sections == ()


def test_malformed_list_values_compose_without_raising() -> None:
    document = {
        "summary": 5,
        "skills": "Python",
        "languages": [None, "English", 3],
        "projects": [{"name": "Compiler", "technologies": 5, "highlights": {"a": 1}}, "loose"],
        "technical_skills": [{"category": "Tools", "items": None}],
    }

    tree = _compose(document)

    assert _section(tree, SectionKind.SUMMARY).lines[0].text == "5"
    assert SectionKind.SKILLS not in tree.section_kinds
    assert _section(tree, SectionKind.LANGUAGES).text == "English, 3"
    project = _section(tree, SectionKind.PROJECTS).items[0]
    assert project.title == "Compiler"
    assert (project.detail_label, project.detail, project.bullets) == ("", "", ())
    assert len(_section(tree, SectionKind.PROJECTS).items) == 1


def test_executive_uppercases_section_titles() -> None:
    tree = _compose(FULL_DOCUMENT, "executive")
    assert _section(tree, SectionKind.EXPERIENCE).title == "PROFESSIONAL EXPERIENCE"
    assert _section(_compose(FULL_DOCUMENT), SectionKind.EXPERIENCE).title == (
        "Professional Experience"
    )


def test_templates_force_font_and_spacing() -> None:
    sizes = {"font_size": "large", "spacing": "spacious", "font": "monospace"}
    classic = _compose(FULL_DOCUMENT, "classic", sizes=sizes)
    assert classic.style.font_stack == FONT_STACKS[FontFamily.SERIF]
    assert classic.style.spacing == SPACING_SCALES[Spacing.SPACIOUS]

    compact = _compose(FULL_DOCUMENT, "compact", sizes=sizes)
    assert compact.style.spacing == SPACING_SCALES[Spacing.COMPACT]
    assert compact.style.font_stack == FONT_STACKS[FontFamily.MONOSPACE]


def test_invalid_size_settings_fall_back() -> None:
    tree = _compose(FULL_DOCUMENT, sizes={"font_size": "huge", "spacing": None})
    assert tree.style.type_scale.base == "11px"
    assert tree.style.spacing == SPACING_SCALES[Spacing.NORMAL]


def test_compose_resume_uses_stored_settings() -> None:
    document = copy.deepcopy(FULL_DOCUMENT)
    document["template_settings"] = {"template": "minimal", "color_theme": "maroon"}
    tree = compose_resume(document)
    assert tree.style.descriptor.id == "minimal"
    assert tree.style.palette.id == "maroon"
    assert tree.title == "Engineering Resume"


def test_compose_resume_unknown_settings_use_defaults() -> None:
    tree = compose_resume({"template_settings": {"template": "nope", "color_theme": "nope"}})
    assert tree.style.descriptor.id == "modern"
    assert tree.style.palette.id == "blue"
