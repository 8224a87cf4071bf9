"""Test suite for resume document store functions."""

from __future__ import annotations

import pytest

from resumify.exceptions import ValidationError
from resumify.services.resume import (
    SHARE_ID_LENGTH,
    count_resumes,
    create_resume,
    delete_resume,
    duplicate_resume,
    get_resume,
    list_resumes,
    new_share_id,
    regenerate_share_id,
    set_visibility,
    update_resume,
)

pytestmark = pytest.mark.usefixtures("api_db")

OWNER = "user-a"
OTHER = "user-b"

PERSONAL = {
    "first_name": "Jane",
    "last_name": "Doe",
    "email": "jane@example.com",
}


def test_create_defaults() -> None:
    resume = create_resume(OWNER, {"title": "  Backend Engineer  "})

    assert resume["title"] == "Backend Engineer"
    assert resume["owner_id"] == OWNER
    assert resume["visibility"] == "private"
    assert resume["revision"] == 1
    assert len(resume["share_id"]) == SHARE_ID_LENGTH
    assert resume["template_settings"]["template"] == "modern"
    assert resume["template_settings"]["color_theme"] == "blue"
    assert resume["skills"] == []
    assert resume["pdf_url"] is None
    assert resume["artifact_revision"] is None


def test_create_requires_title() -> None:
    with pytest.raises(ValidationError, match="Title"):
        create_resume(OWNER, {"summary": "No title"})
    with pytest.raises(ValidationError, match="Title"):
        create_resume(OWNER, {"title": "   "})


@pytest.mark.parametrize(
    "fields",
    [
        {"title": "x" * 101},
        {"title": "ok", "summary": "s" * 1001},
        {"title": "ok", "template_settings": {"template": "fancy"}},
        {"title": "ok", "template_settings": {"color_theme": "plaid"}},
        {"title": "ok", "template_settings": {"font_size": "huge"}},
        {"title": "ok", "visibility": "friends"},
        {"title": "ok", "skills": "Python"},
        {"title": "ok", "owner_id": "someone-else"},
    ],
)
def test_create_rejects_invalid_fields(fields) -> None:
    with pytest.raises(ValidationError):
        create_resume(OWNER, fields)
    assert count_resumes(OWNER) == 0


def test_current_entries_drop_end_date() -> None:
    resume = create_resume(
        OWNER,
        {
            "title": "Resume",
            "experience": [
                {
                    "company": "Acme",
                    "position": "Dev",
                    "start_date": "2022-01",
                    "end_date": "2023-01",
                    "current": True,
                }
            ],
        },
    )
    assert resume["experience"][0]["end_date"] is None


def test_get_hides_other_owners() -> None:
    resume = create_resume(OWNER, {"title": "Mine"})

    assert get_resume(resume["id"], OWNER)["title"] == "Mine"
    assert get_resume(resume["id"], OTHER) is None
    assert get_resume("missing", OWNER) is None


def test_list_orders_by_most_recent_update() -> None:
    first = create_resume(OWNER, {"title": "First"})
    create_resume(OWNER, {"title": "Second"})
    create_resume(OTHER, {"title": "Not mine"})
    update_resume(first["id"], OWNER, {"summary": "touched"})

    titles = [r["title"] for r in list_resumes(OWNER)]

    assert titles == ["First", "Second"]
    assert count_resumes(OWNER) == 2
    assert count_resumes("nobody") == 0


def test_update_bumps_revision_and_keeps_other_fields() -> None:
    resume = create_resume(OWNER, {"title": "Resume", "skills": ["Python"], "summary": "Hi"})

    updated = update_resume(resume["id"], OWNER, {"skills": ["Python", "SQL"]})

    assert updated["revision"] == 2
    assert updated["skills"] == ["Python", "SQL"]
    assert updated["summary"] == "Hi"
    assert updated["share_id"] == resume["share_id"]


def test_update_of_visibility_only_keeps_revision() -> None:
    resume = create_resume(OWNER, {"title": "Resume"})

    updated = update_resume(resume["id"], OWNER, {"visibility": "public"})

    assert updated["visibility"] == "public"
    assert updated["revision"] == 1


def test_update_validates_and_ignores_other_owner() -> None:
    resume = create_resume(OWNER, {"title": "Resume"})

    with pytest.raises(ValidationError):
        update_resume(resume["id"], OWNER, {"title": ""})
    assert update_resume(resume["id"], OTHER, {"summary": "hijack"}) is None
    assert get_resume(resume["id"], OWNER)["summary"] is None


def test_update_merges_partial_template_settings() -> None:
    resume = create_resume(OWNER, {"title": "Resume"})

    updated = update_resume(
        resume["id"], OWNER, {"template_settings": {"template": "classic", "spacing": "compact"}}
    )

    assert updated["template_settings"] == {
        "template": "classic",
        "color_theme": "blue",
        "font_size": "medium",
        "spacing": "compact",
        "font": "sans-serif",
    }


def test_client_cannot_write_photo_fields() -> None:
    info = {**PERSONAL, "profile_photo_url": "https://evil/p.png", "profile_photo_asset_id": "x"}

    resume = create_resume(OWNER, {"title": "Resume", "personal_info": info})

    assert resume["personal_info"] == PERSONAL


def test_delete_removes_resume_and_pdf(pipeline, local_store) -> None:
    resume = create_resume(OWNER, {"title": "Resume"})
    outcome = pipeline.run(resume)
    pdf_path = local_store.path_for(outcome.artifacts.pdf_asset_id)
    assert pdf_path.exists()

    assert delete_resume(resume["id"], OTHER) is False
    assert delete_resume(resume["id"], OWNER) is True

    assert get_resume(resume["id"], OWNER) is None
    assert not pdf_path.exists()
    assert delete_resume(resume["id"], OWNER) is False


def test_duplicate_copies_fields_as_private() -> None:
    resume = create_resume(
        OWNER,
        {
            "title": "Resume",
            "personal_info": PERSONAL,
            "skills": ["Python"],
            "visibility": "public",
            "template_settings": {"template": "creative", "color_theme": "teal"},
        },
    )
    update_resume(resume["id"], OWNER, {"summary": "edited"})

    copy = duplicate_resume(resume["id"], OWNER)

    assert copy["id"] != resume["id"]
    assert copy["share_id"] != resume["share_id"]
    assert copy["title"] == "Resume (Copy)"
    assert copy["visibility"] == "private"
    assert copy["revision"] == 1
    assert copy["summary"] == "edited"
    assert copy["skills"] == ["Python"]
    assert copy["personal_info"] == PERSONAL
    assert copy["template_settings"]["template"] == "creative"
    assert copy["pdf_url"] is None
    assert duplicate_resume(resume["id"], OTHER) is None


def test_duplicate_truncates_long_titles() -> None:
    resume = create_resume(OWNER, {"title": "t" * 100})

    copy = duplicate_resume(resume["id"], OWNER)

    assert len(copy["title"]) == 100
    assert copy["title"].endswith(" (Copy)")


def test_set_visibility_explicit_and_toggle() -> None:
    resume = create_resume(OWNER, {"title": "Resume"})

    assert set_visibility(resume["id"], OWNER, "public")["visibility"] == "public"
    assert set_visibility(resume["id"], OWNER)["visibility"] == "private"
    toggled = set_visibility(resume["id"], OWNER)
    assert toggled["visibility"] == "public"
    assert toggled["revision"] == 1
    assert set_visibility(resume["id"], OTHER) is None
    with pytest.raises(ValidationError):
        set_visibility(resume["id"], OWNER, "unlisted")


def test_regenerate_share_id() -> None:
    resume = create_resume(OWNER, {"title": "Resume"})

    regenerated = regenerate_share_id(resume["id"], OWNER)

    assert regenerated["share_id"] != resume["share_id"]
    assert len(regenerated["share_id"]) == SHARE_ID_LENGTH
    assert regenerated["revision"] == resume["revision"]
    assert regenerate_share_id(resume["id"], OTHER) is None


def test_share_ids_are_url_safe() -> None:
    ids = {new_share_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(len(s) == SHARE_ID_LENGTH for s in ids)
    assert all(c.isalnum() or c in "-_" for s in ids for c in s)
