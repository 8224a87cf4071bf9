"""Resolve public share ids to resume documents.

A private resume and an unknown share id are indistinguishable to the
caller: both raise the same :class:`ResumeNotFoundError`.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select

from resumify.data.db import get_session
from resumify.data.models import Resume
from resumify.exceptions import ResumeNotFoundError
from resumify.services.resume import resume_to_dict

__all__ = ["PUBLIC_FIELDS", "public_view", "resolve_share"]

# What an anonymous viewer may see; owner and asset ids stay private.
PUBLIC_FIELDS = (
    "title",
    "personal_info",
    "summary",
    "experience",
    "education",
    "projects",
    "coursework",
    "technical_skills",
    "skills",
    "languages",
    "achievements",
    "certifications",
    "template_settings",
    "share_id",
    "pdf_url",
    "preview_url",
    "view_url",
    "updated_at",
)


def resolve_share(share_id: str) -> dict[str, Any]:
    """Return the public resume for *share_id*.

    Raises:
        ResumeNotFoundError: Unknown share id or a resume that is not public.
    """
    with get_session() as session:
        resume = session.scalar(
            select(Resume).where(Resume.share_id == share_id, Resume.visibility == "public")
        )
        if resume is None:
            raise ResumeNotFoundError()
        return resume_to_dict(resume)


def public_view(resume: dict[str, Any]) -> dict[str, Any]:
    """Strip a resume dict down to what an anonymous viewer may see."""
    view = {key: resume.get(key) for key in PUBLIC_FIELDS}
    info = view.get("personal_info")
    if info:
        view["personal_info"] = {
            k: v for k, v in info.items() if k != "profile_photo_asset_id"
        }
    return view
