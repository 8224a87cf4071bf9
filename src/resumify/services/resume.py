"""Document store operations for resumes.

Every function opens its own session via ``get_session()`` and returns plain
dicts (or ``None`` when the resume does not exist or belongs to someone
else).  The returned dict is a superset of :class:`ResumeData`, so callers can
hand it straight to the render pipeline as a snapshot.

Only these functions write field data; artifact pointers are written by
``resumify.services.reconciliation`` alone.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from resumify.data.db import get_session
from resumify.data.models import Resume
from resumify.exceptions import ValidationError
from resumify.services.artifact_publisher import discard_asset
from resumify.services.resume_data import complete_template_settings, resume_to_data
from resumify.templates import is_registered_template, is_registered_theme
from resumify.templates.base import FontFamily, FontSize, Spacing

logger = logging.getLogger(__name__)

__all__ = [
    "CONTENT_FIELDS",
    "MAX_SUMMARY_LENGTH",
    "MAX_TITLE_LENGTH",
    "PHOTO_KEYS",
    "SHARE_ID_LENGTH",
    "VISIBILITIES",
    "count_resumes",
    "create_resume",
    "delete_resume",
    "duplicate_resume",
    "get_resume",
    "list_resumes",
    "new_share_id",
    "regenerate_share_id",
    "release_asset_if_unused",
    "resume_to_dict",
    "set_visibility",
    "update_resume",
]

MAX_TITLE_LENGTH = 100
MAX_SUMMARY_LENGTH = 1000
SHARE_ID_LENGTH = 12
VISIBILITIES = ("private", "public")
COPY_SUFFIX = " (Copy)"

# Fields that feed the rendered artifact; changing any of them bumps the revision.
CONTENT_FIELDS = (
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
)
_LIST_FIELDS = (
    "experience",
    "education",
    "projects",
    "coursework",
    "technical_skills",
    "skills",
    "languages",
    "achievements",
    "certifications",
)
_DATED_FIELDS = ("experience", "education")
_UPDATABLE_FIELDS = (*CONTENT_FIELDS, "visibility")
# Managed by the profile photo service only, always set and cleared as a pair.
PHOTO_KEYS = ("profile_photo_url", "profile_photo_asset_id")

_SETTING_CHOICES: dict[str, tuple[str, ...]] = {
    "font_size": tuple(FontSize),
    "spacing": tuple(Spacing),
    "font": tuple(FontFamily),
}


def _now() -> datetime:
    return datetime.now(UTC)


def resume_to_dict(resume: Resume) -> dict[str, Any]:
    data: dict[str, Any] = dict(resume_to_data(resume))
    data.update(
        {
            "share_id": resume.share_id,
            "visibility": resume.visibility,
            "pdf_url": resume.pdf_url,
            "pdf_asset_id": resume.pdf_asset_id,
            "preview_url": resume.preview_url,
            "view_url": resume.view_url,
            "artifact_revision": resume.artifact_revision,
            "created_at": resume.created_at,
            "updated_at": resume.updated_at,
        }
    )
    return data


def _keep_photo(current: dict | None, new: dict | None) -> dict | None:
    photo = {k: (current or {}).get(k) for k in PHOTO_KEYS}
    if not photo["profile_photo_asset_id"]:
        return new
    return {**(new or {}), **photo}


def _owned(session: Session, resume_id: str, owner_id: str) -> Resume | None:
    resume = session.get(Resume, resume_id)
    if resume is None or resume.owner_id != owner_id:
        return None
    return resume


# ----------------------------------------------------------------------
# Validation


def _validate_title(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required")
    title = title.strip()
    if len(title) > MAX_TITLE_LENGTH:
        raise ValidationError(f"Title must be at most {MAX_TITLE_LENGTH} characters")
    return title


def _validate_summary(summary: Any) -> str | None:
    if summary is None:
        return None
    if not isinstance(summary, str):
        raise ValidationError("Summary must be text")
    if len(summary) > MAX_SUMMARY_LENGTH:
        raise ValidationError(f"Summary must be at most {MAX_SUMMARY_LENGTH} characters")
    return summary


def _validate_template_settings(settings: Any) -> dict[str, str]:
    if settings is None:
        return dict(complete_template_settings(None))
    if not isinstance(settings, Mapping):
        raise ValidationError("Template settings must be an object")
    merged = dict(complete_template_settings(dict(settings)))
    if not is_registered_template(merged["template"]):
        raise ValidationError(f"Unknown template: {merged['template']}")
    if not is_registered_theme(merged["color_theme"]):
        raise ValidationError(f"Unknown color theme: {merged['color_theme']}")
    for key, choices in _SETTING_CHOICES.items():
        if merged[key] not in choices:
            raise ValidationError(f"Invalid {key}: {merged[key]}")
    return merged


def _normalize_dated(entries: list[Any]) -> list[Any]:
    normalized = []
    for entry in entries:
        if isinstance(entry, Mapping):
            entry = dict(entry)
            # A current position has no end date, whatever the client sent.
            if entry.get("current"):
                entry["end_date"] = None
        normalized.append(entry)
    return normalized


def _validate_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(fields) - set(_UPDATABLE_FIELDS)
    if unknown:
        raise ValidationError(f"Unknown resume fields: {', '.join(sorted(unknown))}")

    clean: dict[str, Any] = {}
    for key, value in fields.items():
        if key == "title":
            clean[key] = _validate_title(value)
        elif key == "summary":
            clean[key] = _validate_summary(value)
        elif key == "template_settings":
            clean[key] = _validate_template_settings(value)
        elif key == "visibility":
            if value not in VISIBILITIES:
                raise ValidationError(f"Visibility must be one of {', '.join(VISIBILITIES)}")
            clean[key] = value
        elif key == "personal_info":
            if value is not None and not isinstance(value, Mapping):
                raise ValidationError("Personal info must be an object")
            if value is None:
                clean[key] = None
            else:
                clean[key] = {k: v for k, v in value.items() if k not in PHOTO_KEYS}
        elif key in _LIST_FIELDS:
            if value is None:
                value = []
            if not isinstance(value, list | tuple):
                raise ValidationError(f"{key} must be a list")
            value = list(value)
            clean[key] = _normalize_dated(value) if key in _DATED_FIELDS else value
    return clean


# ----------------------------------------------------------------------
# Share ids


def new_share_id() -> str:
    """Return a random URL-safe share id of ``SHARE_ID_LENGTH`` characters."""
    return secrets.token_urlsafe(SHARE_ID_LENGTH)[:SHARE_ID_LENGTH]


def _unique_share_id(session: Session) -> str:
    while True:
        candidate = new_share_id()
        taken = session.scalar(select(Resume.id).where(Resume.share_id == candidate))
        if taken is None:
            return candidate


# ----------------------------------------------------------------------
# CRUD


def create_resume(owner_id: str, fields: Mapping[str, Any]) -> dict[str, Any]:
    """Create a resume owned by *owner_id*.

    Args:
        owner_id: Opaque identity of the authenticated caller.
        fields: Document fields; ``title`` is required.

    Returns:
        The stored resume as a dict, including ``revision`` 1.

    Raises:
        ValidationError: If a field is malformed or references an
            unregistered template or theme.
    """
    if "title" not in fields:
        raise ValidationError("Title is required")
    clean = _validate_fields(fields)
    clean.setdefault("template_settings", _validate_template_settings(None))

    with get_session() as session:
        now = _now()
        resume = Resume(
            owner_id=owner_id,
            share_id=_unique_share_id(session),
            revision=1,
            created_at=now,
            updated_at=now,
            **clean,
        )
        session.add(resume)
        session.flush()
        logger.info("Created resume %s for %s", resume.id, owner_id)
        return resume_to_dict(resume)


def get_resume(resume_id: str, owner_id: str) -> dict[str, Any] | None:
    """Return the resume if it exists and belongs to *owner_id*."""
    with get_session() as session:
        resume = _owned(session, resume_id, owner_id)
        return resume_to_dict(resume) if resume else None


def list_resumes(owner_id: str) -> list[dict[str, Any]]:
    """Return all resumes of *owner_id*, most recently updated first."""
    with get_session() as session:
        resumes = session.scalars(
            select(Resume)
            .where(Resume.owner_id == owner_id)
            .order_by(Resume.updated_at.desc(), Resume.created_at.desc())
        ).all()
        return [resume_to_dict(r) for r in resumes]


def count_resumes(owner_id: str) -> int:
    with get_session() as session:
        return session.scalar(
            select(func.count()).select_from(Resume).where(Resume.owner_id == owner_id)
        ) or 0


def update_resume(
    resume_id: str, owner_id: str, fields: Mapping[str, Any]
) -> dict[str, Any] | None:
    """Apply *fields* to the resume and return its new state.

    Only the keys present in *fields* are written, so a full replace and a
    partial update share this path.  Content changes bump ``revision``;
    artifact pointers are never touched.

    Raises:
        ValidationError: If any field is malformed.
    """
    clean = _validate_fields(fields)

    with get_session() as session:
        resume = _owned(session, resume_id, owner_id)
        if resume is None:
            return None
        if not clean:
            return resume_to_dict(resume)

        if "personal_info" in clean:
            clean["personal_info"] = _keep_photo(resume.personal_info, clean["personal_info"])
        for key, value in clean.items():
            setattr(resume, key, value)
        if any(key in CONTENT_FIELDS for key in clean):
            resume.revision = (resume.revision or 0) + 1
        resume.updated_at = _now()
        session.flush()
        return resume_to_dict(resume)


def delete_resume(resume_id: str, owner_id: str) -> bool:
    """Delete the resume and release its stored assets.

    Asset cleanup is best effort: failures are logged, never raised.
    """
    with get_session() as session:
        resume = _owned(session, resume_id, owner_id)
        if resume is None:
            return False
        pdf_asset_id = resume.pdf_asset_id
        photo_asset_id = (resume.personal_info or {}).get("profile_photo_asset_id")
        session.delete(resume)

    if pdf_asset_id:
        discard_asset(pdf_asset_id)
    if photo_asset_id:
        release_asset_if_unused(photo_asset_id, owner_id)
    logger.info("Deleted resume %s", resume_id)
    return True


def duplicate_resume(resume_id: str, owner_id: str) -> dict[str, Any] | None:
    """Copy a resume's fields into a new private resume with a fresh share id.

    The copy starts without artifacts; callers schedule its render.
    """
    with get_session() as session:
        source = _owned(session, resume_id, owner_id)
        if source is None:
            return None

        snapshot = resume_to_data(source)
        base_title = snapshot["title"][: MAX_TITLE_LENGTH - len(COPY_SUFFIX)]
        now = _now()
        copy = Resume(
            owner_id=owner_id,
            share_id=_unique_share_id(session),
            visibility="private",
            revision=1,
            created_at=now,
            updated_at=now,
            **{key: snapshot[key] for key in CONTENT_FIELDS},  # type: ignore[literal-required]
        )
        copy.title = f"{base_title}{COPY_SUFFIX}"
        session.add(copy)
        session.flush()
        return resume_to_dict(copy)


def set_visibility(
    resume_id: str, owner_id: str, visibility: str | None = None
) -> dict[str, Any] | None:
    """Set visibility, or flip it when *visibility* is None."""
    if visibility is not None and visibility not in VISIBILITIES:
        raise ValidationError(f"Visibility must be one of {', '.join(VISIBILITIES)}")

    with get_session() as session:
        resume = _owned(session, resume_id, owner_id)
        if resume is None:
            return None
        if visibility is None:
            visibility = "private" if resume.visibility == "public" else "public"
        resume.visibility = visibility
        resume.updated_at = _now()
        session.flush()
        return resume_to_dict(resume)


def regenerate_share_id(resume_id: str, owner_id: str) -> dict[str, Any] | None:
    """Replace the share id; the previous one stops resolving immediately."""
    with get_session() as session:
        resume = _owned(session, resume_id, owner_id)
        if resume is None:
            return None
        resume.share_id = _unique_share_id(session)
        resume.updated_at = _now()
        session.flush()
        return resume_to_dict(resume)


# ----------------------------------------------------------------------
# Assets


def release_asset_if_unused(asset_id: str, owner_id: str) -> bool:
    """Delete a photo asset unless another of the owner's resumes still shows it.

    Duplicates share the original's photo asset, so the last reference
    releases it.
    """
    with get_session() as session:
        infos = session.scalars(
            select(Resume.personal_info).where(Resume.owner_id == owner_id)
        ).all()
    if any((info or {}).get("profile_photo_asset_id") == asset_id for info in infos):
        return False
    return discard_asset(asset_id)
