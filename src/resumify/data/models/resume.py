from __future__ import annotations

import uuid
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import JSON, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from resumify.data.db import Base


def _new_id() -> str:
    return uuid.uuid4().hex


def _default_template_settings() -> dict[str, str]:
    from resumify.templates import DEFAULT_TEMPLATE_SETTINGS

    return dict(DEFAULT_TEMPLATE_SETTINGS)


class Resume(Base):
    """
    A single resume document: structured fields plus derived artifact pointers.

    Ordered collections are stored as JSON arrays; list order is render order.
    The artifact columns (``pdf_url``, ``pdf_asset_id``, ``preview_url``,
    ``view_url``, ``artifact_revision``) are written only by reconciliation.
    """

    __tablename__ = "resumes"

    id: Mapped[str] = mapped_column(String(32), primary_key=True, default=_new_id)
    owner_id: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    share_id: Mapped[str] = mapped_column(String(32), unique=True, nullable=False, index=True)
    title: Mapped[str] = mapped_column(String(100), nullable=False)

    personal_info: Mapped[dict[str, Any] | None] = mapped_column(JSON, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)

    experience: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    education: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    projects: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    coursework: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    technical_skills: Mapped[list[dict[str, Any]]] = mapped_column(
        JSON, nullable=False, default=list
    )
    skills: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    languages: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    achievements: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    certifications: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    visibility: Mapped[str] = mapped_column(String(16), nullable=False, default="private", index=True)
    template_settings: Mapped[dict[str, str]] = mapped_column(
        JSON, nullable=False, default=_default_template_settings
    )

    # Bumped on every field mutation; never on artifact writes.
    revision: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    pdf_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    pdf_asset_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    preview_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    view_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    artifact_revision: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(UTC)
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(UTC),
    )
