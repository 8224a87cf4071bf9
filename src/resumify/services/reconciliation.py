"""Write a published artifact triple back onto its document.

The write is a single conditional UPDATE that touches only the artifact
columns.  It applies only when the stored ``artifact_revision`` is empty or
not newer than the revision the render was taken from, so a slow render of
an old edit can never overwrite the artifacts of a newer one.  Field values,
``revision`` and ``updated_at`` are never written here.
"""

from __future__ import annotations

import logging

from sqlalchemy import or_, update
from sqlalchemy.exc import SQLAlchemyError

from resumify.data.db import get_session
from resumify.data.models import Resume
from resumify.exceptions import ReconciliationError
from resumify.services.artifact_publisher import ArtifactTriple

logger = logging.getLogger(__name__)

__all__ = ["apply_artifacts", "artifact_pointers"]


def apply_artifacts(resume_id: str, revision: int, artifacts: ArtifactTriple) -> bool:
    """Apply *artifacts* rendered from *revision* of *resume_id*.

    Returns:
        True if the pointers were written; False if the document is gone or
        already carries artifacts from a newer revision.

    Raises:
        ReconciliationError: The store write itself failed.
    """
    stmt = (
        update(Resume)
        .where(Resume.id == resume_id)
        .where(or_(Resume.artifact_revision.is_(None), Resume.artifact_revision <= revision))
        .values(
            pdf_url=artifacts.pdf_url,
            pdf_asset_id=artifacts.pdf_asset_id,
            preview_url=artifacts.preview_url,
            view_url=artifacts.view_url,
            artifact_revision=revision,
        )
        .execution_options(synchronize_session=False)
    )
    try:
        with get_session() as session:
            result = session.execute(stmt)
            applied = result.rowcount == 1
    except SQLAlchemyError as exc:
        raise ReconciliationError(
            f"Failed to store artifacts for resume {resume_id} at revision {revision}"
        ) from exc

    if not applied:
        logger.info(
            "Skipped artifacts for resume %s at revision %d (deleted or superseded)",
            resume_id,
            revision,
        )
    return applied


def artifact_pointers(resume_id: str) -> dict | None:
    """Return the currently stored artifact pointers, or None for an unknown id."""
    with get_session() as session:
        resume = session.get(Resume, resume_id)
        if resume is None:
            return None
        return {
            "pdf_url": resume.pdf_url,
            "pdf_asset_id": resume.pdf_asset_id,
            "preview_url": resume.preview_url,
            "view_url": resume.view_url,
            "artifact_revision": resume.artifact_revision,
        }
