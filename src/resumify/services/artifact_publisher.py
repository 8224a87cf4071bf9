"""Publish rendered PDFs as an artifact triple.

A publish uploads the PDF under a fresh
``resume-<id>-r<revision>-<timestamp>-<nonce>`` key, so re-publishing never
overwrites the asset the stored pointers still reference.  Only once the
upload and the page-1 preview both succeed is an :class:`ArtifactTriple`
returned for reconciliation.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass

from resumify.exceptions import PublishError
from resumify.services.object_store import ObjectStore, get_object_store

logger = logging.getLogger(__name__)

__all__ = [
    "PREVIEW_FORMAT",
    "PREVIEW_HEIGHT",
    "PREVIEW_PAGE",
    "PREVIEW_WIDTH",
    "ArtifactTriple",
    "asset_key",
    "discard_asset",
    "publish_pdf",
]

PREVIEW_PAGE = 1
PREVIEW_WIDTH = 300
PREVIEW_HEIGHT = 420
PREVIEW_FORMAT = "jpg"


@dataclass(frozen=True)
class ArtifactTriple:
    """The pointers produced by one successful render and publish."""

    pdf_url: str
    pdf_asset_id: str
    preview_url: str
    view_url: str


def asset_key(resume_id: str, revision: int, timestamp_ms: int | None = None) -> str:
    """Upload key for one publish of *resume_id*.

    The random suffix keeps two publishes in the same millisecond apart, so
    a stale publish never deletes the asset a newer one is pointing at.
    """
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    return f"resume-{resume_id}-r{revision}-{timestamp_ms}-{uuid.uuid4().hex[:8]}"


def publish_pdf(
    pdf: bytes,
    *,
    resume_id: str,
    revision: int,
    owner_id: str,
    store: ObjectStore | None = None,
) -> ArtifactTriple:
    """Upload *pdf* and derive its preview and view URLs.

    If the preview cannot be derived the freshly uploaded asset is deleted
    again before :class:`PublishError` propagates.

    Raises:
        PublishError: Upload or transformation failed.
    """
    store = store or get_object_store()
    key = asset_key(resume_id, revision)

    try:
        stored = store.upload_asset(pdf, kind="resume", owner_id=owner_id, key=key, fmt="pdf")
    except PublishError:
        raise
    except Exception as exc:
        raise PublishError(f"Upload failed for resume {resume_id}: {exc}") from exc

    try:
        preview_url = store.transformed_url(
            stored.asset_id,
            page=PREVIEW_PAGE,
            width=PREVIEW_WIDTH,
            height=PREVIEW_HEIGHT,
            fmt=PREVIEW_FORMAT,
        )
    except Exception as exc:
        discard_asset(stored.asset_id, store=store)
        if isinstance(exc, PublishError):
            raise
        raise PublishError(f"Preview derivation failed for resume {resume_id}: {exc}") from exc

    # Download and inline view share the asset; kept distinct for backends that
    # serve attachment and inline from different URLs.
    return ArtifactTriple(
        pdf_url=stored.url,
        pdf_asset_id=stored.asset_id,
        preview_url=preview_url,
        view_url=stored.url,
    )


def discard_asset(asset_id: str, *, store: ObjectStore | None = None) -> bool:
    """Best-effort delete; returns False (and logs) instead of raising."""
    store = store or get_object_store()
    try:
        store.delete_asset(asset_id)
    except Exception:
        logger.warning("Failed to delete asset %s", asset_id, exc_info=True)
        return False
    return True
