"""Service helpers for resume profile photos kept in the object store."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from resumify.data.db import get_session
from resumify.data.models import Resume
from resumify.exceptions import AssetError
from resumify.services.artifact_publisher import discard_asset
from resumify.services.object_store import ObjectStore, get_object_store
from resumify.services.resume import (
    PHOTO_KEYS,
    get_resume,
    release_asset_if_unused,
    resume_to_dict,
)

logger = logging.getLogger(__name__)

__all__ = [
    "MAX_PHOTO_BYTES",
    "PhotoInfo",
    "clear_profile_photo",
    "set_profile_photo",
    "validate_photo_upload",
]

MAX_PHOTO_BYTES = 5 * 1024 * 1024

IMAGE_TYPE_TO_MIME = {
    "png": "image/png",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
}
IMAGE_TYPE_TO_EXTENSION = {
    "png": "png",
    "jpeg": "jpg",
    "gif": "gif",
    "webp": "webp",
}
CONTENT_TYPE_ALIASES = {
    "image/jpg": "image/jpeg",
    "image/pjpeg": "image/jpeg",
}


@dataclass(frozen=True)
class PhotoInfo:
    image_type: str
    mime_type: str
    extension: str


def _normalize_content_type(content_type: str | None) -> str | None:
    if content_type is None:
        return None
    normalized = content_type.split(";")[0].strip().lower()
    return CONTENT_TYPE_ALIASES.get(normalized, normalized)


def _detect_image_type(data: bytes) -> str | None:
    if len(data) >= 8 and data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "png"
    if len(data) >= 3 and data[:3] == b"\xff\xd8\xff":
        return "jpeg"
    if len(data) >= 6 and data[:6] in (b"GIF87a", b"GIF89a"):
        return "gif"
    if len(data) >= 12 and data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "webp"
    return None


def validate_photo_upload(*, content_type: str | None, data: bytes) -> PhotoInfo:
    """Check size, sniff the image type and make sure the declared type agrees.

    Raises:
        AssetError: With a user-facing message when the upload is rejected.
    """
    if not data:
        raise AssetError("Photo file is empty.")
    if len(data) > MAX_PHOTO_BYTES:
        raise AssetError("Photo exceeds 5 MiB.")

    image_type = _detect_image_type(data)
    if image_type is None:
        raise AssetError("Unsupported photo image type.")

    normalized_type = _normalize_content_type(content_type)
    expected_mime = IMAGE_TYPE_TO_MIME[image_type]
    if normalized_type and normalized_type not in IMAGE_TYPE_TO_MIME.values():
        raise AssetError("Unsupported photo content type.")
    if normalized_type and normalized_type != expected_mime:
        raise AssetError("Photo content type does not match image data.")

    return PhotoInfo(
        image_type=image_type,
        mime_type=expected_mime,
        extension=IMAGE_TYPE_TO_EXTENSION[image_type],
    )


def _write_photo(
    resume_id: str, owner_id: str, url: str | None, asset_id: str | None
) -> tuple[dict[str, Any] | None, str | None]:
    """Set or clear the photo pair; returns (resume dict, previous asset id)."""
    with get_session() as session:
        resume = session.get(Resume, resume_id)
        if resume is None or resume.owner_id != owner_id:
            return None, None
        info = dict(resume.personal_info or {})
        previous = info.get("profile_photo_asset_id")
        if url and asset_id:
            info["profile_photo_url"] = url
            info["profile_photo_asset_id"] = asset_id
        else:
            for key in PHOTO_KEYS:
                info.pop(key, None)
        resume.personal_info = info or None
        resume.revision = (resume.revision or 0) + 1
        resume.updated_at = datetime.now(UTC)
        session.flush()
        return resume_to_dict(resume), previous


def set_profile_photo(
    resume_id: str,
    owner_id: str,
    *,
    content_type: str | None,
    data: bytes,
    store: ObjectStore | None = None,
) -> dict[str, Any] | None:
    """Upload a new profile photo and point the resume at it.

    The previous photo is released once the new one is stored.

    Returns:
        The updated resume dict, or None if the resume is not the caller's.

    Raises:
        AssetError: The upload is not an acceptable image.
        PublishError: The object store rejected the upload.
    """
    if get_resume(resume_id, owner_id) is None:
        return None

    info = validate_photo_upload(content_type=content_type, data=data)
    store = store or get_object_store()
    key = f"photo-{resume_id}-{time.time_ns() // 1_000_000}"
    stored = store.upload_asset(
        data, kind="photo", owner_id=owner_id, key=key, fmt=info.extension
    )

    try:
        updated, previous = _write_photo(resume_id, owner_id, stored.url, stored.asset_id)
    except Exception:
        discard_asset(stored.asset_id, store=store)
        raise
    if updated is None:
        # Deleted while uploading.
        discard_asset(stored.asset_id, store=store)
        return None

    if previous and previous != stored.asset_id:
        release_asset_if_unused(previous, owner_id)
    logger.info("Stored profile photo %s for resume %s", stored.asset_id, resume_id)
    return updated


def clear_profile_photo(resume_id: str, owner_id: str) -> dict[str, Any] | None:
    """Remove the photo pair from the resume and release the asset."""
    updated, previous = _write_photo(resume_id, owner_id, None, None)
    if updated is None:
        return None
    if previous:
        release_asset_if_unused(previous, owner_id)
    return updated
