"""Serve assets written by the local object store."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse

from resumify.exceptions import PublishError
from resumify.services.object_store import LocalObjectStore, get_object_store

router = APIRouter(prefix="/assets", tags=["assets"])

MEDIA_TYPES = {
    ".pdf": "application/pdf",
    ".jpg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}


@router.get("/{asset_id:path}")
def get_asset(asset_id: str) -> FileResponse:
    """Return a stored asset; 404 when assets live in a remote store."""
    store = get_object_store()
    if not isinstance(store, LocalObjectStore):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")
    try:
        path = store.path_for(asset_id)
    except PublishError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found") from exc
    if not path.is_file():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Asset not found")
    return FileResponse(path=str(path), media_type=MEDIA_TYPES.get(path.suffix.lower()))
