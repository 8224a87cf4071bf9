"""Object store backends for published artifacts and profile photos.

Two backends share one small interface:

- ``LocalObjectStore`` keeps assets under ``RESUMIFY_STORAGE_DIR`` and serves
  them below ``RESUMIFY_PUBLIC_BASE_URL``.  Raster previews are derived on
  request with PyMuPDF and Pillow and cached next to the source asset.
- ``CloudinaryObjectStore`` uploads to Cloudinary and derives previews with
  URL transformations, so nothing is rasterized locally.
"""

from __future__ import annotations

import io
import logging
import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import cloudinary
import cloudinary.uploader
import cloudinary.utils
import fitz  # PyMuPDF
from PIL import Image, ImageOps

from resumify.config import get_settings
from resumify.exceptions import PublishError

logger = logging.getLogger(__name__)

__all__ = [
    "ASSET_FOLDERS",
    "CloudinaryObjectStore",
    "LocalObjectStore",
    "ObjectStore",
    "StoredAsset",
    "get_object_store",
    "set_object_store",
]

ASSET_FOLDERS = {
    "resume": "resumify/resumes",
    "photo": "resumify/profile-photos",
}

_UNSAFE = re.compile(r"[^A-Za-z0-9_.-]+")
DERIVED_DIR_NAME = "derived"


@dataclass(frozen=True)
class StoredAsset:
    url: str
    asset_id: str


class ObjectStore(Protocol):
    def upload_asset(
        self, data: bytes, *, kind: str, owner_id: str, key: str, fmt: str
    ) -> StoredAsset: ...

    def transformed_url(
        self, asset_id: str, *, page: int, width: int, height: int, fmt: str
    ) -> str: ...

    def delete_asset(self, asset_id: str) -> None: ...


def _safe_segment(value: str) -> str:
    cleaned = _UNSAFE.sub("_", value).strip("._")
    return cleaned or "anonymous"


def _folder(kind: str, owner_id: str) -> str:
    try:
        base = ASSET_FOLDERS[kind]
    except KeyError:
        raise PublishError(f"Unknown asset kind: {kind!r}") from None
    return f"{base}/{_safe_segment(owner_id)}"


class LocalObjectStore:
    """Disk-backed store rooted at a directory."""

    def __init__(self, root: Path, public_base_url: str) -> None:
        self.root = root
        self.public_base_url = public_base_url.rstrip("/")
        self._lock = threading.Lock()

    def url_for(self, asset_id: str) -> str:
        return f"{self.public_base_url}/{asset_id}"

    def path_for(self, asset_id: str) -> Path:
        """Return the on-disk path of *asset_id*, refusing paths outside the root."""
        root = self.root.resolve()
        path = (root / asset_id).resolve()
        if not path.is_relative_to(root):
            raise PublishError(f"Asset id escapes the store root: {asset_id!r}")
        return path

    def upload_asset(
        self, data: bytes, *, kind: str, owner_id: str, key: str, fmt: str
    ) -> StoredAsset:
        if not data:
            raise PublishError("Refusing to store an empty asset")
        asset_id = f"{_folder(kind, owner_id)}/{_safe_segment(key)}.{fmt}"
        target = self.path_for(asset_id)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            # Write then rename so readers never see a half-written file.
            partial = target.with_name(target.name + ".part")
            partial.write_bytes(data)
            partial.replace(target)
        except OSError as exc:
            raise PublishError(f"Failed to store asset {asset_id}: {exc}") from exc
        return StoredAsset(url=self.url_for(asset_id), asset_id=asset_id)

    def transformed_url(
        self, asset_id: str, *, page: int, width: int, height: int, fmt: str
    ) -> str:
        """Rasterize *page* of a stored PDF, crop-filled to ``width`` x ``height``."""
        source = self.path_for(asset_id)
        stem = Path(asset_id).with_suffix("")
        derived_id = f"{DERIVED_DIR_NAME}/{stem}.p{page}_{width}x{height}.{fmt}"
        target = self.path_for(derived_id)

        with self._lock:
            if not target.exists():
                self._rasterize(source, target, page=page, width=width, height=height, fmt=fmt)
        return self.url_for(derived_id)

    def _rasterize(
        self, source: Path, target: Path, *, page: int, width: int, height: int, fmt: str
    ) -> None:
        if not source.exists():
            raise PublishError(f"Cannot derive preview: {source.name} does not exist")
        try:
            with fitz.open(str(source)) as doc:
                if page < 1 or page > doc.page_count:
                    raise PublishError(f"Page {page} out of range for {source.name}")
                pdf_page = doc.load_page(page - 1)
                # Oversample so the fill-crop downscale stays sharp.
                zoom = max(width / pdf_page.rect.width, height / pdf_page.rect.height) * 2
                pix = pdf_page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
                image = Image.open(io.BytesIO(pix.tobytes("png"))).convert("RGB")
        except PublishError:
            raise
        except Exception as exc:
            raise PublishError(f"Failed to rasterize {source.name}: {exc}") from exc

        thumb = ImageOps.fit(image, (width, height), method=Image.Resampling.LANCZOS)
        target.parent.mkdir(parents=True, exist_ok=True)
        pil_format = "JPEG" if fmt.lower() in ("jpg", "jpeg") else fmt.upper()
        try:
            thumb.save(target, format=pil_format, quality=85)
        except (OSError, ValueError, KeyError) as exc:
            raise PublishError(f"Failed to write preview {target.name}: {exc}") from exc

    def delete_asset(self, asset_id: str) -> None:
        path = self.path_for(asset_id)
        path.unlink(missing_ok=True)
        derived_root = self.path_for(DERIVED_DIR_NAME)
        stem = Path(asset_id).with_suffix("")
        derived_dir = (derived_root / stem).parent
        if derived_dir.exists():
            for derived in derived_dir.glob(f"{stem.name}.p*"):
                derived.unlink(missing_ok=True)


class CloudinaryObjectStore:
    """Cloudinary-backed store; previews come from delivery URL transformations."""

    def __init__(
        self,
        *,
        cloud_name: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
    ) -> None:
        # With none given, the SDK falls back to CLOUDINARY_URL.
        if cloud_name or api_key or api_secret:
            cloudinary.config(
                cloud_name=cloud_name,
                api_key=api_key,
                api_secret=api_secret,
                secure=True,
            )

    def upload_asset(
        self, data: bytes, *, kind: str, owner_id: str, key: str, fmt: str
    ) -> StoredAsset:
        try:
            result = cloudinary.uploader.upload(
                io.BytesIO(data),
                folder=_folder(kind, owner_id),
                public_id=_safe_segment(key),
                resource_type="image",
                format=fmt,
                overwrite=False,
            )
        except Exception as exc:
            raise PublishError(f"Cloudinary upload failed: {exc}") from exc

        url = result.get("secure_url")
        asset_id = result.get("public_id")
        if not url or not asset_id:
            raise PublishError("Cloudinary upload returned no URL or public id")
        return StoredAsset(url=url, asset_id=asset_id)

    def transformed_url(
        self, asset_id: str, *, page: int, width: int, height: int, fmt: str
    ) -> str:
        url, _options = cloudinary.utils.cloudinary_url(
            asset_id,
            resource_type="image",
            type="upload",
            format=fmt,
            page=page,
            width=width,
            height=height,
            crop="fill",
            quality="auto",
            secure=True,
        )
        if not url:
            raise PublishError(f"Could not build a preview URL for {asset_id}")
        return url

    def delete_asset(self, asset_id: str) -> None:
        try:
            result = cloudinary.uploader.destroy(asset_id, resource_type="image")
        except Exception as exc:
            raise PublishError(f"Cloudinary delete failed for {asset_id}: {exc}") from exc
        if result.get("result") not in ("ok", "not found"):
            raise PublishError(f"Cloudinary refused to delete {asset_id}: {result!r}")


_store: ObjectStore | None = None
_store_lock = threading.Lock()


def get_object_store() -> ObjectStore:
    """Return the configured object store, building it on first use."""
    global _store
    with _store_lock:
        if _store is None:
            settings = get_settings()
            if settings.object_store == "cloudinary":
                _store = CloudinaryObjectStore(
                    cloud_name=settings.cloudinary_cloud_name,
                    api_key=settings.cloudinary_api_key,
                    api_secret=settings.cloudinary_api_secret,
                )
            else:
                if settings.object_store != "local":
                    logger.warning(
                        "Unknown RESUMIFY_OBJECT_STORE=%r, using local storage",
                        settings.object_store,
                    )
                _store = LocalObjectStore(settings.storage_dir, settings.public_base_url)
        return _store


def set_object_store(store: ObjectStore | None) -> None:
    """Replace (or with ``None`` reset) the process-wide object store."""
    global _store
    with _store_lock:
        _store = store
