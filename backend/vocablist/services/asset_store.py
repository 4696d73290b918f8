"""
VocabList Backend - Asset Store (cover images)
================================================

What:  Blob storage interface for list cover images, plus the local
       filesystem implementation.
How:   AssetStore is the narrow contract the list services depend on:
       upload(content, filename) -> {url, assetId} and delete(assetId).
       LocalAssetStore validates the upload and writes it with async file I/O.
Who:   ListStore (create with cover, set_cover_image, delete cascade) and the
       GET /api/assets/{assetId} route.

Validation (LocalAssetStore):
    1. Extension check: .png .jpg .jpeg .webp
    2. Size check:      settings.max_file_size
    3. MIME check:      python-magic reads the header bytes; the stored
                        extension follows the detected type, so a renamed
                        file is either rejected or served as what it is
    4. UUID filename:   no caller input reaches the filesystem path

Directory Structure:
    storage/
    └── covers/
        └── u1/
            └── 2026/
                └── 10/
                    └── 19/
                        └── a1b2c3d4-....jpg

    The asset id is the path relative to the storage root; the public URL is
    {ASSET_URL_PREFIX}/{assetId}.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

import aiofiles
import aiofiles.os
import magic

from vocablist.config import settings
from vocablist.exceptions import AssetStorageError, InvalidArgumentError, NotFoundError

logger = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp"}

MEDIA_TYPES = {
    ".png": "image/png",
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".webp": "image/webp",
}

# Detected content type -> extension the asset is stored under
ALLOWED_MIME_TYPES = {
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/webp": ".webp",
}


class AssetStore(ABC):
    """
    Abstract interface of the blob store holding cover images.

    Contract:
        - upload() returns {"url": ..., "assetId": ...}
        - delete() of an unknown asset id is not an error
        - Provider failures are raised as AssetStorageError; there are no retries
    """

    @abstractmethod
    async def upload(
        self,
        content: bytes,
        filename: str,
        folder: Optional[str] = None,
    ) -> Dict[str, str]:
        """
        Store an image and return its descriptor.

        Raises:
            InvalidArgumentError: Unsupported name or content type, or too large.
            AssetStorageError: The provider failed to store the bytes.
        """
        ...

    @abstractmethod
    async def delete(self, asset_id: str) -> None:
        """Remove an asset. Raises AssetStorageError if the provider fails."""
        ...


class LocalAssetStore(AssetStore):
    """Stores cover images under STORAGE_ROOT in date-organized directories."""

    def __init__(self, storage_root: Optional[str] = None):
        """
        Args:
            storage_root: Override the default storage path (used in tests).
                          If None, uses settings.storage_root.
        """
        self.storage_root = Path(storage_root or settings.storage_root).resolve()
        self.storage_root.mkdir(parents=True, exist_ok=True)
        logger.info("LocalAssetStore initialized with storage_root=%s", self.storage_root)

    def validate_extension(self, filename: str) -> str:
        """Returns the normalized extension (lowercase with dot)."""
        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise InvalidArgumentError(
                message=(
                    f"File type '{ext}' is not supported. "
                    f"Allowed types: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
                ),
                field="coverImage",
                context={"extension": ext, "allowed": sorted(ALLOWED_EXTENSIONS)},
            )
        return ext

    def validate_size(self, size: int) -> None:
        max_mb = settings.max_file_size / (1024 * 1024)
        if size == 0:
            raise InvalidArgumentError(message="Cover image is empty", field="coverImage")
        if size > settings.max_file_size:
            raise InvalidArgumentError(
                message=f"File size ({size / (1024 * 1024):.1f}MB) exceeds maximum of {max_mb:.0f}MB.",
                field="coverImage",
                context={"max_size_mb": max_mb, "actual_size": size},
            )

    def validate_mime_type(self, content: bytes, filename: str) -> str:
        """
        Detect the real content type from the header bytes.

        Returns:
            The detected MIME type, one of ALLOWED_MIME_TYPES.

        Raises:
            InvalidArgumentError: The bytes are not a PNG, JPEG or WEBP image.
            AssetStorageError: libmagic failed to inspect the content.
        """
        try:
            mime_type = magic.from_buffer(content, mime=True)
        except magic.MagicException as e:
            logger.error("MIME type detection failed for %s: %s", filename, str(e))
            raise AssetStorageError(
                message="Could not verify file type. Please try again.",
                context={"error": str(e)},
            )

        if mime_type not in ALLOWED_MIME_TYPES:
            raise InvalidArgumentError(
                message=(
                    f"File content type '{mime_type}' is not supported. "
                    f"The cover must be a PNG, JPEG or WEBP image."
                ),
                field="coverImage",
                context={"detected_mime": mime_type, "allowed": sorted(ALLOWED_MIME_TYPES)},
            )
        return mime_type

    def _generate_asset_id(self, extension: str, folder: Optional[str]) -> str:
        date_dir = datetime.now(timezone.utc).strftime("%Y/%m/%d")
        asset_id = f"{date_dir}/{uuid.uuid4()}{extension}"
        if folder:
            asset_id = f"{folder.strip('/')}/{asset_id}"
        return asset_id

    def url_for(self, asset_id: str) -> str:
        return f"{settings.asset_url_prefix}/{asset_id}"

    def resolve_path(self, asset_id: str) -> Path:
        """
        Map an asset id to a file inside the storage root.

        Raises:
            InvalidArgumentError: The id escapes the storage root.
        """
        path = (self.storage_root / asset_id).resolve()
        if not path.is_relative_to(self.storage_root):
            raise InvalidArgumentError(message="Invalid asset id", field="assetId")
        return path

    async def upload(
        self,
        content: bytes,
        filename: str,
        folder: Optional[str] = None,
    ) -> Dict[str, str]:
        self.validate_extension(filename)
        self.validate_size(len(content))
        mime_type = self.validate_mime_type(content, filename)

        asset_id = self._generate_asset_id(ALLOWED_MIME_TYPES[mime_type], folder)
        path = self.resolve_path(asset_id)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store asset at %s: %s", path, str(e))
            raise AssetStorageError(
                message="Failed to save cover image. Please try again.",
                context={"asset_id": asset_id, "os_error": str(e)},
            )

        logger.info("Asset stored: %s (%s, %d bytes)", asset_id, mime_type, len(content))
        return {"url": self.url_for(asset_id), "assetId": asset_id}

    async def delete(self, asset_id: str) -> None:
        path = self.resolve_path(asset_id)
        if not await aiofiles.os.path.exists(path):
            logger.debug("Asset already gone: %s", asset_id)
            return
        try:
            await aiofiles.os.remove(path)
        except OSError as e:
            logger.error("Failed to delete asset %s: %s", asset_id, str(e))
            raise AssetStorageError(
                message="Failed to delete cover image.",
                context={"asset_id": asset_id, "os_error": str(e)},
            )
        logger.info("Asset deleted: %s", asset_id)

    async def open_asset(self, asset_id: str) -> Path:
        """Return the on-disk path of an existing asset (NotFoundError otherwise)."""
        path = self.resolve_path(asset_id)
        if not await aiofiles.os.path.isfile(path):
            raise NotFoundError(resource="asset", resource_id=asset_id)
        return path


# ── Singleton Instance ────────────────────────────────────────────────────
asset_store = LocalAssetStore()
