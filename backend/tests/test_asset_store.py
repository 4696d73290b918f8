"""
VocabList Backend - Asset Store Unit Tests
============================================

What:  Tests for LocalAssetStore validation, upload and delete.
Why:   Cover uploads are the only path where caller bytes reach the disk and
       are later served publicly, so every check is pinned down here.
How:   Each test gets a store rooted in a temporary directory.

Test Strategy:
    ✅ Allowed extensions (.png, .jpg, .jpeg, .webp), case-insensitive
    ✅ Rejected extensions (.gif, .pdf, none)
    ✅ Size limits (empty, boundary at MAX_FILE_SIZE)
    ✅ Content sniffing: non-image bytes under an image name are rejected
    ✅ Stored extension follows the detected type, not the filename
    ✅ Upload writes under the folder, delete removes, delete is idempotent
    ✅ Asset ids cannot escape the storage root
"""

from pathlib import Path

import pytest

from vocablist.config import settings
from vocablist.exceptions import InvalidArgumentError, NotFoundError


class TestAssetValidation:
    # ── Extension Validation ──────────────────────────────────────────────

    @pytest.mark.parametrize("filename", ["cover.png", "cover.jpg", "cover.jpeg", "cover.webp"])
    def test_allowed_extensions(self, asset_store, filename):
        """Every supported image extension passes and is returned normalized."""
        assert asset_store.validate_extension(filename) == Path(filename).suffix

    def test_extension_is_case_insensitive(self, asset_store):
        """Upper-case extensions are accepted and lower-cased."""
        assert asset_store.validate_extension("COVER.PNG") == ".png"

    @pytest.mark.parametrize("filename", ["anim.gif", "doc.pdf", "noextension", ""])
    def test_rejected_extensions(self, asset_store, filename):
        """Unsupported or missing extensions are rejected on the coverImage field."""
        with pytest.raises(InvalidArgumentError, match="not supported") as exc_info:
            asset_store.validate_extension(filename)
        assert exc_info.value.field == "coverImage"

    # ── Size Validation ───────────────────────────────────────────────────

    def test_size_at_limit(self, asset_store):
        """A file of exactly MAX_FILE_SIZE bytes is allowed."""
        asset_store.validate_size(settings.max_file_size)

    def test_size_over_limit(self, asset_store):
        """One byte over the limit is rejected."""
        with pytest.raises(InvalidArgumentError, match="exceeds maximum"):
            asset_store.validate_size(settings.max_file_size + 1)

    def test_empty_rejected(self, asset_store):
        """Empty uploads are rejected."""
        with pytest.raises(InvalidArgumentError, match="empty"):
            asset_store.validate_size(0)

    # ── MIME Validation ───────────────────────────────────────────────────

    def test_jpeg_content_detected(self, asset_store, sample_image_bytes):
        """JPEG header bytes are detected as image/jpeg."""
        assert asset_store.validate_mime_type(sample_image_bytes, "cat.jpg") == "image/jpeg"

    def test_png_content_detected(self, asset_store, sample_png_bytes):
        """PNG header bytes are detected as image/png."""
        assert asset_store.validate_mime_type(sample_png_bytes, "cat.png") == "image/png"

    def test_script_renamed_to_png_rejected(self, asset_store):
        """A shell script saved as .png fails the content check."""
        with pytest.raises(InvalidArgumentError, match="content type") as exc_info:
            asset_store.validate_mime_type(b"#!/bin/sh\necho not an image\n", "evil.png")
        assert exc_info.value.field == "coverImage"


class TestAssetStorage:
    @pytest.mark.asyncio
    async def test_upload_and_delete(self, asset_store, sample_image_bytes, temp_storage):
        """Upload writes under the folder and returns url + assetId; delete removes it."""
        uploaded = await asset_store.upload(sample_image_bytes, "cat.JPG", folder="covers/u1")

        asset_id = uploaded["assetId"]
        assert asset_id.startswith("covers/u1/")
        assert asset_id.endswith(".jpg")
        assert uploaded["url"] == f"{settings.asset_url_prefix}/{asset_id}"
        path = Path(temp_storage) / asset_id
        assert path.read_bytes() == sample_image_bytes

        await asset_store.delete(asset_id)
        assert not path.exists()

    @pytest.mark.asyncio
    async def test_non_image_under_image_name_is_not_stored(self, asset_store, temp_storage):
        """Non-image bytes named .png are rejected and nothing is written."""
        with pytest.raises(InvalidArgumentError):
            await asset_store.upload(b"#!/bin/sh\necho not an image\n", "evil.png")
        assert [p for p in Path(temp_storage).rglob("*") if p.is_file()] == []

    @pytest.mark.asyncio
    async def test_stored_extension_follows_content(self, asset_store, sample_image_bytes):
        """JPEG bytes uploaded as .png are stored (and later served) as .jpg."""
        uploaded = await asset_store.upload(sample_image_bytes, "cover.png")
        assert uploaded["assetId"].endswith(".jpg")

    @pytest.mark.asyncio
    async def test_delete_missing_asset_is_noop(self, asset_store):
        """Deleting an unknown asset id does not raise."""
        await asset_store.delete("covers/u1/2026/01/01/gone.png")

    @pytest.mark.asyncio
    async def test_upload_rejects_before_writing(self, asset_store, temp_storage):
        """An unsupported extension fails before any file is created."""
        with pytest.raises(InvalidArgumentError):
            await asset_store.upload(b"data", "cover.gif")
        assert list(Path(temp_storage).rglob("*.*")) == []

    @pytest.mark.asyncio
    async def test_open_missing_asset(self, asset_store):
        """Opening an unknown asset raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await asset_store.open_asset("nope.png")

    def test_path_traversal_rejected(self, asset_store):
        """Asset ids resolving outside the storage root are rejected."""
        with pytest.raises(InvalidArgumentError):
            asset_store.resolve_path("../../etc/passwd")
