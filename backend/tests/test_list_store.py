"""
VocabList Backend - List Store Tests
======================================

What:  ListStore against a real SQLDocumentStore and a temp LocalAssetStore.
Why:   List ids are derived from names, so collisions, reserved names and
       the delete cascade decide whether other lists stay intact.

What we test:
    ✅ Deterministic ids and name collisions (case / whitespace)
    ✅ Blank names rejected before any write
    ✅ Names cannot claim language / default / imported list ids
    ✅ Default list provisioning is idempotent
    ✅ Rename keeps the id; stored timestamps share one format
    ✅ Cover images: upload on create, replace, cleanup on conflict
    ✅ Delete cascade: items, cover asset, share codes, list
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from vocablist.exceptions import AlreadyExistsError, InvalidArgumentError, NotFoundError
from vocablist.schemas.lists import ListItem, Visibility
from vocablist.services.document_store import DocumentStore
from vocablist.services.list_store import ListStore


def _item(word_id: str) -> ListItem:
    return ListItem(
        word_id=word_id,
        original_word=word_id,
        translated_word=f"{word_id}-it",
        translated_lang="it",
        source_asset_id="cap1",
        added_at="2026-10-19T10:00:00+00:00",
    )


def _stored_files(root: str):
    return [p for p in Path(root).rglob("*") if p.is_file()]


class TestCreate:
    @pytest.mark.asyncio
    async def test_create_derives_id_from_name_and_owner(self, list_store):
        """The id is slug(name) + owner; the display name keeps its inner spacing."""
        word_list = await list_store.create("u1", "  Travel  Words ", description="trip")

        assert word_list.list_id == "travel_words_u1"
        assert word_list.list_name == "Travel  Words"
        assert word_list.word_count == 0
        assert word_list.visibility == Visibility.PRIVATE
        assert (await list_store.get("u1", "travel_words_u1")).description == "trip"

    @pytest.mark.asyncio
    async def test_names_differing_by_case_collide(self, list_store):
        """'Travel' and 'TRAVEL' map to the same id, so the second create conflicts."""
        await list_store.create("u1", "Travel")
        with pytest.raises(AlreadyExistsError):
            await list_store.create("u1", "TRAVEL")

    @pytest.mark.asyncio
    async def test_same_name_for_different_owners(self, list_store):
        """Owners have separate namespaces."""
        await list_store.create("u1", "Travel")
        await list_store.create("u2", "Travel")
        assert [l.list_id for l in await list_store.list("u2")] == ["travel_u2"]

    @pytest.mark.asyncio
    async def test_slash_in_name_stays_one_path_segment(self, list_store):
        """'/' in a name never splits the document path."""
        word_list = await list_store.create("u1", "food/drink")
        assert word_list.list_id == "food-drink_u1"

    @pytest.mark.asyncio
    async def test_blank_name_rejected_without_store_access(self):
        """A blank name fails validation before the store is touched."""
        store = MagicMock(spec=DocumentStore)
        service = ListStore(store, assets=AsyncMock(), shares=AsyncMock())

        with pytest.raises(InvalidArgumentError):
            await service.create("u1", "   ")
        assert store.mock_calls == []

    @pytest.mark.asyncio
    async def test_create_with_cover_uploads_first(self, list_store, sample_image_bytes, temp_storage):
        """A cover passed to create is stored and referenced by the list."""
        word_list = await list_store.create(
            "u1", "Pets", cover_image=sample_image_bytes, cover_filename="cat.jpg"
        )

        assert word_list.cover_image is not None
        assert word_list.cover_image.url.endswith(word_list.cover_image.asset_id)
        assert (Path(temp_storage) / word_list.cover_image.asset_id).exists()

    @pytest.mark.asyncio
    async def test_cover_removed_when_name_taken(self, list_store, sample_image_bytes, temp_storage):
        """The uploaded cover is discarded when the create loses on the name."""
        await list_store.create("u1", "Pets")
        with pytest.raises(AlreadyExistsError):
            await list_store.create(
                "u1", "pets", cover_image=sample_image_bytes, cover_filename="cat.jpg"
            )
        assert _stored_files(temp_storage) == []


class TestReservedNames:
    @pytest.mark.asyncio
    async def test_name_cannot_take_language_list(self, list_store, language_lists):
        """'Lang List it' is refused and the real Italian language list is unaffected."""
        with pytest.raises(InvalidArgumentError) as exc_info:
            await list_store.create("u1", "Lang List it")
        assert exc_info.value.field == "listName"

        lang_list = await language_lists.ensure("u1", "it")
        assert lang_list.list_name == "Language: it"
        assert lang_list.list_language == ["it"]

    @pytest.mark.asyncio
    async def test_name_cannot_take_default_list(self, list_store):
        """'Default Favourite' is refused, so ensure_default still owns its id."""
        with pytest.raises(InvalidArgumentError):
            await list_store.create("u1", "Default Favourite")

        default = await list_store.ensure_default("u1")
        assert default.is_default is True
        assert default.list_name == "favorite"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["Import", "import travel", "IMPORT_x"])
    async def test_name_cannot_take_imported_list(self, list_store, name):
        """Names whose id would start with 'import_' are refused."""
        with pytest.raises(InvalidArgumentError):
            await list_store.create("u1", name)
        assert await list_store.list("u1") == []

    @pytest.mark.asyncio
    async def test_similar_names_still_allowed(self, list_store):
        """Only the reserved prefixes are blocked, not every name containing them."""
        word_list = await list_store.create("u1", "Languages")
        assert word_list.list_id == "languages_u1"
        word_list = await list_store.create("u1", "My default favourites")
        assert word_list.list_id == "my_default_favourites_u1"


class TestDefaultList:
    @pytest.mark.asyncio
    async def test_ensure_default_is_idempotent(self, list_store):
        """Repeated provisioning returns the same single default list."""
        first = await list_store.ensure_default("u1")
        second = await list_store.ensure_default("u1")

        assert first.list_id == second.list_id == "default_favourite_u1"
        assert second.is_default is True
        assert second.list_name == "favorite"
        assert len(await list_store.list("u1")) == 1


class TestUpdate:
    @pytest.mark.asyncio
    async def test_rename_keeps_id(self, list_store):
        """Renaming changes listName only; the id stays stable."""
        await list_store.create("u1", "Travel")
        renamed = await list_store.update("u1", "travel_u1", name="Holidays")

        assert renamed.list_id == "travel_u1"
        assert renamed.list_name == "Holidays"

    @pytest.mark.asyncio
    async def test_updated_at_uses_document_format(self, list_store, document_store):
        """updatedAt written by update() uses the same 'Z' form as createdAt."""
        await list_store.create("u1", "Travel")
        await list_store.update("u1", "travel_u1", description="new")

        data = await document_store.get("users/u1/lists/travel_u1")
        assert data["createdAt"].endswith("Z")
        assert data["updatedAt"].endswith("Z")

    @pytest.mark.asyncio
    async def test_update_requires_a_field(self, list_store):
        """Calling update with nothing to change is an InvalidArgumentError."""
        await list_store.create("u1", "Travel")
        with pytest.raises(InvalidArgumentError):
            await list_store.update("u1", "travel_u1")

    @pytest.mark.asyncio
    async def test_update_missing_list(self, list_store):
        """Updating an unknown list raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await list_store.update("u1", "nope_u1", description="x")

    @pytest.mark.asyncio
    async def test_replace_cover_deletes_previous(
        self, list_store, sample_image_bytes, sample_png_bytes, temp_storage
    ):
        """Setting a new cover stores it and removes the old asset."""
        created = await list_store.create(
            "u1", "Pets", cover_image=sample_image_bytes, cover_filename="a.jpg"
        )
        updated = await list_store.set_cover_image("u1", "pets_u1", sample_png_bytes, "b.png")

        root = Path(temp_storage)
        assert not (root / created.cover_image.asset_id).exists()
        assert (root / updated.cover_image.asset_id).exists()
        assert updated.cover_image.asset_id.endswith(".png")
        stored = await list_store.get("u1", "pets_u1")
        assert stored.cover_image.asset_id == updated.cover_image.asset_id


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_cascades(
        self, list_store, item_store, share_registry, document_store, sample_image_bytes, temp_storage
    ):
        """Delete removes items and cover, revokes share codes, then drops the list."""
        created = await list_store.create(
            "u1", "Pets", cover_image=sample_image_bytes, cover_filename="a.jpg"
        )
        await item_store.add("u1", "pets_u1", _item("id_cat"))
        await item_store.add("u1", "pets_u1", _item("id_dog"))
        share = await share_registry.issue("u1", "pets_u1")

        await list_store.delete("u1", "pets_u1")

        assert await document_store.list_collection("users/u1/lists/pets_u1/items") == []
        assert not (Path(temp_storage) / created.cover_image.asset_id).exists()
        code = await document_store.get(f"sharedCodes/{share.shared_id}")
        assert code["isDeleted"] is True
        assert code["deletedAt"].endswith("Z")
        with pytest.raises(NotFoundError):
            await list_store.get("u1", "pets_u1")

    @pytest.mark.asyncio
    async def test_delete_missing_list(self, list_store):
        """Deleting an unknown list raises NotFoundError."""
        with pytest.raises(NotFoundError):
            await list_store.delete("u1", "nope_u1")
