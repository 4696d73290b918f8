"""
VocabList Backend - Share Code Registry Tests
===============================================

Why:   Share tokens are public capabilities; only live codes of live lists
       may resolve.

What we test:
    ✅ issue -> resolve round trip, list becomes public
    ✅ Tokens are opaque and distinct per issue
    ✅ Unknown, revoked and orphaned codes do not resolve
    ✅ revoke_for_list only touches active codes of that list
    ✅ Timestamps on codes and lists share one stored format
"""

import pytest

from vocablist.exceptions import NotFoundError
from vocablist.schemas.lists import ListItem, Visibility


def _item(word_id: str) -> ListItem:
    return ListItem(
        word_id=word_id,
        original_word=word_id,
        translated_word=f"{word_id}-it",
        translated_lang="it",
        added_at="2026-10-19T10:00:00+00:00",
    )


class TestIssue:
    @pytest.mark.asyncio
    async def test_issue_and_resolve(self, list_store, item_store, share_registry):
        """Issuing makes the list public and the token resolves to it with its items."""
        await list_store.create("u1", "Travel")
        await item_store.add("u1", "travel_u1", _item("id_cat"))

        share = await share_registry.issue("u1", "travel_u1")

        assert len(share.shared_code) == 12
        assert share.share_url == f"https://vocab.test/shared/{share.shared_code}"
        assert (await list_store.get("u1", "travel_u1")).visibility == Visibility.PUBLIC

        view = await share_registry.resolve(share.shared_code)
        assert view.owner_id == "u1"
        assert view.word_list.list_id == "travel_u1"
        assert [i.word_id for i in view.items] == ["id_cat"]

    @pytest.mark.asyncio
    async def test_each_issue_creates_a_new_code(self, list_store, share_registry, document_store):
        """Every issue mints a fresh token and record."""
        await list_store.create("u1", "Travel")

        first = await share_registry.issue("u1", "travel_u1")
        second = await share_registry.issue("u1", "travel_u1")

        assert first.shared_code != second.shared_code
        assert len(await document_store.list_collection("sharedCodes")) == 2

    @pytest.mark.asyncio
    async def test_issue_for_missing_list(self, share_registry, document_store):
        """No code is recorded for an unknown list."""
        with pytest.raises(NotFoundError):
            await share_registry.issue("u1", "nope_u1")
        assert await document_store.list_collection("sharedCodes") == []


class TestResolve:
    @pytest.mark.asyncio
    async def test_unknown_token(self, share_registry):
        """A token that was never issued does not resolve."""
        with pytest.raises(NotFoundError):
            await share_registry.resolve("doesNotExist")

    @pytest.mark.asyncio
    async def test_blank_token(self, share_registry):
        """An empty token does not resolve."""
        with pytest.raises(NotFoundError):
            await share_registry.resolve("")

    @pytest.mark.asyncio
    async def test_revoked_token(self, list_store, share_registry):
        """A revoked token does not resolve."""
        await list_store.create("u1", "Travel")
        share = await share_registry.issue("u1", "travel_u1")
        await share_registry.revoke_for_list("u1", "travel_u1")

        with pytest.raises(NotFoundError):
            await share_registry.resolve(share.shared_code)

    @pytest.mark.asyncio
    async def test_code_of_deleted_list(self, list_store, share_registry, document_store):
        """An active code whose list is gone does not resolve."""
        await list_store.create("u1", "Travel")
        share = await share_registry.issue("u1", "travel_u1")
        # bypass the cascade so the code stays active
        await document_store.delete("users/u1/lists/travel_u1")

        with pytest.raises(NotFoundError):
            await share_registry.resolve(share.shared_code)


class TestRevoke:
    @pytest.mark.asyncio
    async def test_revoke_counts_active_codes_only(self, list_store, share_registry):
        """Revoke returns how many active codes it flipped and spares other lists."""
        await list_store.create("u1", "Travel")
        await list_store.create("u1", "Food")
        await share_registry.issue("u1", "travel_u1")
        await share_registry.issue("u1", "travel_u1")
        other = await share_registry.issue("u1", "food_u1")

        assert await share_registry.revoke_for_list("u1", "travel_u1") == 2
        assert await share_registry.revoke_for_list("u1", "travel_u1") == 0

        view = await share_registry.resolve(other.shared_code)
        assert view.word_list.list_id == "food_u1"

    @pytest.mark.asyncio
    async def test_revoked_code_is_kept(self, list_store, share_registry, document_store):
        """Revoked codes stay on record, flagged with deletedAt."""
        await list_store.create("u1", "Travel")
        share = await share_registry.issue("u1", "travel_u1")
        await share_registry.revoke_for_list("u1", "travel_u1")

        code = await share_registry.find(share.shared_code)
        assert code.is_deleted is True
        assert code.deleted_at is not None
        raw = await document_store.get(f"sharedCodes/{share.shared_id}")
        assert raw["deletedAt"].endswith("Z")
        assert raw["createdAt"].endswith("Z")


class TestTimestamps:
    @pytest.mark.asyncio
    async def test_issue_stamps_list_like_the_code(self, list_store, share_registry, document_store):
        """The list's updatedAt and the code's createdAt come from one instant and render identically."""
        await list_store.create("u1", "Travel")
        share = await share_registry.issue("u1", "travel_u1")

        list_doc = await document_store.get("users/u1/lists/travel_u1")
        code_doc = await document_store.get(f"sharedCodes/{share.shared_id}")
        assert list_doc["updatedAt"] == code_doc["createdAt"]
