"""
VocabList Backend - List Store
================================

What:  CRUD over the word lists owned by a user, cover images and the
       default "favorite" list.
How:   List ids are deterministic ({slug(name)}_{owner}) so uniqueness is
       enforced by the store's conditional create instead of a name index.
Who:   Route handlers, LanguageListManager, ImportEngine.

Delete cascade (order matters):
    1. Delete every item of the list (one batch)
    2. Delete the cover image from the asset store
    3. Soft-delete every share code of (owner, listId)
    4. Delete the list document

    Items go first so that a racing add-item cannot leave a dangling item
    under a deleted list. A failure in any step propagates and the remaining
    steps are not attempted; repeating the delete finishes the job.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from vocablist.exceptions import (
    AlreadyExistsError,
    InvalidArgumentError,
    NotFoundError,
    VocabListError,
)
from vocablist.schemas.lists import CoverImage, WordList, to_timestamp
from vocablist.services import keys
from vocablist.services.asset_store import AssetStore, asset_store
from vocablist.services.document_store import DocumentStore
from vocablist.services.share_registry import ShareCodeRegistry, share_registry
from vocablist.services.sql_document_store import document_store

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ListStore:
    """
    Business logic for list records.

    Error Handling Strategy:
        Input problems raise InvalidArgumentError before any store access.
        Missing lists raise NotFoundError, name collisions AlreadyExistsError.
        Store and asset failures propagate unchanged.
    """

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        assets: Optional[AssetStore] = None,
        shares: Optional[ShareCodeRegistry] = None,
    ):
        self.store = store or document_store
        self.assets = assets or asset_store
        self.shares = shares or share_registry

    async def create(
        self,
        owner: str,
        name: str,
        description: Optional[str] = None,
        languages: Optional[Sequence[str]] = None,
        cover_image: Optional[bytes] = None,
        cover_filename: Optional[str] = None,
    ) -> WordList:
        """
        Create a list named `name` for `owner`.

        Two names that differ only by case or whitespace map to the same id
        and therefore collide.

        Raises:
            InvalidArgumentError: Blank name or owner, invalid cover image.
            AlreadyExistsError: A list with the same normalized name exists.
        """
        keys.require_segment(owner, "owner")
        if not name or not name.strip():
            raise InvalidArgumentError(message="List name is required", field="listName")
        list_id = keys.list_id_for_name(owner, name)

        cover: Optional[CoverImage] = None
        if cover_image is not None:
            uploaded = await self.assets.upload(
                cover_image, cover_filename or "", folder=f"covers/{owner}"
            )
            cover = CoverImage.model_validate(uploaded)

        now = _utc_now()
        record = WordList(
            list_id=list_id,
            list_name=name.strip(),
            description=description,
            list_language=list(languages or []),
            cover_image=cover,
            created_at=now,
            updated_at=now,
        )

        try:
            created = await self.store.create(keys.list_path(owner, list_id), record.to_document())
        except Exception:
            if cover:
                await self._discard_asset(cover.asset_id)
            raise

        if not created:
            if cover:
                await self._discard_asset(cover.asset_id)
            raise AlreadyExistsError(resource="list", resource_id=list_id)

        logger.info("List created: %s (owner=%s)", list_id, owner)
        return record

    async def get_or_create(self, owner: str, record: WordList) -> Tuple[WordList, bool]:
        """
        Return the list with record.list_id, creating it from `record` if absent.

        Uses the conditional create, so concurrent first callers end up with a
        single document: the loser reads back the winner's fields.

        Returns:
            (list, created) where created is True only for the caller that wrote it.
        """
        path = keys.list_path(owner, record.list_id)
        existing = await self.store.get(path)
        if existing is not None:
            return WordList.model_validate(existing), False

        if await self.store.create(path, record.to_document()):
            logger.info("List provisioned: %s (owner=%s)", record.list_id, owner)
            return record, True

        winner = await self.store.get(path)
        if winner is None:
            # created and deleted again between our two reads
            raise NotFoundError(resource="list", resource_id=record.list_id)
        return WordList.model_validate(winner), False

    async def ensure_default(self, owner: str) -> WordList:
        """Idempotently provision the owner's default list (called on sign-up)."""
        keys.require_segment(owner, "owner")
        now = _utc_now()
        record = WordList(
            list_id=keys.default_list_id(owner),
            list_name=keys.DEFAULT_LIST_NAME,
            is_default=True,
            created_at=now,
            updated_at=now,
        )
        word_list, _ = await self.get_or_create(owner, record)
        return word_list

    async def get(self, owner: str, list_id: str) -> WordList:
        keys.require_segment(owner, "owner")
        keys.require_segment(list_id, "listId")
        data = await self.store.get(keys.list_path(owner, list_id))
        if data is None:
            raise NotFoundError(resource="list", resource_id=list_id)
        return WordList.model_validate(data)

    async def exists(self, owner: str, list_id: str) -> bool:
        return await self.store.get(keys.list_path(owner, list_id)) is not None

    async def list(self, owner: str) -> List[WordList]:
        keys.require_segment(owner, "owner")
        snapshots = await self.store.list_collection(keys.lists_collection(owner))
        return [WordList.model_validate(s.data) for s in snapshots]

    async def update(
        self,
        owner: str,
        list_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> WordList:
        """
        Rename or re-describe a list. The id is not re-derived from the new name.

        Raises:
            InvalidArgumentError: Nothing to update, or a blank name.
            NotFoundError: The list does not exist.
        """
        keys.require_segment(owner, "owner")
        keys.require_segment(list_id, "listId")
        if name is None and description is None:
            raise InvalidArgumentError(message="Nothing to update")
        if name is not None and not name.strip():
            raise InvalidArgumentError(message="List name must not be blank", field="listName")

        fields = {"updatedAt": to_timestamp(_utc_now())}
        if name is not None:
            fields["listName"] = name.strip()
        if description is not None:
            fields["description"] = description

        await self._update_list(owner, list_id, fields)
        logger.info("List updated: %s (fields=%s)", list_id, sorted(fields))
        return await self.get(owner, list_id)

    async def set_cover_image(
        self,
        owner: str,
        list_id: str,
        content: bytes,
        filename: str,
    ) -> WordList:
        """
        Replace the cover image of a list.

        The new image is uploaded and recorded first; the previous image is
        then deleted on a best-effort basis.
        """
        current = await self.get(owner, list_id)

        uploaded = await self.assets.upload(content, filename, folder=f"covers/{owner}")
        cover = CoverImage.model_validate(uploaded)
        now = _utc_now()

        try:
            await self._update_list(
                owner,
                list_id,
                {"coverImage": cover.to_document(), "updatedAt": to_timestamp(now)},
            )
        except Exception:
            await self._discard_asset(cover.asset_id)
            raise

        if current.cover_image and current.cover_image.asset_id != cover.asset_id:
            await self._discard_asset(current.cover_image.asset_id)

        logger.info("Cover image set for list %s: %s", list_id, cover.asset_id)
        return current.model_copy(update={"cover_image": cover, "updated_at": now})

    async def delete(self, owner: str, list_id: str) -> None:
        """
        Delete a list and everything hanging off it.

        Raises:
            NotFoundError: The list does not exist.
        """
        record = await self.get(owner, list_id)

        # ── Step 1: Items ─────────────────────────────────────────────────
        items = await self.store.list_collection(keys.items_collection(owner, list_id))
        if items:
            batch = self.store.batch()
            for snapshot in items:
                batch.delete(snapshot.path)
            await batch.commit()

        # ── Step 2: Cover image ───────────────────────────────────────────
        if record.cover_image:
            await self.assets.delete(record.cover_image.asset_id)

        # ── Step 3: Share codes ───────────────────────────────────────────
        revoked = await self.shares.revoke_for_list(owner, list_id)

        # ── Step 4: List document ─────────────────────────────────────────
        await self.store.delete(keys.list_path(owner, list_id))

        logger.info(
            "List deleted: %s (owner=%s, items=%d, shares_revoked=%d)",
            list_id,
            owner,
            len(items),
            revoked,
        )

    async def _update_list(self, owner: str, list_id: str, fields: dict) -> None:
        try:
            await self.store.update(keys.list_path(owner, list_id), fields)
        except NotFoundError:
            raise NotFoundError(resource="list", resource_id=list_id)

    async def _discard_asset(self, asset_id: str) -> None:
        """Best-effort removal of an asset that is no longer referenced."""
        try:
            await self.assets.delete(asset_id)
        except VocabListError as e:
            logger.warning("Could not delete unreferenced asset %s: %s", asset_id, e.message)


# ── Singleton Instance ────────────────────────────────────────────────────
list_store = ListStore()
