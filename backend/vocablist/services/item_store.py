"""
VocabList Backend - Item Store
================================

What:  CRUD over the items nested under a list.
How:   An item is keyed by its wordId, so a list holds at most one item per
       word. Adding or removing an item and moving the list's wordCount
       happen in one atomic batch (create/delete + increment).
Who:   MultiListInserter, ShareCodeRegistry.resolve, ImportEngine, routes.

wordCount:
    A cached counter on the list document. It only moves through the store's
    atomic increment, and list_items(reconcile=True) rewrites it from the
    actual item count when the two disagree.
"""

import logging
from datetime import datetime, timezone
from typing import List, Optional

from vocablist.exceptions import AlreadyExistsError, NotFoundError
from vocablist.schemas.lists import ListItem, to_timestamp
from vocablist.services import keys
from vocablist.services.document_store import DocumentStore
from vocablist.services.sql_document_store import document_store

logger = logging.getLogger(__name__)


class ItemStore:
    def __init__(self, store: Optional[DocumentStore] = None):
        self.store = store or document_store

    async def add(self, owner: str, list_id: str, item: ListItem) -> bool:
        """
        Add an item to a list and bump the list's wordCount.

        Returns:
            True if the item was inserted, False if the list already holds
            an item with this wordId (reported, not raised).

        Raises:
            NotFoundError: The list does not exist.
        """
        keys.require_segment(item.word_id, "wordId")
        list_path = keys.list_path(owner, list_id)
        path = keys.item_path(owner, list_id, item.word_id)

        if await self.store.get(list_path) is None:
            raise NotFoundError(resource="list", resource_id=list_id)
        if await self.store.get(path) is not None:
            logger.debug("Item %s already in list %s", item.word_id, list_id)
            return False

        batch = self.store.batch()
        batch.create(path, item.to_document())
        batch.increment(
            list_path,
            "wordCount",
            1,
            extra={"updatedAt": to_timestamp(datetime.now(timezone.utc))},
        )
        try:
            await batch.commit()
        except AlreadyExistsError:
            # a concurrent add of the same word won
            return False
        except NotFoundError:
            raise NotFoundError(resource="list", resource_id=list_id)

        logger.info("Item %s added to list %s", item.word_id, list_id)
        return True

    async def remove(self, owner: str, list_id: str, word_id: str) -> None:
        """
        Remove an item and decrement the list's wordCount.

        Raises:
            NotFoundError: The list or the item does not exist.
        """
        keys.require_segment(word_id, "wordId")
        list_path = keys.list_path(owner, list_id)
        path = keys.item_path(owner, list_id, word_id)

        if await self.store.get(list_path) is None:
            raise NotFoundError(resource="list", resource_id=list_id)
        if await self.store.get(path) is None:
            raise NotFoundError(resource="item", resource_id=word_id)

        batch = self.store.batch()
        batch.delete(path)
        batch.increment(
            list_path,
            "wordCount",
            -1,
            extra={"updatedAt": to_timestamp(datetime.now(timezone.utc))},
        )
        try:
            await batch.commit()
        except NotFoundError:
            raise NotFoundError(resource="list", resource_id=list_id)

        logger.info("Item %s removed from list %s", word_id, list_id)

    async def get(self, owner: str, list_id: str, word_id: str) -> Optional[ListItem]:
        data = await self.store.get(keys.item_path(owner, list_id, word_id))
        return ListItem.model_validate(data) if data is not None else None

    async def list_items(
        self,
        owner: str,
        list_id: str,
        reconcile: bool = False,
    ) -> List[ListItem]:
        """
        Return every item of a list, ordered by wordId.

        With reconcile=True the list's wordCount is rewritten when it does not
        match the number of items returned.

        Raises:
            NotFoundError: The list does not exist.
        """
        list_path = keys.list_path(owner, list_id)
        list_data = await self.store.get(list_path)
        if list_data is None:
            raise NotFoundError(resource="list", resource_id=list_id)

        snapshots = await self.store.list_collection(keys.items_collection(owner, list_id))
        items = [ListItem.model_validate(s.data) for s in snapshots]

        cached = list_data.get("wordCount")
        if reconcile and cached != len(items):
            logger.warning(
                "wordCount drift on list %s (owner=%s): cached=%s actual=%d, reconciling",
                list_id,
                owner,
                cached,
                len(items),
            )
            try:
                await self.store.update(list_path, {"wordCount": len(items)})
            except NotFoundError:
                raise NotFoundError(resource="list", resource_id=list_id)

        return items


# ── Singleton Instance ────────────────────────────────────────────────────
item_store = ItemStore()
