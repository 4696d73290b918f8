"""
VocabList Backend - Import Engine
===================================

What:  Clones a shared list and its items into the importing user's lists.
How:   resolve(token) -> build `import_{sourceListId}` plus item snapshots ->
       write the list and every item in ONE batch -> reconcile wordCount.
Who:   POST /api/shared/{code}/import.

Snapshot semantics:
    Items are copied by value (wordId, originalWord, translatedWord,
    translatedLang) with a fresh addedAt and no source capture. Later edits
    to or deletion of the source list never reach the copy.

Retry safety:
    The list is written with a conditional create inside the batch, so a
    second import of the same source fails with AlreadyExistsError and
    leaves the first copy untouched. A failed batch writes nothing.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from vocablist.exceptions import AlreadyExistsError
from vocablist.schemas.lists import ImportResult, ListItem, Visibility, WordList
from vocablist.services import keys
from vocablist.services.document_store import DocumentStore
from vocablist.services.item_store import ItemStore, item_store
from vocablist.services.share_registry import ShareCodeRegistry, share_registry
from vocablist.services.sql_document_store import document_store

logger = logging.getLogger(__name__)

IMPORTED_SUFFIX = " (Imported)"


class ImportEngine:
    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        shares: Optional[ShareCodeRegistry] = None,
        items: Optional[ItemStore] = None,
    ):
        self.store = store or document_store
        self.shares = shares or share_registry
        self.items = items or item_store

    async def import_list(self, importing_owner: str, token: str) -> ImportResult:
        """
        Import the list behind `token` for `importing_owner`.

        Raises:
            NotFoundError: Invalid or revoked token, or the source list is gone.
            AlreadyExistsError: This source list was already imported.
        """
        keys.require_segment(importing_owner, "owner")

        # ── Step 1: Resolve the source ────────────────────────────────────
        shared = await self.shares.resolve(token)
        source = shared.word_list
        new_list_id = keys.import_list_id(source.list_id)
        now = datetime.now(timezone.utc)

        # ── Step 2: Build the copy ────────────────────────────────────────
        record = WordList(
            list_id=new_list_id,
            list_name=f"{source.list_name}{IMPORTED_SUFFIX}",
            description=source.description,
            list_language=list(source.list_language),
            visibility=Visibility.PRIVATE,
            imported=True,
            imported_from=shared.owner_id,
            imported_at=now,
            word_count=len(shared.items),
            created_at=now,
            updated_at=now,
        )
        copies = [
            ListItem(
                word_id=item.word_id,
                original_word=item.original_word,
                translated_word=item.translated_word,
                translated_lang=item.translated_lang,
                added_at=now,
            )
            for item in shared.items
        ]

        # ── Step 3: One atomic write ──────────────────────────────────────
        batch = self.store.batch()
        batch.create(keys.list_path(importing_owner, new_list_id), record.to_document())
        for copy in copies:
            batch.create(
                keys.item_path(importing_owner, new_list_id, copy.word_id),
                copy.to_document(),
            )
        try:
            await batch.commit()
        except AlreadyExistsError:
            raise AlreadyExistsError(resource="imported list", resource_id=new_list_id)

        # ── Step 4: Reconcile wordCount against what was stored ───────────
        stored = await self.items.list_items(importing_owner, new_list_id, reconcile=True)

        logger.info(
            "Imported list %s from owner=%s into %s (owner=%s, items=%d)",
            source.list_id,
            shared.owner_id,
            new_list_id,
            importing_owner,
            len(stored),
        )
        return ImportResult(
            word_list=record.model_copy(update={"word_count": len(stored)}),
            items_imported=len(stored),
            source_owner_id=shared.owner_id,
        )


# ── Singleton Instance ────────────────────────────────────────────────────
import_engine = ImportEngine()
