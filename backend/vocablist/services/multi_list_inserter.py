"""
VocabList Backend - Multi-List Inserter
=========================================

What:  Adds one vocabulary item to up to K explicit lists plus the owner's
       language list, with an independent outcome per target.
Why:   A user saving a word into five lists gets partial credit when one of
       them was deleted concurrently, instead of an all-or-nothing failure.
Who:   POST /api/items.

Orchestration Flow:
    ┌────────────┐   ┌──────────────┐   ┌───────────────┐   ┌──────────────┐
    │  Validate  │──▶│  Resolve     │──▶│ Language list │──▶│ Each target  │
    │ (no store  │   │  lang, word, │   │ (best-effort) │   │ independently│
    │  access)   │   │  translation │   └───────────────┘   └──────────────┘
    └────────────┘   └──────────────┘

    Raised:    InvalidArgumentError (validation), NotFoundError and
               TranslationLookupError (resolution).
    Reported:  everything that happens per target, and whether the language
               list received the item.
"""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence

from vocablist.config import settings
from vocablist.exceptions import InvalidArgumentError, NotFoundError, VocabListError
from vocablist.schemas.lists import (
    AddItemResult,
    AddItemSummary,
    ListItem,
    TargetOutcome,
    TargetStatus,
)
from vocablist.services import keys
from vocablist.services.item_store import ItemStore, item_store
from vocablist.services.language_lists import LanguageListManager, language_lists
from vocablist.services.translation_lookup import TranslationLookup, translation_lookup

logger = logging.getLogger(__name__)


class MultiListInserter:
    def __init__(
        self,
        items: Optional[ItemStore] = None,
        languages: Optional[LanguageListManager] = None,
        lookup: Optional[TranslationLookup] = None,
        max_targets: Optional[int] = None,
    ):
        self.items = items or item_store
        self.languages = languages or language_lists
        self.lookup = lookup or translation_lookup
        self.max_targets = max_targets or settings.max_target_lists

    def validate(
        self,
        owner: str,
        word_id: str,
        source_asset_id: str,
        target_list_ids: Sequence[str],
    ) -> List[str]:
        """
        Check every argument without touching the store.

        Returns:
            The target ids with duplicates removed, first occurrence order kept.
        """
        keys.require_segment(owner, "owner")
        keys.require_segment(word_id, "wordId")
        keys.require_segment(source_asset_id, "sourceAssetId")

        if not target_list_ids:
            raise InvalidArgumentError(
                message="At least one target list is required", field="targetListIds"
            )
        if len(target_list_ids) > self.max_targets:
            raise InvalidArgumentError(
                message=f"At most {self.max_targets} target lists are allowed",
                field="targetListIds",
                context={"requested": len(target_list_ids), "max": self.max_targets},
            )
        for list_id in target_list_ids:
            keys.require_segment(list_id, "targetListIds")
        return list(dict.fromkeys(target_list_ids))

    async def add_item(
        self,
        owner: str,
        word_id: str,
        source_asset_id: str,
        target_list_ids: Sequence[str],
    ) -> AddItemResult:
        """
        Add a translated word to several lists.

        Raises:
            InvalidArgumentError: Bad arguments; nothing was read or written.
            NotFoundError: Unknown capture, capture without language, unknown
                word, or no translation into the capture's language.
            TranslationLookupError: The lookup itself failed.
        """
        targets = self.validate(owner, word_id, source_asset_id, target_list_ids)

        # ── Step 1: Resolve once for all targets ──────────────────────────
        target_lang = await self.lookup.get_source_language(owner, source_asset_id)
        if not target_lang:
            raise NotFoundError(resource="capture language", resource_id=source_asset_id)

        word = await self.lookup.get_word(word_id)
        if word is None:
            raise NotFoundError(resource="word", resource_id=word_id)

        translated = word.translations.get(target_lang)
        if not translated:
            match = await self.lookup.find_translation(word.original_word, target_lang)
            if match is None:
                raise NotFoundError(
                    resource="translation",
                    resource_id=f"{word_id}:{target_lang}",
                )
            translated = match.translated_word

        item = ListItem(
            word_id=word_id,
            original_word=word.original_word,
            translated_word=translated,
            translated_lang=target_lang,
            source_asset_id=source_asset_id,
            added_at=datetime.now(timezone.utc),
        )

        # ── Step 2: Language list (best-effort) ───────────────────────────
        lang_list_id = self.languages.list_id_for(owner, target_lang)
        lang_outcome = await self._add_to_language_list(owner, target_lang, item)
        lang_item_added = lang_outcome.status in (TargetStatus.SUCCESS, TargetStatus.DUPLICATE)

        # ── Step 3: Each explicit target ──────────────────────────────────
        outcomes: List[TargetOutcome] = []
        for list_id in targets:
            if list_id == lang_list_id:
                outcomes.append(lang_outcome.model_copy())
                continue
            outcomes.append(await self._add_to_target(owner, list_id, item))

        # ── Step 4: Summary ───────────────────────────────────────────────
        success_count = sum(1 for o in outcomes if o.status == TargetStatus.SUCCESS)
        summary = AddItemSummary(
            success_count=success_count,
            failed_count=len(outcomes) - success_count,
            lang_item_added=lang_item_added,
        )
        logger.info(
            "add_item %s for owner=%s: %d/%d targets, language list %s",
            word_id,
            owner,
            success_count,
            len(outcomes),
            "updated" if lang_item_added else "not updated",
        )
        return AddItemResult(
            word_id=word_id,
            original_word=item.original_word,
            translated_word=item.translated_word,
            translated_lang=target_lang,
            language_list_id=lang_list_id,
            targets=outcomes,
            summary=summary,
        )

    async def _add_to_language_list(
        self, owner: str, target_lang: str, item: ListItem
    ) -> TargetOutcome:
        list_id = self.languages.list_id_for(owner, target_lang)
        try:
            await self.languages.ensure(owner, target_lang)
        except Exception as e:
            logger.warning(
                "Language list %s could not be ensured: %s", list_id, str(e), exc_info=True
            )
            return TargetOutcome(list_id=list_id, status=TargetStatus.ERROR, message=_describe(e))
        return await self._add_to_target(owner, list_id, item, best_effort=True)

    async def _add_to_target(
        self,
        owner: str,
        list_id: str,
        item: ListItem,
        best_effort: bool = False,
    ) -> TargetOutcome:
        try:
            added = await self.items.add(owner, list_id, item)
        except NotFoundError:
            return TargetOutcome(
                list_id=list_id, status=TargetStatus.NOT_FOUND, message="List not found"
            )
        except Exception as e:
            if best_effort:
                logger.warning("Adding %s to %s failed: %s", item.word_id, list_id, str(e))
            else:
                logger.error(
                    "Adding %s to %s failed: %s", item.word_id, list_id, str(e), exc_info=True
                )
            return TargetOutcome(list_id=list_id, status=TargetStatus.ERROR, message=_describe(e))

        if not added:
            return TargetOutcome(
                list_id=list_id,
                status=TargetStatus.DUPLICATE,
                message="Word already in list",
            )
        return TargetOutcome(list_id=list_id, status=TargetStatus.SUCCESS)


def _describe(error: Exception) -> str:
    if isinstance(error, VocabListError):
        return error.message
    return "Unexpected error while adding the word"


# ── Singleton Instance ────────────────────────────────────────────────────
multi_list_inserter = MultiListInserter()
