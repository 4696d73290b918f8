"""
VocabList Backend - Translation Lookup
========================================

What:  Read-only access to words, translations and the language of a capture.
How:   TranslationLookup is the interface MultiListInserter depends on.
       StoreTranslationLookup reads the global `words` collection and the
       owner's `captures` collection of the document store.
Who:   MultiListInserter resolves the target language, word and translated
       text through it once per add-item call.

Contract:
    - Missing records are reported as None; the caller decides whether that
      is a NotFound.
    - Any failure to reach the backing data raises TranslationLookupError
      (an ExternalServiceError, HTTP 502).
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from pydantic import ValidationError

from vocablist.exceptions import TranslationLookupError, VocabListError
from vocablist.schemas.lists import TranslationMatch, Word
from vocablist.services import keys
from vocablist.services.document_store import DocumentStore
from vocablist.services.sql_document_store import document_store

logger = logging.getLogger(__name__)


class TranslationLookup(ABC):
    """Abstract interface for word and translation lookups."""

    @abstractmethod
    async def get_word(self, word_id: str) -> Optional[Word]:
        """Return the global word record, or None if unknown."""
        ...

    @abstractmethod
    async def get_source_language(self, owner: str, source_asset_id: str) -> Optional[str]:
        """Return the target language recorded on the owner's capture, or None."""
        ...

    @abstractmethod
    async def find_translation(self, text: str, target_lang: str) -> Optional[TranslationMatch]:
        """Find an existing translation of `text` into `target_lang`, or None."""
        ...


class StoreTranslationLookup(TranslationLookup):
    """TranslationLookup over the `words` and `captures` documents."""

    def __init__(self, store: Optional[DocumentStore] = None):
        self.store = store or document_store

    async def get_word(self, word_id: str) -> Optional[Word]:
        data = await self._read(keys.word_path(word_id))
        if data is None:
            return None
        try:
            return Word.model_validate({"wordId": word_id, **data})
        except ValidationError as e:
            raise TranslationLookupError(
                message="Word record is malformed",
                context={"word_id": word_id, "errors": e.error_count()},
            )

    async def get_source_language(self, owner: str, source_asset_id: str) -> Optional[str]:
        data = await self._read(keys.capture_path(owner, source_asset_id))
        if data is None:
            return None
        return data.get("targetLang") or None

    async def find_translation(self, text: str, target_lang: str) -> Optional[TranslationMatch]:
        try:
            matches = await self.store.query(
                keys.WORDS, {"originalWord": text.lower()}, limit=1
            )
        except VocabListError as e:
            raise self._wrap("find_translation", text, e)

        if not matches:
            return None
        translated = (matches[0].data.get("translations") or {}).get(target_lang)
        if not translated:
            return None
        return TranslationMatch(word_id=matches[0].id, translated_word=translated)

    async def _read(self, path: str):
        try:
            return await self.store.get(path)
        except VocabListError as e:
            raise self._wrap("get", path, e)

    @staticmethod
    def _wrap(operation: str, target: str, error: VocabListError) -> TranslationLookupError:
        logger.error("Translation lookup %s failed for %s: %s", operation, target, error.message)
        return TranslationLookupError(
            context={"operation": operation, "target": target, "error_type": type(error).__name__},
        )


# ── Singleton Instance ────────────────────────────────────────────────────
translation_lookup = StoreTranslationLookup()
