"""
VocabList Backend - Language List Manager
===========================================

What:  Get-or-create of the per-(owner, targetLang) aggregation list.
How:   The list id is deterministic (lang_list_{targetLang}_{owner}); a get is
       followed, when absent, by the store's conditional create. Concurrent
       first callers race on the create: exactly one wins and the others read
       the winner's document back, so one record exists per pair.
Who:   MultiListInserter, once per add-item call.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from vocablist.exceptions import InvalidArgumentError
from vocablist.schemas.lists import Visibility, WordList
from vocablist.services import keys
from vocablist.services.list_store import ListStore, list_store

logger = logging.getLogger(__name__)


class LanguageListManager:
    def __init__(self, lists: Optional[ListStore] = None):
        self.lists = lists or list_store

    def list_id_for(self, owner: str, target_lang: str) -> str:
        return keys.language_list_id(owner, target_lang)

    async def ensure(self, owner: str, target_lang: str) -> WordList:
        """
        Return the owner's language list for `target_lang`, creating it if needed.

        Raises:
            InvalidArgumentError: Blank owner or language.
        """
        keys.require_segment(owner, "owner")
        if not target_lang or not target_lang.strip():
            raise InvalidArgumentError(message="Target language is required", field="targetLang")
        keys.require_segment(target_lang, "targetLang")

        now = datetime.now(timezone.utc)
        record = WordList(
            list_id=self.list_id_for(owner, target_lang),
            list_name=f"Language: {target_lang}",
            description=f"Words translated to {target_lang}",
            list_language=[target_lang],
            visibility=Visibility.PRIVATE,
            word_count=0,
            created_at=now,
            updated_at=now,
        )
        word_list, created = await self.lists.get_or_create(owner, record)
        if created:
            logger.info("Language list created: %s", record.list_id)
        return word_list


# ── Singleton Instance ────────────────────────────────────────────────────
language_lists = LanguageListManager()
