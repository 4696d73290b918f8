"""
VocabList Backend - Share Code Registry
=========================================

What:  Issues, resolves and revokes opaque share tokens for lists.
How:   A token is `secrets.token_urlsafe(SHARE_CODE_BYTES)`, unrelated to the
       owner or list id. The mapping token -> (owner, list) lives in the
       global `sharedCodes` collection and is found by an equality query on
       `sharedCode`, so holding a token reveals nothing about internal ids.
Who:   Share routes, ImportEngine (resolve) and ListStore.delete (revoke).

Soft delete:
    Codes are never removed. Revoking sets isDeleted=true and deletedAt; a
    revoked code never resolves again and is never reissued.
"""

import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import Optional

from vocablist.config import settings
from vocablist.exceptions import NotFoundError
from vocablist.schemas.lists import (
    SharedCode,
    SharedListView,
    ShareResult,
    WordList,
    to_timestamp,
)
from vocablist.services import keys
from vocablist.services.document_store import DocumentStore
from vocablist.services.item_store import ItemStore, item_store
from vocablist.services.sql_document_store import document_store

logger = logging.getLogger(__name__)


class ShareCodeRegistry:
    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        items: Optional[ItemStore] = None,
    ):
        self.store = store or document_store
        self.items = items or item_store

    def generate_token(self) -> str:
        return secrets.token_urlsafe(settings.share_code_bytes)

    async def issue(self, owner: str, list_id: str) -> ShareResult:
        """
        Issue a new share token for a list and make the list public.

        The share code and the visibility change are written in one batch.

        Raises:
            NotFoundError: The list does not exist.
        """
        keys.require_segment(owner, "owner")
        keys.require_segment(list_id, "listId")
        list_path = keys.list_path(owner, list_id)
        if await self.store.get(list_path) is None:
            raise NotFoundError(resource="list", resource_id=list_id)

        token = self.generate_token()
        now = datetime.now(timezone.utc)
        record = SharedCode(
            shared_id=uuid.uuid4().hex,
            shared_code=token,
            owner_id=owner,
            list_id=list_id,
            share_url=f"{settings.share_base_url}/{token}",
            created_at=now,
        )

        batch = self.store.batch()
        batch.create(keys.shared_code_path(record.shared_id), record.to_document())
        batch.update(list_path, {"visibility": "public", "updatedAt": to_timestamp(now)})
        try:
            await batch.commit()
        except NotFoundError:
            raise NotFoundError(resource="list", resource_id=list_id)

        logger.info("Share code issued for list %s (owner=%s, sharedId=%s)", list_id, owner, record.shared_id)
        return ShareResult(
            shared_id=record.shared_id,
            shared_code=token,
            share_url=record.share_url,
            list_id=list_id,
        )

    async def find(self, token: str) -> Optional[SharedCode]:
        """Look up a share code record by token, including revoked ones."""
        if not token or not token.strip():
            return None
        matches = await self.store.query(keys.SHARED_CODES, {"sharedCode": token}, limit=1)
        if not matches:
            return None
        return SharedCode.model_validate(matches[0].data)

    async def resolve(self, token: str) -> SharedListView:
        """
        Resolve a token to its list and items.

        Raises:
            NotFoundError: Unknown or revoked token, or the list is gone.
        """
        code = await self.find(token)
        if code is None or code.is_deleted:
            raise NotFoundError(resource="shared list")

        list_data = await self.store.get(keys.list_path(code.owner_id, code.list_id))
        if list_data is None:
            raise NotFoundError(resource="shared list")

        items = await self.items.list_items(code.owner_id, code.list_id)
        return SharedListView(
            owner_id=code.owner_id,
            word_list=WordList.model_validate(list_data),
            items=items,
        )

    async def revoke_for_list(self, owner: str, list_id: str) -> int:
        """
        Soft-delete every active share code of (owner, list).

        Returns:
            The number of codes revoked by this call.
        """
        active = await self.store.query(
            keys.SHARED_CODES,
            {"ownerId": owner, "listId": list_id, "isDeleted": False},
        )
        if not active:
            return 0

        deleted_at = to_timestamp(datetime.now(timezone.utc))
        batch = self.store.batch()
        for snapshot in active:
            batch.set(snapshot.path, {"isDeleted": True, "deletedAt": deleted_at}, merge=True)
        await batch.commit()

        logger.info("Revoked %d share code(s) for list %s (owner=%s)", len(active), list_id, owner)
        return len(active)


# ── Singleton Instance ────────────────────────────────────────────────────
share_registry = ShareCodeRegistry()
