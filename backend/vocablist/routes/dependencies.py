"""
VocabList Backend - Route Dependencies
========================================

What:  FastAPI dependencies shared by the route modules: the caller's owner id
       and the service instances.
How:   Providers return the module-level singletons. Tests replace them with
       `app.dependency_overrides` to run the routes against a temporary store.
"""

from typing import Optional

from fastapi import Header

from vocablist.exceptions import UnauthenticatedError
from vocablist.services.asset_store import LocalAssetStore, asset_store
from vocablist.services.document_store import DocumentStore
from vocablist.services.import_engine import ImportEngine, import_engine
from vocablist.services.item_store import ItemStore, item_store
from vocablist.services.list_store import ListStore, list_store
from vocablist.services.multi_list_inserter import MultiListInserter, multi_list_inserter
from vocablist.services.share_registry import ShareCodeRegistry, share_registry
from vocablist.services.sql_document_store import document_store


async def get_owner_id(
    x_owner_id: Optional[str] = Header(
        default=None,
        description="Authenticated owner id, set by the gateway",
    ),
) -> str:
    """The identity is trusted as-is; only presence is checked here."""
    if not x_owner_id or not x_owner_id.strip():
        raise UnauthenticatedError()
    return x_owner_id.strip()


def get_document_store() -> DocumentStore:
    return document_store


def get_asset_store() -> LocalAssetStore:
    return asset_store


def get_list_store() -> ListStore:
    return list_store


def get_item_store() -> ItemStore:
    return item_store


def get_multi_list_inserter() -> MultiListInserter:
    return multi_list_inserter


def get_share_registry() -> ShareCodeRegistry:
    return share_registry


def get_import_engine() -> ImportEngine:
    return import_engine
