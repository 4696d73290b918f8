"""
VocabList Backend - Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the test suite.
How:   Every test gets its own SQLite database (aiosqlite, under tmp_path)
       behind a real SQLDocumentStore, and services wired to it. Route tests
       use an httpx AsyncClient on the ASGI app with the service providers
       overridden.

Fixture Hierarchy (all function-scoped):
    document_store ─┬─ item_store ── share_registry ─┐
                    │                                 ├─ list_store ── language_lists
    asset_store ────┼─────────────────────────────────┘
                    ├─ translation_lookup ─┐
                    │                      ├─ inserter
                    └─ import_engine       │
    test_client (overrides every provider) ┘
"""

import os
import tempfile

# Must run before any vocablist import: settings and the engine are module-level
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///" + os.path.join(
    tempfile.mkdtemp(prefix="vocablist_db_"), "unused.db"
)
os.environ["STORAGE_ROOT"] = tempfile.mkdtemp(prefix="vocablist_test_")
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["SHARE_BASE_URL"] = "https://vocab.test/shared"

from typing import Any, Dict  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import async_sessionmaker  # noqa: E402

from vocablist.database import Base, build_engine  # noqa: E402
from vocablist.models.document import Document  # noqa: E402,F401
from vocablist.services.asset_store import LocalAssetStore  # noqa: E402
from vocablist.services.import_engine import ImportEngine  # noqa: E402
from vocablist.services.item_store import ItemStore  # noqa: E402
from vocablist.services.language_lists import LanguageListManager  # noqa: E402
from vocablist.services.list_store import ListStore  # noqa: E402
from vocablist.services.multi_list_inserter import MultiListInserter  # noqa: E402
from vocablist.services.share_registry import ShareCodeRegistry  # noqa: E402
from vocablist.services.sql_document_store import SQLDocumentStore  # noqa: E402
from vocablist.services.translation_lookup import StoreTranslationLookup  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Storage Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def document_store(tmp_path):
    """A SQLDocumentStore on a fresh SQLite file with the documents table created."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'documents.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield SQLDocumentStore(async_sessionmaker(engine, expire_on_commit=False))

    await engine.dispose()


@pytest.fixture
def temp_storage(tmp_path):
    storage_dir = tmp_path / "storage"
    storage_dir.mkdir()
    return str(storage_dir)


@pytest.fixture
def asset_store(temp_storage):
    return LocalAssetStore(temp_storage)


@pytest.fixture
def sample_image_bytes():
    """Smallest valid JPEG: SOI + JFIF header + EOI."""
    return (
        b"\xff\xd8\xff\xe0\x00\x10JFIF\x00\x01\x01\x00\x00\x01\x00\x01\x00\x00"
        b"\xff\xd9"
    )


@pytest.fixture
def sample_png_bytes():
    """PNG signature + IHDR chunk of a 1x1 RGBA image (enough for libmagic)."""
    return (
        b"\x89PNG\r\n\x1a\n"
        b"\x00\x00\x00\rIHDR\x00\x00\x00\x01\x00\x00\x00\x01\x08\x06\x00\x00\x00\x1f\x15\xc4\x89"
    )


# ══════════════════════════════════════════════════════════════════════════
# Service Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def item_store(document_store):
    return ItemStore(document_store)


@pytest.fixture
def share_registry(document_store, item_store):
    return ShareCodeRegistry(document_store, item_store)


@pytest.fixture
def list_store(document_store, asset_store, share_registry):
    return ListStore(document_store, asset_store, share_registry)


@pytest.fixture
def language_lists(list_store):
    return LanguageListManager(list_store)


@pytest.fixture
def translation_lookup(document_store):
    return StoreTranslationLookup(document_store)


@pytest.fixture
def inserter(item_store, language_lists, translation_lookup):
    return MultiListInserter(item_store, language_lists, translation_lookup, max_targets=5)


@pytest.fixture
def import_engine(document_store, share_registry, item_store):
    return ImportEngine(document_store, share_registry, item_store)


# ══════════════════════════════════════════════════════════════════════════
# Seed Data
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def seed_capture(document_store):
    """Write a capture record: await seed_capture("u1", "cap1", "it")."""

    async def _seed(owner: str, capture_id: str, target_lang: str) -> None:
        await document_store.set(
            f"users/{owner}/captures/{capture_id}",
            {"captureId": capture_id, "targetLang": target_lang},
        )

    return _seed


@pytest.fixture
def seed_word(document_store):
    """Write a global word record: await seed_word("id_cat", "cat", {"it": "gatto"})."""

    async def _seed(word_id: str, original: str, translations: Dict[str, str]) -> Dict[str, Any]:
        data = {"wordId": word_id, "originalWord": original, "translations": translations}
        await document_store.set(f"words/{word_id}", data)
        return data

    return _seed


# ══════════════════════════════════════════════════════════════════════════
# HTTP Client
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def test_client(
    document_store,
    asset_store,
    list_store,
    item_store,
    share_registry,
    inserter,
    import_engine,
):
    """AsyncClient on a fresh app whose services all use the test store."""
    from vocablist.main import create_app
    from vocablist.routes import dependencies as deps

    app = create_app()
    app.dependency_overrides.update(
        {
            deps.get_document_store: lambda: document_store,
            deps.get_asset_store: lambda: asset_store,
            deps.get_list_store: lambda: list_store,
            deps.get_item_store: lambda: item_store,
            deps.get_share_registry: lambda: share_registry,
            deps.get_multi_list_inserter: lambda: inserter,
            deps.get_import_engine: lambda: import_engine,
        }
    )

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
