"""
VocabList Backend - SQLAlchemy Document Store
===============================================

What:  DocumentStore implementation on async SQLAlchemy (one `documents` row
       per document, JSON body).
How:   Every public call opens a short-lived session and runs as one
       transaction. Writes are expressed as queued operations so that a
       single write and a WriteBatch share the same code path.
Who:   Instantiated once as `document_store`; tests build their own instance
       on a temporary SQLite database.

Primitives:
    create      INSERT ... ON CONFLICT DO NOTHING RETURNING path
                (a conditional create; no row returned means it existed)
    merge/update/increment
                SELECT data, version → compute new body →
                UPDATE ... WHERE path = :p AND version = :v
                A lost race shows up as zero updated rows; the body is re-read
                and recomputed, up to `store_max_cas_attempts` times.
    batch       All queued operations inside one transaction; any failure
                rolls every one of them back.

Dialects:
    PostgreSQL and SQLite use their native ON CONFLICT insert. Other dialects
    fall back to a pre-check plus plain INSERT.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, NamedTuple, Optional

from sqlalchemy import delete, insert, select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from vocablist.config import settings
from vocablist.database import async_session_factory
from vocablist.exceptions import (
    AlreadyExistsError,
    DatabaseError,
    NotFoundError,
)
from vocablist.models.document import Document
from vocablist.services.document_store import (
    DocumentSnapshot,
    DocumentStore,
    WriteBatch,
    split_path,
)

logger = logging.getLogger(__name__)

_documents = Document.__table__


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class _Op(NamedTuple):
    """A queued write."""

    kind: str  # set | merge | create | update | increment | delete
    path: str
    data: Dict[str, Any]
    field: Optional[str] = None
    amount: int = 0


class SQLWriteBatch(WriteBatch):
    """WriteBatch that hands its queued operations to SQLDocumentStore on commit."""

    def __init__(self, store: "SQLDocumentStore"):
        self._store = store
        self._ops: List[_Op] = []
        self._committed = False

    def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> "SQLWriteBatch":
        self._ops.append(_Op("merge" if merge else "set", path, dict(data)))
        return self

    def create(self, path: str, data: Dict[str, Any]) -> "SQLWriteBatch":
        self._ops.append(_Op("create", path, dict(data)))
        return self

    def update(self, path: str, data: Dict[str, Any]) -> "SQLWriteBatch":
        self._ops.append(_Op("update", path, dict(data)))
        return self

    def increment(
        self,
        path: str,
        field: str,
        amount: int = 1,
        extra: Optional[Dict[str, Any]] = None,
    ) -> "SQLWriteBatch":
        self._ops.append(_Op("increment", path, dict(extra or {}), field, amount))
        return self

    def delete(self, path: str) -> "SQLWriteBatch":
        self._ops.append(_Op("delete", path, {}))
        return self

    async def commit(self) -> None:
        if self._committed:
            raise RuntimeError("WriteBatch already committed")
        self._committed = True
        if self._ops:
            await self._store._apply(self._ops)

    def __len__(self) -> int:
        return len(self._ops)


class SQLDocumentStore(DocumentStore):
    """
    Document store backed by the `documents` table.

    Error Handling Strategy:
        Business conditions surface as return values or NotFoundError /
        AlreadyExistsError. Every SQLAlchemyError is logged and re-raised as
        DatabaseError (no retries).
    """

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker] = None,
        max_cas_attempts: Optional[int] = None,
    ):
        self._session_factory = session_factory or async_session_factory
        self.max_cas_attempts = max_cas_attempts or settings.store_max_cas_attempts

    # ── Reads ─────────────────────────────────────────────────────────────

    async def get(self, path: str) -> Optional[Dict[str, Any]]:
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(Document.data).where(Document.path == path)
                )
                data = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise self._wrap_error("get", path, e)
        return dict(data) if data is not None else None

    async def list_collection(self, collection: str) -> List[DocumentSnapshot]:
        stmt = (
            select(Document.doc_id, Document.path, Document.data)
            .where(Document.collection == collection)
            .order_by(Document.doc_id)
        )
        return await self._fetch_snapshots("list_collection", collection, stmt)

    async def query(
        self,
        collection: str,
        filters: Dict[str, Any],
        limit: Optional[int] = None,
    ) -> List[DocumentSnapshot]:
        stmt = select(Document.doc_id, Document.path, Document.data).where(
            Document.collection == collection,
            *[self._equals(field, value) for field, value in filters.items()],
        ).order_by(Document.doc_id)
        if limit is not None:
            stmt = stmt.limit(limit)
        return await self._fetch_snapshots("query", collection, stmt)

    async def health_check(self) -> bool:
        try:
            async with self._session_factory() as session:
                await session.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Document store health check failed: %s", str(e))
            return False

    # ── Writes ────────────────────────────────────────────────────────────

    async def set(self, path: str, data: Dict[str, Any], merge: bool = False) -> None:
        await self.batch().set(path, data, merge=merge).commit()

    async def create(self, path: str, data: Dict[str, Any]) -> bool:
        try:
            await self.batch().create(path, data).commit()
        except AlreadyExistsError:
            return False
        return True

    async def update(self, path: str, data: Dict[str, Any]) -> None:
        await self.batch().update(path, data).commit()

    async def increment(
        self,
        path: str,
        field: str,
        amount: int = 1,
        extra: Optional[Dict[str, Any]] = None,
    ) -> int:
        op = _Op("increment", path, dict(extra or {}), field, amount)
        (new_data,) = await self._apply([op])
        return new_data[field]

    async def delete(self, path: str) -> None:
        await self.batch().delete(path).commit()

    def batch(self) -> SQLWriteBatch:
        return SQLWriteBatch(self)

    # ── Internals ─────────────────────────────────────────────────────────

    async def _apply(self, ops: List[_Op]) -> List[Optional[Dict[str, Any]]]:
        """Run queued operations in one transaction; returns each op's new body."""
        results: List[Optional[Dict[str, Any]]] = []
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    for op in ops:
                        results.append(await self._apply_one(session, op))
        except SQLAlchemyError as e:
            raise self._wrap_error("write", ops[0].path, e, batch_size=len(ops))
        logger.debug("Applied %d write(s) starting at %s", len(ops), ops[0].path)
        return results

    async def _apply_one(
        self, session: AsyncSession, op: _Op
    ) -> Optional[Dict[str, Any]]:
        if op.kind == "delete":
            await session.execute(delete(_documents).where(_documents.c.path == op.path))
            return None

        if op.kind == "create":
            if not await self._insert_if_absent(session, op.path, op.data):
                raise AlreadyExistsError(resource="document", resource_id=op.path)
            return op.data

        if op.kind == "set":
            return await self._mutate(session, op.path, lambda current: dict(op.data), upsert=True)

        if op.kind == "merge":
            return await self._mutate(
                session, op.path, lambda current: {**current, **op.data}, upsert=True
            )

        if op.kind == "update":
            return await self._mutate(
                session, op.path, lambda current: {**current, **op.data}, upsert=False
            )

        if op.kind == "increment":
            def apply_increment(current: Dict[str, Any]) -> Dict[str, Any]:
                new_data = {**current, **op.data}
                new_data[op.field] = (current.get(op.field) or 0) + op.amount
                return new_data

            return await self._mutate(session, op.path, apply_increment, upsert=False)

        raise ValueError(f"Unknown write operation '{op.kind}'")

    async def _mutate(
        self,
        session: AsyncSession,
        path: str,
        compute: Callable[[Dict[str, Any]], Dict[str, Any]],
        upsert: bool,
    ) -> Dict[str, Any]:
        """Read-compute-write guarded by the version column."""
        for _ in range(self.max_cas_attempts):
            row = (
                await session.execute(
                    select(Document.data, Document.version).where(Document.path == path)
                )
            ).one_or_none()

            if row is None:
                if not upsert:
                    raise NotFoundError(resource="document", resource_id=path)
                new_data = compute({})
                if await self._insert_if_absent(session, path, new_data):
                    return new_data
                continue

            new_data = compute(dict(row.data))
            result = await session.execute(
                update(_documents)
                .where(_documents.c.path == path, _documents.c.version == row.version)
                .values(data=new_data, version=row.version + 1, updated_at=_utc_now())
                .returning(_documents.c.version)
            )
            if result.scalar_one_or_none() is not None:
                return new_data
            logger.debug("Version conflict on %s, re-reading", path)

        raise DatabaseError(
            message="The record is being modified concurrently. Please try again.",
            context={"path": path, "attempts": self.max_cas_attempts},
        )

    async def _insert_if_absent(
        self, session: AsyncSession, path: str, data: Dict[str, Any]
    ) -> bool:
        collection, doc_id = split_path(path)
        now = _utc_now()
        values = {
            "path": path,
            "collection": collection,
            "doc_id": doc_id,
            "data": data,
            "version": 1,
            "created_at": now,
            "updated_at": now,
        }

        dialect = session.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(_documents).values(**values).on_conflict_do_nothing(
                index_elements=["path"]
            )
        elif dialect == "sqlite":
            stmt = sqlite_insert(_documents).values(**values).on_conflict_do_nothing(
                index_elements=["path"]
            )
        else:
            existing = await session.execute(
                select(Document.path).where(Document.path == path)
            )
            if existing.scalar_one_or_none() is not None:
                return False
            await session.execute(insert(_documents).values(**values))
            return True

        result = await session.execute(stmt.returning(_documents.c.path))
        return result.scalar_one_or_none() is not None

    async def _fetch_snapshots(self, operation: str, collection: str, stmt) -> List[DocumentSnapshot]:
        try:
            async with self._session_factory() as session:
                rows = (await session.execute(stmt)).all()
        except SQLAlchemyError as e:
            raise self._wrap_error(operation, collection, e)
        return [DocumentSnapshot(id=r.doc_id, path=r.path, data=dict(r.data)) for r in rows]

    @staticmethod
    def _equals(field: str, value: Any):
        element = Document.data[field]
        # bool is a subclass of int, so it is checked first
        if isinstance(value, bool):
            return element.as_boolean() == value
        if isinstance(value, int):
            return element.as_integer() == value
        if isinstance(value, str):
            return element.as_string() == value
        raise ValueError(f"Unsupported filter value for '{field}': {value!r}")

    @staticmethod
    def _wrap_error(operation: str, path: str, error: Exception, **context: Any) -> DatabaseError:
        logger.error(
            "Document store %s failed on %s: %s", operation, path, str(error), exc_info=True
        )
        return DatabaseError(
            context={
                "operation": operation,
                "path": path,
                "error_type": type(error).__name__,
                **context,
            },
        )


# ── Singleton Instance ────────────────────────────────────────────────────
document_store = SQLDocumentStore()
