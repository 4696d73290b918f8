"""
VocabList Backend - Document SQLAlchemy Model
===============================================

What:  ORM model representing the `documents` table.
How:   Every record of the hierarchical document store (lists, items,
       share codes, words, captures) is one row keyed by its full path.
Who:   Used by SQLDocumentStore and by Alembic for schema management.

Table Design:
    - path:        Full document path, e.g. users/u1/lists/travel_u1/items/id_cat
    - collection:  Parent collection path, e.g. users/u1/lists/travel_u1/items
    - doc_id:      Last path segment (the document id inside its collection)
    - data:        JSON document body (camelCase fields)
    - version:     Incremented on every write; compare-and-swap token for
                   merge and increment operations
    - created_at / updated_at: UTC row timestamps

    Index on collection:
        Collection listing and equality queries always filter on it.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import JSON, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from vocablist.database import Base


class Document(Base):
    """
    A single document of the hierarchical store.

    Query Patterns:
        - Get by key:        WHERE path = :path (primary key)
        - List collection:   WHERE collection = :collection
        - Equality query:    WHERE collection = :c AND data->>'field' = :v LIMIT n
    """

    __tablename__ = "documents"

    path: Mapped[str] = mapped_column(
        String(768),
        primary_key=True,
        comment="Full slash-separated document path",
    )

    collection: Mapped[str] = mapped_column(
        String(768),
        nullable=False,
        comment="Parent collection path",
    )

    doc_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Document id inside its collection",
    )

    data: Mapped[Dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
        comment="Document body",
    )

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        comment="Write counter used for compare-and-swap updates",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        Index("idx_documents_collection", "collection"),
    )

    def __repr__(self) -> str:
        return f"<Document(path='{self.path}', version={self.version})>"
