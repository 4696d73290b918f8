"""Create documents table

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Creates the `documents` table backing the hierarchical document store
       (lists, items, share codes, words, captures).
How:   One row per document keyed by its full path; the JSON body holds the
       record fields. `version` is the compare-and-swap token.

Rollback: downgrade() drops the table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "documents",
        sa.Column("path", sa.String(768), nullable=False, comment="Full slash-separated document path"),
        sa.Column("collection", sa.String(768), nullable=False, comment="Parent collection path"),
        sa.Column("doc_id", sa.String(255), nullable=False, comment="Document id inside its collection"),
        sa.Column("data", sa.JSON(), nullable=False, comment="Document body"),
        sa.Column(
            "version",
            sa.Integer(),
            nullable=False,
            server_default=sa.text("1"),
            comment="Write counter used for compare-and-swap updates",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("path", name="pk_documents"),
    )

    # Collection listings and equality queries always filter on collection
    op.create_index("idx_documents_collection", "documents", ["collection"])


def downgrade() -> None:
    op.drop_index("idx_documents_collection", table_name="documents")
    op.drop_table("documents")
