"""Create vault_documents, the JSONB document collection table.

Revision ID: 001
Create Date: 2026-10-18

One row per stored document. `collection` namespaces rows the way a
document database names collections; `data` holds the record fields.
"""

from alembic import op

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.execute(
        """
        CREATE TABLE vault_documents (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            collection TEXT NOT NULL CHECK (collection <> ''),
            data JSONB NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
        """
    )

    op.execute(
        "CREATE INDEX idx_vault_documents_collection ON vault_documents (collection)"
    )
    # Display order is uploaded_at desc; lets list queries sort server-side if needed
    op.execute(
        """
        CREATE INDEX idx_vault_documents_uploaded_at
            ON vault_documents (collection, (data->>'uploaded_at') DESC)
        """
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS vault_documents")
