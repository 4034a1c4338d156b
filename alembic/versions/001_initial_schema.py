"""Initial schema — the shared documents table.

Revision ID: 001_initial
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # ── documents (every collection, keyed by collection + id) ──────
    op.create_table(
        "documents",
        sa.Column("collection", sa.String(128), primary_key=True),
        sa.Column("id", sa.String(64), primary_key=True),
        sa.Column(
            "data",
            postgresql.JSONB,
            nullable=False,
            comment="Document payload with camelCase keys",
        ),
        sa.Column(
            "version",
            sa.Integer,
            server_default="1",
            nullable=False,
            comment="Incremented on every write; guards conditional updates",
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    # Lookups used by the services: sessions by party and status,
    # connections by sender/recipient, cards by code.
    op.create_index(
        "ix_documents_session_target",
        "documents",
        [sa.text("(data->>'targetUserId')"), sa.text("(data->>'status')")],
        postgresql_where=sa.text("collection = 'discoverySessions'"),
    )
    op.create_index(
        "ix_documents_session_initiator",
        "documents",
        [sa.text("(data->>'initiatorId')"), sa.text("(data->>'status')")],
        postgresql_where=sa.text("collection = 'discoverySessions'"),
    )
    op.create_index(
        "ix_documents_connection_to",
        "documents",
        [sa.text("(data->>'toUserId')"), sa.text("(data->>'status')")],
        postgresql_where=sa.text("collection = 'chatConnections'"),
    )
    op.create_index(
        "ix_documents_connection_from",
        "documents",
        [sa.text("(data->>'fromUserId')")],
        postgresql_where=sa.text("collection = 'chatConnections'"),
    )
    op.create_index(
        "ix_documents_card_code",
        "documents",
        [sa.text("(data->>'code')")],
        postgresql_where=sa.text("collection = 'cardCodes'"),
    )


def downgrade() -> None:
    op.drop_index("ix_documents_card_code", table_name="documents")
    op.drop_index("ix_documents_connection_from", table_name="documents")
    op.drop_index("ix_documents_connection_to", table_name="documents")
    op.drop_index("ix_documents_session_initiator", table_name="documents")
    op.drop_index("ix_documents_session_target", table_name="documents")
    op.drop_table("documents")
