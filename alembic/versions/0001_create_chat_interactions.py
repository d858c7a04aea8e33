"""create chat_interactions table

Revision ID: 0001
Revises:
Create Date: 2024-09-16

"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "chat_interactions",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("interaction_id", sa.String(), nullable=False),
        sa.Column("session_id", sa.String(), nullable=False),
        sa.Column("role", sa.String(length=20), nullable=False),
        sa.Column("content", sa.String(), nullable=False),
        sa.Column(
            "messages",
            postgresql.JSONB(),
            server_default=sa.text("'[]'::jsonb"),
            nullable=False,
        ),
        sa.Column("rating", sa.String(length=20), nullable=True),
        sa.Column("rated_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id", name="pk_chat_interactions"),
        sa.UniqueConstraint(
            "interaction_id", name="uq_chat_interactions_interaction_id"
        ),
        sa.CheckConstraint(
            "rating IS NULL OR rating IN ('helpful', 'unhelpful')",
            name="ck_chat_interactions_rating",
        ),
    )

    op.create_index(
        "ix_chat_interactions_session_id_created_at",
        "chat_interactions",
        ["session_id", "created_at"],
    )
    op.create_index(
        "ix_chat_interactions_created_at",
        "chat_interactions",
        ["created_at"],
    )


def downgrade() -> None:
    op.drop_index("ix_chat_interactions_created_at", table_name="chat_interactions")
    op.drop_index(
        "ix_chat_interactions_session_id_created_at",
        table_name="chat_interactions",
    )
    op.drop_table("chat_interactions")
