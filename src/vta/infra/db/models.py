"""SQLAlchemy ORM models for the teaching assistant.

All tables are managed by Alembic migrations.  The ``Base.metadata``
naming convention keeps constraint names deterministic for
``--autogenerate`` diffs.
"""

from datetime import datetime, timezone
from typing import Literal

from sqlalchemy import (
    JSON,
    BigInteger,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    func,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from typing_extensions import TypedDict

# ---------------------------------------------------------------------------
# Declarative base with naming convention
# ---------------------------------------------------------------------------


class Base(DeclarativeBase):
    """Shared declarative base with explicit naming convention."""


Base.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Postgres gets BIGSERIAL/JSONB; SQLite (tests, local runs) gets the
# rowid alias and plain JSON.
_PK_TYPE = BigInteger().with_variant(Integer(), "sqlite")
_JSON_TYPE = JSON().with_variant(JSONB(), "postgresql")


# ---------------------------------------------------------------------------
# Role / rating constants & types
# ---------------------------------------------------------------------------

ROLE_USER: Literal["user"] = "user"
ROLE_ASSISTANT: Literal["assistant"] = "assistant"
ROLE_SYSTEM: Literal["system"] = "system"

Role = Literal["user", "assistant", "system"]

RATING_HELPFUL: Literal["helpful"] = "helpful"
RATING_UNHELPFUL: Literal["unhelpful"] = "unhelpful"

Rating = Literal["helpful", "unhelpful"]


class StoredMessage(TypedDict):
    """One entry of the ``messages`` JSON column."""

    role: Role
    content: str
    timestamp: str


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ---------------------------------------------------------------------------
# Chat interactions table
# ---------------------------------------------------------------------------


class ChatInteraction(Base):
    """One stored exchange between a student and the assistant.

    ``role``/``content`` hold the headline message (the assistant reply
    for rows written by the chat endpoint) and ``messages`` embeds the
    full user/assistant pair.  Rows are only ever appended; ``rating``
    and ``rated_at`` are filled in at most once afterwards.
    """

    __tablename__ = "chat_interactions"

    id: Mapped[int] = mapped_column(
        _PK_TYPE,
        primary_key=True,
        autoincrement=True,
    )
    interaction_id: Mapped[str] = mapped_column(
        String,
        unique=True,
        nullable=False,
    )
    session_id: Mapped[str] = mapped_column(
        String,
        nullable=False,
    )
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        String,
        nullable=False,
    )
    messages: Mapped[list[StoredMessage]] = mapped_column(
        _JSON_TYPE,
        nullable=False,
        default=list,
    )
    rating: Mapped[str | None] = mapped_column(
        String(20),
        nullable=True,
    )
    rated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        server_default=func.now(),
    )

    __table_args__ = (
        CheckConstraint(
            "rating IS NULL OR rating IN ('helpful', 'unhelpful')",
            name="rating",
        ),
        Index(
            "ix_chat_interactions_session_id_created_at",
            "session_id",
            "created_at",
        ),
        Index("ix_chat_interactions_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<ChatInteraction(id={self.id}, "
            f"interaction_id={self.interaction_id!r}, "
            f"session_id={self.session_id!r}, role={self.role!r})>"
        )

    def flatten(self) -> list[StoredMessage]:
        """Return the embedded messages, or the headline message alone."""
        if self.messages:
            return list(self.messages)
        timestamp = self.created_at.isoformat() if self.created_at else ""
        return [
            StoredMessage(
                role=self.role,  # type: ignore[typeddict-item]
                content=self.content,
                timestamp=timestamp,
            )
        ]
