"""
SQLAlchemy ORM models for TiDB.

Tables:
  status_updates — the primary resource (body, mood, lifecycle status, likes)
  status_changes — append-only transition log for tracked fields
  comments       — child resource, cascade-deleted with its status update
  reactions      — child resource, one per (update, kind, actor)

Cascades are performed by the stores, not by the database: foreign keys are
declared for integrity but carry no ON DELETE action.
"""
import uuid
from datetime import datetime, timezone
from typing import ClassVar, Optional

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from status_feed.database import Base


def _uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    # Stored naive; every timestamp column holds UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


class StatusUpdate(Base):
    __tablename__ = "status_updates"
    record_kind: ClassVar[str] = "status_update"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    mood: Mapped[str] = mapped_column(String(32), nullable=False)
    # 'submitted' | 'in_review' | ... | None (uninitialized)
    status: Mapped[Optional[str]] = mapped_column(String(32))
    likes_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        Index("idx_status_updates_created", "created_at"),
        Index("idx_status_updates_mood", "mood"),
    )


class StatusChange(Base):
    __tablename__ = "status_changes"
    record_kind: ClassVar[str] = "status_change"

    # Integer id doubles as the insertion sequence used to break timestamp ties
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    status_update_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("status_updates.id"), nullable=False
    )
    field: Mapped[str] = mapped_column(String(32), nullable=False, default="mood")
    from_value: Mapped[Optional[str]] = mapped_column(String(32))
    to_value: Mapped[str] = mapped_column(String(32), nullable=False)
    reason: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        # Chronological scans of one update's timeline
        Index("idx_status_changes_update_created", "status_update_id", "created_at"),
    )


class Comment(Base):
    __tablename__ = "comments"
    record_kind: ClassVar[str] = "comment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    status_update_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("status_updates.id"), nullable=False
    )
    body: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=utcnow, onupdate=utcnow, nullable=False
    )

    __table_args__ = (
        Index("idx_comments_update_created", "status_update_id", "created_at"),
    )


class Reaction(Base):
    __tablename__ = "reactions"
    record_kind: ClassVar[str] = "reaction"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    status_update_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("status_updates.id"), nullable=False
    )
    kind: Mapped[str] = mapped_column(String(16), nullable=False)
    actor_identifier: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "status_update_id", "kind", "actor_identifier", name="uq_reactions_update_kind_actor"
        ),
    )
