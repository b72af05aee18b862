"""
Game Catalog API — Game SQLAlchemy Model
==========================================

What:  ORM model representing the ``games`` table in PostgreSQL.
How:   Each row stores one Game document in a JSONB column; the identity and
       insertion timestamp live in their own columns.
Who:   Used by SqlGameRepository and by Alembic for schema management.

Table Design:
    - id: UUID primary key, assigned in Python on insert
    - document: the Game document exactly as validated (camelCase keys,
      no identity field)
    - created_at: insertion time, the default listing order
    - GIN index on document: serves the ``?|`` membership filters
      (platform / genre)
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict

from sqlalchemy import Index, text
from sqlalchemy.dialects.postgresql import JSONB, TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column

from gamecatalog.database import Base


class GameRecord(Base):
    """
    One stored Game.

    Query Patterns:
        - List / search: WHERE <jsonb predicates> ORDER BY created_at, id
        - Get single game: WHERE id = :uuid (primary key)
    """

    __tablename__ = "games"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )

    document: Mapped[Dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
        comment="Validated Game document (camelCase keys)",
    )

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=text("CURRENT_TIMESTAMP"),
    )

    __table_args__ = (
        Index("idx_games_document", document, postgresql_using="gin"),
        Index("idx_games_created_at", created_at),
    )

    def to_document(self) -> Dict[str, Any]:
        """Return the stored document with its identity under ``_id``."""
        return {"_id": str(self.id), **(self.document or {})}

    def __repr__(self) -> str:
        title = (self.document or {}).get("title")
        return f"<GameRecord(id={self.id}, title='{title}')>"
