"""Create games table

Revision ID: 001
Revises: None
Create Date: 2026-10-18 00:00:00.000000+00:00

What:  Creates the ``games`` table: one JSONB Game document per row.
How:   UUID primary key, JSONB document with a GIN index for the
       platform / genre membership filters, created_at for the default
       listing order.

Rollback: downgrade() drops the table and every stored game with it.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "games",
        sa.Column(
            "id",
            postgresql.UUID(as_uuid=True),
            server_default=sa.text("gen_random_uuid()"),
            nullable=False,
        ),
        sa.Column(
            "document",
            postgresql.JSONB(),
            nullable=False,
            comment="Validated Game document (camelCase keys)",
        ),
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )

    # Serves document -> 'platforms' ?| ARRAY[...] and the genre equivalent
    op.create_index(
        "idx_games_document",
        "games",
        ["document"],
        postgresql_using="gin",
    )
    op.create_index("idx_games_created_at", "games", ["created_at"])


def downgrade() -> None:
    op.drop_index("idx_games_created_at", table_name="games")
    op.drop_index("idx_games_document", table_name="games")
    op.drop_table("games")
