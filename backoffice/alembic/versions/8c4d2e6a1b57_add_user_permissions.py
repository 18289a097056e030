"""add user_permissions

Revision ID: 8c4d2e6a1b57
Revises: 3f1a9c2b7d10
Create Date: 2026-10-26
"""
from __future__ import annotations

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8c4d2e6a1b57"
down_revision: Union[str, Sequence[str], None] = "3f1a9c2b7d10"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TABLE_NAME = "user_permissions"


def upgrade() -> None:
    op.create_table(
        TABLE_NAME,
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("module", sa.String(32), nullable=False),
        sa.Column("action", sa.String(32), nullable=False),
        sa.Column("granted", sa.Boolean(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("user_id", "module", "action", name="uq_user_permission"),
    )
    op.create_index("ix_user_permissions_user_id", TABLE_NAME, ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_user_permissions_user_id", table_name=TABLE_NAME)
    op.drop_table(TABLE_NAME)
