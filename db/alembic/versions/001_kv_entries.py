"""Key-value table for the durable store.

Revision ID: 001_kv_entries
Revises:
Create Date: 2026-10-18

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_kv_entries"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Brand records (brand:<id>) and the secret index (secret-index:<secret>)
    op.create_table(
        "kv_entries",
        sa.Column("key", sa.Text(), primary_key=True),
        sa.Column("value", sa.Text(), nullable=False),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.execute("CREATE INDEX ix_kv_entries_key_prefix ON kv_entries (key text_pattern_ops)")


def downgrade() -> None:
    op.drop_index("ix_kv_entries_key_prefix", table_name="kv_entries")
    op.drop_table("kv_entries")
