"""add user location

Revision ID: 0002
Revises: 0001
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Optional, Sequence, Union

import sqlalchemy as sa

from alembic import op

from account_store.db.schema import USERS_TABLE

# revision identifiers, used by Alembic.
revision: str = "0002"
down_revision: Optional[str] = "0001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """为 users 表添加可空的 location JSON 列"""
    op.add_column(USERS_TABLE, sa.Column("location", sa.JSON(), nullable=True))


def downgrade() -> None:
    with op.batch_alter_table(USERS_TABLE) as batch_op:
        batch_op.drop_column("location")
