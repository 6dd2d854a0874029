"""create users

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from typing import Optional, Sequence, Union

import sqlalchemy as sa

from alembic import op

from account_store.db.schema import ID_TYPE, UQ_USERS_EMAIL, UQ_USERS_USERNAME, USERS_TABLE

# revision identifiers, used by Alembic.
revision: str = "0001"
down_revision: Optional[str] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """创建不带 location 列的 users 表"""
    op.create_table(
        USERS_TABLE,
        # sqlite_autoincrement 保证删除后 id 不被复用
        sa.Column("id", ID_TYPE, primary_key=True, autoincrement=True),
        sa.Column("username", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("password", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("username", name=UQ_USERS_USERNAME),
        sa.UniqueConstraint("email", name=UQ_USERS_EMAIL),
        sqlite_autoincrement=True,
    )


def downgrade() -> None:
    op.drop_table(USERS_TABLE)
