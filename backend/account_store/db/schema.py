"""
表结构定义
两个 schema 变体（带 / 不带 location 列）共用同一个 UserRecord，部署时二选一
DDL 由 migrations/versions 下的 Alembic 修订创建，这里的 Table 只用于构造语句
"""

from sqlalchemy import BigInteger, Integer, DateTime, MetaData, Table, Text, UniqueConstraint
from sqlmodel import Column, JSON

USERS_TABLE = "users"

# 唯一约束名，数据库报错信息里会带上它们
UQ_USERS_USERNAME = "uq_users_username"
UQ_USERS_EMAIL = "uq_users_email"

# SQLite 只认 INTEGER PRIMARY KEY 作为自增主键，其他数据库用 BIGINT
ID_TYPE = BigInteger().with_variant(Integer(), "sqlite")


def build_users_table(metadata: MetaData, with_location: bool = True) -> Table:
    """
    构建 users 表

    Args:
        metadata: 表所属的 MetaData
        with_location: 是否包含 location JSON 列

    Returns:
        sqlalchemy Table
    """
    columns = [
        # 主键，由数据库生成；sqlite_autoincrement 保证删除后 id 不被复用
        Column("id", ID_TYPE, primary_key=True, autoincrement=True),
        Column("username", Text, nullable=False),
        Column("email", Text, nullable=False),
        Column("password", Text, nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False),
        Column("updated_at", DateTime(timezone=True), nullable=False),
    ]
    if with_location:
        columns.append(Column("location", JSON(none_as_null=True), nullable=True))

    return Table(
        USERS_TABLE,
        metadata,
        *columns,
        UniqueConstraint("username", name=UQ_USERS_USERNAME),
        UniqueConstraint("email", name=UQ_USERS_EMAIL),
        sqlite_autoincrement=True,
    )


# 两个变体各自独立的 MetaData，避免同名表冲突
_TABLES = {
    True: build_users_table(MetaData(), with_location=True),
    False: build_users_table(MetaData(), with_location=False),
}


def get_users_table(with_location: bool = True) -> Table:
    """获取指定变体的 users 表"""
    return _TABLES[bool(with_location)]
