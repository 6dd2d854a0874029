"""Alembic 迁移环境

通过 account_store.db.migrate 以编程方式调用时，连接经 config.attributes["connection"] 传入；
直接使用 alembic CLI 时按环境变量配置创建引擎
"""

from alembic import context

from account_store.config import load_settings
from account_store.db.engine import get_engine

config = context.config


def do_run_migrations(connection) -> None:
    """在给定连接上执行迁移，SQLite 使用 batch 模式"""
    context.configure(
        connection=connection,
        target_metadata=None,
        render_as_batch=connection.dialect.name == "sqlite",
        transaction_per_migration=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_offline() -> None:
    """只生成 SQL，不连接数据库"""
    context.configure(
        url=load_settings().database_url,
        target_metadata=None,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connection = config.attributes.get("connection")
    if connection is not None:
        do_run_migrations(connection)
        return

    engine = get_engine(load_settings())
    with engine.begin() as connection:
        do_run_migrations(connection)
    engine.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
