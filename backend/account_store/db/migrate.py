"""
迁移执行器
以编程方式调用 Alembic，把数据库升级到 schema 变体对应的修订
修订脚本位于 account_store/db/migrations/versions，版本记录在 alembic_version 表
"""

import io
from pathlib import Path
from typing import List, Optional

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext
from alembic.script import ScriptDirectory
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import SQLAlchemyError

from account_store.core.exceptions import StorageUnavailable
from account_store.core.logger import get_logger

logger = get_logger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

# 不带 location 的变体停在 0001；启用 location 时升级到最新
BASE_REVISION = "0001"
LOCATION_REVISION = "head"


def get_alembic_config(connection: Optional[Connection] = None) -> Config:
    """
    构造 Alembic 配置（不依赖 alembic.ini）

    Args:
        connection: 迁移使用的连接，由 env.py 从 config.attributes 读取
    """
    config = Config(stdout=io.StringIO())
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    if connection is not None:
        config.attributes["connection"] = connection
    return config


def target_version_for(with_location: bool) -> str:
    """schema 变体对应的目标修订"""
    return LOCATION_REVISION if with_location else BASE_REVISION


def available_migrations() -> List[str]:
    """按执行顺序返回所有修订号"""
    script = ScriptDirectory.from_config(get_alembic_config())
    revisions = [rev.revision for rev in script.walk_revisions("base", "heads")]
    revisions.reverse()
    return revisions


def current_version(engine: Engine) -> Optional[str]:
    """当前数据库所在的修订，未执行过任何迁移时返回 None"""
    try:
        with engine.connect() as conn:
            return MigrationContext.configure(conn).get_current_revision()
    except SQLAlchemyError as e:
        raise StorageUnavailable(f"cannot read migration state: {e}") from e


def _resolve(revision: str, revisions: List[str]) -> str:
    if revision == "head":
        return revisions[-1]
    return revision


def run_migrations(engine: Engine, target_version: str = "head") -> List[str]:
    """
    把数据库升级到目标修订

    所有待执行的修订在同一个事务中执行，失败时整体回滚，alembic_version 保持不变；
    已经执行过的修订不会再次执行

    Args:
        engine: 数据库引擎
        target_version: 目标修订号，"head" 表示最新

    Returns:
        本次执行的修订号列表（按执行顺序）

    Raises:
        StorageUnavailable: 迁移执行失败
    """
    revisions = available_migrations()
    target = _resolve(target_version, revisions)
    before = current_version(engine)

    start = revisions.index(before) + 1 if before else 0
    end = revisions.index(target) + 1
    pending = revisions[start:end]
    if not pending:
        logger.info("Database schema is up to date (revision %s)", before)
        return []

    try:
        with engine.begin() as conn:
            command.upgrade(get_alembic_config(conn), target)
    except SQLAlchemyError as e:
        logger.error("Migration to %s failed, rolled back to %s: %s", target, before, e)
        raise StorageUnavailable(f"migration failed: {e}") from e

    logger.info("Applied migrations %s", ", ".join(pending))
    return pending
