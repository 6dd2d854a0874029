"""
数据库初始化脚本
按配置的 schema 变体执行迁移
直接运行：python -m account_store.db.init_db
"""

from typing import List, Optional

from sqlalchemy.engine import Engine

from account_store.config import Settings, load_settings
from account_store.core.logger import get_logger, set_level
from account_store.db.engine import get_engine, ping
from account_store.db.migrate import run_migrations, target_version_for

logger = get_logger(__name__)


def create_tables(engine: Engine, with_location: bool = True) -> List[int]:
    """
    创建 users 表
    通过迁移完成，保证与生产环境的 schema 一致

    Returns:
        本次执行的迁移版本号
    """
    return run_migrations(engine, target_version=target_version_for(with_location))


def init_db(settings: Optional[Settings] = None) -> Engine:
    """
    完整的数据库初始化流程
    1. 创建数据库引擎
    2. 检查连通性
    3. 执行迁移
    """
    if settings is None:
        settings = load_settings()

    set_level(settings.log_level)
    logger.info("Initializing database (location enabled: %s)", settings.user_location_enabled)
    engine = get_engine(settings)
    ping(engine)
    create_tables(engine, with_location=settings.user_location_enabled)
    logger.info("Database initialization completed")
    return engine


if __name__ == "__main__":
    init_db()
