"""
数据库引擎
根据配置创建 SQLAlchemy 引擎，并提供连通性检查
"""

from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine

from account_store.config import Settings, load_settings
from account_store.core.exceptions import StorageUnavailable
from account_store.core.logger import get_logger

logger = get_logger(__name__)


def get_engine(settings: Optional[Settings] = None) -> Engine:
    """
    创建并返回数据库引擎

    SQLite 内存库使用 StaticPool 以便所有连接共享同一个库；
    其他数据库使用连接池，池大小和获取超时来自配置
    """
    if settings is None:
        settings = load_settings()

    url = settings.database_url
    if settings.is_sqlite:
        kwargs = {"connect_args": {"check_same_thread": False}}  # SQLite 特有配置
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        engine = create_engine(url, echo=settings.echo, **kwargs)
    else:
        engine = create_engine(
            url,
            echo=settings.echo,
            pool_size=settings.pool_size,
            pool_timeout=settings.pool_timeout,
            pool_pre_ping=True,
        )

    logger.info("Database engine created for %s", engine.url.render_as_string(hide_password=True))
    return engine


def ping(engine: Engine) -> bool:
    """
    执行 SELECT 1 检查数据库是否可达

    Raises:
        StorageUnavailable: 数据库不可达
    """
    try:
        with engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar_one() == 1
    except SQLAlchemyError as e:
        logger.error("Database ping failed: %s", e)
        raise StorageUnavailable(f"database unreachable: {e}") from e
