"""
配置模块
从环境变量读取数据库连接、schema 变体和日志配置
"""

import os
from pathlib import Path
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict

# backend 目录，相对路径的 DATABASE_PATH 从这里解析
BACKEND_ROOT = Path(__file__).resolve().parent.parent

DEFAULT_DATABASE_PATH = "database.db"
DEFAULT_POOL_SIZE = 5
DEFAULT_POOL_TIMEOUT = 30  # seconds

_TRUE_VALUES = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """不可变的配置对象，部署期间固定"""

    database_url: str
    # schema 变体：是否启用 location 列（部署时决定，不按记录决定）
    user_location_enabled: bool = True
    echo: bool = False
    pool_size: int = DEFAULT_POOL_SIZE
    pool_timeout: int = DEFAULT_POOL_TIMEOUT
    log_level: str = "INFO"

    model_config = ConfigDict(frozen=True)

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


def _as_bool(raw: Optional[str], default: bool) -> bool:
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE_VALUES


def get_database_url(env: Mapping[str, str]) -> str:
    """
    获取数据库连接 URL
    优先使用 DATABASE_URL，否则使用 DATABASE_PATH 指向的 SQLite 文件
    """
    url = env.get("DATABASE_URL")
    if url:
        return url

    db_path = env.get("DATABASE_PATH", DEFAULT_DATABASE_PATH)
    # 确保路径是绝对路径
    if db_path != ":memory:" and not os.path.isabs(db_path):
        db_path = str(BACKEND_ROOT / db_path)
    return f"sqlite:///{db_path}"


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """
    根据环境变量构造 Settings

    Args:
        env: 环境变量映射（默认 os.environ，测试时可注入）

    Returns:
        Settings 实例
    """
    if env is None:
        env = os.environ

    return Settings(
        database_url=get_database_url(env),
        user_location_enabled=_as_bool(env.get("USER_LOCATION_ENABLED"), True),
        echo=_as_bool(env.get("DB_ECHO"), False),
        pool_size=int(env.get("DB_POOL_SIZE", DEFAULT_POOL_SIZE)),
        pool_timeout=int(env.get("DB_POOL_TIMEOUT", DEFAULT_POOL_TIMEOUT)),
        log_level=env.get("LOG_LEVEL", "INFO").upper(),
    )
