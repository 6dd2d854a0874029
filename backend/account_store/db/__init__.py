"""
数据库模块
提供引擎、表结构、映射和迁移
"""

from .engine import get_engine, ping
from .schema import USERS_TABLE, build_users_table, get_users_table
from .migrate import run_migrations, current_version, target_version_for
from .init_db import init_db, create_tables

__all__ = [
    "get_engine",
    "ping",
    "USERS_TABLE",
    "build_users_table",
    "get_users_table",
    "run_migrations",
    "current_version",
    "target_version_for",
    "init_db",
    "create_tables",
]
