"""
Pytest 测试配置
提供测试数据库、Repository 和测试数据
"""

import sys
from pathlib import Path
from typing import Generator

import pytest
from sqlalchemy.engine import Engine

# 添加项目根目录到 sys.path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from account_store.config import load_settings
from account_store.db.engine import get_engine
from account_store.db.init_db import create_tables
from account_store.models.user import UserRecord
from account_store.repositories.user_repository import UserRepository


def _memory_engine() -> Engine:
    """内存 SQLite 引擎（StaticPool，所有连接共享同一个库）"""
    return get_engine(load_settings({"DATABASE_PATH": ":memory:"}))


# ==================== 数据库 Fixtures ====================

@pytest.fixture(scope="function")
def test_db_engine() -> Generator[Engine, None, None]:
    """
    创建测试用的内存数据库引擎（带 location 列的 schema）
    每个测试函数都会获得一个全新的数据库
    """
    engine = _memory_engine()
    create_tables(engine, with_location=True)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def plain_db_engine() -> Generator[Engine, None, None]:
    """不带 location 列的 schema 变体"""
    engine = _memory_engine()
    create_tables(engine, with_location=False)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def empty_db_engine() -> Generator[Engine, None, None]:
    """尚未执行任何迁移的数据库"""
    engine = _memory_engine()

    yield engine

    engine.dispose()


# ==================== Repository Fixtures ====================

@pytest.fixture(scope="function")
def user_repository(test_db_engine: Engine) -> UserRepository:
    """
    创建 UserRepository 实例
    """
    return UserRepository(test_db_engine, with_location=True)


@pytest.fixture(scope="function")
def plain_user_repository(plain_db_engine: Engine) -> UserRepository:
    """
    不带 location 变体的 UserRepository
    """
    return UserRepository(plain_db_engine, with_location=False)


# ==================== 测试数据 Fixtures ====================

@pytest.fixture(scope="function")
def test_user(user_repository: UserRepository) -> UserRecord:
    """
    创建测试用户
    """
    return user_repository.save(
        UserRecord.create(
            username="test_user",
            email="test_user@example.com",
            password="secret",
            location={"city": "Beijing", "coordinates": [116.4, 39.9]},
        )
    )


# ==================== Pytest 配置 ====================

def pytest_configure(config):
    """
    Pytest 初始化配置
    """
    # 标记测试分类
    config.addinivalue_line(
        "markers", "unit: Unit tests"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests"
    )
