"""
数据库初始化单元测试
验证配置读取、引擎创建、Alembic 迁移和初始化流程
"""

from unittest.mock import patch

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import inspect, text
from sqlalchemy.exc import OperationalError

from account_store.config import BACKEND_ROOT, load_settings
from account_store.core.exceptions import StorageUnavailable
from account_store.db.engine import get_engine, ping
from account_store.db.init_db import create_tables, init_db
from account_store.db.migrate import (
    available_migrations,
    current_version,
    run_migrations,
    target_version_for,
)


def _columns(engine, table="users"):
    return {column["name"] for column in inspect(engine).get_columns(table)}


class TestSettings:
    """测试配置读取"""

    def test_defaults(self):
        settings = load_settings({})

        assert settings.database_url == f"sqlite:///{BACKEND_ROOT / 'database.db'}"
        assert settings.user_location_enabled is True
        assert settings.echo is False
        assert settings.log_level == "INFO"

    def test_database_url_takes_precedence(self):
        settings = load_settings({
            "DATABASE_URL": "postgresql://user:pw@localhost:5432/accounts",
            "DATABASE_PATH": "ignored.db",
        })

        assert settings.database_url == "postgresql://user:pw@localhost:5432/accounts"
        assert settings.is_sqlite is False

    def test_absolute_database_path(self, tmp_path):
        db_file = tmp_path / "accounts.db"

        settings = load_settings({"DATABASE_PATH": str(db_file)})

        assert settings.database_url == f"sqlite:///{db_file}"

    @pytest.mark.parametrize("raw, expected", [
        ("false", False),
        ("0", False),
        ("no", False),
        ("true", True),
        ("YES", True),
        ("", True),
    ])
    def test_location_flag(self, raw, expected):
        settings = load_settings({"USER_LOCATION_ENABLED": raw})

        assert settings.user_location_enabled is expected

    def test_settings_are_frozen(self):
        settings = load_settings({})

        with pytest.raises(PydanticValidationError):
            settings.echo = True


class TestEngine:
    """测试引擎和连通性检查"""

    def test_ping(self, empty_db_engine):
        assert ping(empty_db_engine) is True

    def test_ping_failure(self, empty_db_engine):
        error = OperationalError("SELECT 1", {}, Exception("connection refused"))

        with patch.object(empty_db_engine, "connect", side_effect=error):
            with pytest.raises(StorageUnavailable):
                ping(empty_db_engine)

    def test_file_database(self, tmp_path):
        """测试文件数据库在不同连接之间共享数据"""
        engine = get_engine(load_settings({"DATABASE_PATH": str(tmp_path / "file.db")}))
        create_tables(engine)

        with engine.begin() as conn:
            conn.execute(text(
                "INSERT INTO users (username, email, password, created_at, updated_at) "
                "VALUES ('a', 'a@example.com', '', '2024-01-01 00:00:00', '2024-01-01 00:00:00')"
            ))
        with engine.connect() as conn:
            assert conn.execute(text("SELECT COUNT(*) FROM users")).scalar_one() == 1

        engine.dispose()


class TestMigrations:
    """测试 Alembic 迁移"""

    def test_available_migrations_ordered(self):
        assert available_migrations()[:2] == ["0001", "0002"]

    def test_target_versions(self):
        assert target_version_for(True) == "head"
        assert target_version_for(False) == "0001"

    def test_run_all(self, empty_db_engine):
        """测试执行到最新修订，得到带 location 的 schema"""
        applied = run_migrations(empty_db_engine)

        assert applied[:2] == ["0001", "0002"]
        assert current_version(empty_db_engine) == applied[-1]
        assert _columns(empty_db_engine) == {
            "id", "username", "email", "password", "created_at", "updated_at", "location"
        }

    def test_plain_variant_schema(self, empty_db_engine):
        """测试不带 location 的变体停在 0001"""
        applied = create_tables(empty_db_engine, with_location=False)

        assert applied == ["0001"]
        assert current_version(empty_db_engine) == "0001"
        assert "location" not in _columns(empty_db_engine)

    def test_unique_constraints_named(self, empty_db_engine):
        """测试唯一约束带有固定名称"""
        run_migrations(empty_db_engine)

        names = {c["name"] for c in inspect(empty_db_engine).get_unique_constraints("users")}

        assert {"uq_users_username", "uq_users_email"} <= names

    def test_migrations_applied_at_most_once(self, empty_db_engine):
        """测试重复执行不会再次应用已执行的迁移"""
        run_migrations(empty_db_engine)

        assert run_migrations(empty_db_engine) == []
        with empty_db_engine.connect() as conn:
            versions = conn.execute(text("SELECT version_num FROM alembic_version")).scalars().all()
        assert versions == [available_migrations()[-1]]

    def test_upgrade_plain_to_location(self, empty_db_engine):
        """测试从不带 location 的 schema 升级时只执行剩余迁移"""
        create_tables(empty_db_engine, with_location=False)

        applied = create_tables(empty_db_engine, with_location=True)

        assert applied == ["0002"]
        assert "location" in _columns(empty_db_engine)

    def test_current_version_empty(self, empty_db_engine):
        assert current_version(empty_db_engine) is None

    def test_failed_migration_rolls_back_version(self, empty_db_engine):
        """测试迁移失败时修订号不被记录"""
        run_migrations(empty_db_engine, target_version="0001")
        error = OperationalError("ALTER TABLE", {}, Exception("disk I/O error"))

        with patch("alembic.op.add_column", side_effect=error):
            with pytest.raises(StorageUnavailable):
                run_migrations(empty_db_engine)

        assert current_version(empty_db_engine) == "0001"
        assert "location" not in _columns(empty_db_engine)


class TestInitDb:
    """测试完整初始化流程"""

    def test_init_db(self, tmp_path):
        settings = load_settings({
            "DATABASE_PATH": str(tmp_path / "init.db"),
            "USER_LOCATION_ENABLED": "false",
        })

        engine = init_db(settings)

        assert current_version(engine) == "0001"
        assert "location" not in _columns(engine)
        engine.dispose()
