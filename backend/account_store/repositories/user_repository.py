"""
用户管理 Repository
提供 users 表的保存、查询、计数和删除操作
"""

import re
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from account_store.core.exceptions import (
    NotFound,
    StorageUnavailable,
    UniquenessViolation,
    ValidationError,
)
from account_store.core.logger import get_logger
from account_store.db.mapping import record_to_row, row_to_record
from account_store.db.schema import get_users_table
from account_store.models.base import ensure_utc, utc_now
from account_store.models.user import UserRecord, validate_record

logger = get_logger(__name__)

# find_all 每批从游标读取的行数
FETCH_BATCH_SIZE = 500

_UNIQUE_FIELDS = ("username", "email")

# 驱动报错信息中指明冲突列的片段：SQLite "users.email"，
# PostgreSQL 的约束名 "uq_users_email" / "users_email_key" 或 "Key (email)="
_CONFLICT_PATTERN = re.compile(
    r"(?:\busers\.|\buq_users_|\busers_|\bkey \()(username|email)(?![a-z0-9])"
)


class UserRepository:
    """
    用户数据访问对象
    封装所有与 users 表相关的数据库操作

    每个操作单独获取连接，结束时（包括异常路径）归还连接池；
    唯一性完全依赖数据库的唯一约束，不做应用层加锁
    """

    def __init__(self, engine: Engine, with_location: bool = True):
        """
        初始化 Repository

        Args:
            engine: SQLAlchemy 引擎（连接池由调用方管理）
            with_location: 当前部署的 schema 是否包含 location 列
        """
        self.engine = engine
        self.with_location = with_location
        self.table = get_users_table(with_location)

    # ==================== 连接管理 ====================

    @contextmanager
    def _connection(self, write: bool = False) -> Iterator[Connection]:
        """
        获取一个连接；write=True 时开启事务，成功提交、异常回滚

        数据库驱动的异常统一转换为 StorageUnavailable（唯一约束冲突除外，由调用方处理）
        """
        try:
            scope = self.engine.begin() if write else self.engine.connect()
            with scope as conn:
                yield conn
        except IntegrityError:
            raise
        except SQLAlchemyError as e:
            logger.error("Storage operation on %s failed: %s", self.table.name, e)
            raise StorageUnavailable(str(e)) from e

    # ==================== 写操作 ====================

    def save(self, record: UserRecord) -> UserRecord:
        """
        保存用户记录

        id 为 None 或 0 时插入，由数据库分配 id；否则按 id 更新，并刷新 updated_at。
        created_at 只在插入时写入，更新后返回的记录以库中的行为准

        Args:
            record: 待保存的记录

        Returns:
            保存后的新记录对象（带 id / 新的 updated_at）

        Raises:
            ValidationError: 记录不合法，或当前 schema 不支持 location
            UniquenessViolation: username 或 email 与其他记录冲突
            NotFound: 更新的 id 不存在
            StorageUnavailable: 数据库不可用
        """
        record = validate_record(record)
        if record.location is not None and not self.with_location:
            raise ValidationError("location is not supported by the current schema")

        # id 为 None 或 0 都表示尚未持久化
        if not record.id:
            return self._insert(record)
        return self._update(record)

    def _insert(self, record: UserRecord) -> UserRecord:
        values = record_to_row(record, self.table)
        try:
            with self._connection(write=True) as conn:
                result = conn.execute(insert(self.table).values(**values))
                new_id = result.inserted_primary_key[0]
        except IntegrityError as e:
            raise self._uniqueness_error(e, record) from e

        logger.info("Created user %s (ID: %s)", record.username, new_id)
        return record.model_copy(update={"id": new_id})

    def _update(self, record: UserRecord) -> UserRecord:
        """
        按 id 更新；created_at 以库中的值为准，返回值从更新后的行重新读取
        """
        id_column = self.table.c.id
        try:
            with self._connection(write=True) as conn:
                created_at = conn.execute(
                    select(self.table.c.created_at).where(id_column == record.id)
                ).scalar_one_or_none()
                if created_at is None:
                    raise NotFound("user", record.id)

                # updated_at 刷新为当前时间，且不早于库中的 created_at
                values = record_to_row(record, self.table)
                values.pop("created_at")
                values["updated_at"] = max(utc_now(), ensure_utc(created_at))

                conn.execute(update(self.table).where(id_column == record.id).values(**values))
                row = conn.execute(select(self.table).where(id_column == record.id)).mappings().one()
        except IntegrityError as e:
            raise self._uniqueness_error(e, record) from e

        logger.info("Updated user %s (ID: %s)", record.username, record.id)
        return row_to_record(row)

    def delete_by_id(self, user_id: int) -> bool:
        """
        删除用户，被删除的 id 不会被重新分配

        Returns:
            是否删除了记录
        """
        with self._connection(write=True) as conn:
            deleted = conn.execute(delete(self.table).where(self.table.c.id == user_id)).rowcount > 0
        if deleted:
            logger.info("Deleted user ID: %s", user_id)
        return deleted

    # ==================== 读操作 ====================

    def find_all(self) -> Iterator[UserRecord]:
        """
        惰性遍历所有用户（按 id 升序）

        每次调用都会得到新的生成器和新的快照；生成器耗尽或被关闭时释放连接
        """
        statement = (
            select(self.table)
            .order_by(self.table.c.id)
            .execution_options(yield_per=FETCH_BATCH_SIZE)
        )
        with self._connection() as conn:
            for row in conn.execute(statement).mappings():
                yield row_to_record(row)

    def find_by_id(self, user_id: int) -> Optional[UserRecord]:
        """根据 ID 获取用户，不存在则返回 None"""
        return self._find_one(self.table.c.id == user_id)

    def find_by_email(self, email: str) -> Optional[UserRecord]:
        """
        根据邮箱获取用户

        按数据库原生的文本比较匹配，不做大小写归一化

        Returns:
            UserRecord 对象，不存在则返回 None
        """
        return self._find_one(self.table.c.email == email)

    def find_by_username(self, username: str) -> Optional[UserRecord]:
        """根据用户名获取用户，不存在则返回 None"""
        return self._find_one(self.table.c.username == username)

    def exists_by_email(self, email: str) -> bool:
        statement = select(self.table.c.id).where(self.table.c.email == email).limit(1)
        with self._connection() as conn:
            return conn.execute(statement).first() is not None

    def count(self) -> int:
        """当前记录总数"""
        statement = select(func.count()).select_from(self.table)
        with self._connection() as conn:
            return conn.execute(statement).scalar_one()

    # ==================== 内部方法 ====================

    def _find_one(self, condition) -> Optional[UserRecord]:
        with self._connection() as conn:
            row = conn.execute(select(self.table).where(condition)).mappings().first()
        return row_to_record(row) if row else None

    def _uniqueness_error(self, error: IntegrityError, record: UserRecord) -> UniquenessViolation:
        """
        把唯一约束冲突转换为 UniquenessViolation，并尽量指出冲突字段

        先从数据库报错信息里找列名，找不到再按字段查询与其他记录的冲突
        """
        message = str(error.orig).lower()
        match = _CONFLICT_PATTERN.search(message)
        field = match.group(1) if match else None

        if field is None:
            for name in _UNIQUE_FIELDS:
                other = self._find_one(self.table.c[name] == getattr(record, name))
                if other is not None and other.id != record.id:
                    field = name
                    break

        value = getattr(record, field) if field else None
        logger.error("Unique constraint violated on users.%s: %s", field, error.orig)
        return UniquenessViolation(field, value)
