"""
用户域模型
账户记录的内存形态，与具体存储技术无关；表结构映射见 account_store.db.schema
"""

from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError, field_validator
from sqlmodel import Field

from account_store.core.exceptions import ValidationError
from .base import TimestampModel
from .location import parse_location


class UserRecord(TimestampModel):
    """
    用户记录
    id 由数据库在插入时分配；未保存的记录 id 为 None（0 视同未保存）
    """

    # 主键，由数据库分配
    id: Optional[int] = Field(default=None)

    # 唯一用户名
    username: str = Field(nullable=False)

    # 唯一邮箱，按原样保存，不做大小写归一化
    email: str = Field(nullable=False)

    # 原样保存；哈希由调用方负责
    password: str = Field(nullable=False)

    # 可选的结构化位置信息（JSON 对象），只在启用 location 的 schema 变体中持久化
    location: Optional[Dict[str, Any]] = Field(default=None)

    @field_validator("username", "email")
    @classmethod
    def not_blank(cls, value: str, info) -> str:
        if not value or not value.strip():
            raise ValueError(f"{info.field_name} must not be empty")
        return value

    @field_validator("id")
    @classmethod
    def non_negative_id(cls, value: Optional[int]) -> Optional[int]:
        # 0 与 None 一样表示尚未持久化
        if value is not None and value < 0:
            raise ValueError("id must not be negative")
        return value

    @field_validator("location", mode="before")
    @classmethod
    def well_formed_location(cls, value: Any) -> Optional[Dict[str, Any]]:
        return parse_location(value)

    @classmethod
    def create(
        cls,
        username: str,
        email: str,
        password: str,
        location: Any = None,
    ) -> "UserRecord":
        """
        构造一条新记录

        Args:
            username: 用户名（非空）
            email: 邮箱（非空）
            password: 密码（原样保存）
            location: 可选的 JSON 对象或 JSON 文本

        Returns:
            id 为 None、created_at == updated_at 的新记录

        Raises:
            ValidationError: 字段不合法
        """
        return build_record(
            username=username, email=email, password=password, location=location
        )

    def to_dict(self) -> Dict[str, Any]:
        """不含 password 的字典表示，便于日志和展示"""
        return self.model_dump(exclude={"password"})


def build_record(**fields: Any) -> UserRecord:
    """按字段构造 UserRecord，把 pydantic 的校验错误转换为领域 ValidationError"""
    try:
        return UserRecord(**fields)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e


def validate_record(record: UserRecord) -> UserRecord:
    """
    重新校验一条记录（调用方可能在构造后修改过字段）

    Returns:
        校验通过的新实例，location 已规范化
    """
    return build_record(**record.model_dump())


def _describe(error: PydanticValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(p) for p in item.get("loc", ())) or "record"
        parts.append(f"{loc}: {item.get('msg')}")
    return "; ".join(parts)
