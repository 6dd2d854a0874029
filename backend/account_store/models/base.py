"""
基础模型
提供所有记录共用的时间戳字段
"""

from datetime import datetime, timezone
from typing import Any

from pydantic import field_validator, model_validator
from sqlmodel import SQLModel, Field


def utc_now() -> datetime:
    """当前 UTC 时间（timezone-aware）"""
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """naive datetime 视为 UTC（SQLite 读回的时间不带时区）"""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class TimestampModel(SQLModel):
    """时间戳基类，为所有模型提供 created_at 和 updated_at 字段

    构造时两个字段取同一时刻；之后 updated_at 由 Repository.save 或调用方的 touch() 刷新
    """
    created_at: datetime = Field(default_factory=utc_now, nullable=False)
    updated_at: datetime = Field(default_factory=utc_now, nullable=False)

    @model_validator(mode="before")
    @classmethod
    def same_instant_on_create(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("updated_at") is None:
            data = dict(data)
            created_at = data.get("created_at") or utc_now()
            data["created_at"] = created_at
            data["updated_at"] = created_at
        return data

    @field_validator("created_at", "updated_at")
    @classmethod
    def as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def check_timestamp_order(self):
        if self.created_at > self.updated_at:
            raise ValueError("updated_at must not be earlier than created_at")
        return self

    def touch(self) -> None:
        """刷新 updated_at 为当前时间（不早于 created_at）"""
        self.updated_at = max(utc_now(), self.created_at)
