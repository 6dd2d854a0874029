"""
记录与数据库行之间的显式映射
"""

from datetime import datetime, timezone
from typing import Any, Dict, Mapping

from sqlalchemy import Table

from account_store.models.location import load_location, parse_location
from account_store.models.user import UserRecord, build_record


def _to_utc(value: datetime) -> datetime:
    return value.astimezone(timezone.utc)


def record_to_row(record: UserRecord, table: Table, include_id: bool = False) -> Dict[str, Any]:
    """
    把记录转换为 insert/update 用的列值字典

    只输出表中真实存在的列；不带 location 的变体中 location 被忽略（由调用方提前拒绝）
    """
    row: Dict[str, Any] = {
        "username": record.username,
        "email": record.email,
        "password": record.password,
        "created_at": _to_utc(record.created_at),
        "updated_at": _to_utc(record.updated_at),
    }
    if include_id and record.id is not None:
        row["id"] = record.id
    if "location" in table.c:
        row["location"] = parse_location(record.location)
    return row


def row_to_record(row: Mapping[str, Any]) -> UserRecord:
    """把查询结果行（RowMapping）转换为 UserRecord"""
    return build_record(
        id=row["id"],
        username=row["username"],
        email=row["email"],
        password=row["password"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        location=load_location(row.get("location")),
    )
