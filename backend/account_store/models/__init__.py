"""
数据模型模块
"""

from .base import TimestampModel, ensure_utc, utc_now
from .user import UserRecord, build_record, validate_record
from .location import parse_location, dump_location, load_location

__all__ = [
    "TimestampModel",
    "utc_now",
    "ensure_utc",
    "UserRecord",
    "build_record",
    "validate_record",
    "parse_location",
    "dump_location",
    "load_location",
]
