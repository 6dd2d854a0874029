"""
核心模块
提供日志和领域异常
"""

from .exceptions import (
    AccountStoreError,
    ValidationError,
    UniquenessViolation,
    NotFound,
    StorageUnavailable,
)
from .logger import get_logger, set_level

__all__ = [
    "AccountStoreError",
    "ValidationError",
    "UniquenessViolation",
    "NotFound",
    "StorageUnavailable",
    "get_logger",
    "set_level",
]
