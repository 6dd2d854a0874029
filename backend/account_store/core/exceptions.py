"""
领域异常
Repository 边界只抛出这里定义的类型，不向调用方泄露数据库驱动的原始异常
"""

from typing import Any, Optional


class AccountStoreError(Exception):
    """所有账户存储异常的基类"""


class ValidationError(AccountStoreError):
    """输入不合法，在访问数据库之前抛出"""


class UniquenessViolation(AccountStoreError):
    """username 或 email 与已有记录冲突"""

    def __init__(self, field: Optional[str], value: Any = None):
        self.field = field
        self.value = value
        if field:
            message = f"{field} '{value}' already exists"
        else:
            message = "unique constraint violated"
        super().__init__(message)


class NotFound(AccountStoreError):
    """更新或读取的目标记录不存在"""

    def __init__(self, entity: str, key: Any):
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} {key!r} not found")


class StorageUnavailable(AccountStoreError):
    """连接失败、超时等数据库层面的错误，不在本层重试"""
