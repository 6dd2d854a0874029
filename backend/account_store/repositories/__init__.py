"""
Repository (DAO) 模块
提供数据库操作的抽象层，封装 CRUD 逻辑
"""

from .user_repository import UserRepository

__all__ = [
    "UserRepository"
]
