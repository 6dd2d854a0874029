"""
账户记录存储
提供用户实体模型、用户 Repository 以及版本化的数据库迁移
"""

__version__ = "0.1.0"
