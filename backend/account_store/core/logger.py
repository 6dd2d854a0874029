"""
日志配置
所有模块统一通过 get_logger(__name__) 获取 logger
"""

import logging
import os
import sys

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_ROOT_NAME = "account_store"
_initialized = False


def _init_logging() -> None:
    """只配置一次包级 logger"""
    global _initialized
    if _initialized:
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(_LOG_FORMAT, _DATE_FORMAT))
    root = logging.getLogger(_ROOT_NAME)
    root.setLevel(os.environ.get("LOG_LEVEL", "INFO").upper())
    root.addHandler(handler)
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """
    获取命名 logger

    Args:
        name: 通常为调用模块的 __name__

    Returns:
        配置好的 logging.Logger
    """
    _init_logging()
    return logging.getLogger(name)


def set_level(level: str) -> None:
    """调整包级 logger 的日志级别（例如按配置中的 LOG_LEVEL）"""
    _init_logging()
    logging.getLogger(_ROOT_NAME).setLevel(level.upper())
