"""
工具模块 - 配置与日志
"""

from .config import Settings, get_settings
from .logging_config import setup_logging

__all__ = ["Settings", "get_settings", "setup_logging"]
