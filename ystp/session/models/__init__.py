"""
会话模型模块 - 定义会话数据结构和相关模型

此模块提供用于表示会话阶段、文件元数据和持久化记录的类。
"""

from .session import Phase, FileMetadata, SessionRecord

__all__ = ["Phase", "FileMetadata", "SessionRecord"]
