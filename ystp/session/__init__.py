"""
会话管理模块 - 提供会话配对、状态机和持久化服务

该模块包括：
1. 会话记录的持久化存储和检索
2. 单个会话的中继状态机
3. 口令到会话的注册表
"""

from .models import Phase, FileMetadata, SessionRecord
from .relay import Relay, Role, ClosurePolicy, APPROVAL_SENTINEL, EOF_SENTINEL
from .registry import SessionRegistry

__all__ = [
    "Phase",
    "FileMetadata",
    "SessionRecord",
    "Relay",
    "Role",
    "ClosurePolicy",
    "APPROVAL_SENTINEL",
    "EOF_SENTINEL",
    "SessionRegistry",
]
