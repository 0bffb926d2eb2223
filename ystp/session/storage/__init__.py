"""
会话存储模块 - 提供会话记录持久化的存储后端

此模块定义了存储接口和不同的存储实现，如内存和Redis存储。
使用工厂模式创建存储实例，隐藏实现细节。
"""

from .base import StorageProvider
from .memory_provider import MemoryStorageProvider
from .redis_provider import RedisStorageProvider
from .factory import StorageFactory

__all__ = ["StorageProvider", "MemoryStorageProvider", "RedisStorageProvider", "StorageFactory"]
