"""
存储工厂 - 按名称或应用配置创建会话记录存储
"""

import logging
from typing import Dict, List, Type

from .base import StorageProvider
from .memory_provider import MemoryStorageProvider
from .redis_provider import RedisStorageProvider

logger = logging.getLogger(__name__)


class StorageFactory:
    """
    会话记录存储工厂

    中继只依赖 StorageProvider 接口，具体后端由 STORAGE_TYPE 配置选择。
    """

    _providers: Dict[str, Type[StorageProvider]] = {
        "memory": MemoryStorageProvider,
        "redis": RedisStorageProvider,
    }

    @classmethod
    def register_provider(cls, name: str, provider_class: Type[StorageProvider]) -> None:
        """注册额外的存储后端，name 即 STORAGE_TYPE 的取值"""
        cls._providers[name] = provider_class

    @classmethod
    def available(cls) -> List[str]:
        return list(cls._providers)

    @classmethod
    def create(cls, provider_type: str, **kwargs) -> StorageProvider:
        """
        按名称创建存储

        Raises:
            ValueError: 未注册的存储类型
        """
        try:
            provider_class = cls._providers[provider_type]
        except KeyError:
            raise ValueError(
                f"未知的存储类型: {provider_type}，可用类型: {', '.join(cls._providers)}"
            ) from None
        logger.info(f"使用 {provider_type} 存储会话记录")
        return provider_class(**kwargs)

    @classmethod
    def from_settings(cls, settings) -> StorageProvider:
        """
        按应用配置创建存储，Redis 后端使用 REDIS_URL / REDIS_PREFIX / REDIS_EXPIRY

        Args:
            settings: ystp.utils.config.Settings 实例
        """
        if settings.STORAGE_TYPE == "redis":
            return cls.create(
                "redis",
                url=settings.REDIS_URL,
                prefix=settings.REDIS_PREFIX,
                expiry=settings.REDIS_EXPIRY,
            )
        return cls.create(settings.STORAGE_TYPE)
