"""
Redis存储提供者 - 使用Redis实现会话记录存储
"""

import os
import logging
from typing import Optional

import redis.asyncio as aioredis
from redis.exceptions import RedisError

from .base import StorageProvider
from ..models.session import SessionRecord

logger = logging.getLogger(__name__)


class RedisStorageProvider(StorageProvider):
    """
    Redis会话存储实现

    每个口令对应一个字符串键，值为 {phase, metadata?} 的JSON文本。
    进程中断后，会话可以从最后记录的阶段恢复。
    """

    def __init__(self, url=None, prefix=None, expiry=None):
        """
        初始化Redis存储提供者

        Args:
            url: Redis连接URL
            prefix: Redis键前缀
            expiry: 记录过期时间(秒)，0表示永不过期
        """
        self.url = url or os.getenv("REDIS_URL", "redis://localhost:6379/0")
        self.prefix = prefix or os.getenv("REDIS_PREFIX", "ystp:session:")
        self.expiry = int(expiry if expiry is not None else os.getenv("REDIS_EXPIRY", "0"))
        self.redis = None

    async def connect(self):
        """连接Redis"""
        if not self.redis:
            self.redis = aioredis.from_url(
                self.url,
                encoding="utf-8",
                decode_responses=True
            )
            logger.info(f"已连接到Redis: {self.url}")
        return self.redis

    async def close(self):
        """关闭Redis连接"""
        if self.redis:
            await self.redis.aclose()
            self.redis = None
            logger.info("已关闭Redis连接")

    def _get_record_key(self, code):
        """获取会话记录Redis键"""
        return f"{self.prefix}{code}"

    async def save_record(self, record: SessionRecord) -> bool:
        """
        保存会话记录到Redis

        Args:
            record: 要保存的会话记录

        Returns:
            bool: 是否保存成功
        """
        await self.connect()

        key = self._get_record_key(record.code)
        try:
            if self.expiry > 0:
                await self.redis.set(key, record.to_json(), ex=self.expiry)
            else:
                await self.redis.set(key, record.to_json())
            logger.debug(f"已保存会话 {record.code} 到Redis，阶段: {record.phase.name}")
            return True
        except RedisError as e:
            logger.error(f"保存会话 {record.code} 到Redis失败: {e}")
            return False

    async def load_record(self, code: str) -> Optional[SessionRecord]:
        """
        从Redis加载会话记录

        Args:
            code: 会话口令

        Returns:
            Optional[SessionRecord]: 会话记录，如果不存在或无法解析则返回None
        """
        await self.connect()

        try:
            raw = await self.redis.get(self._get_record_key(code))
        except RedisError as e:
            logger.error(f"从Redis加载会话 {code} 失败: {e}")
            return None

        if not raw:
            return None

        try:
            return SessionRecord.from_json(code, raw)
        except (ValueError, TypeError) as e:
            # json.JSONDecodeError 和 pydantic.ValidationError 都是 ValueError
            logger.error(f"会话 {code} 的记录已损坏: {e}")
            return None

    async def delete_record(self, code: str) -> bool:
        """
        从Redis删除会话记录

        Args:
            code: 会话口令

        Returns:
            bool: 是否删除成功
        """
        await self.connect()

        try:
            await self.redis.delete(self._get_record_key(code))
            logger.debug(f"已从Redis删除会话 {code}")
            return True
        except RedisError as e:
            logger.error(f"从Redis删除会话 {code} 失败: {e}")
            return False
