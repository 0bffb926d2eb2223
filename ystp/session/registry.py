"""
会话注册表 - 把口令映射到唯一的中继实例
"""

import logging
from typing import Dict, List, Optional

from .relay import MAX_PENDING_FRAMES, ClosurePolicy, Relay
from .storage.base import StorageProvider

logger = logging.getLogger(__name__)


class SessionRegistry:
    """
    会话注册表

    同一个口令的重复查找总是返回同一个中继实例。注册表不检查口令是否唯一，
    口令冲突会在发送方接入时表现为 SessionConflict。
    会话销毁后会自动从注册表中移除。
    """

    def __init__(self, storage: StorageProvider,
                 closure_policy: ClosurePolicy = ClosurePolicy.ASYMMETRIC,
                 max_pending: int = MAX_PENDING_FRAMES):
        """
        初始化会话注册表

        Args:
            storage: 会话记录存储，所有中继共享
            closure_policy: 新建中继使用的断开处理策略
            max_pending: 每个中继邮箱中最多积压的数据帧数
        """
        self.storage = storage
        self.closure_policy = ClosurePolicy(closure_policy)
        self.max_pending = max_pending
        self._relays: Dict[str, Relay] = {}

    def create(self, code: str) -> Relay:
        """
        为新口令创建会话，发送方接入时使用

        Args:
            code: 新生成的口令

        Returns:
            Relay: 口令对应的中继实例
        """
        relay = self._get_or_create(code)
        logger.debug(f"为口令 {code} 准备会话")
        return relay

    def lookup(self, code: str) -> Relay:
        """
        查找口令对应的会话，接收方接入时使用

        内存中没有对应的中继时会新建一个，中继启动时从存储加载记录。

        Args:
            code: 接收方提供的口令

        Returns:
            Relay: 口令对应的中继实例
        """
        return self._get_or_create(code)

    def get(self, code: str) -> Optional[Relay]:
        """获取已存在的中继，不存在时返回None"""
        return self._relays.get(code)

    def _get_or_create(self, code: str) -> Relay:
        relay = self._relays.get(code)
        if relay is None:
            relay = Relay(
                code,
                self.storage,
                closure_policy=self.closure_policy,
                on_destroyed=self._forget,
                max_pending=self.max_pending,
            )
            self._relays[code] = relay
        return relay

    def _forget(self, relay: Relay) -> None:
        """会话销毁回调"""
        if self._relays.get(relay.code) is relay:
            del self._relays[relay.code]
            logger.debug(f"已从注册表移除会话 {relay.code}")

    async def discard_if_idle(self, code: str) -> bool:
        """
        移除没有绑定任何通道的中继，避免无效口令的查找占用内存

        Returns:
            bool: 是否移除
        """
        relay = self._relays.get(code)
        if relay is None or not relay.idle:
            return False
        del self._relays[code]
        await relay.stop()
        logger.debug(f"已移除空闲会话 {code}")
        return True

    def active_codes(self) -> List[str]:
        """返回注册表中所有会话的口令"""
        return list(self._relays.keys())

    async def close(self) -> None:
        """停止所有中继，持久化记录保留"""
        relays = list(self._relays.values())
        self._relays.clear()
        for relay in relays:
            await relay.stop()
        if relays:
            logger.info(f"已停止 {len(relays)} 个会话")

    def __len__(self) -> int:
        return len(self._relays)

    def __contains__(self, code: str) -> bool:
        return code in self._relays
