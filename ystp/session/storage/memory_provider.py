"""
内存存储提供者 - 进程内的会话记录存储，适用于开发和测试
"""

import logging
from typing import Dict, Optional

from .base import StorageProvider
from ..models.session import SessionRecord

logger = logging.getLogger(__name__)


class MemoryStorageProvider(StorageProvider):
    """
    内存会话存储实现

    记录以序列化后的JSON文本保存，与Redis存储的格式一致，
    因此读出的记录总是一份新的副本。进程退出后记录丢失。
    """

    def __init__(self):
        self._records: Dict[str, str] = {}

    async def save_record(self, record: SessionRecord) -> bool:
        self._records[record.code] = record.to_json()
        logger.debug(f"已保存会话 {record.code} 的记录，阶段: {record.phase.name}")
        return True

    async def load_record(self, code: str) -> Optional[SessionRecord]:
        raw = self._records.get(code)
        if raw is None:
            return None
        try:
            return SessionRecord.from_json(code, raw)
        except ValueError as e:
            logger.error(f"会话 {code} 的记录已损坏: {e}")
            return None

    async def delete_record(self, code: str) -> bool:
        if self._records.pop(code, None) is not None:
            logger.debug(f"已删除会话 {code} 的记录")
        return True

    def __len__(self) -> int:
        return len(self._records)
