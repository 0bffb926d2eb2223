"""
存储提供者抽象基类 - 定义存储接口
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..models.session import SessionRecord


class StorageProvider(ABC):
    """
    存储提供者抽象基类，定义所有存储实现必须支持的接口

    每个口令对应一条记录，记录只包含阶段和元数据。
    所有具体存储实现(如内存存储、Redis存储等)必须继承此类并实现其方法。
    """

    async def connect(self):
        """连接存储后端，默认无需连接"""
        return None

    async def close(self):
        """关闭存储连接，默认无需关闭"""
        return None

    @abstractmethod
    async def save_record(self, record: SessionRecord) -> bool:
        """
        保存会话记录

        Args:
            record: 要保存的会话记录

        Returns:
            bool: 是否保存成功
        """
        pass

    @abstractmethod
    async def load_record(self, code: str) -> Optional[SessionRecord]:
        """
        加载会话记录

        Args:
            code: 会话口令

        Returns:
            Optional[SessionRecord]: 会话记录，如果不存在则返回None
        """
        pass

    @abstractmethod
    async def delete_record(self, code: str) -> bool:
        """
        删除会话记录，记录不存在时视为成功

        Args:
            code: 会话口令

        Returns:
            bool: 是否删除成功
        """
        pass
