"""
会话模型定义 - 定义中继会话的阶段、文件元数据和持久化记录
"""

import enum
import json
from dataclasses import dataclass
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from ...core.exceptions import ProtocolViolation


class Phase(enum.IntEnum):
    """会话阶段枚举，只能单调前进，不会回退"""
    CREATED = 0            # 会话已创建，尚未有发送方接入
    WAITING_METADATA = 1   # 发送方已接入，等待文件元数据
    WAITING_RECEIVER = 2   # 元数据已保存，等待接收方接入
    WAITING_APPROVAL = 3   # 接收方已接入，等待接收方确认
    TRANSFER = 4           # 正在转发发送方的数据


class FileMetadata(BaseModel):
    """
    文件元数据，由发送方在 WAITING_METADATA 阶段发送

    只保留 name 和 size 两个字段，其他字段会被忽略。
    """
    model_config = ConfigDict(extra="ignore", frozen=True)

    name: StrictStr
    size: StrictInt = Field(ge=0)

    @classmethod
    def parse_message(cls, message: Any) -> "FileMetadata":
        """
        从发送方的消息中解析元数据

        Args:
            message: 发送方发来的帧

        Returns:
            FileMetadata: 解析出的元数据

        Raises:
            ProtocolViolation: 消息不是文本帧，或无法解析为 {name, size}
        """
        if not isinstance(message, str):
            raise ProtocolViolation("元数据必须是文本帧")
        try:
            return cls.model_validate_json(message)
        except ValidationError as e:
            raise ProtocolViolation(f"无法解析元数据: {e.error_count()} 个错误") from e

    def to_message(self) -> str:
        """序列化为发给接收方的JSON文本"""
        return self.model_dump_json()


@dataclass
class SessionRecord:
    """
    会话持久化记录

    每个口令对应一条记录，只包含阶段和元数据，不包含任何传输内容。
    元数据当且仅当阶段到达 WAITING_RECEIVER 及之后才存在。
    """
    code: str
    phase: Phase = Phase.CREATED
    metadata: Optional[FileMetadata] = None

    def to_dict(self) -> Dict[str, Any]:
        """转换为存储格式 {phase, metadata?}"""
        data: Dict[str, Any] = {"phase": int(self.phase)}
        if self.metadata is not None:
            data["metadata"] = self.metadata.model_dump()
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_dict(cls, code: str, data: Dict[str, Any]) -> "SessionRecord":
        """
        从存储格式恢复记录

        Raises:
            ValueError: 阶段未知，或元数据与阶段不一致
                (元数据当且仅当阶段不早于 WAITING_RECEIVER 时存在)
        """
        phase = Phase(data.get("phase", Phase.CREATED))
        metadata = data.get("metadata")
        if (metadata is not None) != (phase >= Phase.WAITING_RECEIVER):
            raise ValueError(f"会话 {code} 的记录中元数据与阶段 {phase.name} 不一致")
        return cls(
            code=code,
            phase=phase,
            metadata=FileMetadata.model_validate(metadata) if metadata is not None else None,
        )

    @classmethod
    def from_json(cls, code: str, raw: str) -> "SessionRecord":
        return cls.from_dict(code, json.loads(raw))
