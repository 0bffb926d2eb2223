"""
核心模块 - 异常定义、传输通道抽象和口令生成
"""

from .exceptions import (
    RelayError,
    UpgradeRequired,
    SessionConflict,
    SessionNotReady,
    ProtocolViolation,
    TransportError,
)
from .channel import Channel, WebSocketChannel
from .mnemonic import MnemonicGenerator, mnemonic

__all__ = [
    "RelayError",
    "UpgradeRequired",
    "SessionConflict",
    "SessionNotReady",
    "ProtocolViolation",
    "TransportError",
    "Channel",
    "WebSocketChannel",
    "MnemonicGenerator",
    "mnemonic",
]
