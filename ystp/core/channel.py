"""
传输通道 - 面向消息的双向连接抽象

中继状态机只依赖 Channel 接口：发送离散的文本/二进制帧、关闭连接。
WebSocketChannel 是基于 Starlette/FastAPI WebSocket 的实现。
"""

import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, Union

from fastapi import WebSocket, WebSocketDisconnect
from starlette.responses import PlainTextResponse
from starlette.websockets import WebSocketState

from .exceptions import RelayError, TransportError

logger = logging.getLogger(__name__)

# 文本帧为str，二进制帧为bytes，帧类型通过Python类型保留
Frame = Union[str, bytes]

DENIAL_EXTENSION = "websocket.http.response"


class Channel(ABC):
    """
    传输通道抽象基类

    所有具体通道实现必须保留帧边界和帧类型(文本/二进制)。
    close() 必须是幂等的，对已关闭的通道再次关闭不产生任何效果。
    """

    @abstractmethod
    async def accept(self) -> None:
        """完成握手，使通道可以收发消息"""
        pass

    @abstractmethod
    async def send(self, frame: Frame) -> None:
        """
        发送一个帧

        Args:
            frame: str表示文本帧，bytes表示二进制帧

        Raises:
            TransportError: 通道已关闭或发送失败
        """
        pass

    @abstractmethod
    async def close(self, code: int = 1000) -> None:
        """关闭通道"""
        pass

    @property
    @abstractmethod
    def closed(self) -> bool:
        """通道是否已关闭"""
        pass


class WebSocketChannel(Channel):
    """基于FastAPI WebSocket的传输通道"""

    def __init__(self, websocket: WebSocket):
        self.websocket = websocket
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def mark_closed(self) -> None:
        """对端已断开，后续关闭操作不再发送关闭帧"""
        self._closed = True

    async def accept(self) -> None:
        await self.websocket.accept()

    async def reject(self, error: RelayError) -> None:
        """
        在握手阶段拒绝连接

        ASGI服务器支持拒绝响应扩展时返回带状态码的HTTP响应，
        否则在accept之前直接关闭(服务器会将其转换为403)。
        """
        self._closed = True
        extensions = self.websocket.scope.get("extensions") or {}
        if DENIAL_EXTENSION in extensions:
            response = PlainTextResponse(error.detail, status_code=error.status_code)
            await self.websocket.send_denial_response(response)
        else:
            await self.websocket.close(code=1008, reason=error.detail)

    async def send(self, frame: Frame) -> None:
        if self._closed:
            raise TransportError("通道已关闭")
        try:
            if isinstance(frame, bytes):
                await self.websocket.send_bytes(frame)
            else:
                await self.websocket.send_text(frame)
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            self._closed = True
            raise TransportError(f"发送失败: {e}") from e

    async def close(self, code: int = 1000) -> None:
        if self._closed:
            return
        self._closed = True
        if self.websocket.application_state != WebSocketState.CONNECTED:
            return
        try:
            await self.websocket.close(code=code)
        except (WebSocketDisconnect, RuntimeError, OSError) as e:
            logger.debug(f"关闭WebSocket时连接已断开: {e}")

    async def iter_frames(self) -> AsyncIterator[Frame]:
        """
        逐个读取客户端发来的帧，直到客户端断开

        Yields:
            Frame: 文本帧(str)或二进制帧(bytes)，零长度二进制帧也会原样产出
        """
        while True:
            message = await self.websocket.receive()
            if message["type"] == "websocket.disconnect":
                self._closed = True
                return
            text = message.get("text")
            if text is not None:
                yield text
            else:
                yield message.get("bytes") or b""
