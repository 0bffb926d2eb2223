"""
传输客户端 - 通过中继服务发送和接收文件

发送方: 连接 /send，读取口令，发送元数据，等待接收方确认后按块发送文件，最后发送 EOF。
接收方: 连接 /receive/<code>，读取元数据，发送 LET_IT_RIP，写入数据直到收到 EOF。
"""

import json
import logging
from pathlib import Path
from typing import Callable, Optional, Union
from urllib.parse import quote

from websockets.asyncio.client import connect
from websockets.exceptions import InvalidStatus

from ..core.exceptions import RelayError, SessionConflict, SessionNotReady, UpgradeRequired
from ..session.models.session import FileMetadata
from ..session.relay import APPROVAL_SENTINEL, EOF_SENTINEL

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024  # 64KB

ProgressCallback = Callable[[int, int], None]


def _handshake_error(error: InvalidStatus, default: type) -> RelayError:
    """把握手阶段的HTTP状态码转换为中继异常"""
    status = error.response.status_code
    if status == UpgradeRequired.status_code:
        return UpgradeRequired()
    if status == default.status_code:
        return default()
    return RelayError(f"握手失败，状态码: {status}")


async def send_file(path: Union[str, Path],
                    base_url: str,
                    chunk_size: int = CHUNK_SIZE,
                    on_code: Optional[Callable[[str], None]] = None,
                    on_progress: Optional[ProgressCallback] = None,
                    connect_fn=connect) -> str:
    """
    发送文件

    Args:
        path: 要发送的文件路径
        base_url: 中继服务地址，如 ws://localhost:8787
        chunk_size: 每个二进制帧的字节数
        on_code: 收到口令后的回调，用于把口令展示给用户
        on_progress: 进度回调 (已发送字节数, 总字节数)
        connect_fn: WebSocket连接函数

    Returns:
        str: 会话口令

    Raises:
        FileNotFoundError: 文件不存在
        SessionConflict: 中继拒绝创建会话
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"文件不存在: {path}")
    size = path.stat().st_size

    try:
        async with connect_fn(f"{base_url.rstrip('/')}/send") as ws:
            code = json.loads(await ws.recv())["code"]
            logger.info(f"会话已创建，口令: {code}")
            if on_code:
                on_code(code)

            await ws.send(FileMetadata(name=path.name, size=size).to_message())

            # 等待接收方确认
            while await ws.recv() != APPROVAL_SENTINEL:
                pass
            logger.info("接收方已确认，开始传输")

            sent = 0
            with open(path, "rb") as f:
                for chunk in iter(lambda: f.read(chunk_size), b""):
                    await ws.send(chunk)
                    sent += len(chunk)
                    if on_progress:
                        on_progress(sent, size)
            await ws.send(EOF_SENTINEL)
            logger.info(f"已发送 {sent} 字节")
    except InvalidStatus as e:
        raise _handshake_error(e, SessionConflict) from e

    return code


async def receive_file(code: str,
                       base_url: str,
                       output_dir: Union[str, Path] = ".",
                       overwrite: bool = False,
                       on_metadata: Optional[Callable[[FileMetadata], None]] = None,
                       on_progress: Optional[ProgressCallback] = None,
                       connect_fn=connect) -> Path:
    """
    接收文件

    Args:
        code: 发送方提供的口令
        base_url: 中继服务地址，如 ws://localhost:8787
        output_dir: 保存目录
        overwrite: 是否覆盖同名文件
        on_metadata: 收到元数据后的回调
        on_progress: 进度回调 (已接收字节数, 总字节数)
        connect_fn: WebSocket连接函数

    Returns:
        Path: 保存的文件路径

    Raises:
        SessionNotReady: 会话还没有等待接收方
        FileExistsError: 目标文件已存在且不允许覆盖
    """
    url = f"{base_url.rstrip('/')}/receive/{quote(code, safe='')}"
    target = None

    try:
        async with connect_fn(url) as ws:
            metadata = FileMetadata.model_validate_json(await ws.recv())
            if on_metadata:
                on_metadata(metadata)

            # 只取文件名部分，不允许写到保存目录之外
            target = Path(output_dir) / Path(metadata.name).name
            if target.exists() and not overwrite:
                raise FileExistsError(f"文件已存在: {target}")

            received = 0
            with open(target, "wb") as out:
                await ws.send(APPROVAL_SENTINEL)
                while True:
                    message = await ws.recv()
                    if isinstance(message, str):
                        if message == EOF_SENTINEL:
                            break
                        message = message.encode("utf-8")
                    out.write(message)
                    received += len(message)
                    if on_progress:
                        on_progress(received, metadata.size)
    except InvalidStatus as e:
        raise _handshake_error(e, SessionNotReady) from e
    except FileExistsError:
        raise
    except Exception:
        if target is not None and target.exists():
            target.unlink()
        raise

    logger.info(f"已接收 {received} 字节，保存到 {target}")
    return target
