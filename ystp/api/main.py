from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import FastAPI, Request, WebSocket
from fastapi.responses import PlainTextResponse

from ystp import __version__
from ystp.core.channel import WebSocketChannel
from ystp.core.exceptions import RelayError, UpgradeRequired
from ystp.core.mnemonic import MnemonicGenerator
from ystp.session.registry import SessionRegistry
from ystp.session.relay import Relay
from ystp.session.storage import StorageFactory, StorageProvider
from ystp.utils.config import Settings, get_settings

# 配置日志
logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None,
               storage: Optional[StorageProvider] = None,
               generator: Optional[MnemonicGenerator] = None) -> FastAPI:
    """
    创建中继服务应用

    Args:
        settings: 应用配置，默认使用全局配置
        storage: 会话记录存储，默认按配置创建
        generator: 口令生成器，默认按配置创建

    Returns:
        FastAPI: 应用实例
    """
    settings = settings if settings is not None else get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = storage if storage is not None else StorageFactory.from_settings(settings)
        await store.connect()
        app.state.storage = store
        app.state.registry = SessionRegistry(
            store,
            closure_policy=settings.CLOSURE_POLICY,
            max_pending=settings.MAX_PENDING_FRAMES,
        )
        app.state.generator = generator if generator is not None else MnemonicGenerator(
            word_count=settings.CODE_WORD_COUNT,
            separator=settings.CODE_SEPARATOR,
        )
        logger.info(f"中继服务已启动，存储类型: {settings.STORAGE_TYPE}")
        try:
            yield
        finally:
            await app.state.registry.close()
            await store.close()
            logger.info("中继服务已关闭")

    app = FastAPI(title="YSTP Relay", version=__version__, lifespan=lifespan)

    @app.exception_handler(UpgradeRequired)
    async def upgrade_required_handler(request: Request, exc: UpgradeRequired):
        return PlainTextResponse(exc.detail, status_code=exc.status_code)

    @app.get("/send")
    async def send_without_upgrade():
        """未携带WebSocket升级头的发送请求"""
        raise UpgradeRequired()

    @app.get("/receive/{code}")
    async def receive_without_upgrade(code: str):
        """未携带WebSocket升级头的接收请求"""
        raise UpgradeRequired()

    @app.websocket("/send")
    async def send(websocket: WebSocket):
        """发送方接入: 生成口令并创建会话，第一条消息为 {"code": ...}"""
        registry: SessionRegistry = websocket.app.state.registry
        code = websocket.app.state.generator.generate()
        relay = registry.create(code)
        channel = WebSocketChannel(websocket)

        try:
            await relay.connect_sender(channel)
        except RelayError as e:
            logger.warning(f"发送方接入被拒绝: {e.detail}")
            await registry.discard_if_idle(code)
            await channel.reject(e)
            return

        await pump(relay, channel)

    @app.websocket("/receive/{code}")
    async def receive(websocket: WebSocket, code: str):
        """接收方接入: 第一条消息为发送方提供的元数据"""
        registry: SessionRegistry = websocket.app.state.registry
        relay = registry.lookup(code)
        channel = WebSocketChannel(websocket)

        try:
            await relay.connect_receiver(channel)
        except RelayError as e:
            logger.warning(f"接收方接入口令 {code} 被拒绝: {e.detail}")
            await registry.discard_if_idle(code)
            await channel.reject(e)
            return

        await pump(relay, channel)

    return app


async def pump(relay: Relay, channel: WebSocketChannel) -> None:
    """把通道收到的每一帧按顺序投递给中继，直到对端断开"""
    try:
        async for frame in channel.iter_frames():
            await relay.deliver(channel, frame)
    except Exception as e:
        logger.error(f"会话 {relay.code} 读取消息时出错: {e}")
        channel.mark_closed()
    finally:
        relay.disconnected(channel)


app = create_app()
