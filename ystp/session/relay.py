"""
中继状态机 - 单个会话的配对、确认和转发逻辑

阶段流转:
  1. (CREATED) 会话刚创建。发送方完成WebSocket握手后，中继把口令作为
     第一条消息发给发送方，进入 WAITING_METADATA。
  2. (WAITING_METADATA) 等待发送方发送文件元数据 {name, size}，
     保存后进入 WAITING_RECEIVER。
  3. (WAITING_RECEIVER) 等待接收方凭口令接入。接入后中继把元数据发给
     接收方，进入 WAITING_APPROVAL。
  4. (WAITING_APPROVAL) 等待接收方发送 LET_IT_RIP，转发给发送方后进入 TRANSFER。
  5. (TRANSFER) 发送方的所有消息按原样、按顺序转发给接收方，
     直到发送方发送 EOF，转发 EOF 后销毁会话。

每个 Relay 是一个单任务的actor: 所有事件(接入、消息、断开)进入同一个
邮箱，由同一个任务逐个处理，阶段和元数据只在处理事件时修改。
不符合当前阶段的消息会被丢弃，不向任何一方报错。
"""

import asyncio
import enum
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from ..core.channel import Channel, Frame
from ..core.exceptions import ProtocolViolation, RelayError, SessionConflict, SessionNotReady, TransportError
from .models.session import FileMetadata, Phase, SessionRecord
from .storage.base import StorageProvider

logger = logging.getLogger(__name__)

APPROVAL_SENTINEL = "LET_IT_RIP"
EOF_SENTINEL = "EOF"

# 邮箱中最多积压的数据帧数，超过后 deliver 会等待，由读取端向发送方施加背压
MAX_PENDING_FRAMES = 32


class Role(str, enum.Enum):
    """连接在会话中的角色"""
    SENDER = "sender"
    RECEIVER = "receiver"


class ClosurePolicy(str, enum.Enum):
    """连接断开时的处理策略"""
    ASYMMETRIC = "asymmetric"  # 发送方断开只释放发送方，接收方断开销毁整个会话
    UNIFORM = "uniform"        # 任意一方断开都销毁整个会话


class EventKind(str, enum.Enum):
    ACCEPT = "accept"
    MESSAGE = "message"
    CLOSED = "closed"


@dataclass
class RelayEvent:
    """邮箱中的事件"""
    kind: EventKind
    channel: Channel
    role: Optional[Role] = None
    frame: Optional[Frame] = None
    future: Optional[asyncio.Future] = None


def describe_frame(frame: Frame) -> str:
    """描述帧的类型和长度，不包含内容"""
    if isinstance(frame, bytes):
        return f"binary({len(frame)})"
    return f"text({len(frame)})"


class Relay:
    """
    单个会话的中继状态机

    持有会话阶段、最多一个发送方通道和一个接收方通道、可选的元数据，
    以及两个通道之间的转发逻辑。会话只会被销毁一次，销毁后进入终止状态:
    新的接入会被拒绝，新的消息会被丢弃。
    """

    def __init__(self, code: str,
                 storage: StorageProvider,
                 closure_policy: ClosurePolicy = ClosurePolicy.ASYMMETRIC,
                 on_destroyed: Optional[Callable[["Relay"], None]] = None,
                 max_pending: int = MAX_PENDING_FRAMES):
        """
        初始化中继

        Args:
            code: 会话口令
            storage: 会话记录存储
            closure_policy: 连接断开时的处理策略
            on_destroyed: 会话销毁后的回调，注册表用它移除会话
            max_pending: 邮箱中最多积压的数据帧数
        """
        self.code = code
        self.storage = storage
        self.closure_policy = ClosurePolicy(closure_policy)
        self.on_destroyed = on_destroyed

        self.record = SessionRecord(code=code)
        self.sender: Optional[Channel] = None
        self.receiver: Optional[Channel] = None

        if max_pending < 1:
            raise ValueError("max_pending must be a positive integer")
        self.max_pending = max_pending

        self._inbox: asyncio.Queue = asyncio.Queue()
        self._window = asyncio.Semaphore(max_pending)
        self._task: Optional[asyncio.Task] = None
        self._pending_accepts = 0
        self._stopping = False
        self._destroyed = False

    @property
    def phase(self) -> Phase:
        return self.record.phase

    @property
    def metadata(self) -> Optional[FileMetadata]:
        return self.record.metadata

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    @property
    def backlog(self) -> int:
        """邮箱中尚未处理的事件数"""
        return self._inbox.qsize()

    @property
    def idle(self) -> bool:
        """没有绑定任何通道，也没有等待处理的接入"""
        return self.sender is None and self.receiver is None and self._pending_accepts == 0

    def snapshot(self) -> Dict[str, Any]:
        """会话当前状态的只读快照"""
        return {
            "code": self.code,
            "phase": self.record.phase.name,
            "metadata": self.record.metadata.model_dump() if self.record.metadata else None,
            "sender": self.sender is not None,
            "receiver": self.receiver is not None,
            "destroyed": self._destroyed,
        }

    # ------------------------------------------------------------------
    # 对外接口: 由连接处理协程调用，全部通过邮箱交给actor任务处理
    # ------------------------------------------------------------------

    async def connect_sender(self, channel: Channel) -> None:
        """
        发送方接入

        Raises:
            SessionConflict: 会话已经不在 CREATED 阶段
        """
        await self._accept(Role.SENDER, channel)

    async def connect_receiver(self, channel: Channel) -> None:
        """
        接收方接入

        Raises:
            SessionNotReady: 会话不在 WAITING_RECEIVER 阶段
        """
        await self._accept(Role.RECEIVER, channel)

    async def deliver(self, channel: Channel, frame: Frame) -> None:
        """
        投递一条从通道收到的消息，不等待处理结果

        邮箱中积压的数据帧达到 max_pending 时等待actor处理，
        调用方因此暂停读取，背压传递到发送方的连接上。
        """
        if self._stopping:
            return
        await self._window.acquire()
        if self._stopping:
            self._window.release()
            return
        self._post(RelayEvent(EventKind.MESSAGE, channel, frame=frame))

    def disconnected(self, channel: Channel) -> None:
        """通知通道已被对端关闭"""
        self._post(RelayEvent(EventKind.CLOSED, channel))

    async def wait_idle(self) -> None:
        """等待邮箱中已投递的事件全部处理完毕"""
        await self._inbox.join()

    async def stop(self) -> None:
        """
        停止actor任务

        处理完已在邮箱中的事件后关闭仍然打开的通道，但保留持久化记录，
        以便进程重启后从最后记录的阶段恢复。
        """
        self._stopping = True
        if self._task is None or self._task.done():
            return
        self._inbox.put_nowait(None)
        await self._task

    # ------------------------------------------------------------------
    # 邮箱与actor任务
    # ------------------------------------------------------------------

    async def _accept(self, role: Role, channel: Channel) -> None:
        if self._stopping:
            raise self._rejection(role)

        future = asyncio.get_running_loop().create_future()
        self._pending_accepts += 1
        try:
            self._post(RelayEvent(EventKind.ACCEPT, channel, role=role, future=future))
            await future
        finally:
            self._pending_accepts -= 1

    def _post(self, event: RelayEvent) -> None:
        if self._stopping:
            logger.debug(f"会话 {self.code} 已停止，丢弃事件: {event.kind.value}")
            return
        if self._task is None:
            self._task = asyncio.create_task(self._run(), name=f"relay:{self.code}")
        self._inbox.put_nowait(event)

    async def _run(self) -> None:
        """actor主循环，逐个处理邮箱中的事件"""
        await self._restore()

        while True:
            event = await self._inbox.get()
            try:
                if event is None:
                    break
                await self._dispatch(event)
            except Exception as e:
                logger.exception(f"会话 {self.code} 处理事件 {event.kind.value} 时出错: {e}")
                if event.future is not None and not event.future.done():
                    event.future.set_exception(e)
            finally:
                self._done(event)
            if self._destroyed:
                break

        self._drain()
        if not self._destroyed:
            for channel in (self.receiver, self.sender):
                if channel is not None:
                    await channel.close(code=1001)
            logger.info(f"会话 {self.code} 已停止，阶段: {self.record.phase.name}")

    async def _restore(self) -> None:
        """从存储加载记录，进程重启后从最后记录的阶段继续"""
        record = await self.storage.load_record(self.code)
        if record is not None:
            self.record = record
            logger.info(f"已恢复会话 {self.code}，阶段: {record.phase.name}")

    def _drain(self) -> None:
        """会话终止后，拒绝邮箱中剩余的接入请求，丢弃其余事件"""
        while not self._inbox.empty():
            event = self._inbox.get_nowait()
            self._done(event)
            if event is None:
                continue
            if event.future is not None and not event.future.done():
                event.future.set_exception(self._rejection(event.role))

    def _done(self, event: Optional[RelayEvent]) -> None:
        if event is not None and event.kind == EventKind.MESSAGE:
            self._window.release()
        self._inbox.task_done()

    @staticmethod
    def _rejection(role: Optional[Role]) -> RelayError:
        if role == Role.SENDER:
            return SessionConflict()
        return SessionNotReady()

    async def _dispatch(self, event: RelayEvent) -> None:
        if event.kind == EventKind.ACCEPT:
            try:
                if event.role == Role.SENDER:
                    await self._accept_sender(event.channel)
                else:
                    await self._accept_receiver(event.channel)
            except (SessionConflict, SessionNotReady) as e:
                if not event.future.done():
                    event.future.set_exception(e)
                return
            if not event.future.done():
                event.future.set_result(None)
        elif event.kind == EventKind.MESSAGE:
            if event.channel is self.sender:
                await self._handle_sender_message(event.frame)
            elif event.channel is self.receiver:
                await self._handle_receiver_message(event.frame)
            else:
                logger.warning(f"会话 {self.code} 收到未绑定通道的消息，已丢弃")
        elif event.kind == EventKind.CLOSED:
            await self._handle_closed(event.channel)

    # ------------------------------------------------------------------
    # 状态迁移
    # ------------------------------------------------------------------

    async def _set_phase(self, phase: Phase) -> None:
        """推进阶段并同步持久化"""
        if phase < self.record.phase:
            raise ValueError(f"会话阶段不能回退: {self.record.phase.name} -> {phase.name}")
        self.record.phase = phase
        if not await self.storage.save_record(self.record):
            logger.error(f"会话 {self.code} 的阶段 {phase.name} 持久化失败，继续使用内存状态")

    async def _accept_sender(self, channel: Channel) -> None:
        if self.record.phase != Phase.CREATED or self.sender is not None:
            logger.warning(f"会话 {self.code} 拒绝发送方接入，当前阶段: {self.record.phase.name}")
            raise SessionConflict()

        await channel.accept()
        self.sender = channel
        await self._set_phase(Phase.WAITING_METADATA)
        await self._forward(self.sender, json.dumps({"code": self.code}, separators=(",", ":")))
        logger.info(f"会话 {self.code} 已创建，发送方已接入")

    async def _accept_receiver(self, channel: Channel) -> None:
        if self.record.phase != Phase.WAITING_RECEIVER or self.receiver is not None:
            logger.warning(f"会话 {self.code} 拒绝接收方接入，当前阶段: {self.record.phase.name}")
            raise SessionNotReady()

        await channel.accept()
        self.receiver = channel
        await self._set_phase(Phase.WAITING_APPROVAL)
        await self._forward(self.receiver, self.record.metadata.to_message())
        logger.info(f"会话 {self.code} 接收方已接入，等待确认")

    async def _handle_sender_message(self, frame: Frame) -> None:
        phase = self.record.phase
        try:
            if phase == Phase.WAITING_METADATA:
                metadata = FileMetadata.parse_message(frame)
                self.record.metadata = metadata
                await self._set_phase(Phase.WAITING_RECEIVER)
                logger.info(f"会话 {self.code} 已保存元数据: {metadata.name} ({metadata.size} 字节)")
            elif phase == Phase.TRANSFER:
                logger.debug(f"会话 {self.code} 转发 {describe_frame(frame)}")
                await self._forward(self.receiver, frame)
                if isinstance(frame, str) and frame == EOF_SENTINEL:
                    logger.info(f"会话 {self.code} 传输完成")
                    await self._shutdown()
            else:
                raise ProtocolViolation(f"发送方在 {phase.name} 阶段不应发送消息")
        except ProtocolViolation as e:
            logger.warning(f"会话 {self.code} 丢弃发送方的 {describe_frame(frame)}: {e.detail}")

    async def _handle_receiver_message(self, frame: Frame) -> None:
        phase = self.record.phase
        if phase == Phase.WAITING_APPROVAL and isinstance(frame, str) and frame == APPROVAL_SENTINEL:
            await self._set_phase(Phase.TRANSFER)
            await self._forward(self.sender, frame)
            logger.info(f"会话 {self.code} 接收方已确认，开始传输")
            return
        logger.warning(f"会话 {self.code} 丢弃接收方在 {phase.name} 阶段的 {describe_frame(frame)}")

    async def _handle_closed(self, channel: Channel) -> None:
        if self._destroyed:
            return
        if channel is self.receiver:
            logger.info(f"会话 {self.code} 接收方已断开，销毁会话")
            await self._shutdown()
        elif channel is self.sender:
            if self.closure_policy == ClosurePolicy.UNIFORM:
                logger.info(f"会话 {self.code} 发送方已断开，销毁会话")
                await self._shutdown()
            else:
                # 接收方可能仍在接收在途数据，只释放发送方
                logger.info(f"会话 {self.code} 发送方已断开，释放发送方")
                await channel.close()

    async def _forward(self, target: Optional[Channel], frame: Frame) -> bool:
        """
        向目标通道发送一帧，不等待对端确认

        Returns:
            bool: 是否发送成功
        """
        if target is None or target.closed:
            logger.warning(f"会话 {self.code} 的目标通道不存在或已关闭，丢弃 {describe_frame(frame)}")
            return False
        try:
            await target.send(frame)
            return True
        except TransportError as e:
            logger.warning(f"会话 {self.code} 发送失败，按断开处理: {e.detail}")
            await self._handle_closed(target)
            return False

    async def _shutdown(self) -> None:
        """销毁会话: 关闭两端通道并删除持久化记录，重复调用无效果"""
        if self._destroyed:
            return
        self._destroyed = True
        self._stopping = True

        for channel in (self.receiver, self.sender):
            if channel is not None:
                await channel.close()

        if not await self.storage.delete_record(self.code):
            logger.error(f"删除会话 {self.code} 的记录失败")

        logger.info(f"会话 {self.code} 已销毁")
        if self.on_destroyed is not None:
            self.on_destroyed(self)
