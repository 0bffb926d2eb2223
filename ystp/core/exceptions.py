"""
异常定义 - 中继服务的错误分类

握手阶段的错误会映射为HTTP状态码返回给客户端；
协议违规和传输错误只在中继内部处理，不会传递给任何一方。
"""

from typing import Optional


class RelayError(Exception):
    """中继错误基类"""

    status_code: int = 500
    detail: str = "Internal relay error."

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.detail
        super().__init__(self.detail)


class UpgradeRequired(RelayError):
    """请求缺少WebSocket升级头"""

    status_code = 426
    detail = "Expected websocket upgrade"


class SessionConflict(RelayError):
    """会话已经创建过，无法再次作为发送方接入"""

    status_code = 423
    detail = "Session has already been created."


class SessionNotReady(RelayError):
    """会话尚未等待接收方，稍后可以重试"""

    status_code = 423
    detail = "Session is not ready, try again later."


class ProtocolViolation(RelayError):
    """消息的格式或内容不符合当前阶段的预期"""

    status_code = 400
    detail = "Unexpected message for the current phase."


class TransportError(RelayError):
    """通道层面的发送或关闭失败"""

    status_code = 500
    detail = "Transport channel failure."
