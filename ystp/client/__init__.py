"""
客户端模块 - 基于websockets的发送方和接收方实现
"""

from .transfer import send_file, receive_file, CHUNK_SIZE

__all__ = ["send_file", "receive_file", "CHUNK_SIZE"]
