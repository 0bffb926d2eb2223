"""
YSTP 中继服务 - 基于口令的点对点文件传输中继

发送方与接收方只需共享一个简短的口令，即可通过中继服务建立一条
二进制传输通道。中继只负责会话配对、元数据交换、接收方确认以及
按顺序转发数据，不会持久化任何传输内容。
"""

__version__ = "0.1.0"
