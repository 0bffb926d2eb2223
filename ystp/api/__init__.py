"""
HTTP/WebSocket接口 - 发送方与接收方的握手入口
"""
