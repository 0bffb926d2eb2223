"""
命令行客户端

用法:
  ystp send <file> [--host HOST] [--port PORT] [--protocol ws|wss]
  ystp receive <code> [--host HOST] [--port PORT] [--protocol ws|wss] [--output DIR]
"""
import sys
import asyncio
import argparse

from websockets.exceptions import WebSocketException

from ystp.client import receive_file, send_file
from ystp.core.exceptions import RelayError
from ystp.utils.logging_config import setup_logging

DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8787


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ystp", description="通过YSTP中继发送和接收文件")
    parser.add_argument("--debug", action="store_true", help="输出调试日志")
    subparsers = parser.add_subparsers(dest="command", required=True)

    def add_server_options(sub):
        sub.add_argument("--host", default=DEFAULT_HOST, help=f"服务器地址 (默认: {DEFAULT_HOST})")
        sub.add_argument("--port", type=int, default=DEFAULT_PORT, help=f"服务器端口 (默认: {DEFAULT_PORT})")
        sub.add_argument("--protocol", choices=["ws", "wss"], default="ws", help="WebSocket协议 (默认: ws)")

    send_parser = subparsers.add_parser("send", help="发送文件")
    send_parser.add_argument("file", help="要发送的文件")
    add_server_options(send_parser)

    receive_parser = subparsers.add_parser("receive", help="接收文件")
    receive_parser.add_argument("code", help="发送方提供的口令")
    receive_parser.add_argument("--output", default=".", help="保存目录 (默认: 当前目录)")
    add_server_options(receive_parser)

    return parser


def base_url(args) -> str:
    return f"{args.protocol}://{args.host}:{args.port}"


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(log_level="debug" if args.debug else "warning")

    try:
        if args.command == "send":
            def show_code(code):
                print(f"\n请把口令告诉接收方:\n  {code}\n", flush=True)

            asyncio.run(send_file(args.file, base_url(args), on_code=show_code))
            print("✓ 传输完成")
        else:
            def show_metadata(metadata):
                print(f"正在接收: {metadata.name} ({metadata.size} 字节)", flush=True)

            path = asyncio.run(receive_file(
                args.code, base_url(args), output_dir=args.output, on_metadata=show_metadata
            ))
            print(f"✓ 已保存到 {path}")
    except RelayError as e:
        print(f"✗ 中继拒绝请求: {e.detail}", file=sys.stderr)
        return 1
    except (OSError, ValueError, WebSocketException) as e:
        print(f"✗ 错误: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
