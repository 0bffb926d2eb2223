#!/usr/bin/env python
"""
运行中继服务器的脚本
"""
import sys
import argparse
import logging

import uvicorn
from dotenv import load_dotenv

logger = logging.getLogger(__name__)


def main(argv=None):
    """
    运行中继服务器主函数
    """
    # 配置环境，必须在加载配置之前
    load_dotenv()

    from ystp.utils.config import get_settings
    from ystp.utils.logging_config import setup_logging

    settings = get_settings()

    # 解析命令行参数
    parser = argparse.ArgumentParser(description="运行YSTP中继服务器")
    parser.add_argument("--host", type=str, default=settings.HOST, help="主机地址")
    parser.add_argument("--port", type=int, default=settings.PORT, help="端口号")
    parser.add_argument("--reload", action="store_true", help="启用自动重载")
    parser.add_argument("--debug", action="store_true", help="启用调试模式")
    args = parser.parse_args(argv)

    setup_logging(
        log_level="debug" if args.debug else settings.LOG_LEVEL,
        log_to_file=settings.LOG_TO_FILE,
        log_dir=settings.LOG_DIR,
    )

    if settings.STORAGE_TYPE == "memory":
        logger.warning("⚠️ 使用内存存储，进程重启后会话记录将丢失")

    # 显示服务器信息
    logger.info(f"🚀 启动YSTP中继服务器")
    logger.info(f"📡 服务地址: ws://{args.host}:{args.port}")
    logger.info(f"💾 存储类型: {settings.STORAGE_TYPE}")
    logger.info(f"🔄 自动重载: {'启用' if args.reload else '禁用'}")
    logger.info(f"🐞 调试模式: {'启用' if args.debug else '禁用'}")

    # 启动服务器
    uvicorn.run(
        "ystp.api.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="debug" if args.debug else "info",
        log_config=None,
    )


def run():
    """命令行入口"""
    try:
        main()
    except KeyboardInterrupt:
        logger.info("👋 服务器已停止")
    except Exception as e:
        logger.critical(f"💥 服务器启动失败: {e}")
        sys.exit(1)


if __name__ == "__main__":
    run()
