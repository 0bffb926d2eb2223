"""
日志配置模块 - 提供标准化的日志配置
"""
import sys
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

import colorlog

# 日志级别映射
LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL
}

# 默认日志格式
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
CONSOLE_FORMAT = "%(log_color)s%(asctime)s [%(levelname)s] %(name)s: %(message)s"

LOG_COLORS = {
    'DEBUG': 'cyan',
    'INFO': 'green',
    'WARNING': 'yellow',
    'ERROR': 'red',
    'CRITICAL': 'red,bg_white',
}


# 确保日志目录存在
def ensure_log_dir(log_dir='logs'):
    """确保日志目录存在"""
    path = Path(log_dir)
    if not path.exists():
        path.mkdir(parents=True)
    return path


def setup_logging(app_name='ystp',
                  log_level='info',
                  log_to_console=True,
                  log_to_file=False,
                  log_dir='logs',
                  max_bytes=10_485_760,  # 10MB
                  backup_count=5):
    """
    设置日志配置

    Args:
        app_name: 应用名称
        log_level: 日志级别
        log_to_console: 是否输出到控制台(彩色)
        log_to_file: 是否输出到文件
        log_dir: 日志目录
        max_bytes: 每个日志文件最大字节数
        backup_count: 保留的日志文件数量
    """
    if log_to_file:
        ensure_log_dir(log_dir)

    root_logger = logging.getLogger()

    # 清除现有处理器
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    level = LOG_LEVELS.get(log_level.lower(), logging.INFO)
    root_logger.setLevel(level)

    if log_to_console:
        console_handler = colorlog.StreamHandler(sys.stdout)
        console_handler.setFormatter(colorlog.ColoredFormatter(
            CONSOLE_FORMAT,
            datefmt='%Y-%m-%d %H:%M:%S',
            log_colors=LOG_COLORS
        ))
        root_logger.addHandler(console_handler)

    if log_to_file:
        formatter = logging.Formatter(DEFAULT_FORMAT)

        # 常规日志
        log_file = Path(log_dir) / f"{app_name}.log"
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)

        # 错误日志
        error_log_file = Path(log_dir) / f"{app_name}_error.log"
        error_handler = RotatingFileHandler(
            error_log_file,
            maxBytes=max_bytes,
            backupCount=backup_count
        )
        error_handler.setFormatter(formatter)
        error_handler.setLevel(logging.ERROR)
        root_logger.addHandler(error_handler)

    # 设置第三方库的日志级别
    logging.getLogger('websockets').setLevel(logging.WARNING)
    logging.getLogger('asyncio').setLevel(logging.WARNING)

    root_logger.info(f"日志系统初始化完成，级别: {logging.getLevelName(level)}")

