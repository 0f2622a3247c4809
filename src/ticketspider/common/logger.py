"""统一日志系统

提供项目统一的日志配置，支持 Rich 格式化输出。
"""

from __future__ import annotations

import logging
import os

from rich.console import Console
from rich.logging import RichHandler


# 全局控制台实例
console = Console()

# 日志级别映射
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level() -> int:
    """从环境变量获取日志级别

    Returns:
        日志级别常量
    """
    level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    return LOG_LEVEL_MAP.get(level_str, logging.INFO)


def get_logger(name: str) -> logging.Logger:
    """获取统一配置的日志器

    所有模块应使用此函数获取日志器，以确保统一的格式和输出。

    Args:
        name: 日志器名称，通常使用 __name__

    Returns:
        配置好的日志器实例

    Example:
        >>> from ticketspider.common.logger import get_logger
        >>> logger = get_logger(__name__)
        >>> logger.info("[Run] 开始处理")
    """
    logger = logging.getLogger(name)

    # 避免重复配置
    if logger.handlers:
        return logger

    log_level = get_log_level()
    logger.setLevel(log_level)

    rich_handler = RichHandler(
        console=console,
        show_time=True,
        show_path=False,
        rich_tracebacks=True,
        tracebacks_show_locals=os.getenv("LOG_SHOW_LOCALS", "false").lower() == "true",
        markup=False,
    )
    rich_handler.setLevel(log_level)
    rich_handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))

    logger.addHandler(rich_handler)

    # 阻止日志传播到父级
    logger.propagate = False

    return logger


def setup_file_logging(
    logger: logging.Logger,
    log_file: str,
    level: int = logging.DEBUG,
) -> None:
    """为日志器添加文件输出

    Args:
        logger: 日志器实例
        log_file: 日志文件路径
        level: 文件日志级别
    """
    file_handler = logging.FileHandler(log_file, encoding="utf-8")
    file_handler.setLevel(level)

    formatter = logging.Formatter(
        "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(formatter)

    logger.addHandler(file_handler)


def get_run_logger() -> logging.Logger:
    """获取批量运行日志器"""
    return get_logger("ticketspider.run")
