"""Common模块 - 公共工具和基础设施

该模块提供：
- 全局配置管理
- 浏览器会话与选择器解析
- 类型定义
- 日志系统
- 异常类
- 常量定义
- 输入验证
"""

from .config import config, Config
from .logger import get_logger, console
from .exceptions import (
    TicketSpiderError,
    BrowserError,
    PageLoadError,
    ValidationError,
    ConfigError,
    ExportError,
    NotificationError,
)
from .constants import (
    DEFAULT_LINK_LIMIT,
    DEFAULT_MAPS_URL,
    NOT_FOUND_PRICE,
)

__all__ = [
    # 配置
    "config",
    "Config",
    # 日志
    "get_logger",
    "console",
    # 异常
    "TicketSpiderError",
    "BrowserError",
    "PageLoadError",
    "ValidationError",
    "ConfigError",
    "ExportError",
    "NotificationError",
    # 常量
    "DEFAULT_LINK_LIMIT",
    "DEFAULT_MAPS_URL",
    "NOT_FOUND_PRICE",
]
