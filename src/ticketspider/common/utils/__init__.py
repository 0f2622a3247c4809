"""通用工具模块"""

from .delay import get_random_delay, settle

__all__ = [
    "get_random_delay",
    "settle",
]
