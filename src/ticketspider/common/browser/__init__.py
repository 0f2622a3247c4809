"""浏览器模块"""

from .contexts import bounded_wait, child_frames, search_order
from .resolver import SelectorResolver
from .session import BrowserSession, create_browser_session, shutdown_browser_engine

__all__ = [
    "BrowserSession",
    "create_browser_session",
    "shutdown_browser_engine",
    "SelectorResolver",
    "bounded_wait",
    "child_frames",
    "search_order",
]
