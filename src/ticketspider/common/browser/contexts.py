"""文档上下文工具

顶层 Page 与其直接子 iframe 构成一个扁平的搜索顺序：先顶层，再按枚举
顺序逐个 frame。嵌套更深的 frame 不再递归。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Awaitable, TypeVar

from playwright.async_api import TimeoutError as PlaywrightTimeout

from ..types import WaitOutcome

if TYPE_CHECKING:
    from playwright.async_api import Frame, Page

T = TypeVar("T")


def child_frames(page: "Page") -> list["Frame"]:
    """返回页面的子 frame（不含主 frame），保持枚举顺序"""
    try:
        main = page.main_frame
        return [frame for frame in page.frames if frame is not main]
    except Exception:
        # 页面已关闭时 frames 不可用，按无 frame 处理
        return []


def search_order(page: "Page", include_frames: bool = True) -> list:
    """构建上下文搜索顺序：顶层优先，其后为各子 frame"""
    contexts: list = [page]
    if include_frames:
        contexts.extend(child_frames(page))
    return contexts


async def bounded_wait(awaitable: Awaitable[T], label: str = "") -> WaitOutcome[T]:
    """等待一个自带 timeout 的 Playwright 操作，超时转换为 expired 结果"""
    try:
        value = await awaitable
    except PlaywrightTimeout as e:
        return WaitOutcome.expired(f"{label}: {e}" if label else str(e))
    return WaitOutcome.settled(value)
