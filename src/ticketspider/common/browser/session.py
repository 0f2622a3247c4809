"""浏览器会话管理"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ..config import config
from ..exceptions import PageLoadError
from ..logger import get_logger
from .engine import BrowserEngine, get_browser_engine, shutdown_browser_engine

logger = get_logger(__name__)


class BrowserSession:
    """浏览器会话管理器

    持有一个贯穿整次运行的主页面；外链截图等临时页面通过 secondary_page()
    单独创建，用完即关。
    """

    def __init__(
        self,
        headless: bool | None = None,
        viewport_width: int | None = None,
        viewport_height: int | None = None,
        slow_mo: int | None = None,
    ):
        self.headless = headless if headless is not None else config.browser.headless
        self.viewport_width = viewport_width or config.browser.viewport_width
        self.viewport_height = viewport_height or config.browser.viewport_height
        self.slow_mo = slow_mo if slow_mo is not None else config.browser.slow_mo

        self._engine: BrowserEngine | None = None
        self._page: Page | None = None
        self._page_context = None

    @property
    def viewport(self) -> dict[str, int]:
        return {"width": self.viewport_width, "height": self.viewport_height}

    async def start(self) -> Page:
        """启动浏览器并返回主 Page"""
        self._engine = await get_browser_engine(
            default_headless=self.headless,
            default_timeout=config.browser.timeout_ms,
            slow_mo=self.slow_mo,
        )

        self._page_context = self._engine.page(
            headless=self.headless,
            viewport=self.viewport,
            timeout=config.browser.timeout_ms,
        )
        self._page = await self._page_context.__aenter__()
        return self._page

    async def stop(self) -> None:
        """关闭浏览器会话"""
        if self._page_context:
            try:
                await self._page_context.__aexit__(None, None, None)
            except PlaywrightError as e:
                logger.debug(f"[Session] 关闭页面失败（忽略）: {e}")

        self._page = None
        self._page_context = None

    @property
    def page(self) -> Page | None:
        return self._page

    async def navigate(self, url: str, wait_until: str = "networkidle") -> None:
        """导航到指定 URL"""
        if not self._page:
            raise RuntimeError("Browser session not started")
        try:
            await self._page.goto(url, wait_until=wait_until)
        except PlaywrightError as e:
            raise PageLoadError(url, str(e)) from e

    async def apply_viewport(self) -> None:
        """同意页跳转后重新设置视口"""
        if not self._page:
            return
        try:
            await self._page.set_viewport_size(self.viewport)
        except PlaywrightError as e:
            logger.debug(f"[Session] 设置视口失败（忽略）: {e}")

    @asynccontextmanager
    async def secondary_page(self) -> AsyncGenerator[Page, None]:
        """在主页面所在的 context 中打开一个临时页面，退出时关闭"""
        if not self._page:
            raise RuntimeError("Browser session not started")
        page = await self._page.context.new_page()
        try:
            await page.set_viewport_size(self.viewport)
            yield page
        finally:
            await page.close()


@asynccontextmanager
async def create_browser_session(
    headless: bool | None = None,
    viewport_width: int | None = None,
    viewport_height: int | None = None,
    close_engine: bool = True,
) -> AsyncGenerator[BrowserSession, None]:
    """创建浏览器会话的上下文管理器"""
    session = BrowserSession(
        headless=headless,
        viewport_width=viewport_width,
        viewport_height=viewport_height,
    )
    try:
        await session.start()
        yield session
    finally:
        await session.stop()
        if close_engine:
            # 单次运行结束后关闭全局引擎，避免事件循环结束时残留连接
            try:
                await shutdown_browser_engine()
            except PlaywrightError as e:
                logger.debug(f"[Session] 关闭浏览器引擎失败（忽略）: {e}")
