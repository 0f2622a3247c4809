"""
异步浏览器引擎

提供全局唯一的 Browser 实例管理，集成 playwright_stealth 反检测补丁。
"""

import asyncio
from contextlib import asynccontextmanager
from typing import Optional, AsyncGenerator, Dict, List, Literal, Any
from playwright.async_api import async_playwright, Browser, Playwright, Page
from playwright_stealth import Stealth
from loguru import logger


class BrowserEngine:
    """
    异步浏览器引擎：
    1. 管理全局唯一的 Browser 实例。
    2. 每次 page() 创建独立的 BrowserContext，退出时一并关闭。
    """

    def __init__(
        self,
        default_headless: bool = True,
        default_viewport: Optional[Dict[str, int]] = None,
        default_user_agent: str = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/128.0.0.0 Safari/537.36",
        default_launch_args: Optional[List[str]] = None,
        default_browser_type: Literal["chromium", "firefox", "webkit"] = "chromium",
        max_retries: int = 2,
        default_timeout: int = 30000,
        slow_mo: int = 0,
    ):
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._stealth_context: Optional[Any] = None
        self._current_headless: bool = default_headless
        self._lock = asyncio.Lock()
        self._owner_loop: Optional[asyncio.AbstractEventLoop] = None

        self.default_headless = default_headless
        self.default_viewport = default_viewport or {"width": 1080, "height": 1024}
        self.default_user_agent = default_user_agent
        self.default_browser_type = default_browser_type
        self.max_retries = max_retries
        self.default_timeout = default_timeout
        self.slow_mo = slow_mo

        self.default_launch_args = default_launch_args or [
            "--no-sandbox",
            "--disable-setuid-sandbox",
            "--disable-blink-features=AutomationControlled",
        ]

    async def _ensure_browser(self, headless: bool):
        """
        确保全局 Browser 实例存活且可用

        以下情况需要（重新）启动浏览器：
        1. Event Loop 发生变化
        2. 浏览器实例不存在或已断开
        3. headless 模式需要切换
        """
        current_loop = asyncio.get_running_loop()

        async with self._lock:
            should_restart = False

            if self._browser and self._owner_loop and self._owner_loop != current_loop:
                logger.warning("Event Loop changed. Restarting browser...")
                should_restart = True
            elif not self._browser or not self._browser.is_connected():
                should_restart = True
            elif self._current_headless != headless:
                logger.info(f"Switching Headless Mode: {headless}")
                should_restart = True

            if not should_restart:
                return

            # 清理旧的浏览器实例（仅在同一 Loop 中才能安全关闭）
            if self._browser and self._owner_loop == current_loop:
                try:
                    await self._browser.close()
                except Exception as e:
                    logger.debug(f"[Engine] 关闭旧浏览器失败（忽略）: {e}")

            # 使用 Stealth 包装，绕过站点的自动化检测
            if not self._playwright:
                self._stealth_context = Stealth().use_async(async_playwright())
                self._playwright = await self._stealth_context.__aenter__()

            for attempt in range(self.max_retries + 1):
                try:
                    launcher = getattr(self._playwright, self.default_browser_type)
                    self._browser = await launcher.launch(
                        headless=headless,
                        slow_mo=self.slow_mo,
                        args=self.default_launch_args,
                    )
                    self._current_headless = headless
                    self._owner_loop = current_loop
                    logger.debug(f"[Engine] 浏览器已启动 (headless={headless}, attempt={attempt + 1})")
                    break
                except Exception as e:
                    if attempt == self.max_retries:
                        raise e
                    logger.warning(f"[Engine] 浏览器启动失败，重试中: {e}")

    @asynccontextmanager
    async def page(
        self,
        headless: Optional[bool] = None,
        viewport: Optional[Dict[str, int]] = None,
        timeout: Optional[int] = None,
        **context_kwargs,
    ) -> AsyncGenerator[Page, None]:
        """
        获取一个 Page 对象。

        Args:
            headless: 是否无头模式
            viewport: 视口大小，如 {"width": 1080, "height": 1024}
            timeout: 页面默认超时（毫秒）
            **context_kwargs: 传递给 browser.new_context 的其他参数
        """
        use_headless = headless if headless is not None else self.default_headless
        await self._ensure_browser(use_headless)

        options = {
            "viewport": viewport or self.default_viewport,
            "user_agent": self.default_user_agent,
            "ignore_https_errors": True,
            **context_kwargs,
        }

        context = await self._browser.new_context(**options)
        page = await context.new_page()
        page.set_default_timeout(timeout or self.default_timeout)

        try:
            yield page
        finally:
            await page.close()
            await context.close()

    async def close(self):
        """彻底关闭引擎"""
        current_loop = asyncio.get_running_loop()
        if self._browser and self._owner_loop == current_loop:
            await self._browser.close()
        if self._stealth_context and self._owner_loop == current_loop:
            await self._stealth_context.__aexit__(None, None, None)
        self._browser = None
        self._playwright = None
        self._stealth_context = None


# ========== 全局单例管理 ==========
_browser_engine: Optional[BrowserEngine] = None
_engine_lock = asyncio.Lock()


async def get_browser_engine(**config) -> BrowserEngine:
    """
    获取全局 BrowserEngine 单例。

    首次调用时可传入配置参数初始化引擎，后续调用忽略参数返回已有实例。
    """
    global _browser_engine

    async with _engine_lock:
        if _browser_engine is None:
            _browser_engine = BrowserEngine(**config)
        return _browser_engine


async def shutdown_browser_engine() -> None:
    """关闭并清理全局引擎"""
    global _browser_engine

    async with _engine_lock:
        if _browser_engine is not None:
            await _browser_engine.close()
            _browser_engine = None
