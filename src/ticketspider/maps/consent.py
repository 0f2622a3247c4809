"""
Cookie 同意页处理器

访问地图时可能被重定向到 consent.google.com。检测到后按候选顺序寻找
"Accept all" 按钮并点击；点击后页面不跳转不算错误。
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from loguru import logger
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

from ..common.browser.resolver import SelectorResolver
from ..common.config import config
from ..common.constants import CONSENT_URL_PATTERN
from ..common.types import WaitOutcome
from .selectors import CONSENT_ACCEPT

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Page


class ConsentDismisser:
    """同意页接管处理器"""

    def __init__(
        self,
        resolver: SelectorResolver | None = None,
        navigation_timeout_ms: int | None = None,
        url_pattern: str = CONSENT_URL_PATTERN,
    ):
        self.resolver = resolver or SelectorResolver(
            timeout_ms=config.maps.element_timeout_ms,
            frame_timeout_ms=config.maps.frame_timeout_ms,
        )
        self.navigation_timeout_ms = navigation_timeout_ms or config.maps.consent_timeout_ms
        self.url_pattern = url_pattern

    @property
    def name(self) -> str:
        return "同意页处理"

    def detect(self, page: "Page") -> bool:
        """仅当当前地址命中同意页特征时才处理"""
        if page is None:
            return False
        try:
            url = page.url
        except PlaywrightError:
            return False
        return isinstance(url, str) and self.url_pattern in url

    async def dismiss(self, page: "Page") -> bool:
        """
        关闭同意页。

        Returns:
            是否执行了点击
        """
        if not self.detect(page):
            return False

        logger.info(f"[Consent] 检测到同意页: {page.url}")
        resolved = await self.resolver.locate(page, CONSENT_ACCEPT)
        if resolved is None:
            logger.warning("[Consent] 未找到同意按钮，继续后续流程")
            return False

        try:
            outcome = await self._click_expecting_navigation(page, resolved.element)
        except PlaywrightError as e:
            logger.warning(f"[Consent] 点击同意按钮失败: {e}")
            return False

        if outcome.timed_out:
            logger.debug("[Consent] 点击后未发生导航（忽略）")
        logger.success(f"[Consent] 已点击同意按钮: {resolved.query.label}")
        return True

    async def _click_expecting_navigation(
        self, page: "Page", element: "ElementHandle"
    ) -> WaitOutcome[None]:
        """点击并同时等待导航，导航超时转换为 expired"""
        try:
            async with page.expect_navigation(
                wait_until="networkidle", timeout=self.navigation_timeout_ms
            ):
                await element.click()
        except PlaywrightTimeout as e:
            return WaitOutcome.expired(str(e))
        return WaitOutcome.settled()
