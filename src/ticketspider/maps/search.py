"""地点搜索模块 - 在地图搜索框中输入地点并提交"""

from __future__ import annotations

from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError

from ..common.browser.contexts import bounded_wait
from ..common.browser.resolver import SelectorResolver
from ..common.config import config
from ..common.logger import get_logger
from .selectors import SEARCH_INPUT

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Page

logger = get_logger(__name__)


class PlaceSearchController:
    """地点搜索控制器"""

    def __init__(
        self,
        resolver: SelectorResolver | None = None,
        typing_delay_ms: int | None = None,
        result_selector: str | None = None,
        timeout_ms: int | None = None,
    ):
        self.resolver = resolver or SelectorResolver(
            timeout_ms=config.maps.element_timeout_ms,
            frame_timeout_ms=config.maps.frame_timeout_ms,
        )
        self.typing_delay_ms = (
            config.maps.typing_delay_ms if typing_delay_ms is None else typing_delay_ms
        )
        self.result_selector = result_selector or config.maps.result_selector
        self.timeout_ms = timeout_ms or config.maps.search_timeout_ms

    async def search(
        self,
        page: "Page",
        place: str,
        result_selector: str | None = None,
        timeout_ms: int | None = None,
    ) -> bool:
        """
        搜索地点。

        输入框可能位于 iframe 中；回车通过 page.keyboard 发出，焦点所在的
        frame 同样能收到。

        Args:
            page: 主页面
            place: 地点名称
            result_selector: 结果面板出现的标志选择器
            timeout_ms: 等待结果面板的时间

        Returns:
            是否成功提交了搜索（结果面板未出现仍视为成功）
        """
        if page is None or not place:
            return False

        resolved = await self.resolver.locate(page, SEARCH_INPUT)
        if resolved is None:
            logger.warning(f"[Search] 未找到搜索框: {place}")
            return False

        try:
            await self._select_existing(resolved.element)
            await resolved.element.type(str(place), delay=self.typing_delay_ms)
            await page.keyboard.press("Enter")
        except PlaywrightError as e:
            logger.warning(f"[Search] 输入地点失败 {place}: {e}")
            return False

        selector = result_selector or self.result_selector
        try:
            outcome = await bounded_wait(
                page.wait_for_selector(selector, timeout=timeout_ms or self.timeout_ms),
                label=selector,
            )
        except PlaywrightError as e:
            logger.debug(f"[Search] 等待结果面板出错（忽略）: {e}")
        else:
            if outcome.timed_out:
                logger.debug(f"[Search] 结果面板 {selector} 未出现（忽略）")

        logger.info(f"[Search] 已提交搜索: {place}")
        return True

    async def _select_existing(self, element: "ElementHandle") -> None:
        """三击选中已有内容，不支持时退化为单击"""
        try:
            await element.click(click_count=3)
        except PlaywrightError:
            await element.click()
