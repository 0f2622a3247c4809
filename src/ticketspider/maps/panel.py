"""门票面板导航 - 选择 Tickets 标签页，再选择 Admission 子标签页"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError

from ..common.browser.contexts import search_order
from ..common.browser.resolver import SelectorResolver
from ..common.config import config
from ..common.constants import SCREENSHOT_PREFIX
from ..common.logger import get_logger
from ..common.validators import sanitize_place_name
from .selectors import (
    ADMISSION_TAB,
    ADMISSION_TAB_TEXT,
    TAB_CONTROL,
    TAB_TEXT_NODE,
    TICKETS_TAB,
)

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = get_logger(__name__)


class PanelNavigator:
    """门票面板导航器

    两个标签页都遵循同样的形状：顶层有界等待，失败后以更短的等待逐个扫描
    子 frame。Admission 另有按文本匹配的兜底，因为属性选择器随语言和版本变化。
    """

    def __init__(
        self,
        resolver: SelectorResolver | None = None,
        admission_timeout_ms: int | None = None,
        screenshot_dir: str | Path | None = None,
    ):
        self.resolver = resolver or SelectorResolver(
            timeout_ms=config.maps.element_timeout_ms,
            frame_timeout_ms=config.maps.frame_timeout_ms,
        )
        self.admission_timeout_ms = admission_timeout_ms or config.maps.admission_timeout_ms
        self.screenshot_dir = Path(screenshot_dir or config.run.screenshot_dir)

    async def select_tickets_tab(self, page: "Page") -> bool:
        """点击 Tickets 标签页"""
        resolved = await self.resolver.locate(page, TICKETS_TAB)
        if resolved is None:
            logger.warning("[Panel] 未找到 Tickets 标签页")
            return False
        try:
            await resolved.element.click()
        except PlaywrightError as e:
            logger.warning(f"[Panel] 点击 Tickets 标签页失败: {e}")
            return False
        logger.info("[Panel] 已进入 Tickets 标签页")
        return True

    async def select_admission_tab(self, page: "Page") -> bool:
        """点击 Admission 子标签页（属性选择器优先，文本兜底）"""
        resolved = await self.resolver.locate(
            page, ADMISSION_TAB, timeout_ms=self.admission_timeout_ms
        )
        if resolved is not None:
            try:
                await resolved.element.click()
                logger.info("[Panel] 已进入 Admission 标签页")
                return True
            except PlaywrightError as e:
                logger.debug(f"[Panel] 点击 Admission 属性匹配失败，改用文本匹配: {e}")

        for context in search_order(page):
            if await self._click_tab_by_text(context, ADMISSION_TAB_TEXT):
                logger.info("[Panel] 已通过文本匹配进入 Admission 标签页")
                return True

        logger.warning("[Panel] 未找到 Admission 标签页")
        return False

    async def _click_tab_by_text(self, context, label: str) -> bool:
        """检查每个 tab 的子 div 文本，点击第一个包含 label 的 tab"""
        try:
            tabs = await context.query_selector_all(TAB_CONTROL)
        except PlaywrightError:
            return False

        for tab in tabs:
            try:
                for node in await tab.query_selector_all(TAB_TEXT_NODE):
                    text = await node.inner_text()
                    if text and label in text.strip():
                        await tab.click()
                        return True
            except PlaywrightError:
                # tab 在检查期间被重新渲染，跳过
                continue
        return False

    def screenshot_path(self, place: str) -> Path:
        return self.screenshot_dir / f"{SCREENSHOT_PREFIX}-{sanitize_place_name(place)}.png"

    async def capture_screenshot(self, page: "Page", place: str) -> str | None:
        """为到达的门票面板截图，作为审计留档"""
        path = self.screenshot_path(place)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await page.screenshot(path=str(path))
        except (PlaywrightError, OSError) as e:
            logger.warning(f"[Panel] 截图失败 {place}: {e}")
            return None
        logger.info(f"[Panel] 截图已保存: {path}")
        return str(path)
