"""链接收集模块 - 从结果面板收集外部售票链接"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from playwright.async_api import Error as PlaywrightError

from ..common.browser.contexts import child_frames
from ..common.config import config
from ..common.logger import get_logger
from ..common.types import AdmissionLink
from ..common.validators import is_http_url
from .selectors import ANCHOR

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = get_logger(__name__)

# a.href 返回浏览器解析后的绝对地址
HREF_SCRIPT = "els => els.map(a => a.href)"


class LinkHarvester:
    """链接收集器

    收集顺序：
    1. 顶层文档中结果面板内的链接
    2. 顶层文档中的全部链接
    3. 各子 frame 中的全部链接（合并后去重）

    每一层都先过滤掉非 http(s) 地址再判断是否为空，最后截断到 limit。
    """

    def __init__(self, panel_selector: str | None = None, limit: int | None = None):
        self.panel_selector = panel_selector or config.maps.result_selector
        self.limit = limit or config.run.link_limit

    async def harvest(self, page: "Page", limit: int | None = None) -> list[AdmissionLink]:
        """
        收集链接。

        Args:
            page: 主页面
            limit: 最多返回的链接数

        Returns:
            去重后的绝对链接（保持文档顺序），长度不超过 limit
        """
        limit = self.limit if limit is None else limit
        if limit <= 0:
            return []

        # :is() 让逗号分隔的面板选择器整体作为祖先范围
        panel_anchors = f":is({self.panel_selector}) {ANCHOR}"
        links = self._usable(await self._collect(page, panel_anchors), page)
        tier = "面板"

        if not links:
            links = self._usable(await self._collect(page, ANCHOR), page)
            tier = "整页"

        if not links:
            tier = "frame"
            seen: set[str] = set()
            for frame in child_frames(page):
                for link in self._usable(await self._collect(frame, ANCHOR), frame):
                    if link.url not in seen:
                        seen.add(link.url)
                        links.append(link)

        logger.info(f"[Harvest] {tier} 层收集到 {len(links)} 个链接，保留 {min(len(links), limit)} 个")
        return links[:limit]

    async def _collect(self, context, selector: str) -> list[str]:
        try:
            hrefs = await context.eval_on_selector_all(selector, HREF_SCRIPT)
        except PlaywrightError as e:
            logger.debug(f"[Harvest] 读取 {selector} 失败（忽略）: {e}")
            return []
        return [h for h in hrefs or [] if isinstance(h, str) and h]

    @staticmethod
    def _usable(hrefs: Iterable[str], source) -> list[AdmissionLink]:
        """过滤非 http(s) 地址并按首次出现去重"""
        seen: set[str] = set()
        links: list[AdmissionLink] = []
        for href in hrefs:
            if href in seen or not is_http_url(href):
                continue
            seen.add(href)
            links.append(AdmissionLink(url=href, source=source))
        return links
