"""价格提取模块 - 在链接附近查找货币金额文本"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Iterable

from playwright.async_api import Error as PlaywrightError

from ..common.browser.contexts import child_frames
from ..common.constants import NOT_FOUND_PRICE
from ..common.logger import get_logger
from ..common.types import AdmissionLink

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = get_logger(__name__)

CURRENCY_SYMBOLS = "€$£¥₹"
CURRENCY_CODES = ("AED", "USD", "EUR", "GBP", "AUD", "CAD", "INR", "SAR", "JPY", "CHF")

# 货币符号或 ISO 代码 + 可选空白 + 数字（可含千分位/小数点）
PRICE_PATTERN = re.compile(
    rf"(?:[{re.escape(CURRENCY_SYMBOLS)}]|\b(?:{'|'.join(CURRENCY_CODES)}))\s*\d[\d.,]*"
)

# 找到 href 完全相同的链接，返回其后代文本（文档顺序）与自身文本
ANCHOR_TEXT_SCRIPT = """
(href) => {
    const anchor = Array.from(document.querySelectorAll('a[href]')).find(a => a.href === href);
    if (!anchor) return null;
    const descendants = [];
    for (const el of anchor.querySelectorAll('*')) {
        const text = el.innerText && el.innerText.trim();
        if (text) descendants.push(text);
    }
    return { descendants, text: (anchor.innerText || '').trim() };
}
"""


def match_price(text: str | None) -> str | None:
    """返回文本中第一个价格片段，去掉末尾多余的分隔符"""
    if not text:
        return None
    match = PRICE_PATTERN.search(text)
    if not match:
        return None
    return match.group(0).rstrip(".,").strip()


def first_price(texts: Iterable[str | None]) -> str | None:
    for text in texts:
        price = match_price(text)
        if price:
            return price
    return None


class PriceExtractor:
    """价格提取器

    先在发现链接的上下文中查找，找不到再遍历主页面的各子 frame。
    """

    async def extract_price(self, context, url: str) -> str | None:
        """
        在单个上下文中提取价格。

        Args:
            context: Page 或 Frame
            url: 链接的绝对地址（精确匹配，不做模糊匹配）

        Returns:
            价格文本，未找到返回 None
        """
        try:
            snapshot = await context.evaluate(ANCHOR_TEXT_SCRIPT, url)
        except PlaywrightError as e:
            logger.debug(f"[Price] 读取链接文本失败（忽略）: {e}")
            return None

        if not snapshot:
            return None

        price = first_price(snapshot.get("descendants") or [])
        if price:
            return price
        return match_price(snapshot.get("text"))

    async def price_for(self, page: "Page", link: AdmissionLink) -> str:
        """按 来源上下文 -> 各子 frame 的顺序提取，全部落空时返回 "Not found" """
        price = await self.extract_price(link.source, link.url)
        if price:
            return price

        for frame in child_frames(page):
            if frame is link.source:
                continue
            price = await self.extract_price(frame, link.url)
            if price:
                return price

        logger.debug(f"[Price] 未找到价格: {link.url}")
        return NOT_FOUND_PRICE
