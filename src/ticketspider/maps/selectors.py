"""地图页面选择器候选（按优先级排列）

页面结构经常变化，这里把每一步的兜底顺序写成数据，靠前者优先。
"""

from __future__ import annotations

from ..common.types import Query, SelectorCandidate

# 同意页：精确 aria-label -> aria-label 子串 -> 内部 jsname -> 按钮文本
CONSENT_ACCEPT = SelectorCandidate(
    name="consent_accept",
    queries=(
        Query.css('button[aria-label="Accept all"]'),
        Query.css('button[aria-label*="Accept"]'),
        Query.css('button[jsname="b3VHJd"]'),
        Query.css('button[jsname*="b3"]'),
        Query.text_contains(("Accept all", "Accept"), tag="button"),
    ),
)

SEARCH_INPUT = SelectorCandidate(
    name="search_input",
    queries=(
        Query.css("#searchboxinput"),
        Query.css('input[aria-label*="Search"]'),
    ),
)

TICKETS_TAB = SelectorCandidate(
    name="tickets_tab",
    queries=(Query.css('button[role="tab"][aria-label*="Tickets"]'),),
)

# data-tab-index 与语言无关，但随版本变化；文本兜底见 ADMISSION_TAB_TEXT
ADMISSION_TAB = SelectorCandidate(
    name="admission_tab",
    queries=(
        Query.css('button[role="tab"][data-tab-index="0"][jsaction*="pane.tabs.tabClick"]'),
    ),
)

TAB_CONTROL = 'button[role="tab"]'
TAB_TEXT_NODE = "div"
ADMISSION_TAB_TEXT = "Admission"

ANCHOR = "a[href]"
