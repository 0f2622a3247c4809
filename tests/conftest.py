"""pytest 全局配置和 fixtures

提供模拟 Playwright Page / Frame / ElementHandle 的脚本化替身，
以及关闭了所有等待时间的运行配置。
"""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Callable

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeout

# 添加项目路径
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ticketspider.common.config import MailConfig, RunConfig  # noqa: E402
from ticketspider.common.browser.resolver import SelectorResolver  # noqa: E402

MAPS_URL = "https://www.google.com/maps/"
CONSENT_URL = "https://consent.google.com/ml?continue=https://www.google.com/maps/"

SEARCH_BOX = "#searchboxinput"
RESULT_PANE = "#pane"
TICKETS_TAB = 'button[role="tab"][aria-label*="Tickets"]'
ADMISSION_TAB = 'button[role="tab"][data-tab-index="0"][jsaction*="pane.tabs.tabClick"]'
PANE_ANCHORS = ":is(#pane) a[href]"
ALL_ANCHORS = "a[href]"


# ============================================================================
# Playwright 替身
# ============================================================================


class FakeElement:
    """模拟 ElementHandle"""

    def __init__(
        self,
        text: str = "",
        on_click: Callable[[], None] | None = None,
        children: dict[str, list["FakeElement"]] | None = None,
        triple_click_supported: bool = True,
        click_error: bool = False,
    ):
        self.text = text
        self.value = ""
        self.clicks = 0
        self.click_counts: list[int] = []
        self.typed: list[tuple[str, int]] = []
        self.children = children or {}
        self._on_click = on_click
        self._triple_click_supported = triple_click_supported
        self._click_error = click_error

    async def click(self, click_count: int = 1, **kwargs):
        if self._click_error:
            raise PlaywrightError("Element is not attached to the DOM")
        if click_count > 1 and not self._triple_click_supported:
            raise PlaywrightError("click_count not supported")
        self.clicks += 1
        self.click_counts.append(click_count)
        if click_count > 1:
            self.value = ""
        if self._on_click:
            self._on_click()

    async def type(self, text: str, delay: float = 0):
        self.typed.append((text, delay))
        self.value += text

    async def inner_text(self) -> str:
        return self.text

    async def query_selector_all(self, selector: str) -> list["FakeElement"]:
        return list(self.children.get(selector, []))


class FakeFrame:
    """模拟 Frame：按选择器登记可见元素、链接与链接文本"""

    def __init__(self, name: str = "frame"):
        self.name = name
        self.elements: dict[str, FakeElement] = {}
        self.lists: dict[str, list[FakeElement]] = {}
        self.hrefs: dict[str, list[str]] = {}
        self.anchors: dict[str, dict] = {}
        self.wait_calls: list[tuple[str, int | None]] = []
        self.detached = False

    def reset(self) -> None:
        self.elements.clear()
        self.lists.clear()
        self.hrefs.clear()
        self.anchors.clear()

    def add_anchor(self, href: str, descendants: list[str] | None = None, text: str = "") -> None:
        self.anchors[href] = {"descendants": list(descendants or []), "text": text}

    async def wait_for_selector(self, selector: str, state: str = "visible", timeout: int | None = None):
        self.wait_calls.append((selector, timeout))
        if self.detached:
            raise PlaywrightError("Frame was detached")
        element = self.elements.get(selector)
        if element is None:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded waiting for {selector}")
        return element

    async def query_selector_all(self, selector: str) -> list[FakeElement]:
        if self.detached:
            raise PlaywrightError("Frame was detached")
        return list(self.lists.get(selector, []))

    async def eval_on_selector_all(self, selector: str, script: str) -> list[str]:
        if self.detached:
            raise PlaywrightError("Frame was detached")
        return list(self.hrefs.get(selector, []))

    async def evaluate(self, script: str, arg=None):
        if self.detached:
            raise PlaywrightError("Execution context was destroyed")
        return self.anchors.get(arg)


class FakeKeyboard:
    def __init__(self, page: "FakePage"):
        self.page = page
        self.presses: list[str] = []

    async def press(self, key: str):
        self.presses.append(key)
        if key == "Enter":
            self.page.submit()


class FakePage(FakeFrame):
    """模拟 Page：顶层文档 + 子 frame 列表"""

    def __init__(self, url: str = MAPS_URL):
        super().__init__("main")
        self.url = url
        self.main_frame = FakeFrame("main-frame")
        self.child_frames: list[FakeFrame] = []
        self.keyboard = FakeKeyboard(self)
        self.navigation_target: str | None = None
        self.screenshots: list[str] = []
        self.viewports: list[dict] = []
        self.submitted: list[str] = []

    @property
    def frames(self) -> list[FakeFrame]:
        return [self.main_frame, *self.child_frames]

    def submit(self) -> None:
        self.submitted.append("")

    @asynccontextmanager
    async def expect_navigation(self, wait_until: str = "load", timeout: int | None = None):
        yield
        if self.navigation_target is None:
            raise PlaywrightTimeout(f"Timeout {timeout}ms exceeded waiting for navigation")
        self.url = self.navigation_target

    async def screenshot(self, path: str, **kwargs):
        Path(path).write_bytes(b"\x89PNG fake")
        self.screenshots.append(path)

    async def set_viewport_size(self, viewport: dict):
        self.viewports.append(viewport)


class MapsPage(FakePage):
    """按地点脚本化的地图页面

    在搜索框输入地点并回车后，页面切换为该地点登记的状态；
    未登记的地点只有搜索框，没有任何标签页。
    """

    def __init__(self):
        super().__init__(MAPS_URL)
        self.search_box = FakeElement()
        self.places: dict[str, Callable[["MapsPage"], None]] = {}
        self._show_search_box()

    def _show_search_box(self) -> None:
        self.elements[SEARCH_BOX] = self.search_box

    def add_place(
        self,
        place: str,
        tickets: bool = True,
        admission: bool = True,
        links: list[tuple[str, str]] | None = None,
    ) -> None:
        """登记地点：links 为 (href, 链接内文本) 列表，出现在结果面板中"""

        def load(page: "MapsPage") -> None:
            page.elements[RESULT_PANE] = FakeElement()
            if not tickets:
                return

            def open_tickets():
                if admission:
                    page.elements[ADMISSION_TAB] = FakeElement(on_click=open_admission)

            def open_admission():
                hrefs = [href for href, _ in links or []]
                page.hrefs[PANE_ANCHORS] = hrefs
                page.hrefs[ALL_ANCHORS] = hrefs
                for href, text in links or []:
                    page.add_anchor(href, descendants=[text], text=text)

            page.elements[TICKETS_TAB] = FakeElement(on_click=open_tickets)

        self.places[place] = load

    def submit(self) -> None:
        place = self.search_box.value
        self.submitted.append(place)
        self.reset()
        self._show_search_box()
        loader = self.places.get(place)
        if loader:
            loader(self)


class FakeSession:
    """模拟 BrowserSession，仅提供 secondary_page"""

    def __init__(self, failing_urls: set[str] | None = None):
        self.failing_urls = failing_urls or set()
        self.opened: list[str] = []
        self.closed = 0

    @asynccontextmanager
    async def secondary_page(self):
        tab = FakePage(url="about:blank")
        session = self

        async def goto(url: str, wait_until: str = "load"):
            session.opened.append(url)
            if url in session.failing_urls:
                raise PlaywrightTimeout(f"Timeout exceeded navigating to {url}")
            tab.url = url

        tab.goto = goto
        try:
            yield tab
        finally:
            self.closed += 1


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def fake_page():
    """空白顶层页面"""
    return FakePage()


@pytest.fixture
def maps_page():
    """可按地点脚本化的地图页面"""
    return MapsPage()


@pytest.fixture
def fast_resolver():
    """超时参数仅用于断言，替身不会真正等待"""
    return SelectorResolver(timeout_ms=5000, frame_timeout_ms=2000)


@pytest.fixture
def run_settings(tmp_path):
    """关闭所有停顿的运行配置"""
    return RunConfig(
        places=["Place A"],
        link_limit=7,
        place_delay_s=0,
        search_settle_s=0,
        tab_settle_s=0,
        admission_settle_s=0,
        settle_random_s=0,
        output_dir=str(tmp_path / "output"),
        screenshot_dir=str(tmp_path / "screenshots"),
        open_external_links=False,
        external_link_limit=6,
        csv_include_place=False,
    )


@pytest.fixture
def mail_settings():
    """完整的 SMTP 配置（不会真正连接）"""
    return MailConfig(
        enabled=True,
        smtp_host="smtp.example.com",
        smtp_port=587,
        smtp_user="bot@example.com",
        smtp_pass="secret",
        email_to="ops@example.com",
        email_from="",
    )


@pytest.fixture
def temp_output_dir(tmp_path):
    """创建临时输出目录"""
    output_dir = tmp_path / "output"
    output_dir.mkdir(parents=True, exist_ok=True)
    return output_dir
