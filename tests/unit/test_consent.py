"""同意页处理器单元测试"""

import pytest

from ticketspider.maps.consent import ConsentDismisser
from ticketspider.maps.selectors import CONSENT_ACCEPT

from conftest import CONSENT_URL, MAPS_URL, FakeElement, FakeFrame, FakePage


@pytest.fixture
def dismisser(fast_resolver):
    return ConsentDismisser(resolver=fast_resolver, navigation_timeout_ms=15000)


class TestConsentDismisser:

    def test_detect_only_on_consent_url(self, dismisser):
        assert dismisser.detect(FakePage(CONSENT_URL)) is True
        assert dismisser.detect(FakePage(MAPS_URL)) is False
        assert dismisser.detect(None) is False

    @pytest.mark.asyncio
    async def test_not_on_consent_page_does_nothing(self, dismisser):
        page = FakePage(MAPS_URL)
        button = FakeElement()
        page.elements['button[aria-label="Accept all"]'] = button

        assert await dismisser.dismiss(page) is False
        assert button.clicks == 0

    @pytest.mark.asyncio
    async def test_clicks_exact_accept_button_and_follows_navigation(self, dismisser):
        page = FakePage(CONSENT_URL)
        button = FakeElement()
        page.elements['button[aria-label="Accept all"]'] = button
        page.navigation_target = MAPS_URL

        assert await dismisser.dismiss(page) is True
        assert button.clicks == 1
        assert page.url == MAPS_URL

    @pytest.mark.asyncio
    async def test_falls_back_to_jsname_button(self, dismisser):
        page = FakePage(CONSENT_URL)
        button = FakeElement()
        page.elements['button[jsname="b3VHJd"]'] = button
        page.navigation_target = MAPS_URL

        assert await dismisser.dismiss(page) is True
        assert button.clicks == 1

    @pytest.mark.asyncio
    async def test_navigation_timeout_is_not_an_error(self, dismisser):
        """点击后没有导航，依然视为已处理"""
        page = FakePage(CONSENT_URL)
        button = FakeElement()
        page.elements['button[aria-label*="Accept"]'] = button

        assert await dismisser.dismiss(page) is True
        assert button.clicks == 1
        assert page.url == CONSENT_URL

    @pytest.mark.asyncio
    async def test_button_inside_frame(self, dismisser):
        page = FakePage(CONSENT_URL)
        frame = FakeFrame()
        button = FakeElement()
        frame.elements['button[aria-label="Accept all"]'] = button
        page.child_frames.append(frame)
        page.navigation_target = MAPS_URL

        assert await dismisser.dismiss(page) is True
        assert button.clicks == 1

    @pytest.mark.asyncio
    async def test_missing_button_returns_false(self, dismisser):
        assert await dismisser.dismiss(FakePage(CONSENT_URL)) is False

    @pytest.mark.asyncio
    async def test_click_failure_returns_false(self, dismisser):
        page = FakePage(CONSENT_URL)
        page.elements['button[aria-label="Accept all"]'] = FakeElement(click_error=True)

        assert await dismisser.dismiss(page) is False

    @pytest.mark.asyncio
    async def test_falls_back_to_button_text(self, dismisser, fast_resolver):
        """属性都不匹配时，按按钮文本的 XPath 兜底查询仍能找到并点击"""
        text_query = "xpath=//button[contains(., 'Accept all') or contains(., 'Accept')]"
        page = FakePage(CONSENT_URL)
        button = FakeElement(text="Accept all")
        page.elements[text_query] = button
        page.navigation_target = MAPS_URL

        resolved = await fast_resolver.locate(page, CONSENT_ACCEPT)
        assert resolved is not None
        assert resolved.candidate_index == 4
        assert resolved.query.selector == text_query
        assert button.clicks == 0

        assert await dismisser.dismiss(page) is True
        assert button.clicks == 1
        assert page.url == MAPS_URL
