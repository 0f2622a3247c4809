"""价格提取单元测试"""

import pytest

from ticketspider.common.types import AdmissionLink
from ticketspider.maps.prices import PriceExtractor, first_price, match_price

from conftest import FakeFrame

URL = "https://tickets.example/buy"


class TestMatchPrice:

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("Adult $42.50", "$42.50"),
            ("From AED 150", "AED 150"),
            ("€1.299,00 per group", "€1.299,00"),
            ("Price: £20.", "£20"),
            ("AED50 online", "AED50"),
            ("₹ 1,200", "₹ 1,200"),
        ],
    )
    def test_matches_currency_amounts(self, text, expected):
        assert match_price(text) == expected

    @pytest.mark.parametrize("text", ["Official site", "Open 10 AM", "", None, "USDA approved"])
    def test_no_price(self, text):
        assert match_price(text) is None

    def test_first_price_in_order(self):
        assert first_price(["Tickets", "$10", "€20"]) == "$10"
        assert first_price(["no", "price"]) is None


class TestPriceExtractor:

    @pytest.mark.asyncio
    async def test_descendant_price(self, fake_page):
        fake_page.add_anchor(URL, descendants=["Klook", "$42.50"], text="Klook $42.50")

        assert await PriceExtractor().extract_price(fake_page, URL) == "$42.50"

    @pytest.mark.asyncio
    async def test_falls_back_to_anchor_text(self, fake_page):
        fake_page.add_anchor(URL, descendants=["Klook"], text="Klook USD 30")

        assert await PriceExtractor().extract_price(fake_page, URL) == "USD 30"

    @pytest.mark.asyncio
    async def test_unknown_href_returns_none(self, fake_page):
        fake_page.add_anchor("https://other.example/", descendants=["$5"])

        assert await PriceExtractor().extract_price(fake_page, URL) is None

    @pytest.mark.asyncio
    async def test_price_for_not_found(self, fake_page):
        fake_page.add_anchor(URL, descendants=["Official site"], text="Official site")

        price = await PriceExtractor().price_for(fake_page, AdmissionLink(url=URL, source=fake_page))

        assert price == "Not found"

    @pytest.mark.asyncio
    async def test_price_for_searches_frames(self, fake_page):
        frame = FakeFrame()
        frame.add_anchor(URL, descendants=["£12"])
        fake_page.child_frames.append(frame)

        price = await PriceExtractor().price_for(fake_page, AdmissionLink(url=URL, source=fake_page))

        assert price == "£12"

    @pytest.mark.asyncio
    async def test_evaluate_failure_is_a_miss(self, fake_page):
        fake_page.detached = True

        price = await PriceExtractor().price_for(fake_page, AdmissionLink(url=URL, source=fake_page))

        assert price == "Not found"
