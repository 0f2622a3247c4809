"""批量运行编排

每个地点依次经过：搜索 -> Tickets -> Admission -> 截图 -> 收集链接 -> 提取价格
-> 导出 CSV -> 通知。前三步任一失败即放弃该地点，记录失败并继续下一个地点。
整个运行只复用一个主页面，由调用方显式传入。
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable

from playwright.async_api import Error as PlaywrightError

from ..common.browser.session import BrowserSession, create_browser_session
from ..common.config import RunConfig, config
from ..common.constants import EXTERNAL_SHOT_PREFIX
from ..common.exceptions import ExportError
from ..common.logger import get_run_logger
from ..common.types import (
    AdmissionLink,
    NotifyPayload,
    PipelineStage,
    PlaceFailure,
    PriceResult,
    RunOutcome,
    RunSummary,
)
from ..common.utils import settle
from ..common.validators import parse_places, sanitize_place_name, validate_positive_integer
from ..output.csv_export import csv_path_for, write_results_csv
from ..output.notifier import MailNotifier
from .consent import ConsentDismisser
from .harvester import LinkHarvester
from .panel import PanelNavigator
from .prices import PriceExtractor
from .search import PlaceSearchController

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = get_run_logger()


class RunOrchestrator:
    """地点批处理编排器"""

    def __init__(
        self,
        settings: RunConfig | None = None,
        search: PlaceSearchController | None = None,
        panel: PanelNavigator | None = None,
        harvester: LinkHarvester | None = None,
        prices: PriceExtractor | None = None,
        notifier: MailNotifier | None = None,
        send_email: bool | None = None,
    ):
        self.settings = settings or config.run
        self.search = search or PlaceSearchController()
        self.panel = panel or PanelNavigator(screenshot_dir=self.settings.screenshot_dir)
        self.harvester = harvester or LinkHarvester(limit=self.settings.link_limit)
        self.prices = prices or PriceExtractor()
        self.notifier = notifier or MailNotifier()
        self.send_email = send_email

    async def run(
        self,
        page: "Page",
        places: Iterable[str],
        session: BrowserSession | None = None,
    ) -> RunSummary:
        """
        依次处理所有地点。

        Args:
            page: 复用的主页面
            places: 地点名称列表
            session: 浏览器会话（仅在打开外部链接时需要）

        Returns:
            成功与失败的汇总
        """
        places = list(places)
        summary = RunSummary()

        for index, place in enumerate(places):
            logger.info(f"[Run] ({index + 1}/{len(places)}) 开始处理: {place}")
            result = await self.analyze_place(page, place, session=session)
            if isinstance(result, PlaceFailure):
                summary.failures.append(result)
            else:
                summary.outcomes.append(result)

            if index < len(places) - 1:
                await settle(self.settings.place_delay_s)

        logger.info(
            f"[Run] 完成 {summary.processed} 个地点: "
            f"成功 {len(summary.outcomes)}, 失败 {len(summary.failures)}"
        )
        return summary

    async def analyze_place(
        self,
        page: "Page",
        place: str,
        session: BrowserSession | None = None,
    ) -> RunOutcome | PlaceFailure:
        """处理单个地点，失败时返回 PlaceFailure 而不抛出"""
        settings = self.settings
        stage = PipelineStage.SEARCH
        links: list[AdmissionLink] = []

        try:
            if not await self.search.search(page, place):
                return self._fail(place, stage, "搜索框不可用")
            await settle(settings.search_settle_s, settings.settle_random_s)

            stage = PipelineStage.TICKETS_TAB
            if not await self.panel.select_tickets_tab(page):
                return self._fail(place, stage, "未找到 Tickets 标签页")
            await settle(settings.tab_settle_s, settings.settle_random_s)

            stage = PipelineStage.ADMISSION_TAB
            if not await self.panel.select_admission_tab(page):
                return self._fail(place, stage, "未找到 Admission 标签页")
            await settle(settings.admission_settle_s, settings.settle_random_s)

            screenshot = await self.panel.capture_screenshot(page, place)

            stage = PipelineStage.HARVEST
            links = await self.harvester.harvest(page, settings.link_limit)

            stage = PipelineStage.EXTRACT_PRICES
            rows: list[PriceResult] = []
            for link in links:
                price = await self.prices.price_for(page, link)
                logger.info(f"[Price] {link.url} -> {price}")
                rows.append(PriceResult(place=place, url=link.url, price=price))

            stage = PipelineStage.EXPORT
            csv_path = write_results_csv(
                rows,
                csv_path_for(place, settings.output_dir),
                include_place=settings.csv_include_place,
            )
        except ExportError as e:
            return self._fail(place, PipelineStage.EXPORT, str(e))
        except PlaywrightError as e:
            return self._fail(place, stage, f"浏览器异常: {e}")

        external: list[str] = []
        if settings.open_external_links and session is not None:
            external = await self.capture_external_links(session, place, links)

        outcome = RunOutcome(
            place=place,
            screenshot_path=screenshot,
            result_rows=tuple(rows),
            csv_path=csv_path,
            external_screenshots=tuple(external),
        )

        result = await self.notifier.notify(NotifyPayload.from_outcome(outcome), send=self.send_email)
        if result.error:
            logger.warning(f"[Run] {place} 通知失败: {result.error}")

        logger.info(f"[Run] {place} 完成: {len(rows)} 条链接")
        return outcome

    async def capture_external_links(
        self,
        session: BrowserSession,
        place: str,
        links: list[AdmissionLink],
    ) -> list[str]:
        """逐个在临时页面中打开外部链接并截图，单个失败不影响其他链接"""
        safe = sanitize_place_name(place)
        shot_dir = Path(self.settings.screenshot_dir)
        shots: list[str] = []

        for index, link in enumerate(links[: self.settings.external_link_limit], start=1):
            path = shot_dir / f"{EXTERNAL_SHOT_PREFIX}-{safe}-{index}.png"
            try:
                shot_dir.mkdir(parents=True, exist_ok=True)
                async with session.secondary_page() as tab:
                    await tab.goto(link.url, wait_until="networkidle")
                    await tab.screenshot(path=str(path))
            except (PlaywrightError, OSError) as e:
                logger.warning(f"[Run] 外部链接截图失败 {link.url}: {e}")
                continue
            shots.append(str(path))

        return shots

    @staticmethod
    def _fail(place: str, stage: PipelineStage, reason: str) -> PlaceFailure:
        logger.warning(f"[Run] {place} 在 {stage.value} 阶段终止: {reason}")
        return PlaceFailure(place=place, stage=stage, reason=reason)


async def run_places(
    places: Iterable[str] | str | None = None,
    headless: bool | None = None,
    output_dir: str | None = None,
    limit: int | None = None,
    open_external_links: bool | None = None,
    send_email: bool | None = None,
) -> RunSummary:
    """
    打开地图、处理同意页并按顺序处理所有地点。

    Raises:
        ValidationError: 地点列表为空或 limit 非法
        PageLoadError: 地图首页无法打开
    """
    places = parse_places(places if places is not None else config.run.places)

    overrides: dict = {}
    if output_dir:
        overrides["output_dir"] = output_dir
    if limit is not None:
        overrides["link_limit"] = validate_positive_integer(limit, "limit")
    if open_external_links is not None:
        overrides["open_external_links"] = open_external_links
    settings = config.run.model_copy(update=overrides)

    settings.ensure_dirs()

    orchestrator = RunOrchestrator(settings=settings, send_email=send_email)

    async with create_browser_session(headless=headless) as session:
        await session.navigate(config.maps.url)
        await ConsentDismisser().dismiss(session.page)
        await session.apply_viewport()
        return await orchestrator.run(session.page, places, session=session)
