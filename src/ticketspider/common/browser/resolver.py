"""选择器解析器

实现 Priority Fallback 策略：按上下文顺序（顶层 -> 各 iframe）、按候选优先级
逐个尝试，返回第一个可见的匹配元素。全部落空时返回 None，由调用方分支处理。
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Sequence

from playwright.async_api import Error as PlaywrightError

from ..logger import get_logger
from ..types import ResolvedElement, SelectorCandidate
from .contexts import bounded_wait, child_frames

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = get_logger(__name__)


class SelectorResolver:
    """按候选列表和上下文顺序定位元素"""

    def __init__(self, timeout_ms: int = 5000, frame_timeout_ms: int = 2000):
        """
        Args:
            timeout_ms: 顶层文档中每次尝试的等待上限（毫秒）
            frame_timeout_ms: iframe 扫描时每次尝试的等待上限（毫秒）
        """
        self.timeout_ms = timeout_ms
        self.frame_timeout_ms = frame_timeout_ms

    async def resolve(
        self,
        contexts: Sequence,
        candidates: SelectorCandidate,
        timeout_ms: int | None = None,
        context_offset: int = 0,
    ) -> ResolvedElement | None:
        """
        在给定上下文序列中解析候选列表。

        Args:
            contexts: 上下文搜索顺序（Page / Frame）
            candidates: 按优先级排列的查询
            timeout_ms: 单次尝试的等待上限，默认使用顶层超时
            context_offset: 上下文在完整搜索顺序中的起始下标（仅用于结果标注）

        Returns:
            命中的元素信息，全部落空返回 None
        """
        timeout = self.timeout_ms if timeout_ms is None else timeout_ms

        for ctx_index, context in enumerate(contexts, start=context_offset):
            for cand_index, query in enumerate(candidates.queries):
                try:
                    outcome = await bounded_wait(
                        context.wait_for_selector(query.selector, state="visible", timeout=timeout),
                        label=query.label,
                    )
                except PlaywrightError as e:
                    # frame 被销毁或选择器在该文档里非法，视为未命中
                    logger.debug(f"[Resolve] {candidates.name} 查询 {query.label} 出错: {e}")
                    continue

                if outcome.ok and outcome.value is not None:
                    logger.debug(
                        f"[Resolve] {candidates.name} 命中: {query.label} "
                        f"(候选 #{cand_index}, 上下文 #{ctx_index})"
                    )
                    return ResolvedElement(
                        element=outcome.value,
                        query=query,
                        candidate_index=cand_index,
                        context=context,
                        context_index=ctx_index,
                    )

        return None

    async def locate(
        self,
        page: "Page",
        candidates: SelectorCandidate,
        sweep_frames: bool = True,
        timeout_ms: int | None = None,
        frame_timeout_ms: int | None = None,
    ) -> ResolvedElement | None:
        """
        两阶段定位：先在顶层文档中按完整超时等待，失败后以较短超时逐个扫描子 frame。

        Args:
            page: 顶层页面
            candidates: 候选查询
            sweep_frames: 是否扫描子 frame
            timeout_ms: 顶层超时覆盖
            frame_timeout_ms: 单个 frame 超时覆盖
        """
        resolved = await self.resolve([page], candidates, timeout_ms=timeout_ms)
        if resolved is not None or not sweep_frames:
            if resolved is None:
                logger.debug(f"[Resolve] {candidates.name} 顶层未命中，未启用 frame 扫描")
            return resolved

        frames = child_frames(page)
        if not frames:
            logger.debug(f"[Resolve] {candidates.name} 顶层未命中，页面无子 frame")
            return None

        frame_timeout = self.frame_timeout_ms if frame_timeout_ms is None else frame_timeout_ms
        resolved = await self.resolve(frames, candidates, timeout_ms=frame_timeout, context_offset=1)
        if resolved is None:
            logger.debug(f"[Resolve] {candidates.name} 在 {len(frames)} 个 frame 中均未命中")
        return resolved
