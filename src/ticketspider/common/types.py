"""核心数据类型定义"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from .constants import NOT_FOUND_PRICE

if TYPE_CHECKING:
    from playwright.async_api import ElementHandle, Frame, Page

    DocumentContext = Page | Frame

T = TypeVar("T")


# ============================================================================
# 选择器候选
# ============================================================================


def _xpath_literal(text: str) -> str:
    """把任意文本转成合法的 XPath 字符串字面量"""
    if "'" not in text:
        return f"'{text}'"
    if '"' not in text:
        return f'"{text}"'
    parts = text.split("'")
    return "concat(" + ", \"'\", ".join(f"'{p}'" for p in parts) + ")"


class Query(BaseModel):
    """单个查询描述（Playwright 选择器字符串）"""

    model_config = ConfigDict(frozen=True)

    selector: str = Field(..., description="Playwright 选择器，CSS 或 xpath=...")
    label: str = Field(default="", description="日志中展示的名称")

    @classmethod
    def css(cls, selector: str) -> "Query":
        return cls(selector=selector, label=selector)

    @classmethod
    def text_contains(cls, texts: tuple[str, ...] | list[str], tag: str = "*") -> "Query":
        """元素文本包含任一给定字符串（按文本匹配的兜底查询）"""
        predicate = " or ".join(f"contains(., {_xpath_literal(t)})" for t in texts)
        return cls(
            selector=f"xpath=//{tag}[{predicate}]",
            label=f"{tag} 文本包含 {' / '.join(texts)}",
        )


class SelectorCandidate(BaseModel):
    """按优先级排列的查询列表，靠前者优先"""

    model_config = ConfigDict(frozen=True)

    name: str
    queries: tuple[Query, ...]


# ============================================================================
# 等待结果 / 定位结果
# ============================================================================


@dataclass(frozen=True)
class WaitOutcome(Generic[T]):
    """有界等待的显式结果：要么 settled 要么 expired，不抛异常"""

    value: T | None = None
    timed_out: bool = False
    reason: str = ""

    @classmethod
    def settled(cls, value: T | None = None) -> "WaitOutcome[T]":
        return cls(value=value)

    @classmethod
    def expired(cls, reason: str = "") -> "WaitOutcome[T]":
        return cls(timed_out=True, reason=reason)

    @property
    def ok(self) -> bool:
        return not self.timed_out


@dataclass(frozen=True)
class ResolvedElement:
    """选择器解析命中的元素及其来源"""

    element: "ElementHandle"
    query: Query
    candidate_index: int
    context: "DocumentContext"
    context_index: int

    @property
    def in_frame(self) -> bool:
        return self.context_index > 0


# ============================================================================
# 提取结果
# ============================================================================


@dataclass(frozen=True)
class AdmissionLink:
    """从门票面板收集到的外部链接"""

    url: str
    source: Any  # 发现该链接的 DocumentContext


class PriceResult(BaseModel):
    """单条链接的价格结果"""

    model_config = ConfigDict(frozen=True)

    place: str
    url: str
    price: str = NOT_FOUND_PRICE

    @property
    def found(self) -> bool:
        return self.price != NOT_FOUND_PRICE


class PipelineStage(str, Enum):
    """单个地点的处理阶段"""

    SEARCH = "search"
    TICKETS_TAB = "tickets_tab"
    ADMISSION_TAB = "admission_tab"
    HARVEST = "harvest"
    EXTRACT_PRICES = "extract_prices"
    EXPORT = "export"


class PlaceFailure(BaseModel):
    """某个地点中途终止的记录"""

    model_config = ConfigDict(frozen=True)

    place: str
    stage: PipelineStage
    reason: str = ""


class RunOutcome(BaseModel):
    """单个地点处理完成后的产物"""

    model_config = ConfigDict(frozen=True)

    place: str
    screenshot_path: str | None = None
    result_rows: tuple[PriceResult, ...] = ()
    csv_path: str | None = None
    external_screenshots: tuple[str, ...] = ()


class RunSummary(BaseModel):
    """一次批量运行的汇总"""

    outcomes: list[RunOutcome] = Field(default_factory=list)
    failures: list[PlaceFailure] = Field(default_factory=list)

    @property
    def processed(self) -> int:
        return len(self.outcomes) + len(self.failures)


# ============================================================================
# 通知
# ============================================================================


class NotifyPayload(BaseModel):
    """交给通知模块的结构化载荷"""

    model_config = ConfigDict(frozen=True)

    screenshot_path: str | None = None
    place_name: str
    csv_path: str | None = None

    @classmethod
    def from_outcome(cls, outcome: RunOutcome) -> "NotifyPayload":
        return cls(
            screenshot_path=outcome.screenshot_path,
            place_name=outcome.place,
            csv_path=outcome.csv_path,
        )


class NotificationResult(BaseModel):
    """通知发送结果"""

    skipped: bool = False
    ok: bool = False
    error: str | None = None
    attachments_sent: list[str] = Field(default_factory=list)
