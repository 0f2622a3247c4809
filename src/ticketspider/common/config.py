"""配置管理"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .constants import (
    DEFAULT_LINK_LIMIT,
    DEFAULT_MAPS_URL,
    DEFAULT_PLACE,
    DEFAULT_RESULT_SELECTOR,
)

# 加载 .env 文件
load_dotenv()


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() == "true"


def _env_places() -> list[str]:
    """PLACES 逗号分隔优先，其次单个 PLACE，最后使用默认地点"""
    raw = os.getenv("PLACES", "")
    places = [item.strip() for item in raw.split(",") if item.strip()]
    if places:
        return places
    single = os.getenv("PLACE", "").strip()
    return [single or DEFAULT_PLACE]


class BrowserConfig(BaseModel):
    """浏览器配置"""

    headless: bool = Field(default_factory=lambda: _env_flag("HEADLESS", "true"))
    viewport_width: int = Field(default_factory=lambda: int(os.getenv("VIEWPORT_WIDTH", "1080")))
    viewport_height: int = Field(default_factory=lambda: int(os.getenv("VIEWPORT_HEIGHT", "1024")))
    slow_mo: int = Field(default_factory=lambda: int(os.getenv("SLOW_MO", "25")))
    timeout_ms: int = Field(default_factory=lambda: int(os.getenv("STEP_TIMEOUT_MS", "30000")))


class MapsConfig(BaseModel):
    """地图页面交互配置"""

    url: str = Field(default_factory=lambda: os.getenv("MAPS_URL", DEFAULT_MAPS_URL))
    # 搜索提交后用于判断结果面板出现的选择器
    result_selector: str = Field(
        default_factory=lambda: os.getenv("RESULT_SELECTOR", DEFAULT_RESULT_SELECTOR)
    )
    search_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("SEARCH_TIMEOUT_MS", "10000"))
    )
    # 顶层文档中等待元素出现的时间
    element_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("ELEMENT_TIMEOUT_MS", "5000"))
    )
    # 逐个 iframe 扫描时每个 frame 的等待时间（应短于顶层）
    frame_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("FRAME_TIMEOUT_MS", "2000"))
    )
    admission_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("ADMISSION_TIMEOUT_MS", "6000"))
    )
    typing_delay_ms: int = Field(default_factory=lambda: int(os.getenv("TYPING_DELAY_MS", "100")))
    consent_timeout_ms: int = Field(
        default_factory=lambda: int(os.getenv("CONSENT_TIMEOUT_MS", "15000"))
    )


class RunConfig(BaseModel):
    """批量运行配置"""

    places: list[str] = Field(default_factory=_env_places)
    link_limit: int = Field(
        default_factory=lambda: int(os.getenv("LINK_LIMIT", str(DEFAULT_LINK_LIMIT)))
    )
    # 两个地点之间的固定间隔（秒）
    place_delay_s: float = Field(default_factory=lambda: float(os.getenv("PLACE_DELAY_S", "10")))
    search_settle_s: float = Field(
        default_factory=lambda: float(os.getenv("SEARCH_SETTLE_S", "3.0"))
    )
    tab_settle_s: float = Field(default_factory=lambda: float(os.getenv("TAB_SETTLE_S", "1.5")))
    admission_settle_s: float = Field(
        default_factory=lambda: float(os.getenv("ADMISSION_SETTLE_S", "1.2"))
    )
    settle_random_s: float = Field(
        default_factory=lambda: float(os.getenv("SETTLE_RANDOM_S", "0.0"))
    )
    output_dir: str = Field(default_factory=lambda: os.getenv("OUTPUT_DIR", "output"))
    screenshot_dir: str = Field(default_factory=lambda: os.getenv("SCREENSHOT_DIR", "screenshots"))
    open_external_links: bool = Field(default_factory=lambda: _env_flag("OPEN_EXTERNAL_LINKS"))
    external_link_limit: int = Field(
        default_factory=lambda: int(os.getenv("EXTERNAL_LINK_LIMIT", "6"))
    )
    csv_include_place: bool = Field(default_factory=lambda: _env_flag("CSV_INCLUDE_PLACE"))

    def ensure_dirs(self) -> None:
        """确保输出目录存在"""
        Path(self.screenshot_dir).mkdir(parents=True, exist_ok=True)
        Path(self.output_dir).mkdir(parents=True, exist_ok=True)


class MailConfig(BaseModel):
    """结果邮件配置"""

    enabled: bool = Field(default_factory=lambda: _env_flag("SEND_EMAIL"))
    smtp_host: str = Field(default_factory=lambda: os.getenv("SMTP_HOST", ""))
    smtp_port: int = Field(default_factory=lambda: int(os.getenv("SMTP_PORT", "0") or "0"))
    smtp_user: str = Field(default_factory=lambda: os.getenv("SMTP_USER", ""))
    smtp_pass: str = Field(default_factory=lambda: os.getenv("SMTP_PASS", ""))
    email_to: str = Field(default_factory=lambda: os.getenv("EMAIL_TO", ""))
    email_from: str = Field(default_factory=lambda: os.getenv("EMAIL_FROM", ""))

    @property
    def is_configured(self) -> bool:
        return bool(
            self.smtp_host and self.smtp_port and self.smtp_user and self.smtp_pass and self.email_to
        )

    @property
    def sender(self) -> str:
        return self.email_from or self.smtp_user


class ServerConfig(BaseModel):
    """控制服务配置"""

    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: int(os.getenv("PORT", "3000")))
    admin_password: str = Field(default_factory=lambda: os.getenv("ADMIN_PASSWORD", "admin123"))


class Config(BaseModel):
    """全局配置"""

    browser: BrowserConfig = Field(default_factory=BrowserConfig)
    maps: MapsConfig = Field(default_factory=MapsConfig)
    run: RunConfig = Field(default_factory=RunConfig)
    mail: MailConfig = Field(default_factory=MailConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def load(cls) -> "Config":
        """加载配置"""
        return cls()

    def ensure_dirs(self) -> None:
        """确保输出目录存在"""
        self.run.ensure_dirs()


# 全局配置实例
config = Config.load()
