"""常量定义"""

from __future__ import annotations

# ===== 地图站点 =====
DEFAULT_MAPS_URL = "https://www.google.com/maps/"
DEFAULT_PLACE = "Img World of Adventure"
# 搜索后结果面板容器
DEFAULT_RESULT_SELECTOR = "#pane"
# 同意页（cookie consent）跳转地址特征
CONSENT_URL_PATTERN = "consent.google.com"

# ===== 提取 =====
DEFAULT_LINK_LIMIT = 7
NOT_FOUND_PRICE = "Not found"
VALID_URL_SCHEMES = ("http", "https")

# ===== 文件命名 =====
MAX_SAFE_NAME_LENGTH = 60
SCREENSHOT_PREFIX = "gmap-admission"
CSV_PREFIX = "prices"
EXTERNAL_SHOT_PREFIX = "tab"
