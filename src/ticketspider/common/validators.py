"""输入验证工具

提供地点名称、链接地址等输入的验证与清理功能。
"""

from __future__ import annotations

import re
from typing import Iterable
from urllib.parse import urlparse

from .constants import MAX_SAFE_NAME_LENGTH, VALID_URL_SCHEMES
from .exceptions import ValidationError


def is_http_url(url: str) -> bool:
    """判断是否为绝对 http(s) 地址

    javascript:、相对路径、地图内部协议等一律返回 False。
    """
    if not isinstance(url, str) or not url:
        return False
    try:
        result = urlparse(url)
    except ValueError:
        return False
    return result.scheme.lower() in VALID_URL_SCHEMES and bool(result.netloc)


def parse_places(places: Iterable[str] | str | None) -> list[str]:
    """清理地点列表

    Args:
        places: 地点序列，或逗号分隔的字符串

    Returns:
        去除空白和空项后的地点列表（保持原顺序）

    Raises:
        ValidationError: 清理后列表为空时
    """
    if places is None:
        raise ValidationError("地点列表不能为空")
    if isinstance(places, str):
        places = places.split(",")

    cleaned = [p.strip() for p in places if p and p.strip()]
    if not cleaned:
        raise ValidationError("地点列表不能为空")
    return cleaned


def validate_positive_integer(
    value: int,
    name: str,
    min_value: int = 1,
    max_value: int | None = None,
) -> int:
    """验证正整数参数

    Args:
        value: 待验证的值
        name: 参数名称（用于错误消息）
        min_value: 最小值（包含）
        max_value: 最大值（包含），None 表示无上限

    Returns:
        验证后的值

    Raises:
        ValidationError: 当值无效时
    """
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValidationError(f"{name} 必须是整数")

    if value < min_value:
        raise ValidationError(f"{name} 必须至少为 {min_value}")

    if max_value is not None and value > max_value:
        raise ValidationError(f"{name} 不能超过 {max_value}")

    return value


def sanitize_place_name(place: str, max_length: int = MAX_SAFE_NAME_LENGTH) -> str:
    """把地点名转换成可用于文件名的安全片段

    仅保留字母、数字、-、_、.，其余字符替换为 _，并截断长度。
    """
    safe_name = re.sub(r"[^a-zA-Z0-9\-_.]", "_", place or "")
    safe_name = safe_name[:max_length]
    if not safe_name:
        safe_name = "unnamed"
    return safe_name
