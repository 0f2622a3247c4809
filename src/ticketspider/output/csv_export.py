"""价格结果 CSV 读写

表头不加引号；数据行所有字段加双引号，字段内的双引号写成两个双引号。
"""

from __future__ import annotations

import csv
from pathlib import Path
from typing import Sequence

from ..common.constants import CSV_PREFIX
from ..common.exceptions import ExportError
from ..common.logger import get_logger
from ..common.types import PriceResult
from ..common.validators import sanitize_place_name

logger = get_logger(__name__)

HEADER = ("url", "price")
HEADER_WITH_PLACE = ("place", "url", "price")


def csv_path_for(place: str, output_dir: str | Path) -> Path:
    """地点对应的 CSV 路径"""
    return Path(output_dir) / f"{CSV_PREFIX}-{sanitize_place_name(place)}.csv"


def write_results_csv(
    rows: Sequence[PriceResult],
    path: str | Path,
    include_place: bool = False,
) -> str:
    """
    写出价格结果。

    Args:
        rows: 价格结果（按收集顺序）
        path: 目标文件
        include_place: 是否输出 place 列

    Returns:
        写入的文件路径

    Raises:
        ExportError: 文件无法写入时
    """
    path = Path(path)
    header = HEADER_WITH_PLACE if include_place else HEADER

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(",".join(header) + "\n")
            writer = csv.writer(f, quoting=csv.QUOTE_ALL, lineterminator="\n")
            for row in rows:
                values = [row.url, row.price]
                if include_place:
                    values.insert(0, row.place)
                writer.writerow(values)
    except OSError as e:
        raise ExportError(str(path), str(e)) from e

    logger.info(f"[Export] 已写入 {len(rows)} 行: {path}")
    return str(path)


def read_results_csv(path: str | Path) -> list[list[str]]:
    """读取 CSV 全部行（含表头），引号内容按原样还原"""
    with Path(path).open("r", encoding="utf-8", newline="") as f:
        return [row for row in csv.reader(f) if row]


def read_price_table(path: str | Path | None) -> list[tuple[str, str]]:
    """
    读取 (url, price) 表格。

    无论是否有 place 列，都取每行最后两列；文件不存在时返回空列表。
    """
    if not path:
        return []
    try:
        rows = read_results_csv(path)
    except OSError as e:
        logger.debug(f"[Export] 读取 {path} 失败: {e}")
        return []

    table: list[tuple[str, str]] = []
    for cols in rows[1:]:
        if len(cols) >= 2:
            table.append((cols[-2], cols[-1]))
        else:
            table.append((cols[0], ""))
    return table
