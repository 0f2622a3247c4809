"""CLI 入口"""

from __future__ import annotations

import asyncio
import threading
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .common.exceptions import PageLoadError, ValidationError
from .common.logger import get_logger, get_run_logger, setup_file_logging
from .common.types import RunSummary

# 日志器
logger = get_logger(__name__)

app = typer.Typer(
    name="ticketspider",
    help="TicketSpider CLI - 地图门票价格采集工具",
    add_completion=False,
)
console = Console()


def run_async_safely(coro):
    """在 CLI 同步上下文中安全执行协程。"""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        # 没有运行中的事件循环，直接使用 asyncio.run
        return asyncio.run(coro)

    # 已有运行中的事件循环，需要在新线程中创建新的事件循环
    result_holder: dict[str, object] = {"result": None, "error": None}

    def _runner():
        try:
            result_holder["result"] = asyncio.run(coro)
        except BaseException as exc:  # noqa: BLE001
            result_holder["error"] = exc

    thread = threading.Thread(target=_runner, daemon=True)
    thread.start()
    thread.join()

    if result_holder["error"] is not None:
        raise result_holder["error"]  # type: ignore[misc]
    return result_holder["result"]


def _build_summary_table(summary: RunSummary) -> Table:
    """构建运行结果表格。"""
    table = Table(title="运行结果")
    table.add_column("place", style="cyan")
    table.add_column("status", style="green")
    table.add_column("links", style="magenta")
    table.add_column("prices", style="yellow")
    table.add_column("csv / reason", style="blue")

    for outcome in summary.outcomes:
        found = sum(1 for row in outcome.result_rows if row.found)
        table.add_row(
            outcome.place,
            "完成",
            str(len(outcome.result_rows)),
            str(found),
            outcome.csv_path or "",
        )
    for failure in summary.failures:
        table.add_row(failure.place, f"失败 ({failure.stage.value})", "-", "-", failure.reason)
    return table


@app.command("run")
def run_command(
    places: Optional[List[str]] = typer.Option(
        None,
        "--place",
        "-p",
        help="地点名称，可重复指定；未指定时读取 PLACES / PLACE 环境变量",
    ),
    headless: Optional[bool] = typer.Option(
        None,
        "--headless/--no-headless",
        help="是否使用无头模式（默认读取 HEADLESS）",
    ),
    output_dir: Optional[str] = typer.Option(
        None,
        "--output-dir",
        "-o",
        help="CSV 输出目录",
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-n",
        help="每个地点最多收集的链接数",
    ),
    open_external_links: Optional[bool] = typer.Option(
        None,
        "--open-external-links/--no-open-external-links",
        help="是否逐个打开外部链接并截图",
    ),
    send_email: Optional[bool] = typer.Option(
        None,
        "--send-email/--no-send-email",
        help="是否发送结果邮件（默认读取 SEND_EMAIL）",
    ),
    log_file: Optional[str] = typer.Option(
        None,
        "--log-file",
        help="额外写入的日志文件",
    ),
):
    """
    按顺序处理地点：搜索 -> Tickets -> Admission -> 收集链接与价格 -> 导出 CSV
    """
    from .maps.runner import run_places

    if log_file:
        setup_file_logging(get_run_logger(), log_file)

    console.print(
        Panel(
            f"地点: {', '.join(places) if places else '(环境变量)'}\n"
            f"输出目录: {output_dir or '(默认)'}",
            title="TicketSpider",
            style="cyan",
        )
    )

    try:
        summary = run_async_safely(
            run_places(
                places=places or None,
                headless=headless,
                output_dir=output_dir,
                limit=limit,
                open_external_links=open_external_links,
                send_email=send_email,
            )
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]用户中断[/yellow]")
        raise typer.Exit(130)
    except (ValidationError, PageLoadError) as e:
        console.print(Panel(f"[red]{e}[/red]", title="执行错误", style="red"))
        raise typer.Exit(1)

    console.print(_build_summary_table(summary))
    if summary.failures and not summary.outcomes:
        raise typer.Exit(1)


@app.command("serve")
def serve_command(
    host: Optional[str] = typer.Option(None, "--host", help="监听地址（默认读取 HOST）"),
    port: Optional[int] = typer.Option(None, "--port", help="监听端口（默认读取 PORT）"),
):
    """启动控制服务"""
    from .server import serve

    serve(host=host, port=port)


def main():
    """CLI 入口点

    供 pyproject.toml 中 [project.scripts] 调用。
    """
    app()


if __name__ == "__main__":
    main()
