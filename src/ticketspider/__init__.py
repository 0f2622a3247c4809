"""TicketSpider - 地图门票价格采集"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

__version__ = "0.1.0"

if TYPE_CHECKING:
    from .maps.runner import RunOrchestrator as RunOrchestrator
    from .maps.runner import run_places as run_places
    from .server import create_app as create_app

__all__ = [
    "__version__",
    "RunOrchestrator",
    "run_places",
    "create_app",
]


def __getattr__(name: str) -> Any:
    """Lazy exports to avoid importing heavy runtime dependencies at package import time."""
    if name in {"RunOrchestrator", "run_places"}:
        from .maps.runner import RunOrchestrator, run_places

        return RunOrchestrator if name == "RunOrchestrator" else run_places
    if name == "create_app":
        from .server import create_app

        return create_app
    raise AttributeError(f"module 'ticketspider' has no attribute '{name}'")
