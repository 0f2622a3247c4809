"""控制服务

提供密码校验、触发一次批量运行（子进程）和查询运行状态三个接口。
同一时间最多只允许一个子进程运行。
"""

from __future__ import annotations

import subprocess
import sys
import threading
from typing import Callable

from fastapi import FastAPI
from pydantic import BaseModel

from .common.config import ServerConfig, config
from .common.exceptions import ConfigError
from .common.logger import get_logger

logger = get_logger(__name__)

Launcher = Callable[[], "subprocess.Popen[str]"]


class PasswordRequest(BaseModel):
    password: str = ""


class CommandResponse(BaseModel):
    success: bool
    message: str | None = None
    pid: int | None = None


class StatusResponse(BaseModel):
    is_processing: bool


def launch_run() -> "subprocess.Popen[str]":
    """以子进程方式启动一次批量运行，环境变量原样继承"""
    return subprocess.Popen(
        [sys.executable, "-m", "ticketspider", "run"],
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
    )


class RunGuard:
    """单实例运行守卫"""

    def __init__(self):
        self.lock = threading.Lock()
        self._busy = False

    @property
    def is_processing(self) -> bool:
        with self.lock:
            return self._busy

    def acquire(self) -> bool:
        with self.lock:
            if self._busy:
                return False
            self._busy = True
            return True

    def release(self) -> None:
        with self.lock:
            self._busy = False

    def watch(self, process: "subprocess.Popen[str]") -> threading.Thread:
        """后台转发子进程输出，进程退出后释放守卫"""

        def _worker():
            try:
                if process.stdout is not None:
                    for line in process.stdout:
                        logger.info(f"[Child {process.pid}] {line.rstrip()}")
                code = process.wait()
                logger.info(f"[Server] 子进程 {process.pid} 退出，返回码 {code}")
            finally:
                self.release()

        thread = threading.Thread(target=_worker, daemon=True)
        thread.start()
        return thread


def create_app(
    settings: ServerConfig | None = None,
    launcher: Launcher | None = None,
) -> FastAPI:
    """
    创建控制服务应用。

    Args:
        settings: 服务配置，默认使用全局配置
        launcher: 启动子进程的函数，默认运行 `python -m ticketspider run`

    Raises:
        ConfigError: 管理密码为空时
    """
    settings = settings or config.server
    if not settings.admin_password:
        raise ConfigError("ADMIN_PASSWORD 不能为空")

    launcher = launcher or launch_run
    guard = RunGuard()

    app = FastAPI(title="TicketSpider Control", version="0.1.0")
    app.state.guard = guard

    @app.post("/api/verify-password", response_model=CommandResponse, response_model_exclude_none=True)
    def verify_password(body: PasswordRequest) -> CommandResponse:
        if body.password == settings.admin_password:
            return CommandResponse(success=True)
        return CommandResponse(success=False, message="Invalid password")

    @app.post("/api/run-script", response_model=CommandResponse, response_model_exclude_none=True)
    def run_script(body: PasswordRequest) -> CommandResponse:
        if body.password != settings.admin_password:
            return CommandResponse(success=False, message="Invalid password")

        if not guard.acquire():
            return CommandResponse(success=False, message="Script is already running")

        # 启动或监视失败都要释放守卫，否则状态会一直停在运行中
        try:
            process = launcher()
            guard.watch(process)
        except Exception as e:  # noqa: BLE001
            guard.release()
            logger.error(f"[Server] 启动子进程失败: {e}")
            return CommandResponse(success=False, message=f"Failed to start script: {e}")

        logger.info(f"[Server] 已启动子进程 {process.pid}")
        return CommandResponse(success=True, message="Script started successfully", pid=process.pid)

    @app.get("/api/status", response_model=StatusResponse)
    def status() -> StatusResponse:
        return StatusResponse(is_processing=guard.is_processing)

    return app


def serve(host: str | None = None, port: int | None = None) -> None:
    """使用 uvicorn 启动控制服务"""
    import uvicorn

    app = create_app()
    host = host or config.server.host
    port = port or config.server.port
    logger.info(f"[Server] 监听 http://{host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")
