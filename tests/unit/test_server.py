"""控制服务单元测试"""

import threading

import pytest
from fastapi.testclient import TestClient

from ticketspider.common.config import ServerConfig
from ticketspider.common.exceptions import ConfigError
from ticketspider.server import RunGuard, create_app


class FakeProcess:
    """模拟子进程：release 之前 stdout 不结束"""

    def __init__(self, pid: int = 4321):
        self.pid = pid
        self.finished = threading.Event()
        self.stdout = self._lines()

    def _lines(self):
        yield "starting\n"
        self.finished.wait(timeout=5)
        yield "done\n"

    def wait(self):
        return 0


@pytest.fixture
def settings():
    return ServerConfig(host="127.0.0.1", port=3000, admin_password="s3cret")


class TestPasswordEndpoints:

    def test_verify_password(self, settings):
        client = TestClient(create_app(settings, launcher=FakeProcess))

        assert client.post("/api/verify-password", json={"password": "s3cret"}).json() == {
            "success": True
        }
        assert client.post("/api/verify-password", json={"password": "nope"}).json() == {
            "success": False,
            "message": "Invalid password",
        }

    def test_run_script_rejects_wrong_password(self, settings):
        launched = []
        client = TestClient(create_app(settings, launcher=lambda: launched.append(1)))

        body = client.post("/api/run-script", json={"password": "nope"}).json()

        assert body == {"success": False, "message": "Invalid password"}
        assert launched == []


class TestRunScript:

    def test_single_run_at_a_time(self, settings):
        process = FakeProcess()
        app = create_app(settings, launcher=lambda: process)
        client = TestClient(app)

        first = client.post("/api/run-script", json={"password": "s3cret"}).json()
        assert first == {"success": True, "message": "Script started successfully", "pid": 4321}
        assert client.get("/api/status").json() == {"is_processing": True}

        second = client.post("/api/run-script", json={"password": "s3cret"}).json()
        assert second == {"success": False, "message": "Script is already running"}

        process.finished.set()
        for _ in range(50):
            if not app.state.guard.is_processing:
                break
            threading.Event().wait(0.05)
        assert client.get("/api/status").json() == {"is_processing": False}

    def test_launch_failure_releases_guard(self, settings):
        def broken():
            raise FileNotFoundError("python not found")

        app = create_app(settings, launcher=broken)
        client = TestClient(app)

        body = client.post("/api/run-script", json={"password": "s3cret"}).json()

        assert body["success"] is False
        assert "python not found" in body["message"]
        assert client.get("/api/status").json() == {"is_processing": False}

    def test_unexpected_launcher_error_releases_guard(self, settings):
        """非 OSError 的启动异常同样返回失败并清除运行状态"""

        def broken():
            raise RuntimeError("boom")

        app = create_app(settings, launcher=broken)
        client = TestClient(app)

        body = client.post("/api/run-script", json={"password": "s3cret"}).json()

        assert body == {"success": False, "message": "Failed to start script: boom"}
        assert client.get("/api/status").json() == {"is_processing": False}
        assert app.state.guard.acquire() is True


class TestRunGuard:

    def test_acquire_release(self):
        guard = RunGuard()
        assert guard.acquire() is True
        assert guard.acquire() is False
        guard.release()
        assert guard.is_processing is False


def test_empty_password_is_config_error():
    with pytest.raises(ConfigError):
        create_app(ServerConfig(admin_password=""))
