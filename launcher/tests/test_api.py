"""
Tests for the HTTP API that exposes start/stop/provision to a host.
"""

import time

import pytest
from fastapi.testclient import TestClient

from dnl_launcher.api import create_app

from conftest import posix_only, write_companions, write_fake_server


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))


def wait_for_console(client, server_id, expected, timeout=10.0):
    deadline = time.monotonic() + timeout
    lines = []
    while time.monotonic() < deadline:
        lines = [e["line"] for e in client.get(f"/servers/{server_id}/console").json()["entries"]]
        if expected in lines:
            return lines
        time.sleep(0.05)
    return lines


def test_health(client):
    assert client.get("/health").json() == {"ok": True}


def test_game_metadata(client):
    data = client.get("/game").json()
    assert data["app_id"] == 630230
    assert data["default_map"] == "DNL_ALL"
    assert data["companion_files"] == ["steamclient64.dll", "tier0_s64.dll", "vstdlib_s64.dll"]


class TestProvision:

    def test_provision_writes_config(self, client, settings):
        r = client.post("/servers/7/provision", json={"name": "Arena1", "query_port": "27016", "max_players": 70})
        assert r.status_code == 200
        body = r.json()
        assert body["ok"] is True
        assert body["data"]["downloaded"] is True
        cfg = settings.server_storage_root("7") / "DNL" / "Saved" / "Config" / "WindowsServer" / "GameUserSettings.ini"
        assert cfg.read_text(encoding="utf-8") == "name=Arena1 rcon=27016 max=70"

    def test_provision_failure_is_reported(self, settings, tmp_path):
        broken = settings.model_copy(update={"config_template_url": (tmp_path / "missing.ini").as_uri()})
        client = TestClient(create_app(broken))
        r = client.post("/servers/7/provision", json={"name": "Arena1"})
        assert r.status_code == 502
        assert "Download failed" in r.json()["detail"]

    def test_invalid_settings(self, client):
        r = client.post("/servers/7/provision", json={"port": "not-a-port"})
        assert r.status_code == 422


class TestStartStop:

    def test_stop_unknown_server(self, client):
        assert client.post("/servers/1/stop").status_code == 404

    def test_status_unknown_server(self, client):
        assert client.get("/servers/1/status").json()["data"] == {"running": False}

    def test_start_without_companions(self, client):
        r = client.post("/servers/1/start", json={"map_name": "DNL_ALL", "port": 7777})
        assert r.status_code == 500
        assert "steamclient64.dll" in r.json()["detail"]

    def test_start_without_executable(self, client, settings):
        write_companions(settings.server_storage_root("1"))
        r = client.post("/servers/1/start", json={"capture_output": True})
        assert r.status_code == 500
        assert "DNLServer.exe" in r.json()["detail"]

    @posix_only
    def test_full_lifecycle(self, client, settings):
        root = settings.server_storage_root("2")
        write_companions(root)
        write_fake_server(root, 'echo "up $@"\nexec sleep 60')

        r = client.post("/servers/2/start", json={
            "map_name": "DNL_ALL", "ip": "10.0.0.5", "port": 7777, "params": "ServerPassword=x",
            "capture_output": True,
        })
        assert r.status_code == 200
        assert r.json()["data"]["command_line"] == "DNL_ALL?listen?MultiHome=10.0.0.5?Port=7777?ServerPassword=x -server -log"

        assert client.post("/servers/2/start", json={"capture_output": True}).status_code == 409

        expected = "up DNL_ALL?listen?MultiHome=10.0.0.5?Port=7777?ServerPassword=x -server -log"
        assert expected in wait_for_console(client, "2", expected)

        status = client.get("/servers/2/status").json()["data"]
        assert status["running"] is True and status["captured"] is True

        r = client.post("/servers/2/stop")
        assert r.status_code == 200
        assert client.get("/servers/2/status").json()["data"] == {"running": False}
        assert client.post("/servers/2/stop").status_code == 404

    @posix_only
    def test_command_requires_captured_console(self, client, settings):
        root = settings.server_storage_root("5")
        write_companions(root)
        write_fake_server(root, "read line\necho \"got $line\"\nexec sleep 60")

        client.post("/servers/5/start", json={"capture_output": True})
        assert client.post("/servers/5/command", json={"command": "saveworld"}).status_code == 200
        assert "got saveworld" in wait_for_console(client, "5", "got saveworld")
        client.post("/servers/5/stop")

        assert client.post("/servers/6/command", json={"command": "x"}).status_code == 404
