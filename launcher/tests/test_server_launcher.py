"""
Tests for ServerLauncher: staging companions, building the launch spec and starting/stopping.
"""

from pathlib import Path
from unittest.mock import patch

import pytest

from dnl_launcher.console import ServerConsole
from dnl_launcher.exceptions import DependencyMissing, SpawnFailure
from dnl_launcher.models import ServerSettings
from dnl_launcher.server import ServerLauncher

from conftest import posix_only, write_companions, write_fake_server


@pytest.fixture
def server(settings):
    return ServerSettings(
        server_id="3",
        name="Arena1",
        ip="10.0.0.5",
        port=7777,
        query_port=27016,
        map_name="DNL_ALL",
        max_players=70,
        params="ServerPassword=x",
        storage_root=settings.server_storage_root("3"),
    )


class TestPrepare:

    def test_copies_companions_and_builds_spec(self, settings, server):
        write_companions(server.storage_root)
        spec = ServerLauncher(settings).prepare(server)
        for name in ("steamclient64.dll", "tier0_s64.dll", "vstdlib_s64.dll"):
            assert (server.storage_root / "DNL" / "Binaries" / "Win64" / name).is_file()
        assert spec.working_dir == server.storage_root
        assert spec.command_line.startswith("DNL_ALL?listen?MultiHome=10.0.0.5?Port=7777")

    def test_capture_defaults_to_settings(self, settings, server):
        write_companions(server.storage_root)
        assert ServerLauncher(settings).prepare(server).capture_output is False
        embedded = settings.model_copy(update={"embed_console": True})
        assert ServerLauncher(embedded).prepare(server).capture_output is True
        assert ServerLauncher(embedded).prepare(server, capture_output=False).capture_output is False


class TestStart:

    def test_missing_companion_aborts_before_spawn(self, settings, server):
        with patch("dnl_launcher.server.start_process") as start_process:
            with pytest.raises(DependencyMissing):
                ServerLauncher(settings).start(server)
        start_process.assert_not_called()

    def test_missing_executable_is_spawn_failure(self, settings, server):
        write_companions(server.storage_root)
        with pytest.raises(SpawnFailure):
            ServerLauncher(settings).start(server, capture_output=True)

    def test_passes_spec_and_console(self, settings, server):
        write_companions(server.storage_root)
        console = ServerConsole()
        with patch("dnl_launcher.server.start_process") as start_process:
            ServerLauncher(settings, console=console).start(server, capture_output=True)
        spec, sink = start_process.call_args.args
        assert spec.capture_output is True
        assert sink is console

    @posix_only
    def test_real_start_sees_arguments_and_cwd(self, settings, server):
        write_companions(server.storage_root)
        write_fake_server(server.storage_root, 'pwd\necho "$@"')
        console = ServerConsole()
        h = ServerLauncher(settings, console=console).start(server, capture_output=True)
        assert h.wait(timeout=30) == 0
        cwd, args = console.lines("3")
        assert Path(cwd).resolve() == server.storage_root.resolve()
        assert args == "DNL_ALL?listen?MultiHome=10.0.0.5?Port=7777?ServerPassword=x -server -log"

    @posix_only
    def test_extra_flags_reach_server_as_own_arguments(self, settings, server):
        server = server.model_copy(update={"params": "ServerPassword=x -NoBattlEye"})
        write_companions(server.storage_root)
        write_fake_server(server.storage_root, 'echo "$#"\nfor a in "$@"; do echo "$a"; done')
        console = ServerConsole()
        h = ServerLauncher(settings, console=console).start(server, capture_output=True)
        assert h.wait(timeout=30) == 0
        assert console.lines("3") == [
            "4",
            "DNL_ALL?listen?MultiHome=10.0.0.5?Port=7777?ServerPassword=x",
            "-NoBattlEye",
            "-server",
            "-log",
        ]

    @posix_only
    def test_start_then_stop(self, settings, server):
        write_companions(server.storage_root)
        write_fake_server(server.storage_root, "exec sleep 60")
        launcher = ServerLauncher(settings, console=ServerConsole())
        h = launcher.start(server, capture_output=True)
        assert h.is_running()
        launcher.stop(h)
        assert not h.is_running()
