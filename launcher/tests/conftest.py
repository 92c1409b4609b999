import os
import stat
from pathlib import Path

import pytest

from dnl_launcher.game import DARK_AND_LIGHT
from dnl_launcher.settings import Settings

posix_only = pytest.mark.skipif(os.name == "nt", reason="uses a shell script as server executable")


def write_companions(root: Path) -> None:
    """Put the companion DLLs into the storage root, where they are copied from."""
    root.mkdir(parents=True, exist_ok=True)
    for name in DARK_AND_LIGHT.companion_files:
        (root / name).write_bytes(b"dll:" + name.encode())


def write_fake_server(root: Path, body: str) -> Path:
    """Create an executable shell script at the DNLServer.exe location."""
    exe = root / DARK_AND_LIGHT.start_path
    exe.parent.mkdir(parents=True, exist_ok=True)
    exe.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
    exe.chmod(exe.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return exe


@pytest.fixture
def template_file(tmp_path):
    path = tmp_path / "template" / "GameUserSettings.ini"
    path.parent.mkdir(parents=True)
    path.write_text("name={{session_name}} rcon={{rcon_port}} max={{max_players}}", encoding="utf-8")
    return path


@pytest.fixture
def settings(tmp_path, template_file):
    return Settings(
        servers_root=tmp_path / "servers",
        logs_dir=tmp_path / "logs",
        config_template_url=template_file.as_uri(),
        download_timeout=5.0,
        stop_timeout=10.0,
    )
