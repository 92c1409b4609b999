"""
game.py - Fixed variables and defaults of the Dark & Light dedicated server
----------------------------------------------------------------------------
Plugin metadata, file layout constants and the default values a host uses
when it creates a new server instance. Installation (SteamCMD) and A2S
querying are owned by the host; the values are only exposed here.
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Tuple

DEFAULT_CONFIG_TEMPLATE_URL = (
    "https://raw.githubusercontent.com/1stian/WindowsGSM-Configs/master/DarkAndLight/GameUserSettings.ini"
)


@dataclass(frozen=True)
class GameDefinition:
    name: str
    full_name: str
    author: str
    description: str
    version: str
    url: str
    color: str

    app_id: int
    login_anonymous: bool

    # relative to the storage root
    start_path: PurePosixPath
    config_path: PurePosixPath
    companion_files: Tuple[str, ...]

    allows_embed_console: bool
    port_increments: int
    query_method: str
    server_flags: Tuple[str, ...]

    default_port: int
    default_query_port: int
    default_map: str
    default_max_players: int
    default_additional: str

    @property
    def binaries_dir(self) -> PurePosixPath:
        return self.start_path.parent


DARK_AND_LIGHT = GameDefinition(
    name="WindowsGSM.DarkAndLight",
    full_name="Dark & Light",
    author="1stian",
    description="WindowsGSM plugin that adds support for Dark & Light dedicated servers.",
    version="1.1",
    url="https://github.com/1stian/WindowsGSM.DarkAndLight",
    color="#c0883e",
    app_id=630230,
    login_anonymous=True,
    start_path=PurePosixPath("DNL/Binaries/Win64/DNLServer.exe"),
    config_path=PurePosixPath("DNL/Saved/Config/WindowsServer/GameUserSettings.ini"),
    companion_files=("steamclient64.dll", "tier0_s64.dll", "vstdlib_s64.dll"),
    allows_embed_console=False,
    port_increments=1,
    query_method="A2S",
    server_flags=("-server", "-log"),
    default_port=7777,
    default_query_port=27016,
    default_map="DNL_ALL",
    default_max_players=70,
    default_additional="ServerPassword=PASSWORD?ServerAdminPassword=MYADMINPASSWORD",
)
