"""
server.py - Builds the launch command line and starts/stops the Dark & Light server
-----------------------------------------------------------------------------------
The travel URL passed to DNLServer.exe is an ordered list of optional
segments joined with '?'. Every segment is computed by a pure function of
the server settings; a segment with nothing to say is left out entirely.
"""

from __future__ import annotations
from typing import Callable, List, Optional, Sequence
from .console import ConsoleSink
from .fs_layout import build_layout, ensure_dependencies
from .game import DARK_AND_LIGHT, GameDefinition
from .logging_setup import get_logger
from .models import LaunchSpec, ServerSettings
from .process_runner import ProcessHandle, start_process, stop_process
from .settings import Settings

log = get_logger("dnl.launcher.server")

URL_DELIMITER = "?"

Segment = Callable[[ServerSettings], List[str]]


def map_segment(s: ServerSettings) -> List[str]:
    m = s.map_name.strip()
    return [m, "listen"] if m else []


def address_segment(s: ServerSettings) -> List[str]:
    if s.port is None or not s.ip.strip():
        return []
    return [f"MultiHome={s.ip.strip()}"]


def port_segment(s: ServerSettings) -> List[str]:
    return [] if s.port is None else [f"Port={s.port}"]


def params_segment(s: ServerSettings) -> List[str]:
    # host-supplied, passed through verbatim
    return [s.params] if s.params.strip() else []


SEGMENTS: Sequence[Segment] = (map_segment, address_segment, port_segment, params_segment)


def build_url(s: ServerSettings, segments: Sequence[Segment] = SEGMENTS) -> str:
    parts: List[str] = []
    for seg in segments:
        parts.extend(seg(s))
    return URL_DELIMITER.join(parts)


def build_launch_spec(s: ServerSettings, *, capture_output: bool = False,
                      game: GameDefinition = DARK_AND_LIGHT) -> LaunchSpec:
    layout = build_layout(s.storage_root, game)
    url = build_url(s)
    line = " ".join(([url] if url else []) + list(game.server_flags))
    return LaunchSpec(
        server_id=s.server_id,
        working_dir=layout.storage_root.absolute(),
        executable=layout.executable.absolute(),
        # whitespace in the params string separates arguments, like in the argument string
        arguments=tuple(line.split()),
        capture_output=capture_output,
    )


class ServerLauncher:
    def __init__(self, settings: Settings, console: Optional[ConsoleSink] = None,
                 game: GameDefinition = DARK_AND_LIGHT):
        self.settings = settings
        self.console = console
        self.game = game

    def prepare(self, server: ServerSettings, *, capture_output: Optional[bool] = None) -> LaunchSpec:
        """Stage companion files and build the launch spec without starting anything."""
        capture = self.settings.embed_console if capture_output is None else capture_output
        ensure_dependencies(build_layout(server.storage_root, self.game))
        spec = build_launch_spec(server, capture_output=capture, game=self.game)
        log.debug("Launch spec for %s: %s", server.server_id, spec)
        return spec

    def start(self, server: ServerSettings, *, capture_output: Optional[bool] = None) -> ProcessHandle:
        spec = self.prepare(server, capture_output=capture_output)
        return start_process(spec, self.console)

    def stop(self, handle: ProcessHandle) -> int:
        return stop_process(handle, timeout=self.settings.stop_timeout)
