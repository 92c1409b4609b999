"""
config_provisioner.py - Creates GameUserSettings.ini for a server instance
--------------------------------------------------------------------------
Downloads the config template, stores it under the server's storage root and
replaces the {{...}} placeholders with the instance values. Download problems
are logged and absorbed: the caller checks the boolean result.
"""

from __future__ import annotations
import http.client
import os
import re
import tempfile
import urllib.error
import urllib.request
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional
from .exceptions import ProvisionError, ProvisionNetworkFailure, SubstitutionSkipped
from .fs_layout import build_layout
from .game import DARK_AND_LIGHT, GameDefinition
from .logging_setup import get_logger
from .models import ServerSettings
from .settings import Settings

log = get_logger("dnl.launcher.cfg")

USER_AGENT = "dnl-launcher/1.1"


def placeholder_values(s: ServerSettings) -> Dict[str, str]:
    def text(v) -> str:
        return "" if v is None else str(v)

    return {
        "{{session_name}}": s.name,
        "{{rcon_port}}": text(s.query_port),
        "{{max_players}}": text(s.max_players),
    }


def download_template(url: str, destination: Path, timeout: float = 30.0) -> Path:
    """Fetch url into destination. The file only appears once the body is complete."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    tmp_path: Optional[Path] = None
    req = urllib.request.Request(url, headers={"User-Agent": USER_AGENT})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response, tempfile.NamedTemporaryFile(
            "wb", delete=False, dir=str(destination.parent), suffix=".part"
        ) as tmp:
            tmp_path = Path(tmp.name)
            received = 0
            while True:
                chunk = response.read(64 * 1024)
                if not chunk:
                    break
                received += len(chunk)
                tmp.write(chunk)
            declared = response.headers.get("Content-Length")
            if declared and declared.strip().isdigit() and received != int(declared):
                raise ProvisionNetworkFailure(
                    f"Download for {url} incomplete: got {received} of {declared} bytes"
                )
        os.replace(tmp_path, destination)
    except (urllib.error.URLError, http.client.HTTPException, OSError, ValueError) as e:
        raise ProvisionNetworkFailure(f"Download failed for {url}: {e}") from e
    finally:
        if tmp_path and tmp_path.exists():
            try:
                tmp_path.unlink()
            except OSError:
                pass
    return destination


def substitute_placeholders(path: Path, values: Dict[str, str]) -> None:
    """Single-pass literal replacement of every placeholder, written back in place."""
    if not path.is_file():
        raise SubstitutionSkipped(f"No config file at {path}")
    # newline="" keeps line endings; surrogateescape carries non-UTF-8 bytes through unchanged
    with open(path, "r", encoding="utf-8", errors="surrogateescape", newline="") as f:
        text = f.read()
    if values:
        pattern = re.compile("|".join(re.escape(t) for t in sorted(values, key=len, reverse=True)))
        text = pattern.sub(lambda m: values[m.group(0)], text)
    with open(path, "w", encoding="utf-8", errors="surrogateescape", newline="") as f:
        f.write(text)


@dataclass
class ProvisionResult:
    path: Path
    downloaded: bool = False
    substituted: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.path.is_file()

    def __bool__(self) -> bool:
        return self.ok


class ConfigProvisioner:
    def __init__(self, settings: Settings, game: GameDefinition = DARK_AND_LIGHT):
        self.settings = settings
        self.game = game

    def config_path(self, server: ServerSettings) -> Path:
        return build_layout(server.storage_root, self.game).config_file

    def provision_result(self, server: ServerSettings) -> ProvisionResult:
        path = self.config_path(server)
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists():
            log.debug("Removing previous config %s", path)
            path.unlink()

        result = ProvisionResult(path=path)
        url = self.settings.config_template_url
        try:
            download_template(url, path, timeout=self.settings.download_timeout)
            result.downloaded = True
            substitute_placeholders(path, placeholder_values(server))
            result.substituted = True
        except ProvisionError as e:
            log.warning("Config provisioning for server %s incomplete: %s", server.server_id, e)
            result.error = str(e)

        if result.ok:
            log.info("Provisioned config for server %s: %s", server.server_id, path)
        return result

    def provision(self, server: ServerSettings) -> bool:
        return self.provision_result(server).ok
