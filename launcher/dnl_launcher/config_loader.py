from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, Optional
import json5
from .models import ServerSettings
from .settings import Settings
from .logging_setup import get_logger

log = get_logger("dnl.launcher.config")

def load_json(path: Path) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = json5.load(f)
    if not isinstance(data, dict):
        raise ValueError("Server record root must be an object")
    return data

def load_server_settings(path: Path, settings: Settings, *, server_id: Optional[str] = None) -> ServerSettings:
    log.info("Loading server record: %s", path)
    data = load_json(path)
    if server_id is not None:
        data["server_id"] = server_id
    if "server_id" not in data:
        raise ValueError(f"{path}: server_id missing")
    if not data.get("storage_root"):
        data["storage_root"] = settings.server_storage_root(str(data["server_id"]))
    return ServerSettings.model_validate(data)
