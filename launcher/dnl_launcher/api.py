from __future__ import annotations
from dataclasses import asdict
from pathlib import Path
from typing import Dict, Optional, Union
from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, ValidationError
from .config_provisioner import ConfigProvisioner
from .console import ServerConsole
from .exceptions import StartError, StopError
from .game import DARK_AND_LIGHT
from .logging_setup import get_logger
from .models import ServerSettings
from .process_runner import ProcessHandle
from .server import ServerLauncher
from .settings import Settings

log = get_logger("dnl.launcher.api")

class ActionResult(BaseModel):
    ok: bool
    detail: str | None = None
    data: dict | None = None

class ServerRequest(BaseModel):
    name: str = ""
    ip: str = ""
    port: Union[int, str, None] = None
    query_port: Union[int, str, None] = None
    map_name: str = ""
    max_players: Union[int, str, None] = None
    params: str = ""
    storage_root: Optional[Path] = None
    capture_output: Optional[bool] = None

class CommandRequest(BaseModel):
    command: str

def create_app(settings: Settings) -> FastAPI:
    app = FastAPI(title="Dark & Light Launcher API", version="1.1.0")
    console = ServerConsole()
    launcher = ServerLauncher(settings, console=console)
    provisioner = ConfigProvisioner(settings)
    handles: Dict[str, ProcessHandle] = {}

    def to_server(server_id: str, body: ServerRequest) -> ServerSettings:
        data = body.model_dump(exclude={"capture_output"})
        data["server_id"] = server_id
        if data["storage_root"] is None:
            data["storage_root"] = settings.server_storage_root(server_id)
        try:
            return ServerSettings.model_validate(data)
        except ValidationError as e:
            raise HTTPException(status_code=422, detail=e.errors(include_url=False, include_context=False, include_input=False))

    def running_handle(server_id: str) -> ProcessHandle:
        h = handles.get(server_id)
        if h is None:
            raise HTTPException(status_code=404, detail="server_not_started")
        return h

    @app.get("/health")
    def health():
        return {"ok": True}

    @app.get("/game")
    def game():
        return asdict(DARK_AND_LIGHT)

    @app.post("/servers/{server_id}/provision", response_model=ActionResult)
    def provision(server_id: str, body: ServerRequest):
        result = provisioner.provision_result(to_server(server_id, body))
        data = {
            "path": str(result.path),
            "downloaded": result.downloaded,
            "substituted": result.substituted,
            "error": result.error,
        }
        if not result.ok:
            raise HTTPException(status_code=502, detail=result.error or "config_not_created")
        return ActionResult(ok=True, detail="provisioned", data=data)

    @app.post("/servers/{server_id}/start", response_model=ActionResult)
    def start(server_id: str, body: ServerRequest):
        current = handles.get(server_id)
        if current is not None and current.is_running():
            raise HTTPException(status_code=409, detail="already_running")
        server = to_server(server_id, body)
        console.clear(server_id)
        try:
            h = launcher.start(server, capture_output=body.capture_output)
        except StartError as e:
            log.error("Start of server %s failed: %s", server_id, e)
            raise HTTPException(status_code=500, detail=str(e))
        handles[server_id] = h
        return ActionResult(ok=True, detail="started", data={
            "pid": h.pid,
            "command_line": h.spec.command_line,
            "captured": h.captured,
        })

    @app.post("/servers/{server_id}/stop", response_model=ActionResult)
    def stop(server_id: str):
        h = running_handle(server_id)
        try:
            rc = launcher.stop(h)
        except StopError as e:
            log.error("Stop of server %s failed: %s", server_id, e)
            raise HTTPException(status_code=500, detail=str(e))
        handles.pop(server_id, None)
        return ActionResult(ok=True, detail="stopped", data={"returncode": rc})

    @app.get("/servers/{server_id}/status", response_model=ActionResult)
    def status(server_id: str):
        h = handles.get(server_id)
        if h is None:
            return ActionResult(ok=True, data={"running": False})
        return ActionResult(ok=True, data={
            "running": h.is_running(),
            "pid": h.pid,
            "returncode": h.poll(),
            "captured": h.captured,
        })

    @app.get("/servers/{server_id}/console")
    def get_console(server_id: str, tail: int = Query(default=200, ge=0, le=5000)):
        lines = console.lines(server_id)
        lines = lines[-tail:] if tail else []
        return {
            "ok": True,
            "id": server_id,
            "entries": [{"n": i + 1, "line": line} for i, line in enumerate(lines)],
        }

    @app.post("/servers/{server_id}/command", response_model=ActionResult)
    def command(server_id: str, body: CommandRequest):
        h = running_handle(server_id)
        if not h.captured or not h.is_running():
            raise HTTPException(status_code=409, detail="console_not_available")
        h.send_command(body.command)
        return ActionResult(ok=True, detail="sent")

    return app
