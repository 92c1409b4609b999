from __future__ import annotations
import argparse
import json
import uvicorn
from pathlib import Path
from .settings import Settings
from .api import create_app
from .logging_setup import setup_logging, get_logger
from .config_loader import load_server_settings
from .config_provisioner import ConfigProvisioner
from .console import LoggingConsole
from .exceptions import LauncherError
from .models import default_server_settings
from .server import ServerLauncher, build_launch_spec

log = get_logger("dnl.launcher.cli")

def _add_server_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--server", required=True, type=Path, help="Server record (JSON/JSON5)")
    p.add_argument("--server-id", default=None, help="Override server_id from the record")

def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="dnl-launcher")
    sub = parser.add_subparsers(dest="cmd", required=True)

    defaults_p = sub.add_parser("defaults", help="Print a default server record as JSON")
    defaults_p.add_argument("--server-id", required=True)
    defaults_p.add_argument("--storage-root", type=Path, default=None)
    defaults_p.add_argument("--ip", default="")

    cmd_p = sub.add_parser("command", help="Print the launch command line and exit")
    _add_server_args(cmd_p)

    prov_p = sub.add_parser("provision", help="Download GameUserSettings.ini and fill in server values")
    _add_server_args(prov_p)

    run_p = sub.add_parser("run", help="Start the server and wait for it; Ctrl+C kills it")
    _add_server_args(run_p)
    run_p.add_argument("--console", dest="capture", action="store_true", default=None,
                       help="Capture server console output into the launcher log")
    run_p.add_argument("--no-console", dest="capture", action="store_false",
                       help="Let the server own its console window")
    run_p.add_argument("--provision", action="store_true", help="Provision the config file before starting")

    api_p = sub.add_parser("api", help="Run REST API (FastAPI)")
    api_p.add_argument("--host", default="127.0.0.1")
    api_p.add_argument("--port", type=int, default=8000)

    args = parser.parse_args(argv)
    settings = Settings()
    setup_logging(settings)

    if args.cmd == "defaults":
        root = args.storage_root or settings.server_storage_root(args.server_id)
        server = default_server_settings(args.server_id, root, ip=args.ip)
        print(json.dumps(server.model_dump(mode="json"), indent=2, ensure_ascii=False))
        return 0

    if args.cmd == "api":
        app = create_app(settings)
        uvicorn.run(app, host=args.host, port=args.port, log_level=settings.log_level.lower())
        return 0

    try:
        server = load_server_settings(args.server, settings, server_id=args.server_id)
    except (OSError, ValueError) as e:
        log.error("Cannot load server record %s: %s", args.server, e)
        return 2

    if args.cmd == "command":
        spec = build_launch_spec(server, capture_output=settings.embed_console)
        print(f"{spec.executable} {spec.command_line}")
        return 0

    provisioner = ConfigProvisioner(settings)
    if args.cmd == "provision" or getattr(args, "provision", False):
        if not provisioner.provision(server):
            log.error("Config file for server %s was not created", server.server_id)
            return 1
        if args.cmd == "provision":
            return 0

    if args.cmd == "run":
        launcher = ServerLauncher(settings, console=LoggingConsole())
        try:
            handle = launcher.start(server, capture_output=args.capture)
        except LauncherError as e:
            log.error("Server %s failed to start: %s", server.server_id, e)
            return 1
        try:
            rc = handle.wait()
        except KeyboardInterrupt:
            log.info("Interrupted, stopping server %s", server.server_id)
            try:
                rc = launcher.stop(handle)
            except LauncherError as e:
                log.error("%s", e)
                return 1
        log.info("Server %s exited with rc=%s", server.server_id, rc)
        return int(rc if rc is not None else 0)

    return 2
