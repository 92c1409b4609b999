from __future__ import annotations
import os
import subprocess
import threading
from dataclasses import dataclass, field
from typing import IO, List, Optional
from .console import ConsoleSink, LoggingConsole
from .exceptions import SpawnFailure, TerminationFailure
from .logging_setup import get_logger
from .models import LaunchSpec

log = get_logger("dnl.launcher.proc")

@dataclass
class ProcessHandle:
    server_id: str
    proc: subprocess.Popen
    spec: LaunchSpec
    readers: List[threading.Thread] = field(default_factory=list)

    @property
    def pid(self) -> int:
        return self.proc.pid

    @property
    def captured(self) -> bool:
        return self.spec.capture_output

    def poll(self) -> Optional[int]:
        return self.proc.poll()

    def is_running(self) -> bool:
        return self.poll() is None

    def wait(self, timeout: Optional[float] = None) -> int:
        rc = self.proc.wait(timeout=timeout)
        self.join_readers(timeout)
        return rc

    def join_readers(self, timeout: Optional[float] = None) -> None:
        for t in self.readers:
            t.join(timeout)

    def send_command(self, command: str) -> None:
        if self.proc.stdin is None:
            return
        if not command.endswith("\n"):
            command += "\n"
        self.proc.stdin.write(command)
        self.proc.stdin.flush()

def stream_reader(pipe: IO[str], server_id: str, sink: ConsoleSink) -> None:
    """
    Reads output from a subprocess pipe line by line and hands each line to the sink.
    Runs in its own thread until EOF; a failing sink loses the line, not the pipe.
    """
    sink_failed = False
    try:
        for line in iter(pipe.readline, ""):
            try:
                sink.add_output(server_id, line.rstrip("\r\n"))
            except Exception:
                # report once per stream to avoid flooding the log
                if not sink_failed:
                    log.exception("Console sink failed for server %s; dropping lines it rejects", server_id)
                    sink_failed = True
    except Exception:
        log.exception("Error while reading console of server %s", server_id)
    finally:
        try:
            pipe.close()
        except OSError:
            pass

def _window_options(capture: bool) -> dict:
    if os.name != "nt":
        return {}
    if capture:
        return {"creationflags": subprocess.CREATE_NO_WINDOW}
    si = subprocess.STARTUPINFO()
    si.dwFlags |= subprocess.STARTF_USESHOWWINDOW
    si.wShowWindow = 2  # SW_SHOWMINIMIZED
    return {"creationflags": subprocess.CREATE_NEW_CONSOLE, "startupinfo": si}

def start_process(spec: LaunchSpec, sink: Optional[ConsoleSink] = None) -> ProcessHandle:
    log.info("Starting server %s: %s %s", spec.server_id, spec.executable, spec.command_line)
    kwargs = _window_options(spec.capture_output)
    if spec.capture_output:
        kwargs.update(
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            bufsize=1,
        )

    try:
        proc = subprocess.Popen(spec.argv(), cwd=str(spec.working_dir), **kwargs)
    except OSError as e:
        raise SpawnFailure(f"Failed to start {spec.executable}: {e.strerror or e}") from e

    handle = ProcessHandle(server_id=spec.server_id, proc=proc, spec=spec)
    if spec.capture_output:
        sink = sink if sink is not None else LoggingConsole()
        for name, pipe in (("stdout", proc.stdout), ("stderr", proc.stderr)):
            t = threading.Thread(
                target=stream_reader,
                args=(pipe, spec.server_id, sink),
                name=f"dnl-{spec.server_id}-{name}",
                daemon=True,
            )
            t.start()
            handle.readers.append(t)
    log.info("Server %s started (pid=%s, console=%s)", spec.server_id, proc.pid,
             "captured" if spec.capture_output else "window")
    return handle

def stop_process(handle: ProcessHandle, timeout: float = 10.0) -> int:
    """Kill the server process and wait (bounded) for it to exit. Returns the exit code."""
    proc = handle.proc
    rc = proc.poll()
    if rc is not None:
        log.debug("Server %s (pid=%s) already exited with rc=%s", handle.server_id, proc.pid, rc)
        handle.join_readers(timeout)
        return rc

    log.info("Killing server %s (pid=%s)", handle.server_id, proc.pid)
    try:
        proc.kill()
    except OSError as e:
        raise TerminationFailure(f"Failed to kill server {handle.server_id} (pid={proc.pid}): {e}") from e
    try:
        rc = proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise TerminationFailure(
            f"Server {handle.server_id} (pid={proc.pid}) did not exit within {timeout:g}s"
        ) from e
    handle.join_readers(timeout)
    if proc.stdin is not None:
        try:
            proc.stdin.close()
        except OSError:
            pass
    log.info("Server %s exited with rc=%s", handle.server_id, rc)
    return rc
