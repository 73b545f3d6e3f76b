"""Background watcher process bookkeeping.

The daemon is a detached ``python -m barrelkeep.daemon_entry`` process. Its PID
and log live next to the scan cache in ``node_modules/.cache/barrelkeep/``.
"""
from __future__ import annotations

import os
import signal
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from barrelkeep.core.cache import CACHE_DIR
from barrelkeep.errors import BarrelkeepError
from barrelkeep.logger import get_logger

logger = get_logger(__name__)

PID_FILENAME = "daemon.pid"
LOG_FILENAME = "daemon.log"


class DaemonError(BarrelkeepError):
    """The daemon process could not be started."""
    pass


@dataclass(frozen=True)
class DaemonStatus:
    running: bool
    pid: Optional[int]
    log_file: str


def pid_file_path(cwd: str) -> Path:
    return Path(os.path.abspath(cwd), CACHE_DIR, PID_FILENAME)


def log_file_path(cwd: str) -> Path:
    return Path(os.path.abspath(cwd), CACHE_DIR, LOG_FILENAME)


def is_process_alive(pid: int) -> bool:
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists but owned by someone else.
        return True
    except OSError:
        return False
    return True


def read_pid(cwd: str) -> Optional[int]:
    try:
        raw = pid_file_path(cwd).read_text(encoding="utf-8").strip()
    except OSError:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def get_daemon_status(cwd: str) -> DaemonStatus:
    log_file = str(log_file_path(cwd))
    pid = read_pid(cwd)
    if pid is None:
        return DaemonStatus(False, None, log_file)
    alive = is_process_alive(pid)
    return DaemonStatus(alive, pid if alive else None, log_file)


def is_daemon_running(cwd: str) -> bool:
    return get_daemon_status(cwd).running


def daemon_command(cwd: str, config_path: Optional[str] = None) -> list[str]:
    cmd = [sys.executable, "-m", "barrelkeep.daemon_entry", "--cwd", os.path.abspath(cwd)]
    if config_path:
        cmd += ["--config", config_path]
    return cmd


def start_daemon(cwd: str, config_path: Optional[str] = None) -> DaemonStatus:
    """Start the daemon unless one is already running for ``cwd``."""
    status = get_daemon_status(cwd)
    if status.running:
        return status

    pid_path = pid_file_path(cwd)
    log_path = log_file_path(cwd)
    pid_path.parent.mkdir(parents=True, exist_ok=True)
    # Stale PID file from a dead process.
    pid_path.unlink(missing_ok=True)

    with open(log_path, "w", encoding="utf-8") as log:
        try:
            proc = subprocess.Popen(
                daemon_command(cwd, config_path),
                cwd=os.path.abspath(cwd),
                stdin=subprocess.DEVNULL,
                stdout=log,
                stderr=subprocess.STDOUT,
                start_new_session=True,
            )
        except OSError as e:
            raise DaemonError(f"Failed to start daemon: {e}") from e

    pid_path.write_text(str(proc.pid), encoding="utf-8")
    logger.debug("Daemon started", extra={"pid": proc.pid, "log_file": str(log_path)})
    return DaemonStatus(True, proc.pid, str(log_path))


def stop_daemon(cwd: str) -> DaemonStatus:
    """Send SIGTERM to a running daemon and remove its PID file."""
    log_file = str(log_file_path(cwd))
    pid = read_pid(cwd)
    if pid is None:
        return DaemonStatus(False, None, log_file)
    if is_process_alive(pid):
        try:
            os.kill(pid, signal.SIGTERM)
        except ProcessLookupError:
            pass
    pid_file_path(cwd).unlink(missing_ok=True)
    return DaemonStatus(False, None, log_file)
