#!/usr/bin/env python3
"""Daemon process entry point.

Started detached by ``barrelkeep.daemon.start_daemon`` with stdout/stderr
redirected to the daemon log. SIGTERM stops watching and exits; SIGHUP
restarts the session with a freshly loaded config.
"""
from __future__ import annotations

import argparse
import os
import signal
import sys
import threading
from typing import List, Optional

from barrelkeep.config.loader import load_resolved_config
from barrelkeep.logger import get_logger, use_json_logging
from barrelkeep.watch_core.session import WatchSession

logger = get_logger("barrelkeep.daemon")


class DaemonRunner:
    def __init__(self, cwd: str, config_path: Optional[str] = None):
        self.cwd = os.path.abspath(cwd)
        self.config_path = config_path
        self.session: Optional[WatchSession] = None
        self.stop_event = threading.Event()
        self.restart_event = threading.Event()

    def start(self) -> None:
        logger.info("Starting daemon", extra={"cwd": self.cwd})
        config = load_resolved_config(self.cwd, self.config_path)
        session = WatchSession(self.cwd, config, config_path=self.config_path)
        written = session.run_initial()
        if written:
            logger.info("Initial generation", extra={"count": len(written)})
        session.start()
        self.session = session
        logger.info("Watching for changes")

    def shutdown(self) -> None:
        if self.session is not None:
            session, self.session = self.session, None
            session.stop()

    def request_stop(self, signum=None, frame=None) -> None:
        self.stop_event.set()

    def request_restart(self, signum=None, frame=None) -> None:
        self.restart_event.set()

    def run(self) -> int:
        signal.signal(signal.SIGTERM, self.request_stop)
        signal.signal(signal.SIGINT, self.request_stop)
        if hasattr(signal, "SIGHUP"):
            signal.signal(signal.SIGHUP, self.request_restart)

        self.start()
        try:
            while not self.stop_event.wait(0.5):
                if self.restart_event.is_set():
                    self.restart_event.clear()
                    logger.info("SIGHUP received, restarting")
                    self.shutdown()
                    try:
                        self.start()
                    except Exception as exc:
                        logger.error("Restart failed", extra={"error": str(exc)}, exc_info=True)
                        return 1
        finally:
            logger.info("Shutting down")
            self.shutdown()
        return 0


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="barrelkeep-daemon")
    parser.add_argument("--cwd", default=os.getcwd())
    parser.add_argument("--config", default=None)
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    use_json_logging()
    args = parse_args(argv)
    try:
        return DaemonRunner(args.cwd, args.config).run()
    except Exception as exc:
        logger.error("Fatal error", extra={"error": str(exc)}, exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
