from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from addondebug import __app_name__, __version__
from addondebug.core.config import DEFAULT_LOG_FILE, ScanConfig
from addondebug.core.scan_service import ScanService
from addondebug.infra.filesystem import GameDirError, check_game_dir
from addondebug.infra.logging_utils import LOGGER, attach_log_file, detach_handler
from addondebug.reports.json_report import write_report


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=__app_name__,
        description="Classify addon-related DLLs in a game directory for troubleshooting.",
    )
    parser.add_argument("directory", nargs="?", help="Directory to inspect (defaults to the current directory)")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE, help="Log file written next to stdout output")
    parser.add_argument("--no-log-file", action="store_true", help="Log to stdout only")
    parser.add_argument("--report", help="Write a JSON report to this path")
    parser.add_argument("--skip-game-check", action="store_true", help="Do not require Gw2-64.exe and Gw2.dat")
    parser.add_argument("--workers", type=int, default=1, help="Number of files classified in parallel")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"{__app_name__} {__version__}")
    return parser


def reset_log_file(path: Path) -> None:
    if not path.exists():
        return
    try:
        path.unlink()
    except OSError:
        print(f"Failed to delete {path}, log file will be appended to.", file=sys.stderr)


def run(config: ScanConfig) -> int:
    LOGGER.info("Starting debug", extra={"extra_data": {"cwd": str(config.target_dir), "version": __version__}})
    if config.check_game_dir:
        try:
            check_game_dir(config.target_dir, config.game_markers)
        except GameDirError as exc:
            LOGGER.error("Are you running this from the game directory?", extra={"extra_data": {"error": str(exc)}})
            return 1
    elif not config.target_dir.is_dir():
        LOGGER.error("Target is not a directory", extra={"extra_data": {"path": str(config.target_dir)}})
        return 1

    service = ScanService(workers=config.workers)
    try:
        service.inventory(config.target_dir)
        summary = service.run(config.target_dir)
    except OSError as exc:
        LOGGER.error("Failed to walk directory", extra={"extra_data": {"error": str(exc)}})
        return 1

    if config.report_path:
        write_report(summary, config.report_path)
    LOGGER.info(
        "Debug finished",
        extra={"extra_data": {"modules": len(summary.modules), "failures": len(summary.failures)}},
    )
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = create_argument_parser().parse_args(argv)
    config = ScanConfig.from_args(args)
    LOGGER.setLevel(config.log_level)

    file_handler: Optional[logging.Handler] = None
    if config.log_file:
        reset_log_file(config.log_file)
        try:
            config.log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = attach_log_file(config.log_file)
        except OSError as exc:
            LOGGER.error("Failed to open log file", extra={"extra_data": {"path": str(config.log_file), "error": str(exc)}})
            return 1
    try:
        return run(config)
    finally:
        if file_handler is not None:
            detach_handler(file_handler)
