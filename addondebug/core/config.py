from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

DEFAULT_LOG_FILE = "gw2-addon-debug.log"
GAME_MARKERS: Tuple[str, ...] = ("Gw2-64.exe", "Gw2.dat")


@dataclass
class ScanConfig:
    target_dir: Path
    log_file: Optional[Path] = Path(DEFAULT_LOG_FILE)
    report_path: Optional[Path] = None
    check_game_dir: bool = True
    game_markers: Tuple[str, ...] = GAME_MARKERS
    workers: int = 1
    verbose: bool = False

    @property
    def log_level(self) -> int:
        return logging.DEBUG if self.verbose else logging.INFO

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "ScanConfig":
        target = Path(args.directory) if args.directory else Path.cwd()
        return cls(
            target_dir=target.resolve(),
            log_file=None if args.no_log_file else Path(args.log_file),
            report_path=Path(args.report) if args.report else None,
            check_game_dir=not args.skip_game_check,
            workers=max(1, args.workers),
            verbose=args.verbose,
        )
