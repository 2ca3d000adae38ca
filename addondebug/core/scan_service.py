from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, List, Optional, Union

from addondebug.core import models
from addondebug.core.classifier import classify
from addondebug.core.rule_engine import MarkerEngine
from addondebug.infra.filesystem import find_dlls, hash_bytes, iter_files, relative_name
from addondebug.infra.logging_utils import LOGGER
from addondebug.infra.pe_reader import extract_facts

FactExtractor = Callable[[Path], models.ModuleFacts]
Outcome = Union[models.ModuleReport, models.ScanFailure]


class ScanService:
    def __init__(self, extractor: Optional[FactExtractor] = None, workers: int = 1) -> None:
        self.extractor = extractor or extract_facts
        self.workers = max(1, workers)
        self.marker_engine = MarkerEngine()

    def inventory(self, root: Path) -> int:
        count = 0
        for path, size in iter_files(root):
            LOGGER.info("Found file", extra={"extra_data": {"path": relative_name(path, root), "size": size}})
            count += 1
        return count

    def inspect(self, path: Path, root: Path) -> Outcome:
        name = relative_name(path, root)
        try:
            facts = self.extractor(path)
        except models.ExtractionError as exc:
            return models.ScanFailure(path=name, error=str(exc))
        except Exception as exc:  # pragma: no cover - malformed images pefile trips over
            LOGGER.debug("Unexpected extractor error", exc_info=True)
            return models.ScanFailure(path=name, error=f"unexpected error: {exc}")
        hashes = hash_bytes(facts.raw_bytes)
        return models.ModuleReport(
            path=name,
            size=len(facts.raw_bytes),
            sha256=hashes.sha256,
            blake3=hashes.blake3,
            record=classify(facts),
            markers=[m.name for m in self.marker_engine.scan(facts.raw_bytes)],
        )

    def report(self, path: str, outcome: Outcome) -> None:
        if isinstance(outcome, models.ScanFailure):
            LOGGER.error("Failed to parse DLL", extra={"extra_data": {"file": path, "error": outcome.error}})
            return
        LOGGER.info(
            "Parsed DLL",
            extra={
                "extra_data": {
                    "file": path,
                    "info": str(outcome.record),
                    "labels": outcome.record.true_labels(),
                    "sha256": outcome.sha256,
                }
            },
        )

    def run(self, root: Path) -> models.ScanSummary:
        dll_paths = find_dlls(root)
        LOGGER.info("Classifying DLLs", extra={"extra_data": {"count": len(dll_paths), "workers": self.workers}})
        if self.workers > 1:
            with ThreadPoolExecutor(max_workers=self.workers) as pool:
                outcomes: List[Outcome] = list(pool.map(lambda p: self.inspect(p, root), dll_paths))
        else:
            outcomes = [self.inspect(p, root) for p in dll_paths]
        summary = models.ScanSummary(target=root)
        for outcome in sorted(outcomes, key=lambda o: o.path):
            self.report(outcome.path, outcome)
            if isinstance(outcome, models.ScanFailure):
                summary.failures.append(outcome)
            else:
                summary.modules.append(outcome)
        return summary
