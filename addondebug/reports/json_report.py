from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from addondebug import __app_name__, __version__
from addondebug.core import models
from addondebug.infra.logging_utils import LOGGER


def build_report(summary: models.ScanSummary) -> Dict[str, Any]:
    payload: Dict[str, Any] = {
        "app": __app_name__,
        "version": __version__,
        "generated_at": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    }
    payload.update(summary.as_dict())
    return payload


def write_report(summary: models.ScanSummary, output_path: Path) -> Path:
    payload = build_report(summary)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
    LOGGER.info(
        "Report generated",
        extra={"extra_data": {"output": str(output_path), "modules": len(summary.modules), "failures": len(summary.failures)}},
    )
    return output_path
