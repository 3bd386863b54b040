"""JSON export for DANGLESCAN scan results."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from danglescan import __version__
from danglescan.takeover.models import ScanResult


class JSONReporter:
    """Serialise scan results to a structured JSON file."""

    def generate(
        self, result: ScanResult, output_path: str, only_vulnerable: bool = False
    ) -> Path:
        """Write *result* as pretty-printed JSON to *output_path*.

        The summary always covers the whole scan; ``records`` is restricted
        to vulnerable subdomains when *only_vulnerable* is set.

        Returns:
            Path to the generated file.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        records = result.vulnerable if only_vulnerable else result.records
        report: Dict[str, Any] = {
            "meta": {
                "tool": "DANGLESCAN",
                "version": __version__,
                "report_generated_at": datetime.now(timezone.utc).isoformat(),
            },
            "scan": {
                "scan_start": result.started_at,
                "scan_end": result.finished_at,
                "duration_seconds": round(result.duration, 2),
            },
            "summary": result.stats(),
            "records": [r.to_dict() for r in records],
        }

        path.write_text(json.dumps(report, indent=2, default=str), encoding="utf-8")
        return path
