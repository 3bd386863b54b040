"""CSV export for DANGLESCAN scan results."""

from __future__ import annotations

import csv
from pathlib import Path

from danglescan.reporting.text_report import cname_display
from danglescan.takeover.models import ScanResult

_FIELDNAMES = [
    "subdomain",
    "cname",
    "state",
    "vulnerable",
    "matched_fingerprint",
]


class CSVReporter:
    """Serialise scan results to a CSV file, one row per record."""

    def generate(
        self, result: ScanResult, output_path: str, only_vulnerable: bool = False
    ) -> Path:
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)

        records = result.vulnerable if only_vulnerable else result.records
        with path.open("w", newline="", encoding="utf-8") as fh:
            writer = csv.DictWriter(fh, fieldnames=_FIELDNAMES)
            writer.writeheader()
            for record in records:
                writer.writerow({
                    "subdomain": record.subdomain,
                    "cname": cname_display(record),
                    "state": record.state.value,
                    "vulnerable": "Yes" if record.is_vulnerable else "No",
                    "matched_fingerprint": record.matched_fingerprint or "",
                })
        return path
