"""Plain-text report lines for DANGLESCAN results.

Each record renders as::

    Subdomain: <name>, CNAME: <value-or-status>, Vulnerable: <Yes|No>
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from danglescan.takeover.models import DnsState, ResultRecord, ScanResult
from danglescan.takeover.normalizer import NO_RECORD_SENTINEL


def cname_display(record: ResultRecord) -> str:
    """Return the CNAME value, or a status label when there is none."""
    if record.state is DnsState.CNAME_FOUND:
        return record.raw_answer
    if record.state is DnsState.NO_CNAME:
        return NO_RECORD_SENTINEL
    if record.state is DnsState.NXDOMAIN:
        return "NXDOMAIN"
    return f"Query error: {record.raw_answer}"


def format_record(record: ResultRecord) -> str:
    verdict = "Yes" if record.is_vulnerable else "No"
    return (
        f"Subdomain: {record.subdomain}, "
        f"CNAME: {cname_display(record)}, "
        f"Vulnerable: {verdict}"
    )


def format_lines(records: Iterable[ResultRecord], only_vulnerable: bool = False) -> List[str]:
    return [
        format_record(r) for r in records if r.is_vulnerable or not only_vulnerable
    ]


class TextReporter:
    """Write one report line per record."""

    def generate(
        self, result: ScanResult, output_path: str, only_vulnerable: bool = False
    ) -> Path:
        """Write the report for *result* to *output_path*.

        Args:
            result: Completed scan result.
            output_path: Destination file path.
            only_vulnerable: Write ``Vulnerable: Yes`` lines only.

        Returns:
            Path to the generated file.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        lines = format_lines(result.records, only_vulnerable=only_vulnerable)
        path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")
        return path
