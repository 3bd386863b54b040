"""Data types shared by the takeover pipeline."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class DnsState(str, Enum):
    """Closed set of CNAME lookup outcomes."""

    CNAME_FOUND = "cname_found"
    NO_CNAME = "no_cname"
    NXDOMAIN = "nxdomain"
    QUERY_ERROR = "query_error"


@dataclass(frozen=True)
class ResolverOutput:
    """Raw result of one resolver invocation.

    Attributes:
        stdout: CNAME target line(s), empty when there is no record.
        stderr: Diagnostic text; carries ``status: NXDOMAIN`` for missing names.
        failed: ``True`` when the invocation failed (non-zero exit, transport
            error, timeout, or a non-NOERROR DNS status).
    """

    stdout: str = ""
    stderr: str = ""
    failed: bool = False


@dataclass(frozen=True)
class DnsOutcome:
    """Tagged DNS outcome. ``target`` is only set for ``CNAME_FOUND`` and
    ``message`` only for ``QUERY_ERROR``."""

    state: DnsState
    target: str = ""
    message: str = ""

    @classmethod
    def cname_found(cls, target: str) -> "DnsOutcome":
        return cls(DnsState.CNAME_FOUND, target=target)

    @classmethod
    def no_cname(cls) -> "DnsOutcome":
        return cls(DnsState.NO_CNAME)

    @classmethod
    def nxdomain(cls) -> "DnsOutcome":
        return cls(DnsState.NXDOMAIN)

    @classmethod
    def query_error(cls, message: str) -> "DnsOutcome":
        return cls(DnsState.QUERY_ERROR, message=message)


@dataclass(frozen=True)
class ResultRecord:
    """Verdict for one scanned subdomain.

    Attributes:
        subdomain: Input hostname, exactly as read.
        raw_answer: CNAME answer for ``CNAME_FOUND``, else the error message
            for ``QUERY_ERROR``, else empty.
        state: Classified DNS state.
        is_vulnerable: ``True`` only for a matched ``CNAME_FOUND`` answer.
        cname: Normalised domain used for matching.
        matched_fingerprint: First fingerprint that matched, if any.
    """

    subdomain: str
    raw_answer: str
    state: DnsState
    is_vulnerable: bool = False
    cname: str = ""
    matched_fingerprint: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        return {
            "subdomain": self.subdomain,
            "raw_answer": self.raw_answer,
            "state": self.state.value,
            "is_vulnerable": self.is_vulnerable,
            "cname": self.cname,
            "matched_fingerprint": self.matched_fingerprint,
        }


@dataclass
class ScanResult:
    """Ordered result set for one scan run.

    Records keep input order and include every input line, duplicates
    included. :meth:`by_subdomain` gives the last-write-wins mapping view.

    Attributes:
        records: One :class:`ResultRecord` per input subdomain.
        started_at: Unix timestamp when the scan began.
        finished_at: Unix timestamp when the scan ended (or ``None``).
    """

    records: List[ResultRecord] = field(default_factory=list)
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None

    @property
    def duration(self) -> float:
        """Elapsed scan time in seconds."""
        if self.finished_at is None:
            return time.time() - self.started_at
        return self.finished_at - self.started_at

    @property
    def vulnerable(self) -> List[ResultRecord]:
        return [r for r in self.records if r.is_vulnerable]

    def by_subdomain(self) -> Dict[str, ResultRecord]:
        """Map each subdomain to its record; later duplicates win."""
        return {r.subdomain: r for r in self.records}

    def stats(self) -> Dict[str, int]:
        counts = {state.value: 0 for state in DnsState}
        for record in self.records:
            counts[record.state.value] += 1
        counts["checked"] = len(self.records)
        counts["vulnerable"] = len(self.vulnerable)
        return counts
