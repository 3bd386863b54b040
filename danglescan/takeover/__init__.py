"""Resolution classification, CNAME normalisation and fingerprint matching."""

from danglescan.takeover.classifier import classify, classify_output
from danglescan.takeover.matcher import first_match, matches
from danglescan.takeover.models import (
    DnsOutcome,
    DnsState,
    ResolverOutput,
    ResultRecord,
    ScanResult,
)
from danglescan.takeover.normalizer import normalize

__all__ = [
    "DnsOutcome",
    "DnsState",
    "ResolverOutput",
    "ResultRecord",
    "ScanResult",
    "classify",
    "classify_output",
    "first_match",
    "matches",
    "normalize",
]
