"""Classify raw resolver output into a :class:`DnsOutcome`.

A CNAME lookup has three distinct "no record" shapes that must stay apart:
an empty answer (``NO_CNAME``), a non-existent name (``NXDOMAIN``), and a
failed probe (``QUERY_ERROR``). Only the last one is surfaced as a failure.
"""

from __future__ import annotations

from danglescan.takeover.models import DnsOutcome, ResolverOutput

NXDOMAIN_MARKER = "status: NXDOMAIN"

_GENERIC_QUERY_ERROR = "DNS query failed without diagnostic output"


def classify(raw_stdout: str, raw_stderr: str, process_failed: bool) -> DnsOutcome:
    """Return the DNS outcome for one resolver invocation.

    Args:
        raw_stdout: Resolver standard output (the CNAME target, if any).
        raw_stderr: Resolver diagnostic output.
        process_failed: Whether the invocation itself failed.

    Returns:
        Exactly one of ``NXDOMAIN``, ``QUERY_ERROR``, ``NO_CNAME`` or
        ``CNAME_FOUND``.
    """
    stderr = raw_stderr or ""
    if process_failed:
        if NXDOMAIN_MARKER in stderr:
            return DnsOutcome.nxdomain()
        return DnsOutcome.query_error(stderr.strip() or _GENERIC_QUERY_ERROR)

    target = (raw_stdout or "").strip()
    if not target:
        return DnsOutcome.no_cname()
    return DnsOutcome.cname_found(target)


def classify_output(output: ResolverOutput) -> DnsOutcome:
    """Shortcut for :func:`classify` on a :class:`ResolverOutput`."""
    return classify(output.stdout, output.stderr, output.failed)
