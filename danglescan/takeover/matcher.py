"""Fingerprint matching against normalised CNAME domains.

Matching is plain, case-sensitive substring containment. It is not
label-aware: ``notamazonaws.com`` matches the ``amazonaws.com`` fingerprint.
"""

from __future__ import annotations

from typing import Iterable, Optional


def first_match(domain: str, fingerprints: Iterable[str]) -> Optional[str]:
    """Return the first fingerprint contained in *domain*, in given order.

    Args:
        domain: Normalised CNAME domain.
        fingerprints: Fingerprint substrings.

    Returns:
        The matching fingerprint, or ``None``.
    """
    if not domain:
        return None
    for fingerprint in fingerprints:
        if fingerprint and fingerprint in domain:
            return fingerprint
    return None


def matches(domain: str, fingerprints: Iterable[str]) -> bool:
    """Return ``True`` if any fingerprint is a substring of *domain*."""
    return first_match(domain, fingerprints) is not None
