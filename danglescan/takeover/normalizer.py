"""CNAME target normalisation prior to fingerprint matching."""

from __future__ import annotations

NO_RECORD_SENTINEL = "No CNAME record"

_WILDCARD_PREFIX = "*."


def normalize(cname_target: str, strip_root_dot: bool = False) -> str:
    """Return the canonical domain used for fingerprint matching.

    Only the literal two-character ``*.`` wildcard label is removed; a bare
    leading ``*`` is kept. The trailing root dot is kept unless
    *strip_root_dot* is set.

    Args:
        cname_target: Raw CNAME answer.
        strip_root_dot: Remove a single trailing ``.`` from the result.

    Returns:
        Normalised domain, or ``""`` for empty or "no record" input.
    """
    domain = (cname_target or "").strip()
    if not domain or domain == NO_RECORD_SENTINEL:
        return ""

    if domain.startswith(_WILDCARD_PREFIX):
        domain = domain[len(_WILDCARD_PREFIX):]

    if strip_root_dot and domain.endswith("."):
        domain = domain[:-1]
    return domain
