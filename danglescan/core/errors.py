"""Exception types raised by DANGLESCAN components.

``NXDOMAIN`` and "no CNAME" answers are valid scan outcomes and never show up
here; these classes cover the cases that stop a run or a single query.
"""

from __future__ import annotations

from typing import Optional


class DanglescanError(Exception):
    """Base class for all DANGLESCAN errors."""


class InputFileError(DanglescanError):
    """An input file could not be opened or read.

    Attributes:
        path: The offending file path.
        cause: The underlying exception, if any.
    """

    def __init__(self, path: str, cause: Optional[BaseException] = None) -> None:
        self.path = path
        self.cause = cause
        reason = f": {cause}" if cause is not None else ""
        super().__init__(f"Cannot read input file {path}{reason}")


class ResolverInvocationError(DanglescanError):
    """The DNS query mechanism itself could not be invoked.

    Resolvers raise this internally and fold it into a failed
    :class:`~danglescan.takeover.models.ResolverOutput`.
    """


class ScanError(DanglescanError):
    """A scan was aborted because a single DNS query failed.

    Attributes:
        subdomain: Subdomain whose query failed.
        message: Diagnostic text taken from the resolver.
    """

    def __init__(self, subdomain: str, message: str) -> None:
        self.subdomain = subdomain
        self.message = message
        super().__init__(f"DNS query for {subdomain} failed: {message}")
