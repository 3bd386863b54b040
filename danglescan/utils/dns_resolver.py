"""CNAME resolvers for DANGLESCAN.

Every resolver exposes ``async resolve(hostname) -> ResolverOutput`` and never
raises for DNS-level problems: negative answers and invocation failures are
encoded in the returned :class:`~danglescan.takeover.models.ResolverOutput`.

* :class:`DigResolver` shells out to ``dig`` and reads the response header.
* :class:`AsyncDNSResolver` queries through aiodns.
"""

from __future__ import annotations

import asyncio
import re
from typing import Any, List, Optional, Protocol, Tuple

import aiodns

from danglescan.core.config import Config
from danglescan.core.errors import ResolverInvocationError
from danglescan.takeover.classifier import NXDOMAIN_MARKER
from danglescan.takeover.models import ResolverOutput
from danglescan.utils.logger import get_logger

logger = get_logger(__name__)

_STATUS_RE = re.compile(r"status:\s*([A-Z]+)")

# c-ares error codes surfaced through aiodns.error.DNSError.args[0]
_ARES_ENODATA = 1
_ARES_ENOTFOUND = 4


class Resolver(Protocol):
    """Anything that can look up the CNAME of a hostname."""

    async def resolve(self, hostname: str) -> ResolverOutput:
        ...


# ---------------------------------------------------------------------------
# dig
# ---------------------------------------------------------------------------


class DigResolver:
    """CNAME lookups through the ``dig`` command-line tool.

    Example::

        async with DigResolver(nameservers=["1.1.1.1"], timeout=3) as dns:
            output = await dns.resolve("www.example.com")
    """

    def __init__(
        self,
        nameservers: Optional[List[str]] = None,
        timeout: float = 5.0,
        dig_path: str = "dig",
    ) -> None:
        """Initialise the resolver.

        Args:
            nameservers: DNS servers to query; only the first is passed to dig.
                The system resolver is used when empty.
            timeout: Upper bound in seconds for one dig invocation.
            dig_path: Path or name of the dig executable.
        """
        self._nameservers = list(nameservers or [])
        self._timeout = timeout
        self._dig_path = dig_path

    async def __aenter__(self) -> "DigResolver":
        return self

    async def __aexit__(self, *_: Any) -> None:
        return None

    def build_command(self, hostname: str) -> List[str]:
        cmd = [self._dig_path, "+noall", "+comments", "+answer", "-t", "CNAME", "-q", hostname]
        if self._nameservers:
            cmd.insert(1, f"@{self._nameservers[0]}")
        return cmd

    async def resolve(self, hostname: str) -> ResolverOutput:
        """Look up the CNAME of *hostname*.

        Returns:
            Successful output with CNAME targets on stdout for ``NOERROR``;
            failed output with the header line as stderr for any other DNS
            status (so ``NXDOMAIN`` carries ``status: NXDOMAIN``); failed
            output with a diagnostic when dig cannot be run or times out.
        """
        try:
            returncode, stdout, stderr = await self._run(self.build_command(hostname))
        except ResolverInvocationError as exc:
            logger.debug("dig invocation for %s failed: %s", hostname, exc)
            return ResolverOutput(stderr=str(exc), failed=True)

        if returncode != 0:
            diagnostic = (stderr or stdout).strip() or f"dig exited with status {returncode}"
            return ResolverOutput(stderr=diagnostic, failed=True)

        return self.parse_output(stdout)

    @staticmethod
    def parse_output(stdout: str) -> ResolverOutput:
        """Translate ``dig +noall +comments +answer`` output into a resolver result."""
        status: Optional[str] = None
        header = ""
        targets: List[str] = []
        for line in stdout.splitlines():
            line = line.strip()
            if not line:
                continue
            if line.startswith(";"):
                match = _STATUS_RE.search(line)
                if match and status is None:
                    status = match.group(1)
                    header = line.lstrip("; ")
                continue
            fields = line.split()
            if len(fields) >= 5 and fields[3].upper() == "CNAME":
                targets.append(fields[4])

        if status is None:
            return ResolverOutput(
                stdout="\n".join(targets),
                stderr="dig output carried no response status",
                failed=True,
            )
        if status != "NOERROR":
            return ResolverOutput(stderr=header, failed=True)
        return ResolverOutput(stdout="\n".join(targets))

    async def _run(self, cmd: List[str]) -> Tuple[int, str, str]:
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as exc:
            raise ResolverInvocationError(f"cannot run {cmd[0]}: {exc}") from exc

        try:
            stdout_bytes, stderr_bytes = await asyncio.wait_for(
                process.communicate(), timeout=self._timeout
            )
        except asyncio.TimeoutError as exc:
            process.kill()
            await process.wait()
            raise ResolverInvocationError(
                f"dig timed out after {self._timeout:g}s"
            ) from exc

        return (
            process.returncode or 0,
            stdout_bytes.decode("utf-8", errors="replace"),
            stderr_bytes.decode("utf-8", errors="replace"),
        )


# ---------------------------------------------------------------------------
# aiodns
# ---------------------------------------------------------------------------


class AsyncDNSResolver:
    """CNAME lookups through aiodns.

    Example::

        async with AsyncDNSResolver(nameservers=["8.8.8.8"]) as dns:
            output = await dns.resolve("www.example.com")
    """

    def __init__(
        self,
        nameservers: Optional[List[str]] = None,
        timeout: float = 5.0,
    ) -> None:
        self._nameservers = list(nameservers or [])
        self._timeout = timeout
        self._resolver: Optional[aiodns.DNSResolver] = None

    async def __aenter__(self) -> "AsyncDNSResolver":
        self._init()
        return self

    async def __aexit__(self, *_: Any) -> None:
        self._resolver = None

    def _init(self) -> None:
        """Create the aiodns resolver; must run inside the event loop."""
        self._resolver = aiodns.DNSResolver(
            nameservers=self._nameservers or None,
            timeout=self._timeout,
        )

    async def resolve(self, hostname: str) -> ResolverOutput:
        if self._resolver is None:
            self._init()
        assert self._resolver is not None

        try:
            result = await asyncio.wait_for(
                self._resolver.query(hostname, "CNAME"), timeout=self._timeout
            )
        except asyncio.TimeoutError:
            return ResolverOutput(
                stderr=f"CNAME query timed out after {self._timeout:g}s", failed=True
            )
        except aiodns.error.DNSError as exc:
            return self._from_error(hostname, exc)
        except (UnicodeError, ValueError) as exc:
            # pycares rejects names it cannot encode before any query is sent
            return ResolverOutput(stderr=f"{hostname}: {exc}", failed=True)

        return ResolverOutput(stdout=self._format_cname(result))

    @staticmethod
    def _format_cname(result: Any) -> str:
        items = result if isinstance(result, list) else [result]
        return "\n".join(item.cname for item in items if getattr(item, "cname", ""))

    @staticmethod
    def _from_error(hostname: str, exc: Exception) -> ResolverOutput:
        code = exc.args[0] if exc.args else None
        message = exc.args[1] if len(exc.args) > 1 else str(exc)
        if code == _ARES_ENOTFOUND:
            return ResolverOutput(
                stderr=f"{NXDOMAIN_MARKER} ({hostname}: {message})", failed=True
            )
        if code == _ARES_ENODATA:
            return ResolverOutput()
        return ResolverOutput(stderr=f"{hostname}: {message}", failed=True)


def build_resolver(config: Config) -> Resolver:
    """Return the resolver selected by ``config.dns.resolver``."""
    dns_cfg = config.dns
    if dns_cfg.resolver == "aiodns":
        return AsyncDNSResolver(nameservers=dns_cfg.nameservers, timeout=dns_cfg.timeout)
    return DigResolver(
        nameservers=dns_cfg.nameservers,
        timeout=dns_cfg.timeout,
        dig_path=dns_cfg.dig_path,
    )
