"""Scan orchestrator for DANGLESCAN.

:class:`ScanEngine` drives every subdomain through
resolve → classify → normalise → match and collects one
:class:`~danglescan.takeover.models.ResultRecord` per input line.

Lookups run as asyncio tasks bounded by ``scan.concurrency``. Each record is
committed into the slot of its input position, so the final result keeps
input order whatever the completion order.

Under the default ``abort`` error policy the first ``QUERY_ERROR`` cancels all
in-flight lookups, discards their results and raises
:class:`~danglescan.core.errors.ScanError`. The ``isolate`` policy keeps the
failed lookup as a ``QUERY_ERROR`` record and carries on.
"""

from __future__ import annotations

import asyncio
import inspect
import time
from typing import Any, Dict, List, Optional, Sequence

from danglescan.core.config import Config
from danglescan.core.errors import ScanError
from danglescan.takeover.classifier import classify_output
from danglescan.takeover.matcher import first_match
from danglescan.takeover.models import DnsState, ResultRecord, ScanResult
from danglescan.takeover.normalizer import normalize
from danglescan.utils.dns_resolver import Resolver, build_resolver
from danglescan.utils.logger import get_logger

logger = get_logger(__name__)


class ScanEngine:
    """Runs a takeover scan over a list of subdomains.

    Example::

        engine = ScanEngine(config=Config(), resolver=DigResolver())
        result = await engine.run(["www.example.com"], ("amazonaws.com",))
        for record in result.vulnerable:
            print(record.subdomain)
    """

    def __init__(
        self,
        config: Optional[Config] = None,
        resolver: Optional[Resolver] = None,
    ) -> None:
        """Initialise the engine.

        Args:
            config: Scan configuration; defaults are used when ``None``.
            resolver: CNAME resolver; built from ``config.dns`` when ``None``.
        """
        self.config: Config = config or Config()
        self.resolver: Resolver = resolver or build_resolver(self.config)
        self._event_handlers: List[Any] = []

    def on_event(self, handler: Any) -> None:
        """Register a callable to receive scan events.

        Args:
            handler: An async or sync callable that accepts a ``dict`` event.
        """
        self._event_handlers.append(handler)

    async def run(
        self,
        subdomains: Sequence[str],
        fingerprints: Sequence[str],
    ) -> ScanResult:
        """Scan *subdomains* against *fingerprints*.

        Returns:
            :class:`ScanResult` with one record per input subdomain.

        Raises:
            ScanError: Under the ``abort`` policy, when any lookup fails.
        """
        fingerprints = tuple(fingerprints)
        result = ScanResult(started_at=time.time())
        slots: List[Optional[ResultRecord]] = [None] * len(subdomains)
        sem = asyncio.Semaphore(self.config.scan.concurrency)
        aborted = asyncio.Event()

        logger.info(
            "Takeover scan starting — %d subdomains, %d fingerprints",
            len(subdomains), len(fingerprints),
        )
        await self._emit({"event": "scan_started", "subdomains": len(subdomains)})

        async def _check_one(index: int, subdomain: str) -> None:
            async with sem:
                # Queued lookups must not start once another one has failed.
                if aborted.is_set():
                    return
                try:
                    record = await self.check_subdomain(subdomain, fingerprints)
                except Exception:
                    aborted.set()
                    raise
            slots[index] = record
            await self._emit({"event": "subdomain_checked", "record": record})

        tasks = [
            asyncio.ensure_future(_check_one(i, sub)) for i, sub in enumerate(subdomains)
        ]
        try:
            await asyncio.gather(*tasks)
        except Exception as exc:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.error("Scan aborted: %s", exc)
            await self._emit(
                {
                    "event": "scan_aborted",
                    "subdomain": getattr(exc, "subdomain", None),
                    "error": getattr(exc, "message", str(exc)),
                }
            )
            raise

        result.records = [r for r in slots if r is not None]
        result.finished_at = time.time()

        stats = result.stats()
        logger.info(
            "Takeover scan complete — %d checked, %d vulnerable, %.1fs",
            stats["checked"], stats["vulnerable"], result.duration,
        )
        await self._emit({"event": "scan_finished", "stats": stats})
        return result

    async def check_subdomain(
        self, subdomain: str, fingerprints: Sequence[str]
    ) -> ResultRecord:
        """Resolve and classify a single subdomain.

        Raises:
            ScanError: On a failed lookup under the ``abort`` policy.
        """
        output = await self.resolver.resolve(subdomain)
        outcome = classify_output(output)

        if outcome.state is DnsState.QUERY_ERROR:
            if self.config.scan.error_policy == "abort":
                raise ScanError(subdomain, outcome.message)
            logger.warning("Query for %s failed: %s", subdomain, outcome.message)
            return ResultRecord(
                subdomain=subdomain,
                raw_answer=outcome.message,
                state=outcome.state,
            )

        if outcome.state is not DnsState.CNAME_FOUND:
            logger.debug("%s -> %s", subdomain, outcome.state.value)
            return ResultRecord(subdomain=subdomain, raw_answer="", state=outcome.state)

        domain = normalize(outcome.target, strip_root_dot=self.config.match.strip_root_dot)
        matched = first_match(domain, fingerprints)
        if matched is not None:
            logger.warning(
                "VULNERABLE %s -> %s (fingerprint %r)", subdomain, outcome.target, matched
            )
        else:
            logger.debug("%s -> %s (clean)", subdomain, outcome.target)

        return ResultRecord(
            subdomain=subdomain,
            raw_answer=outcome.target,
            state=outcome.state,
            is_vulnerable=matched is not None,
            cname=domain,
            matched_fingerprint=matched,
        )

    async def _emit(self, event: Dict[str, Any]) -> None:
        """Fire *event* to all registered event handlers."""
        for handler in self._event_handlers:
            try:
                if inspect.iscoroutinefunction(handler):
                    await handler(event)
                else:
                    handler(event)
            except Exception as exc:  # noqa: BLE001
                logger.debug("Event handler failed for %s: %s", event.get("event"), exc)


async def scan(
    subdomains: Sequence[str],
    fingerprints: Sequence[str],
    resolver: Resolver,
    config: Optional[Config] = None,
) -> ScanResult:
    """Functional form of :meth:`ScanEngine.run`."""
    return await ScanEngine(config=config, resolver=resolver).run(subdomains, fingerprints)


def run_scan(
    subdomains: Sequence[str],
    fingerprints: Sequence[str],
    resolver: Optional[Resolver] = None,
    config: Optional[Config] = None,
) -> ScanResult:
    """Blocking wrapper around :func:`scan` for synchronous callers."""
    engine = ScanEngine(config=config, resolver=resolver)
    return asyncio.run(engine.run(subdomains, fingerprints))
