"""Tests for danglescan.utils.dns_resolver."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import aiodns
import pytest

from danglescan.core.config import Config, DNSConfig
from danglescan.takeover.classifier import classify_output
from danglescan.takeover.models import DnsState, ResolverOutput
from danglescan.utils.dns_resolver import AsyncDNSResolver, DigResolver, build_resolver

DIG_CNAME = """\
;; Got answer:
;; ->>HEADER<<- opcode: QUERY, status: NOERROR, id: 52170
;; flags: qr rd ra; QUERY: 1, ANSWER: 1, AUTHORITY: 0, ADDITIONAL: 1

;; OPT PSEUDOSECTION:
; EDNS: version: 0, flags:; udp: 1232
;; ANSWER SECTION:
assets.example.com.\t300\tIN\tCNAME\tassets-example.s3.amazonaws.com.
"""

DIG_NOANSWER = """\
;; Got answer:
;; ->>HEADER<<- opcode: QUERY, status: NOERROR, id: 1200
;; flags: qr rd ra; QUERY: 1, ANSWER: 0, AUTHORITY: 1, ADDITIONAL: 1
"""

DIG_NXDOMAIN = """\
;; Got answer:
;; ->>HEADER<<- opcode: QUERY, status: NXDOMAIN, id: 8821
;; flags: qr rd ra; QUERY: 1, ANSWER: 0, AUTHORITY: 1, ADDITIONAL: 1
"""


def _process(returncode: int, stdout: str, stderr: str = "") -> MagicMock:
    proc = MagicMock()
    proc.returncode = returncode
    proc.communicate = AsyncMock(return_value=(stdout.encode(), stderr.encode()))
    proc.wait = AsyncMock(return_value=returncode)
    return proc


# --- DigResolver.parse_output ---

def test_parse_cname_answer():
    out = DigResolver.parse_output(DIG_CNAME)
    assert out == ResolverOutput(stdout="assets-example.s3.amazonaws.com.")
    assert classify_output(out).state is DnsState.CNAME_FOUND


def test_parse_no_answer():
    out = DigResolver.parse_output(DIG_NOANSWER)
    assert out.failed is False
    assert classify_output(out).state is DnsState.NO_CNAME


def test_parse_nxdomain_carries_marker():
    out = DigResolver.parse_output(DIG_NXDOMAIN)
    assert out.failed is True
    assert "status: NXDOMAIN" in out.stderr
    assert classify_output(out).state is DnsState.NXDOMAIN


def test_parse_servfail_is_query_error():
    out = DigResolver.parse_output(DIG_NXDOMAIN.replace("NXDOMAIN", "SERVFAIL"))
    assert classify_output(out).state is DnsState.QUERY_ERROR


def test_parse_missing_status_is_failure():
    out = DigResolver.parse_output("")
    assert out.failed is True
    assert classify_output(out).state is DnsState.QUERY_ERROR


def test_build_command_with_nameserver():
    dig = DigResolver(nameservers=["1.1.1.1", "8.8.8.8"], dig_path="/usr/bin/dig")
    cmd = dig.build_command("www.example.com")
    assert cmd[0] == "/usr/bin/dig"
    assert cmd[1] == "@1.1.1.1"
    assert cmd[-4:] == ["-t", "CNAME", "-q", "www.example.com"]


# --- DigResolver.resolve ---

@pytest.mark.asyncio
async def test_resolve_success():
    with patch(
        "danglescan.utils.dns_resolver.asyncio.create_subprocess_exec",
        new=AsyncMock(return_value=_process(0, DIG_CNAME)),
    ) as spawn:
        out = await DigResolver().resolve("assets.example.com")
    assert out.stdout == "assets-example.s3.amazonaws.com."
    assert "assets.example.com" in spawn.call_args.args


@pytest.mark.asyncio
async def test_resolve_nonzero_exit():
    with patch(
        "danglescan.utils.dns_resolver.asyncio.create_subprocess_exec",
        new=AsyncMock(return_value=_process(9, ";; connection timed out; no servers could be reached\n")),
    ):
        out = await DigResolver().resolve("x.example.com")
    assert out.failed is True
    assert "no servers could be reached" in out.stderr


@pytest.mark.asyncio
async def test_resolve_missing_binary():
    with patch(
        "danglescan.utils.dns_resolver.asyncio.create_subprocess_exec",
        new=AsyncMock(side_effect=FileNotFoundError("dig")),
    ):
        out = await DigResolver().resolve("x.example.com")
    assert out.failed is True
    assert "cannot run dig" in out.stderr
    assert classify_output(out).state is DnsState.QUERY_ERROR


@pytest.mark.asyncio
async def test_resolve_timeout_kills_process():
    proc = _process(0, "")

    async def _hang():
        await asyncio.sleep(10)

    proc.communicate = _hang
    proc.kill = MagicMock()
    with patch(
        "danglescan.utils.dns_resolver.asyncio.create_subprocess_exec",
        new=AsyncMock(return_value=proc),
    ):
        out = await DigResolver(timeout=0.01).resolve("slow.example.com")
    assert out.failed is True
    assert "timed out" in out.stderr
    proc.kill.assert_called_once()


# --- AsyncDNSResolver ---

def _aiodns_resolver(query_mock: AsyncMock) -> AsyncDNSResolver:
    resolver = AsyncDNSResolver(timeout=1.0)
    backend = MagicMock()
    backend.query = query_mock
    resolver._resolver = backend
    return resolver


@pytest.mark.asyncio
async def test_aiodns_cname():
    resolver = _aiodns_resolver(AsyncMock(return_value=MagicMock(cname="foo.github.io")))
    out = await resolver.resolve("docs.example.com")
    assert out == ResolverOutput(stdout="foo.github.io")


@pytest.mark.asyncio
async def test_aiodns_nxdomain():
    resolver = _aiodns_resolver(
        AsyncMock(side_effect=aiodns.error.DNSError(4, "Domain name not found"))
    )
    out = await resolver.resolve("gone.example.com")
    assert classify_output(out).state is DnsState.NXDOMAIN


@pytest.mark.asyncio
async def test_aiodns_nodata():
    resolver = _aiodns_resolver(
        AsyncMock(side_effect=aiodns.error.DNSError(1, "DNS server returned answer with no data"))
    )
    out = await resolver.resolve("www.example.com")
    assert classify_output(out).state is DnsState.NO_CNAME


@pytest.mark.asyncio
async def test_aiodns_other_error():
    resolver = _aiodns_resolver(
        AsyncMock(side_effect=aiodns.error.DNSError(11, "Could not contact DNS servers"))
    )
    out = await resolver.resolve("www.example.com")
    assert classify_output(out).state is DnsState.QUERY_ERROR
    assert "Could not contact DNS servers" in out.stderr


# --- build_resolver ---

def test_build_resolver_default_is_dig():
    assert isinstance(build_resolver(Config()), DigResolver)


def test_build_resolver_aiodns():
    cfg = Config(dns=DNSConfig(resolver="aiodns", nameservers=["9.9.9.9"]))
    assert isinstance(build_resolver(cfg), AsyncDNSResolver)


def test_build_command_keeps_option_like_names_as_query():
    cmd = DigResolver().build_command("+short")
    assert cmd[-2:] == ["-q", "+short"]
    assert cmd.count("+short") == 1


@pytest.mark.asyncio
async def test_aiodns_unencodable_name_is_query_error():
    resolver = _aiodns_resolver(AsyncMock(side_effect=UnicodeError("label empty or too long")))
    out = await resolver.resolve("ü" * 70 + ".example.com")
    assert out.failed is True
    assert "label empty or too long" in out.stderr
    assert classify_output(out).state is DnsState.QUERY_ERROR


@pytest.mark.asyncio
async def test_aiodns_unencodable_name_isolated_in_scan():
    from danglescan.core.config import ScanConfig
    from danglescan.core.engine import scan

    resolver = _aiodns_resolver(AsyncMock(side_effect=UnicodeError("label empty or too long")))
    cfg = Config(scan=ScanConfig(error_policy="isolate"))
    result = await scan(["ü" * 70 + ".example.com"], ["github.io"], resolver, config=cfg)
    assert [r.state for r in result.records] == [DnsState.QUERY_ERROR]
