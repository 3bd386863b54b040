"""Tests for danglescan.takeover.classifier."""

from __future__ import annotations

import pytest

from danglescan.takeover.classifier import classify, classify_output
from danglescan.takeover.models import DnsState, ResolverOutput


def test_cname_found_is_trimmed():
    outcome = classify("  foo.s3.amazonaws.com.\n", "", False)
    assert outcome.state is DnsState.CNAME_FOUND
    assert outcome.target == "foo.s3.amazonaws.com."


def test_empty_stdout_is_no_cname():
    assert classify("", "", False).state is DnsState.NO_CNAME
    assert classify("   \n", "", False).state is DnsState.NO_CNAME


def test_nxdomain_marker_on_failure():
    stderr = ";; ->>HEADER<<- opcode: QUERY, status: NXDOMAIN, id: 4711"
    outcome = classify("", stderr, True)
    assert outcome.state is DnsState.NXDOMAIN
    assert outcome.target == ""


def test_nxdomain_marker_ignored_without_failure():
    outcome = classify("", "status: NXDOMAIN", False)
    assert outcome.state is DnsState.NO_CNAME


def test_failure_without_marker_is_query_error():
    outcome = classify("", "connection timed out; no servers could be reached\n", True)
    assert outcome.state is DnsState.QUERY_ERROR
    assert outcome.message == "connection timed out; no servers could be reached"


def test_failure_with_empty_stderr_has_generic_message():
    outcome = classify("", "", True)
    assert outcome.state is DnsState.QUERY_ERROR
    assert outcome.message


def test_marker_is_case_sensitive():
    outcome = classify("", "STATUS: nxdomain", True)
    assert outcome.state is DnsState.QUERY_ERROR


@pytest.mark.parametrize("stdout", ["", "a.example.net."])
@pytest.mark.parametrize("stderr", ["", "status: NXDOMAIN", "status: SERVFAIL"])
@pytest.mark.parametrize("failed", [True, False])
def test_exactly_one_state(stdout, stderr, failed):
    outcome = classify(stdout, stderr, failed)
    assert outcome.state in set(DnsState)
    is_nx = outcome.state is DnsState.NXDOMAIN
    assert is_nx == (failed and "status: NXDOMAIN" in stderr)


def test_classify_output_wrapper():
    outcome = classify_output(ResolverOutput(stdout="x.herokuapp.com."))
    assert outcome.state is DnsState.CNAME_FOUND
    assert outcome.target == "x.herokuapp.com."
