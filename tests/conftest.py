"""Shared pytest fixtures for the DANGLESCAN test suite."""

from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from danglescan.core.config import Config
from danglescan.takeover.models import ResolverOutput


class FakeResolver:
    """Deterministic resolver returning canned outputs per hostname."""

    def __init__(
        self,
        answers: Optional[Dict[str, ResolverOutput]] = None,
        default: Optional[ResolverOutput] = None,
    ) -> None:
        self.answers = dict(answers or {})
        self.default = default or ResolverOutput()
        self.calls: List[str] = []

    async def resolve(self, hostname: str) -> ResolverOutput:
        self.calls.append(hostname)
        return self.answers.get(hostname, self.default)


@pytest.fixture
def sample_config() -> Config:
    """Return a default Config instance with no external dependencies."""
    return Config()


@pytest.fixture
def fake_resolver_factory():
    """Return the FakeResolver class for building per-test resolvers."""
    return FakeResolver


@pytest.fixture
def write_lines(tmp_path):
    """Write *lines* to a file under ``tmp_path`` and return its path."""

    def _write(name: str, lines: List[str]) -> str:
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return str(path)

    return _write
