"""Configuration management for DANGLESCAN.

Loads configuration from ``danglescan.yaml``, with support for CLI overrides
and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

import yaml
from pydantic import BaseModel, Field

_ENV_PREFIX = "DANGLESCAN__"
DEFAULT_CONFIG_FILE = "danglescan.yaml"


class DNSConfig(BaseModel):
    """DNS resolver configuration."""

    resolver: Literal["dig", "aiodns"] = "dig"
    nameservers: List[str] = Field(default_factory=list)
    timeout: float = Field(5.0, gt=0)
    dig_path: str = "dig"


class ScanConfig(BaseModel):
    """Scan orchestration settings."""

    concurrency: int = Field(1, ge=1)
    error_policy: Literal["abort", "isolate"] = "abort"


class MatchConfig(BaseModel):
    """CNAME normalisation settings."""

    strip_root_dot: bool = False


class ReportingConfig(BaseModel):
    """Reporting output configuration."""

    format: Literal["text", "json", "csv"] = "text"


class Config(BaseModel):
    """Top-level DANGLESCAN configuration."""

    dns: DNSConfig = Field(default_factory=DNSConfig)
    scan: ScanConfig = Field(default_factory=ScanConfig)
    match: MatchConfig = Field(default_factory=MatchConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)


def load_config(config_path: Optional[str] = None) -> Config:
    """Load configuration from a YAML file, applying environment variable overrides.

    Args:
        config_path: Optional path to a YAML configuration file. Defaults to
                     ``danglescan.yaml`` in the current working directory.

    Returns:
        Populated :class:`Config` instance.
    """
    path = Path(config_path) if config_path else Path(DEFAULT_CONFIG_FILE)

    raw: Dict[str, Any] = {}
    if path.exists():
        with path.open("r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}

    _apply_env_overrides(raw)

    return Config(**raw)


def _apply_env_overrides(raw: Dict[str, Any]) -> None:
    """Mutate *raw* in-place with values from environment variables.

    Environment variables follow the pattern ``DANGLESCAN__<SECTION>__<KEY>``,
    e.g. ``DANGLESCAN__SCAN__CONCURRENCY=20``. List values are comma-separated.
    """
    for env_key, env_val in os.environ.items():
        if not env_key.startswith(_ENV_PREFIX):
            continue
        parts = env_key[len(_ENV_PREFIX):].lower().split("__")
        if len(parts) != 2:
            continue
        section, key = parts
        value: Any = env_val
        if key == "nameservers":
            value = [v.strip() for v in env_val.split(",") if v.strip()]
        raw.setdefault(section, {})[key] = value
