"""
Settings loader (``billing_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into the frozen dataclasses of
``billing_config.schema``.  Runtime callers go through
``billing_config.get_active_settings()``.

Invariants enforced
-------------------
* Missing required keys raise ``KeyError``; invalid values raise
  ``ValueError``.  No silent defaults for required fields.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the raw
  settings for change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from billing_config.schema import (
    BillingRunSettings,
    BillingSettings,
    DatabaseSettings,
    LoggingSettings,
    ScheduleSettings,
)

VALID_FREQUENCIES = frozenset(
    {"once", "hourly", "daily", "weekly", "monthly", "on_demand"}
)
VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the top-level YAML node is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {path} must contain a mapping")
    return data


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")
    return value


def parse_database(data: dict[str, Any]) -> DatabaseSettings:
    url = data["url"]
    if not isinstance(url, str) or not url.strip():
        raise ValueError("database.url must be a non-empty string")
    return DatabaseSettings(
        url=url,
        echo=bool(data.get("echo", False)),
        pool_size=_positive_int(data.get("pool_size", 20), "database.pool_size"),
        max_overflow=int(data.get("max_overflow", 10)),
        create_tables=bool(data.get("create_tables", False)),
    )


def parse_billing(data: dict[str, Any]) -> BillingRunSettings:
    return BillingRunSettings(
        max_workers=_positive_int(data.get("max_workers", 8), "billing.max_workers"),
    )


def parse_schedule(data: dict[str, Any]) -> ScheduleSettings:
    frequency = str(data.get("frequency", "monthly")).lower()
    if frequency not in VALID_FREQUENCIES:
        raise ValueError(
            f"schedule.frequency must be one of {sorted(VALID_FREQUENCIES)}, "
            f"got {frequency!r}"
        )
    cron_expression = data.get("cron_expression")
    if cron_expression is not None and not isinstance(cron_expression, str):
        raise ValueError("schedule.cron_expression must be a string")
    return ScheduleSettings(
        frequency=frequency,
        cron_expression=cron_expression or None,
        tick_interval_seconds=_positive_int(
            data.get("tick_interval_seconds", 60), "schedule.tick_interval_seconds",
        ),
    )


def parse_logging(data: dict[str, Any]) -> LoggingSettings:
    level = str(data.get("level", "INFO")).upper()
    if level not in VALID_LOG_LEVELS:
        raise ValueError(
            f"logging.level must be one of {sorted(VALID_LOG_LEVELS)}, got {level!r}"
        )
    return LoggingSettings(level=level)


def parse_settings(data: dict[str, Any]) -> BillingSettings:
    """
    Parse a ``BillingSettings`` from a dict.

    Preconditions:
        - ``data`` must contain a ``database`` section with ``url``.
    Raises:
        KeyError: if required keys are missing.
        ValueError: if a value is out of range or of the wrong type.
    """
    return BillingSettings(
        database=parse_database(data["database"]),
        billing=parse_billing(data.get("billing") or {}),
        schedule=parse_schedule(data.get("schedule") or {}),
        logging=parse_logging(data.get("logging") or {}),
        checksum=compute_checksum(data),
    )


def load_settings(path: Path) -> BillingSettings:
    """Load and parse a YAML settings file."""
    return parse_settings(load_yaml_file(path))


def compute_checksum(data: dict[str, Any]) -> str:
    """
    Compute SHA-256 checksum of canonical JSON serialization.

    Postconditions:
        - Identical ``data`` always produces identical checksums.
    """
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()
