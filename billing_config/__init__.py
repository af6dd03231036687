"""
billing_config -- single public entrypoint for billing settings.

Responsibility:
    Provides the ONLY way to obtain settings at runtime through
    ``get_active_settings()``.  No other component reads configuration
    files or environment variables directly; process entry points apply
    command-line overrides on the returned frozen object with
    ``dataclasses.replace``.

Failure modes:
    - ``FileNotFoundError`` -- settings file does not exist.
    - ``KeyError`` / ``ValueError`` -- missing or invalid settings.
"""

from __future__ import annotations

import logging
from pathlib import Path

from billing_config.loader import load_settings
from billing_config.schema import (
    BillingRunSettings,
    BillingSettings,
    DatabaseSettings,
    LoggingSettings,
    ScheduleSettings,
)

_logger = logging.getLogger("billing_kernel.config")

DEFAULT_SETTINGS_PATH = Path(__file__).parent / "sets" / "default.yaml"

__all__ = [
    "BillingRunSettings",
    "BillingSettings",
    "DatabaseSettings",
    "DEFAULT_SETTINGS_PATH",
    "LoggingSettings",
    "ScheduleSettings",
    "get_active_settings",
]


def get_active_settings(path: Path | None = None) -> BillingSettings:
    """The ONLY public settings entrypoint.

    Args:
        path: YAML settings file.  Defaults to billing_config/sets/default.yaml.

    Returns:
        Frozen ``BillingSettings``.  A ``BILLING_CONFIG_TRACE`` log entry is
        emitted on every successful call.
    """
    settings_path = path or DEFAULT_SETTINGS_PATH
    settings = load_settings(settings_path)

    _logger.info(
        "BILLING_CONFIG_TRACE",
        extra={
            "trace_type": "BILLING_CONFIG_TRACE",
            "path": str(settings_path),
            "checksum": settings.checksum,
            "frequency": settings.schedule.frequency,
            "max_workers": settings.billing.max_workers,
        },
    )
    return settings
