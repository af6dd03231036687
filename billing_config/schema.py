"""
Configuration schema (``billing_config.schema``).

Frozen dataclasses describing the runtime settings of the billing system.
Produced by ``billing_config.loader.parse_settings``; never built by hand
outside tests.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DatabaseSettings:
    """Connection settings for the invoice store."""

    url: str
    echo: bool = False
    pool_size: int = 20
    max_overflow: int = 10
    create_tables: bool = False


@dataclass(frozen=True)
class BillingRunSettings:
    """Settings for a single billing run."""

    max_workers: int = 8  # Upper bound on concurrently billed customers


@dataclass(frozen=True)
class ScheduleSettings:
    """When billing runs happen.

    ``frequency`` is one of ``billing_batch.domain.types.ScheduleFrequency``
    values; ``cron_expression`` (5-field) narrows it to exact slots.
    """

    frequency: str = "monthly"
    cron_expression: str | None = "0 0 1 * *"  # First of the month, midnight
    tick_interval_seconds: int = 60


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class BillingSettings:
    """Root settings object returned by ``get_active_settings()``."""

    database: DatabaseSettings
    billing: BillingRunSettings = field(default_factory=BillingRunSettings)
    schedule: ScheduleSettings = field(default_factory=ScheduleSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    checksum: str = ""
