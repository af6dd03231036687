"""
billing_batch.domain -- Pure types and schedule evaluation.

ZERO I/O.  All types are frozen dataclasses.
"""

from billing_batch.domain.types import (
    BillingRunResult,
    BillingRunStatus,
    BillingSchedule,
    ChargeOutcome,
    ChargeResult,
    ScheduleFrequency,
)

__all__ = [
    "BillingRunResult",
    "BillingRunStatus",
    "BillingSchedule",
    "ChargeOutcome",
    "ChargeResult",
    "ScheduleFrequency",
]
