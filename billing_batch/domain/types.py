"""
billing_batch.domain.types -- Pure frozen dataclasses for billing runs.

ZERO I/O.  Frozen dataclasses with enum status fields.

``ChargeResult`` is the outcome of one charge attempt.  Business failures
are values, not exceptions: the outcome enum tags the variant and ``cause``
carries the provider exception for GATEWAY_FAULT only.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


# =============================================================================
# Status enums
# =============================================================================


class ChargeOutcome(str, Enum):
    """Outcome of a single invoice charge attempt."""

    SUCCEEDED = "succeeded"  # Charged and marked PAID
    INVOICE_NOT_PENDING = "invoice_not_pending"  # Not eligible, provider not called
    FAILED_TO_CHARGE = "failed_to_charge"  # Provider declined
    GATEWAY_FAULT = "gateway_fault"  # Provider raised a recognised error


class BillingRunStatus(str, Enum):
    """Run-level status."""

    COMPLETED = "completed"  # Every customer worker finished
    FAILED = "failed"  # Aborted by an unrecognised exception


class ScheduleFrequency(str, Enum):
    """Recurrence frequency for the billing schedule."""

    ONCE = "once"  # Fire once, no recurrence
    HOURLY = "hourly"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ON_DEMAND = "on_demand"  # Manual trigger only


# =============================================================================
# Charge result
# =============================================================================


@dataclass(frozen=True)
class ChargeResult:
    """Immutable result of charging one invoice.

    Build with the named constructors; ``cause`` is set only for
    ``GATEWAY_FAULT``.
    """

    invoice_id: int
    outcome: ChargeOutcome
    cause: Exception | None = None

    def __post_init__(self) -> None:
        if (self.outcome == ChargeOutcome.GATEWAY_FAULT) != (self.cause is not None):
            raise ValueError(
                "cause must be set for GATEWAY_FAULT and only for GATEWAY_FAULT"
            )

    @classmethod
    def succeeded(cls, invoice_id: int) -> ChargeResult:
        return cls(invoice_id, ChargeOutcome.SUCCEEDED)

    @classmethod
    def invoice_not_pending(cls, invoice_id: int) -> ChargeResult:
        return cls(invoice_id, ChargeOutcome.INVOICE_NOT_PENDING)

    @classmethod
    def failed_to_charge(cls, invoice_id: int) -> ChargeResult:
        return cls(invoice_id, ChargeOutcome.FAILED_TO_CHARGE)

    @classmethod
    def gateway_fault(cls, invoice_id: int, cause: Exception) -> ChargeResult:
        return cls(invoice_id, ChargeOutcome.GATEWAY_FAULT, cause)

    @property
    def is_success(self) -> bool:
        return self.outcome == ChargeOutcome.SUCCEEDED


# =============================================================================
# Run DTOs
# =============================================================================


@dataclass(frozen=True)
class BillingRunResult:
    """Immutable summary of one ``bill_all_pending()`` run.

    Counts are what the run fetched; per-invoice outcomes live in the logs
    and in the store.
    """

    run_id: UUID
    status: BillingRunStatus
    total_invoices: int
    total_customers: int
    started_at: datetime | None = None
    completed_at: datetime | None = None
    duration_ms: int = 0


# =============================================================================
# Schedule DTOs
# =============================================================================


@dataclass(frozen=True)
class BillingSchedule:
    """Immutable snapshot of the recurring billing schedule.

    Schedule evaluation (``should_fire``) is pure -- the scheduler reads
    ``next_run_at`` and the current clock, with no side effects.
    """

    frequency: ScheduleFrequency
    cron_expression: str | None = None  # Fine-grained timing
    next_run_at: datetime | None = None
    last_run_at: datetime | None = None
    last_run_status: BillingRunStatus | None = None
    is_active: bool = True
