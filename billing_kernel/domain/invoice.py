"""
Invoice and customer DTOs.

Frozen dataclasses handed out by the store.  The billing engine never
mutates them; status changes are written through
``InvoiceService.mark_invoice_as_paid()``.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from billing_kernel.domain.values import Currency, Money


class InvoiceStatus(str, Enum):
    """Invoice lifecycle status."""

    PENDING = "PENDING"  # Eligible for charging
    PAID = "PAID"  # Charge confirmed by the payment provider


@dataclass(frozen=True)
class Invoice:
    """Immutable snapshot of an invoice row."""

    id: int
    customer_id: int
    amount: Money
    status: InvoiceStatus

    @property
    def is_pending(self) -> bool:
        return self.status == InvoiceStatus.PENDING


@dataclass(frozen=True)
class Customer:
    """Immutable snapshot of a customer row."""

    id: int
    currency: Currency
