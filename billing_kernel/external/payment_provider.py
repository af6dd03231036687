"""
PaymentProvider -- contract for the external payment gateway.

Contract:
    ``charge(invoice)`` charges the invoice's customer for the invoice amount.

    Returns:
        ``True`` when the customer was charged, ``False`` when the charge was
        declined (e.g. insufficient balance).

    Raises:
        PaymentCustomerNotFoundError: no account for the invoice's customer.
        CurrencyMismatchError: invoice and account currencies differ.
        NetworkError: the provider could not be reached.

Any other exception raised by an implementation is treated as a defect by
the billing engine and aborts the billing run.
"""

from __future__ import annotations

import random
from typing import Protocol, runtime_checkable

from billing_kernel.domain.invoice import Invoice
from billing_kernel.logging_config import get_logger

logger = get_logger("external.payment_provider")


@runtime_checkable
class PaymentProvider(Protocol):
    """Protocol for payment gateway clients."""

    def charge(self, invoice: Invoice) -> bool: ...


class RandomPaymentProvider:
    """
    Demo provider that approves or declines at random.

    Used by ``scripts/run_billing.py`` when no real gateway is wired in.
    Pass ``seed`` for reproducible runs.  ``approval_rate`` is the
    probability that a charge succeeds.
    """

    def __init__(self, seed: int | None = None, approval_rate: float = 0.5):
        if not 0.0 <= approval_rate <= 1.0:
            raise ValueError(f"approval_rate must be within [0, 1], got {approval_rate}")
        self._rng = random.Random(seed)
        self._approval_rate = approval_rate

    def charge(self, invoice: Invoice) -> bool:
        approved = self._rng.random() < self._approval_rate
        logger.debug(
            "demo_charge",
            extra={"invoice_id": invoice.id, "approved": approved},
        )
        return approved
