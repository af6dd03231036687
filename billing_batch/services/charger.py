"""
InvoiceCharger -- charges a single invoice.

Contract:
    ``charge_one(invoice)`` returns a ``ChargeResult``:

    1. Invoice not PENDING       -> INVOICE_NOT_PENDING (provider not called).
    2. Provider raises a
       recognised error           -> GATEWAY_FAULT(cause).
    3. Provider returns False     -> FAILED_TO_CHARGE.
    4. Provider returns True      -> invoice marked PAID, SUCCEEDED.

    Exceptions that are not in ``recoverable_errors`` are NOT caught; they
    propagate to the worker and abort the billing run.  Store failures while
    marking an invoice paid propagate the same way.

Invariants enforced:
    - The provider is called at most once per attempt.
    - ``mark_invoice_as_paid`` is called only after the provider confirmed
      the charge.
"""

from __future__ import annotations

from typing import Protocol

from billing_kernel.domain.invoice import Invoice, InvoiceStatus
from billing_kernel.exceptions import PaymentProviderError
from billing_kernel.external.payment_provider import PaymentProvider
from billing_kernel.logging_config import get_logger

from billing_batch.domain.types import ChargeResult

logger = get_logger("batch.charger")

# Provider errors recovered as GATEWAY_FAULT.  OSError covers ConnectionError
# and TimeoutError raised by HTTP/socket clients.
RECOVERABLE_GATEWAY_ERRORS: tuple[type[Exception], ...] = (
    PaymentProviderError,
    OSError,
)


class InvoiceStore(Protocol):
    """The part of the invoice store the charger writes to."""

    def mark_invoice_as_paid(self, invoice: Invoice) -> None: ...


class InvoiceCharger:
    """Charges one invoice and persists success."""

    def __init__(
        self,
        payment_provider: PaymentProvider,
        invoice_store: InvoiceStore,
        recoverable_errors: tuple[type[Exception], ...] = RECOVERABLE_GATEWAY_ERRORS,
    ):
        self._payment_provider = payment_provider
        self._invoice_store = invoice_store
        self._recoverable_errors = recoverable_errors

    def charge_one(self, invoice: Invoice) -> ChargeResult:
        if invoice.status != InvoiceStatus.PENDING:
            return ChargeResult.invoice_not_pending(invoice.id)

        try:
            charged = self._payment_provider.charge(invoice)
        except self._recoverable_errors as exc:
            logger.error(
                "payment_provider_fault",
                exc_info=True,
                extra={
                    "invoice_id": invoice.id,
                    "customer_id": invoice.customer_id,
                },
            )
            return ChargeResult.gateway_fault(invoice.id, exc)

        if not charged:
            return ChargeResult.failed_to_charge(invoice.id)

        self._invoice_store.mark_invoice_as_paid(invoice)
        return ChargeResult.succeeded(invoice.id)
