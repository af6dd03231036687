"""
CustomerBillingWorker -- bills all pending invoices of one customer.

Contract:
    ``bill_customer(invoices, cancel_event)`` charges the invoices strictly
    sequentially, in the order given.

    - SUCCEEDED              -> next invoice.
    - INVOICE_NOT_PENDING,
      GATEWAY_FAULT          -> warning, next invoice.
    - FAILED_TO_CHARGE       -> warning, stop; the customer's remaining
                                invoices are left PENDING for the next run.
    - cancel_event set       -> stop before the next provider call.

    Returns nothing.  Outcomes are visible through logs and the store.
    Unrecognised exceptions from the charger propagate.
"""

from __future__ import annotations

import threading
from typing import Sequence

from billing_kernel.domain.invoice import Invoice
from billing_kernel.logging_config import LogContext, get_logger

from billing_batch.domain.types import ChargeOutcome
from billing_batch.services.charger import InvoiceCharger

logger = get_logger("batch.worker")


class CustomerBillingWorker:
    """Sequential billing of one customer's invoices."""

    def __init__(self, charger: InvoiceCharger):
        self._charger = charger

    def bill_customer(
        self,
        invoices: Sequence[Invoice],
        cancel_event: threading.Event | None = None,
    ) -> None:
        if not invoices:
            return

        customer_id = invoices[0].customer_id
        with LogContext.bind(customer_id=str(customer_id)):
            for index, invoice in enumerate(invoices):
                if cancel_event is not None and cancel_event.is_set():
                    logger.warning(
                        "customer_billing_cancelled",
                        extra={"unprocessed_invoices": len(invoices) - index},
                    )
                    return

                result = self._charger.charge_one(invoice)

                if result.outcome == ChargeOutcome.SUCCEEDED:
                    logger.debug("invoice_charged", extra={"invoice_id": invoice.id})
                    continue

                if result.outcome == ChargeOutcome.FAILED_TO_CHARGE:
                    logger.warning(
                        "invoice_declined",
                        extra={
                            "invoice_id": invoice.id,
                            "skipped_invoices": len(invoices) - index - 1,
                            "detail": (
                                "Stopping the charging process for all "
                                "unprocessed invoices of this customer"
                            ),
                        },
                    )
                    break

                logger.warning(
                    "invoice_charge_skipped",
                    extra={
                        "invoice_id": invoice.id,
                        "outcome": result.outcome.value,
                        "reason": repr(result.cause) if result.cause else result.outcome.value,
                    },
                )
