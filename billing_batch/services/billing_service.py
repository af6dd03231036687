"""
BillingService -- charges all customers that have pending invoices.

Contract:
    ``bill_all_pending()``:
        1. Fetches every PENDING invoice from the store.
        2. Groups them by customer (store order kept within a customer).
        3. Runs one ``CustomerBillingWorker.bill_customer`` per customer on a
           bounded thread pool.
        4. Returns only after every worker has finished.

    Customers are billed independently: declines and gateway faults stay
    inside their own worker.  The first unrecognised exception raised by any
    worker sets the shared cancel event, cancels workers that have not
    started, waits for running workers to stop at their next invoice
    boundary, and is re-raised unchanged to the caller.  A worker that fails
    while the pool drains is logged as ``billing_worker_failed`` and noted
    on the re-raised exception.

Architecture: billing_batch/services.  Depends on the store only through
    ``fetch_all_pending()``.
"""

from __future__ import annotations

import contextvars
import threading
import time
from concurrent.futures import FIRST_EXCEPTION, Future, ThreadPoolExecutor, wait
from typing import Iterable, Protocol
from uuid import uuid4

from billing_kernel.domain.clock import Clock, SystemClock
from billing_kernel.domain.invoice import Invoice
from billing_kernel.logging_config import LogContext, get_logger

from billing_batch.domain.types import BillingRunResult, BillingRunStatus
from billing_batch.services.worker import CustomerBillingWorker

logger = get_logger("batch.billing_service")

DEFAULT_MAX_WORKERS = 8


class PendingInvoiceSource(Protocol):
    """The part of the invoice store the billing run reads from."""

    def fetch_all_pending(self) -> list[Invoice]: ...


def group_invoices_by_customer(invoices: Iterable[Invoice]) -> dict[int, list[Invoice]]:
    """Group invoices by ``customer_id``, keeping their relative order."""
    groups: dict[int, list[Invoice]] = {}
    for invoice in invoices:
        groups.setdefault(invoice.customer_id, []).append(invoice)
    return groups


class BillingService:
    """Fan-out / fan-in billing run over all customers."""

    def __init__(
        self,
        invoice_source: PendingInvoiceSource,
        worker: CustomerBillingWorker,
        clock: Clock | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")
        self._invoice_source = invoice_source
        self._worker = worker
        self._clock = clock or SystemClock()
        self._max_workers = max_workers

    def bill_all_pending(self) -> BillingRunResult:
        """Charge every customer with pending invoices.

        Raises:
            Whatever unrecognised exception aborted the run (see module
            docstring); business failures never raise.
        """
        run_id = uuid4()
        start_time = time.monotonic()
        started_at = self._clock.now()

        with LogContext.bind(run_id=str(run_id)):
            invoices = self._invoice_source.fetch_all_pending()
            groups = group_invoices_by_customer(invoices)

            logger.info(
                "billing_run_started",
                extra={"invoices": len(invoices), "customers": len(groups)},
            )

            if groups:
                self._run_workers(groups)

            duration_ms = int((time.monotonic() - start_time) * 1000)
            logger.info("billing_run_completed", extra={"duration_ms": duration_ms})

        return BillingRunResult(
            run_id=run_id,
            status=BillingRunStatus.COMPLETED,
            total_invoices=len(invoices),
            total_customers=len(groups),
            started_at=started_at,
            completed_at=self._clock.now(),
            duration_ms=duration_ms,
        )

    def _run_workers(self, groups: dict[int, list[Invoice]]) -> None:
        cancel_event = threading.Event()
        failed: Future | None = None
        failed_customer: int | None = None

        with ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(groups)),
            thread_name_prefix="billing-worker",
        ) as pool:
            # Each worker runs in a copy of the caller's context so run_id
            # reaches its log records.
            futures: dict[Future, int] = {
                pool.submit(
                    contextvars.copy_context().run,
                    self._bill_customer,
                    customer_invoices,
                    cancel_event,
                ): customer_id
                for customer_id, customer_invoices in groups.items()
            }

            done, not_done = wait(futures, return_when=FIRST_EXCEPTION)

            for future in done:
                if future.exception() is not None:
                    failed, failed_customer = future, futures[future]
                    break

            if failed is not None:
                cancel_event.set()
                cancelled = sum(1 for f in not_done if f.cancel())
                logger.error(
                    "billing_run_aborted",
                    exc_info=failed.exception(),
                    extra={
                        "failed_customer_id": failed_customer,
                        "cancelled_customers": cancelled,
                    },
                )
            # Leaving the pool waits for workers that are still running.

        if failed is None:
            return

        error = failed.exception()
        for future, customer_id in futures.items():
            if future is failed or future.cancelled():
                continue
            other = future.exception()
            if other is not None:
                logger.error(
                    "billing_worker_failed",
                    exc_info=other,
                    extra={"failed_customer_id": customer_id},
                )
                error.add_note(f"customer {customer_id} also failed: {other!r}")
        raise error  # type: ignore[misc]

    def _bill_customer(self, invoices: list[Invoice], cancel_event: threading.Event) -> None:
        # The event is set before this future completes, so a queued worker
        # that the pool starts before cancellation still charges nothing.
        try:
            self._worker.bill_customer(invoices, cancel_event)
        except Exception:
            cancel_event.set()
            raise
