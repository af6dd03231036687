"""
Service layer for invoice persistence.

The invoice store consumed by the billing engine: it supplies pending
invoices and durably records payment completion.

Returns frozen ``Invoice`` DTOs, never ORM entities.  Every call opens its
own session via ``session_scope()``, so one service instance can be shared
by all billing worker threads.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from billing_kernel.db.engine import session_scope
from billing_kernel.domain.invoice import Invoice, InvoiceStatus
from billing_kernel.domain.values import Money
from billing_kernel.exceptions import CustomerNotFoundError, InvoiceNotFoundError
from billing_kernel.logging_config import get_logger
from billing_kernel.models.invoice import CustomerModel, InvoiceModel

logger = get_logger("services.invoice")


class InvoiceService:
    """
    Store for invoices.

    Contract:
        - ``fetch_all_pending()`` returns PENDING invoices ordered by id, so
          the order within one customer is stable between calls.
        - ``mark_invoice_as_paid()`` is the only status transition and is
          only ever PENDING -> PAID.
    """

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def fetch(self, invoice_id: int) -> Invoice:
        """
        Get an invoice by ID.

        Raises:
            InvoiceNotFoundError: If the invoice doesn't exist.
        """
        with session_scope(self._session_factory) as session:
            model = session.get(InvoiceModel, invoice_id)
            if model is None:
                raise InvoiceNotFoundError(invoice_id)
            return model.to_dto()

    def fetch_all(self) -> list[Invoice]:
        with session_scope(self._session_factory) as session:
            models = session.execute(
                select(InvoiceModel).order_by(InvoiceModel.id)
            ).scalars().all()
            return [m.to_dto() for m in models]

    def fetch_all_pending(self) -> list[Invoice]:
        """Return every PENDING invoice, ordered by invoice id."""
        with session_scope(self._session_factory) as session:
            models = session.execute(
                select(InvoiceModel)
                .where(InvoiceModel.status == InvoiceStatus.PENDING.value)
                .order_by(InvoiceModel.id)
            ).scalars().all()
            return [m.to_dto() for m in models]

    def create_invoice(
        self,
        customer_id: int,
        amount: Money,
        status: InvoiceStatus = InvoiceStatus.PENDING,
    ) -> Invoice:
        """
        Create an invoice for an existing customer.

        Raises:
            CustomerNotFoundError: If the customer doesn't exist.
        """
        with session_scope(self._session_factory) as session:
            if session.get(CustomerModel, customer_id) is None:
                raise CustomerNotFoundError(customer_id)
            model = InvoiceModel(
                customer_id=customer_id,
                amount=amount.amount,
                currency=amount.currency.value,
                status=status.value,
            )
            session.add(model)
            session.flush()
            return model.to_dto()

    def mark_invoice_as_paid(self, invoice: Invoice) -> None:
        """
        Persist the invoice as PAID.

        Only a PENDING row is updated; a row that is already PAID is left
        untouched so a repeated call cannot change anything.

        Raises:
            InvoiceNotFoundError: If the invoice doesn't exist.
        """
        with session_scope(self._session_factory) as session:
            model = session.get(InvoiceModel, invoice.id)
            if model is None:
                raise InvoiceNotFoundError(invoice.id)
            if model.status != InvoiceStatus.PENDING.value:
                logger.warning(
                    "invoice_already_settled",
                    extra={"invoice_id": invoice.id, "status": model.status},
                )
                return
            model.status = InvoiceStatus.PAID.value

        logger.info(
            "invoice_marked_paid",
            extra={"invoice_id": invoice.id, "customer_id": invoice.customer_id},
        )
