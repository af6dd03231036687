"""
Tests for billing_kernel.services.invoice_service.

InvoiceService against in-memory SQLite: DTO round trips, pending
selection and ordering, and the PENDING -> PAID transition.
"""

from decimal import Decimal

import pytest

from billing_kernel.domain.invoice import Invoice, InvoiceStatus
from billing_kernel.domain.values import Currency, Money
from billing_kernel.exceptions import CustomerNotFoundError, InvoiceNotFoundError


@pytest.fixture
def customer(customer_service):
    return customer_service.create_customer(Currency.USD)


def _usd(amount: str) -> Money:
    return Money(Decimal(amount), Currency.USD)


class TestCreateAndFetch:
    def test_create_returns_dto(self, invoice_service, customer):
        invoice = invoice_service.create_invoice(customer.id, _usd("99.95"))

        assert isinstance(invoice, Invoice)
        assert invoice.customer_id == customer.id
        assert invoice.status == InvoiceStatus.PENDING
        assert invoice.amount == _usd("99.95")

    def test_fetch_round_trip(self, invoice_service, customer):
        created = invoice_service.create_invoice(customer.id, _usd("10.10"))

        fetched = invoice_service.fetch(created.id)

        assert fetched.id == created.id
        assert fetched.amount.amount == Decimal("10.10")
        assert fetched.amount.currency == Currency.USD

    def test_fetch_missing(self, invoice_service):
        with pytest.raises(InvoiceNotFoundError) as exc_info:
            invoice_service.fetch(404)
        assert exc_info.value.invoice_id == 404

    def test_create_for_unknown_customer(self, invoice_service):
        with pytest.raises(CustomerNotFoundError):
            invoice_service.create_invoice(12345, _usd("1.00"))

    def test_fetch_all_ordered_by_id(self, invoice_service, customer):
        ids = [invoice_service.create_invoice(customer.id, _usd("1.00")).id for _ in range(3)]
        assert [inv.id for inv in invoice_service.fetch_all()] == ids


class TestFetchAllPending:
    def test_only_pending(self, invoice_service, customer):
        pending = invoice_service.create_invoice(customer.id, _usd("1.00"))
        invoice_service.create_invoice(customer.id, _usd("2.00"), status=InvoiceStatus.PAID)

        assert [inv.id for inv in invoice_service.fetch_all_pending()] == [pending.id]

    def test_empty_store(self, invoice_service):
        assert invoice_service.fetch_all_pending() == []

    def test_ordered_by_id_across_customers(self, invoice_service, customer_service):
        first = customer_service.create_customer(Currency.EUR)
        second = customer_service.create_customer(Currency.GBP)
        created = [
            invoice_service.create_invoice(first.id, Money(Decimal("1"), Currency.EUR)),
            invoice_service.create_invoice(second.id, Money(Decimal("2"), Currency.GBP)),
            invoice_service.create_invoice(first.id, Money(Decimal("3"), Currency.EUR)),
        ]

        assert [inv.id for inv in invoice_service.fetch_all_pending()] == [inv.id for inv in created]


class TestMarkInvoiceAsPaid:
    def test_marks_paid(self, invoice_service, customer, captured_logs):
        invoice = invoice_service.create_invoice(customer.id, _usd("5.00"))

        invoice_service.mark_invoice_as_paid(invoice)

        assert invoice_service.fetch(invoice.id).status == InvoiceStatus.PAID
        assert invoice_service.fetch_all_pending() == []
        assert any(r["message"] == "invoice_marked_paid" for r in captured_logs())

    def test_already_paid_is_left_unchanged(self, invoice_service, customer, captured_logs):
        invoice = invoice_service.create_invoice(customer.id, _usd("5.00"))
        invoice_service.mark_invoice_as_paid(invoice)

        invoice_service.mark_invoice_as_paid(invoice)

        assert invoice_service.fetch(invoice.id).status == InvoiceStatus.PAID
        settled = [r for r in captured_logs() if r["message"] == "invoice_already_settled"]
        assert len(settled) == 1

    def test_missing_invoice(self, invoice_service, customer):
        ghost = Invoice(id=999, customer_id=customer.id, amount=_usd("1"), status=InvoiceStatus.PENDING)

        with pytest.raises(InvoiceNotFoundError):
            invoice_service.mark_invoice_as_paid(ghost)
