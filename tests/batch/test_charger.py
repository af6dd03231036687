"""
Tests for billing_batch.services.charger.

Validates InvoiceCharger: eligibility check, provider outcome mapping,
recognised provider faults recovered as GATEWAY_FAULT, and unrecognised
exceptions propagated unchanged.
"""

import pytest

from billing_kernel.domain.invoice import InvoiceStatus
from billing_kernel.exceptions import (
    CurrencyMismatchError,
    NetworkError,
    PaymentCustomerNotFoundError,
)

from billing_batch.domain.types import ChargeOutcome
from billing_batch.services.charger import RECOVERABLE_GATEWAY_ERRORS, InvoiceCharger
from tests.fakes import FakeInvoiceStore, FakePaymentProvider, make_invoice


def _charger(provider, store=None):
    return InvoiceCharger(payment_provider=provider, invoice_store=store or FakeInvoiceStore())


# =============================================================================
# Eligibility
# =============================================================================


class TestInvoiceNotPending:
    def test_paid_invoice_is_not_charged(self):
        provider = FakePaymentProvider()
        store = FakeInvoiceStore()
        invoice = make_invoice(1, customer_id=10, status=InvoiceStatus.PAID)

        result = _charger(provider, store).charge_one(invoice)

        assert result.outcome == ChargeOutcome.INVOICE_NOT_PENDING
        assert result.invoice_id == 1
        assert result.cause is None
        assert provider.calls == []
        assert store.marked == []


# =============================================================================
# Provider outcomes
# =============================================================================


class TestProviderOutcomes:
    def test_approved_charge_marks_paid_once(self):
        invoice = make_invoice(1, customer_id=10)
        provider = FakePaymentProvider({1: True})
        store = FakeInvoiceStore([invoice])

        result = _charger(provider, store).charge_one(invoice)

        assert result.outcome == ChargeOutcome.SUCCEEDED
        assert result.is_success
        assert provider.calls == [1]
        assert store.marked == [1]
        assert store.status_of(1) == InvoiceStatus.PAID

    def test_declined_charge_leaves_invoice_pending(self):
        invoice = make_invoice(1, customer_id=10)
        provider = FakePaymentProvider({1: False})
        store = FakeInvoiceStore([invoice])

        result = _charger(provider, store).charge_one(invoice)

        assert result.outcome == ChargeOutcome.FAILED_TO_CHARGE
        assert not result.is_success
        assert store.marked == []
        assert store.status_of(1) == InvoiceStatus.PENDING


# =============================================================================
# Provider faults
# =============================================================================


class TestGatewayFaults:
    @pytest.mark.parametrize(
        "error",
        [
            NetworkError(),
            CurrencyMismatchError(invoice_id=1, customer_id=10),
            PaymentCustomerNotFoundError(customer_id=10),
            ConnectionError("connection reset"),
            TimeoutError("read timed out"),
        ],
        ids=["network", "currency_mismatch", "customer_not_found", "connection", "timeout"],
    )
    def test_recognised_error_becomes_gateway_fault(self, error):
        invoice = make_invoice(1, customer_id=10)
        store = FakeInvoiceStore([invoice])

        result = _charger(FakePaymentProvider({1: error}), store).charge_one(invoice)

        assert result.outcome == ChargeOutcome.GATEWAY_FAULT
        assert result.cause is error
        assert store.marked == []
        assert store.status_of(1) == InvoiceStatus.PENDING

    def test_gateway_fault_is_logged_with_invoice(self, captured_logs):
        invoice = make_invoice(7, customer_id=3)

        _charger(FakePaymentProvider({7: NetworkError()})).charge_one(invoice)

        faults = [r for r in captured_logs() if r["message"] == "payment_provider_fault"]
        assert len(faults) == 1
        assert faults[0]["level"] == "ERROR"
        assert faults[0]["invoice_id"] == 7
        assert faults[0]["customer_id"] == 3
        assert faults[0]["exc_type"] == "NetworkError"
        assert faults[0]["exc_code"] == "NETWORK_ERROR"

    def test_unrecognised_error_propagates(self):
        invoice = make_invoice(1, customer_id=10)
        store = FakeInvoiceStore([invoice])
        boom = TypeError("unexpected payload")

        with pytest.raises(TypeError) as exc_info:
            _charger(FakePaymentProvider({1: boom}), store).charge_one(invoice)

        assert exc_info.value is boom
        assert store.marked == []

    def test_custom_recoverable_errors(self):
        invoice = make_invoice(1, customer_id=10)
        charger = InvoiceCharger(
            payment_provider=FakePaymentProvider({1: KeyError("k")}),
            invoice_store=FakeInvoiceStore([invoice]),
            recoverable_errors=RECOVERABLE_GATEWAY_ERRORS + (KeyError,),
        )

        assert charger.charge_one(invoice).outcome == ChargeOutcome.GATEWAY_FAULT

    def test_store_failure_after_charge_propagates(self):
        invoice = make_invoice(1, customer_id=10)

        class BrokenStore:
            def mark_invoice_as_paid(self, invoice):
                raise RuntimeError("store offline")

        charger = InvoiceCharger(FakePaymentProvider({1: True}), BrokenStore())

        with pytest.raises(RuntimeError, match="store offline"):
            charger.charge_one(invoice)
