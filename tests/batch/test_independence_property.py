"""
Property-based tests for customer independence in a billing run.

For any grouping of invoices and any pattern of declines, faults and
approvals, the charge attempts for a customer equal that customer's
invoices up to and including its first decline, whatever happens to the
other customers.
"""

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from billing_kernel.domain.invoice import InvoiceStatus
from billing_kernel.exceptions import NetworkError

from billing_batch.services.billing_service import BillingService
from billing_batch.services.charger import InvoiceCharger
from billing_batch.services.worker import CustomerBillingWorker
from tests.fakes import FakeInvoiceStore, FakePaymentProvider, make_invoice

RESPONSES = st.sampled_from(["approve", "decline", "fault"])


@st.composite
def billing_runs(draw):
    """Draw (invoices, responses): up to 6 customers with up to 5 invoices each."""
    customer_ids = draw(st.lists(st.integers(1, 50), min_size=1, max_size=6, unique=True))
    invoices = []
    responses = {}
    next_id = 1
    for customer_id in customer_ids:
        for _ in range(draw(st.integers(1, 5))):
            invoices.append(make_invoice(next_id, customer_id=customer_id))
            responses[next_id] = draw(RESPONSES)
            next_id += 1
    return invoices, responses


def _expected_attempts(invoices, responses, customer_id):
    attempts = []
    for invoice in sorted(invoices, key=lambda inv: inv.id):
        if invoice.customer_id != customer_id:
            continue
        attempts.append(invoice.id)
        if responses[invoice.id] == "decline":
            break
    return attempts


def _to_provider_answer(kind):
    if kind == "approve":
        return True
    if kind == "decline":
        return False
    return NetworkError()


class TestCustomerIndependence:
    @given(run=billing_runs())
    @settings(max_examples=60, deadline=None, suppress_health_check=[HealthCheck.too_slow, HealthCheck.function_scoped_fixture])
    def test_attempts_depend_only_on_own_invoices(self, run):
        invoices, responses = run
        provider = FakePaymentProvider(
            {invoice_id: _to_provider_answer(kind) for invoice_id, kind in responses.items()}
        )
        store = FakeInvoiceStore(invoices)
        worker = CustomerBillingWorker(InvoiceCharger(provider, store))

        BillingService(store, worker, max_workers=4).bill_all_pending()

        for customer_id in {inv.customer_id for inv in invoices}:
            expected = _expected_attempts(invoices, responses, customer_id)
            actual = [
                invoice_id for invoice_id in provider.calls
                if invoice_id in {inv.id for inv in invoices if inv.customer_id == customer_id}
            ]
            assert actual == expected

        for invoice in invoices:
            paid = store.status_of(invoice.id) == InvoiceStatus.PAID
            attempted_and_approved = (
                invoice.id in provider.calls and responses[invoice.id] == "approve"
            )
            assert paid == attempted_and_approved
