"""
Tests for billing_batch.orchestrator.

Validates BillingOrchestrator wiring: settings-driven engine and table
setup, billing service and scheduler construction, shared clock.
"""

from datetime import datetime, timezone
from decimal import Decimal

import pytest
from sqlalchemy.orm import sessionmaker

from billing_config import (
    BillingRunSettings,
    BillingSettings,
    DatabaseSettings,
    ScheduleSettings,
)
from billing_kernel.db.engine import reset_engine
from billing_kernel.domain.clock import DeterministicClock
from billing_kernel.domain.invoice import InvoiceStatus
from billing_kernel.domain.values import Currency, Money

from billing_batch.domain.types import BillingRunStatus, ScheduleFrequency
from billing_batch.orchestrator import BillingOrchestrator
from billing_batch.services.billing_service import BillingService
from billing_batch.services.scheduler import BillingScheduler
from tests.fakes import FakePaymentProvider


@pytest.fixture
def clock():
    return DeterministicClock(fixed_time=datetime(2026, 2, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings(tmp_path):
    return BillingSettings(
        database=DatabaseSettings(
            url=f"sqlite:///{tmp_path / 'orchestrator.db'}",
            create_tables=True,
        ),
        billing=BillingRunSettings(max_workers=3),
        schedule=ScheduleSettings(frequency="daily", cron_expression="30 6 * * *"),
    )


@pytest.fixture
def orchestrator(settings, clock):
    orch = BillingOrchestrator.from_settings(settings, FakePaymentProvider(), clock=clock)
    yield orch
    reset_engine()


class TestFromSettings:
    def test_creates_tables_and_services(self, orchestrator):
        customer = orchestrator.customer_service.create_customer(Currency.SEK)
        invoice = orchestrator.invoice_service.create_invoice(
            customer.id, Money(Decimal("12.50"), Currency.SEK),
        )

        assert orchestrator.invoice_service.fetch(invoice.id).amount.amount == Decimal("12.50")

    def test_schedule_from_settings(self, orchestrator):
        assert orchestrator.schedule.frequency == ScheduleFrequency.DAILY
        assert orchestrator.schedule.cron_expression == "30 6 * * *"

    def test_logs_configuration(self, settings, clock, captured_logs):
        BillingOrchestrator.from_settings(settings, FakePaymentProvider(), clock=clock)
        reset_engine()

        configured = [r for r in captured_logs() if r["message"] == "billing_orchestrator_configured"]
        assert configured[0]["max_workers"] == 3
        assert configured[0]["frequency"] == "daily"


class TestWiring:
    def test_billing_run_end_to_end(self, orchestrator):
        customer = orchestrator.customer_service.create_customer(Currency.EUR)
        first = orchestrator.invoice_service.create_invoice(
            customer.id, Money(Decimal("1.00"), Currency.EUR),
        )
        second = orchestrator.invoice_service.create_invoice(
            customer.id, Money(Decimal("2.00"), Currency.EUR),
        )

        service = orchestrator.create_billing_service()
        result = service.bill_all_pending()

        assert isinstance(service, BillingService)
        assert result.status == BillingRunStatus.COMPLETED
        assert orchestrator.invoice_service.fetch(first.id).status == InvoiceStatus.PAID
        assert orchestrator.invoice_service.fetch(second.id).status == InvoiceStatus.PAID

    def test_scheduler_shares_clock(self, orchestrator, clock):
        scheduler = orchestrator.create_scheduler()

        assert isinstance(scheduler, BillingScheduler)
        assert orchestrator.clock is clock
        assert scheduler.schedule.next_run_at == datetime(2026, 2, 2, 6, 30, tzinfo=timezone.utc)

    def test_direct_construction_defaults_to_monthly(self, engine):
        orch = BillingOrchestrator(
            session_factory=sessionmaker(bind=engine, expire_on_commit=False),
            payment_provider=FakePaymentProvider(),
        )

        assert orch.schedule.frequency == ScheduleFrequency.MONTHLY
        assert orch.schedule.cron_expression == "0 0 1 * *"
