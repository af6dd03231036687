"""
BillingOrchestrator -- DI container for the billing system.

Contract:
    Wires the invoice store, payment provider, charger, customer worker,
    billing service and scheduler.  Single place where all billing
    dependencies are composed.

Architecture: billing_batch (top-level).  The canonical entry point for
    configuring and running billing.

Invariants enforced:
    - Clock injection (service and scheduler receive the same Clock).
    - Nothing in billing_kernel imports billing_batch.
"""

from __future__ import annotations

from sqlalchemy.orm import Session, sessionmaker

from billing_config import BillingSettings
from billing_kernel.db.engine import create_tables, init_engine_from_url
from billing_kernel.domain.clock import Clock, SystemClock
from billing_kernel.external.payment_provider import PaymentProvider
from billing_kernel.logging_config import get_logger
from billing_kernel.services.customer_service import CustomerService
from billing_kernel.services.invoice_service import InvoiceService

from billing_batch.domain.types import BillingSchedule, ScheduleFrequency
from billing_batch.services.billing_service import DEFAULT_MAX_WORKERS, BillingService
from billing_batch.services.charger import InvoiceCharger
from billing_batch.services.scheduler import BillingScheduler
from billing_batch.services.worker import CustomerBillingWorker

logger = get_logger("batch.orchestrator")


class BillingOrchestrator:
    """DI container for the billing system.

    Contract:
        - ``from_settings()`` initialises the engine and returns a fully
          wired orchestrator.
        - ``create_billing_service()`` returns a BillingService for ad-hoc
          runs.
        - ``create_scheduler()`` returns a BillingScheduler for background use.

    Non-goals:
        - Does NOT start the scheduler automatically -- caller decides.
    """

    def __init__(
        self,
        session_factory: sessionmaker[Session],
        payment_provider: PaymentProvider,
        clock: Clock | None = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        schedule: BillingSchedule | None = None,
        tick_interval_seconds: int = 60,
    ) -> None:
        self._session_factory = session_factory
        self._payment_provider = payment_provider
        self._clock = clock or SystemClock()
        self._max_workers = max_workers
        self._schedule = schedule or BillingSchedule(
            frequency=ScheduleFrequency.MONTHLY,
            cron_expression="0 0 1 * *",
        )
        self._tick_interval = tick_interval_seconds
        self._invoice_service = InvoiceService(session_factory)
        self._customer_service = CustomerService(session_factory)

    # -------------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------------

    @classmethod
    def from_settings(
        cls,
        settings: BillingSettings,
        payment_provider: PaymentProvider,
        clock: Clock | None = None,
    ) -> BillingOrchestrator:
        """Create a fully wired BillingOrchestrator from settings.

        Args:
            settings: Loaded billing settings (see billing_config).
            payment_provider: Gateway client used for every charge.
            clock: Optional clock for deterministic testing.
        """
        db = settings.database
        engine = init_engine_from_url(
            db.url,
            echo=db.echo,
            pool_size=db.pool_size,
            max_overflow=db.max_overflow,
        )
        if db.create_tables:
            create_tables(engine)

        schedule = BillingSchedule(
            frequency=ScheduleFrequency(settings.schedule.frequency),
            cron_expression=settings.schedule.cron_expression,
        )

        logger.info(
            "billing_orchestrator_configured",
            extra={
                "max_workers": settings.billing.max_workers,
                "frequency": schedule.frequency.value,
                "cron_expression": schedule.cron_expression,
                "config_checksum": settings.checksum,
            },
        )

        return cls(
            session_factory=sessionmaker(bind=engine, expire_on_commit=False),
            payment_provider=payment_provider,
            clock=clock,
            max_workers=settings.billing.max_workers,
            schedule=schedule,
            tick_interval_seconds=settings.schedule.tick_interval_seconds,
        )

    # -------------------------------------------------------------------------
    # Billing
    # -------------------------------------------------------------------------

    def create_billing_service(self) -> BillingService:
        """Create a BillingService wired with the orchestrator's dependencies."""
        charger = InvoiceCharger(
            payment_provider=self._payment_provider,
            invoice_store=self._invoice_service,
        )
        return BillingService(
            invoice_source=self._invoice_service,
            worker=CustomerBillingWorker(charger),
            clock=self._clock,
            max_workers=self._max_workers,
        )

    # -------------------------------------------------------------------------
    # Scheduler
    # -------------------------------------------------------------------------

    def create_scheduler(self) -> BillingScheduler:
        """Create a BillingScheduler driving a fresh BillingService."""
        return BillingScheduler(
            billing_service=self.create_billing_service(),
            schedule=self._schedule,
            clock=self._clock,
            tick_interval_seconds=self._tick_interval,
        )

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def invoice_service(self) -> InvoiceService:
        return self._invoice_service

    @property
    def customer_service(self) -> CustomerService:
        return self._customer_service

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def schedule(self) -> BillingSchedule:
        return self._schedule
