"""
BillingScheduler -- In-process periodic trigger for billing runs.

Contract:
    Polls the billing schedule on a configurable interval, evaluates
    ``should_fire()`` (pure) and, when due, calls
    ``BillingService.bill_all_pending()``.

Architecture: billing_batch/services.  Uses billing_batch.domain.schedule
    for pure evaluation.

Invariants enforced:
    - All timestamps from the injected Clock.
    - Schedule evaluation is pure (should_fire).
    - A run that aborts is recorded as FAILED and its exception re-raised
      from ``tick()``; the background loop logs it and keeps polling, so the
      next scheduled run still happens.
    - Graceful shutdown: ``stop()`` lets an in-flight run finish.
"""

from __future__ import annotations

import dataclasses
import threading
from datetime import datetime

from billing_kernel.domain.clock import Clock, SystemClock
from billing_kernel.logging_config import get_logger

from billing_batch.domain.schedule import compute_next_run, parse_cron, should_fire
from billing_batch.domain.types import (
    BillingRunResult,
    BillingRunStatus,
    BillingSchedule,
)
from billing_batch.services.billing_service import BillingService

logger = get_logger("batch.scheduler")


class BillingScheduler:
    """In-process polling scheduler for the billing run.

    Contract:
        - ``tick()`` evaluates the schedule and fires the run if due.
        - ``run_now()`` fires the run regardless of the schedule.
        - ``start()`` / ``stop()`` for background thread operation.

    Non-goals:
        - NOT a distributed scheduler (no leader election).
        - Does NOT handle timezone conversions (expects the clock's zone).
    """

    def __init__(
        self,
        billing_service: BillingService,
        schedule: BillingSchedule,
        clock: Clock | None = None,
        tick_interval_seconds: int = 60,
    ):
        if schedule.cron_expression:
            parse_cron(schedule.cron_expression)
        self._billing_service = billing_service
        self._clock = clock or SystemClock()
        self._tick_interval = tick_interval_seconds
        self._schedule = schedule
        self._schedule_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None

        if schedule.next_run_at is None and schedule.cron_expression:
            # Wait for the first cron slot instead of firing on startup.
            self._schedule = dataclasses.replace(
                schedule,
                next_run_at=compute_next_run(
                    schedule.frequency,
                    self._clock.now(),
                    schedule.cron_expression,
                ),
            )

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    @property
    def schedule(self) -> BillingSchedule:
        with self._schedule_lock:
            return self._schedule

    def tick(self) -> BillingRunResult | None:
        """Fire the billing run if the schedule is due (public for testing).

        Returns the run result, or None if nothing was due.
        """
        now = self._clock.now()
        if not should_fire(self.schedule, now):
            return None
        return self._fire(now)

    def run_now(self) -> BillingRunResult:
        """Fire the billing run immediately (manual trigger)."""
        return self._fire(self._clock.now())

    def start(self) -> None:
        """Start the scheduler in a background thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            name="billing-scheduler",
            daemon=True,
        )
        self._thread.start()
        logger.info(
            "scheduler_started",
            extra={
                "tick_interval": self._tick_interval,
                "next_run_at": self.schedule.next_run_at,
            },
        )

    def stop(self, timeout: float = 30.0) -> None:
        """Signal stop and wait for the scheduler to finish.

        Args:
            timeout: Max seconds to wait for the thread to finish.
        """
        self._stop_event.set()
        if self._thread is not None and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        logger.info("scheduler_stopped")

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _run_loop(self) -> None:
        """Background polling loop. Exits when stop_event is set."""
        while not self._stop_event.is_set():
            try:
                self.tick()
            except Exception:
                logger.exception("scheduler_tick_exception")
            self._stop_event.wait(timeout=self._tick_interval)

    def _fire(self, now: datetime) -> BillingRunResult:
        try:
            result = self._billing_service.bill_all_pending()
        except Exception:
            self._record_run(now, BillingRunStatus.FAILED)
            raise
        self._record_run(now, result.status)
        return result

    def _record_run(self, now: datetime, status: BillingRunStatus) -> None:
        with self._schedule_lock:
            schedule = self._schedule
            next_run = compute_next_run(
                frequency=schedule.frequency,
                last_run_at=now,
                cron_expression=schedule.cron_expression,
            )
            self._schedule = dataclasses.replace(
                schedule,
                last_run_at=now,
                last_run_status=status,
                next_run_at=next_run,
            )

        logger.info(
            "schedule_fired",
            extra={
                "status": status.value,
                "next_run_at": str(next_run) if next_run else None,
            },
        )
