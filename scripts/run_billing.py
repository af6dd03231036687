#!/usr/bin/env python3
"""
Run the billing job: charge every customer's pending invoices.

Settings come from the active settings file (get_active_settings). The
database URL can be overridden on the command line; demo data can be seeded
into an empty database first.

Usage:
    python3 scripts/run_billing.py [options]

Examples:
    # Seed 20 customers with 5 invoices each, run one billing pass and exit
    python3 scripts/run_billing.py --database-url sqlite:///demo.db \\
        --seed-customers 20 --invoices-per-customer 5 --once

    # Run the scheduler in the foreground until Ctrl-C
    python3 scripts/run_billing.py --config billing_config/sets/default.yaml
"""

from __future__ import annotations

import argparse
import dataclasses
import random
import sys
import time
from decimal import Decimal
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run the billing job once or on its schedule.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Settings YAML file (default: billing_config/sets/default.yaml).",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="Database URL; overrides database.url from the settings file.",
    )
    parser.add_argument(
        "--seed-customers",
        type=int,
        default=0,
        help="Create N demo customers before billing (default: 0).",
    )
    parser.add_argument(
        "--invoices-per-customer",
        type=int,
        default=10,
        help="Invoices per seeded customer; the first is PENDING, the rest PAID (default: 10).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for demo data and the demo payment provider.",
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run one billing pass immediately and exit instead of scheduling.",
    )
    return parser.parse_args()


def _seed_demo_data(orchestrator, customers: int, invoices_per_customer: int, rng: random.Random) -> None:
    from billing_kernel.domain.invoice import InvoiceStatus
    from billing_kernel.domain.values import Currency, Money

    currencies = list(Currency)
    for _ in range(customers):
        customer = orchestrator.customer_service.create_customer(rng.choice(currencies))
        for index in range(invoices_per_customer):
            amount = Decimal(rng.randint(1000, 50000)) / Decimal(100)
            orchestrator.invoice_service.create_invoice(
                customer.id,
                Money(amount, customer.currency),
                status=InvoiceStatus.PENDING if index == 0 else InvoiceStatus.PAID,
            )
    print(f"Seeded {customers} customers with {invoices_per_customer} invoices each.")


def main() -> int:
    args = _parse_args()

    if args.seed_customers < 0 or args.invoices_per_customer < 0:
        print("ERROR: seed counts must be >= 0", file=sys.stderr)
        return 1

    # Lazy imports so we fail fast on args first
    from billing_config import get_active_settings
    from billing_kernel.external.payment_provider import RandomPaymentProvider
    from billing_kernel.logging_config import configure_logging, get_logger

    from billing_batch.orchestrator import BillingOrchestrator

    try:
        settings = get_active_settings(args.config)
    except Exception as e:
        print(f"ERROR: Failed to load settings: {e}", file=sys.stderr)
        return 1

    if args.database_url:
        settings = dataclasses.replace(
            settings,
            database=dataclasses.replace(settings.database, url=args.database_url),
        )

    configure_logging(level=settings.logging.level)
    logger = get_logger("scripts.run_billing")

    rng = random.Random(args.seed)
    try:
        orchestrator = BillingOrchestrator.from_settings(
            settings,
            payment_provider=RandomPaymentProvider(seed=args.seed),
        )
    except Exception as e:
        print(f"ERROR: Database init failed: {e}", file=sys.stderr)
        return 1

    if args.seed_customers:
        _seed_demo_data(orchestrator, args.seed_customers, args.invoices_per_customer, rng)

    if args.once:
        logger.info("job_starting")
        result = orchestrator.create_billing_service().bill_all_pending()
        logger.info(
            "job_execution_complete",
            extra={
                "status": result.status.value,
                "invoices": result.total_invoices,
                "customers": result.total_customers,
            },
        )
        print(
            f"Billing run {result.run_id}: {result.total_invoices} pending invoices "
            f"across {result.total_customers} customers in {result.duration_ms} ms."
        )
        return 0

    scheduler = orchestrator.create_scheduler()
    scheduler.start()
    print(f"Scheduler running; next run at {scheduler.schedule.next_run_at}. Ctrl-C to stop.")
    try:
        while scheduler.is_running:
            time.sleep(1)
    except KeyboardInterrupt:
        print("Stopping scheduler...")
    finally:
        scheduler.stop()
    return 0


if __name__ == "__main__":
    sys.exit(main())
