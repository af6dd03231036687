"""
billing_kernel.domain -- Pure value objects and the clock abstraction.

ZERO I/O (except SystemClock).
"""

from billing_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from billing_kernel.domain.invoice import Customer, Invoice, InvoiceStatus
from billing_kernel.domain.values import Currency, Money

__all__ = [
    "Clock",
    "Currency",
    "Customer",
    "DeterministicClock",
    "Invoice",
    "InvoiceStatus",
    "Money",
    "SystemClock",
]
