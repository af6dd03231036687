"""Contracts for systems outside the billing kernel."""

from billing_kernel.external.payment_provider import (
    PaymentProvider,
    RandomPaymentProvider,
)

__all__ = ["PaymentProvider", "RandomPaymentProvider"]
