"""
Typed exception hierarchy for the billing kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

The billing engine has to tell business failures apart from defects.
Callers catch by type, never by message:

    try:
        charged = provider.charge(invoice)
    except PaymentProviderError as e:      # expected, recovered per invoice
        log.error("payment_provider_fault", extra={"code": e.code})

Anything that is NOT a recognised type propagates and fails the run.

Every exception has a ``code`` class attribute (machine-readable) and keeps
its context as attributes, so the structured log formatter can emit them as
``exc_*`` fields.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    BillingKernelError (base)
    |
    +-- StoreError
    |   +-- InvoiceNotFoundError
    |   +-- CustomerNotFoundError
    |
    +-- PaymentProviderError
    |   +-- NetworkError
    |   +-- CurrencyMismatchError
    |   +-- PaymentCustomerNotFoundError
    |
    +-- ScheduleError
        +-- InvalidCronExpressionError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Store           | INVOICE_NOT_FOUND           | Invoice ID doesn't exist
                | CUSTOMER_NOT_FOUND          | Customer ID doesn't exist
----------------|-----------------------------|-----------------------------------------
Payment         | NETWORK_ERROR               | Provider unreachable / timed out
                | CURRENCY_MISMATCH           | Invoice currency != customer currency
                | PAYMENT_CUSTOMER_NOT_FOUND  | Provider has no account for customer
----------------|-----------------------------|-----------------------------------------
Schedule        | INVALID_CRON_EXPRESSION     | Cron string cannot be parsed
"""


class BillingKernelError(Exception):
    """
    Base exception for all billing kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "BILLING_KERNEL_ERROR"


# Store exceptions


class StoreError(BillingKernelError):
    """Base exception for invoice/customer store errors."""

    code: str = "STORE_ERROR"


class InvoiceNotFoundError(StoreError):
    """Invoice with given ID was not found."""

    code: str = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: int):
        self.invoice_id = invoice_id
        super().__init__(f"Invoice not found: {invoice_id}")


class CustomerNotFoundError(StoreError):
    """Customer with given ID was not found."""

    code: str = "CUSTOMER_NOT_FOUND"

    def __init__(self, customer_id: int):
        self.customer_id = customer_id
        super().__init__(f"Customer not found: {customer_id}")


# Payment provider exceptions


class PaymentProviderError(BillingKernelError):
    """
    Base exception for recognised payment provider faults.

    Raised by a PaymentProvider when a charge could not be attempted or
    completed for an operational reason.  The billing engine treats these as
    business outcomes: the invoice stays PENDING and the next run retries it.
    """

    code: str = "PAYMENT_PROVIDER_ERROR"


class NetworkError(PaymentProviderError):
    """The provider could not be reached or did not answer in time."""

    code: str = "NETWORK_ERROR"

    def __init__(self, message: str = "Payment provider network failure"):
        super().__init__(message)


class CurrencyMismatchError(PaymentProviderError):
    """Invoice currency does not match the customer's account currency."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, invoice_id: int, customer_id: int):
        self.invoice_id = invoice_id
        self.customer_id = customer_id
        super().__init__(
            f"Currency of invoice '{invoice_id}' does not match currency "
            f"of customer '{customer_id}'"
        )


class PaymentCustomerNotFoundError(PaymentProviderError):
    """The provider has no account for the invoice's customer."""

    code: str = "PAYMENT_CUSTOMER_NOT_FOUND"

    def __init__(self, customer_id: int):
        self.customer_id = customer_id
        super().__init__(f"Payment provider has no customer '{customer_id}'")


# Schedule exceptions


class ScheduleError(BillingKernelError):
    """Base exception for billing schedule errors."""

    code: str = "SCHEDULE_ERROR"


class InvalidCronExpressionError(ScheduleError, ValueError):
    """Cron expression could not be parsed."""

    code: str = "INVALID_CRON_EXPRESSION"

    def __init__(self, expression: str, reason: str):
        self.expression = expression
        self.reason = reason
        super().__init__(f"Invalid cron expression '{expression}': {reason}")
