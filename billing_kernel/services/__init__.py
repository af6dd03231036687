"""Store services: invoice and customer persistence behind DTO-returning APIs."""

from billing_kernel.services.customer_service import CustomerService
from billing_kernel.services.invoice_service import InvoiceService

__all__ = ["CustomerService", "InvoiceService"]
