"""
ORM models for the billing kernel.

Importing this package registers every table on ``Base.metadata``.
"""

from billing_kernel.models.invoice import CustomerModel, InvoiceModel

__all__ = ["CustomerModel", "InvoiceModel"]
