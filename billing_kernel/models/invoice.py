"""
ORM models for customers and invoices.

Contract:
    CustomerModel and InvoiceModel persist the billing store.  Each has a
    ``to_dto()`` method returning the frozen domain dataclass; services never
    hand ORM instances to the billing engine.

Architecture: billing_kernel/models.  Imports from billing_kernel.db.base and
    billing_kernel.domain only.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from billing_kernel.db.base import Base
from billing_kernel.domain.invoice import Customer, Invoice, InvoiceStatus
from billing_kernel.domain.values import Currency, Money


class CustomerModel(Base):
    """Persistent customer record."""

    __tablename__ = "customers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)

    invoices: Mapped[list["InvoiceModel"]] = relationship(
        "InvoiceModel",
        back_populates="customer",
    )

    def to_dto(self) -> Customer:
        return Customer(id=self.id, currency=Currency(self.currency))


class InvoiceModel(Base):
    """Persistent invoice record."""

    __tablename__ = "invoices"

    __table_args__ = (
        Index("ix_invoices_status", "status"),
        Index("ix_invoices_customer_id", "customer_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("customers.id"),
        nullable=False,
    )
    amount: Mapped[Decimal] = mapped_column(nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)

    customer: Mapped["CustomerModel"] = relationship(
        "CustomerModel",
        back_populates="invoices",
    )

    def to_dto(self) -> Invoice:
        return Invoice(
            id=self.id,
            customer_id=self.customer_id,
            amount=Money(amount=self.amount, currency=Currency(self.currency)),
            status=InvoiceStatus(self.status),
        )
