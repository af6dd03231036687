"""
Service layer for customer persistence.

Returns frozen ``Customer`` DTOs, never ORM entities.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker

from billing_kernel.db.engine import session_scope
from billing_kernel.domain.invoice import Customer
from billing_kernel.domain.values import Currency
from billing_kernel.exceptions import CustomerNotFoundError
from billing_kernel.models.invoice import CustomerModel


class CustomerService:
    """Store for customers."""

    def __init__(self, session_factory: sessionmaker[Session]):
        self._session_factory = session_factory

    def fetch(self, customer_id: int) -> Customer:
        """
        Get a customer by ID.

        Raises:
            CustomerNotFoundError: If the customer doesn't exist.
        """
        with session_scope(self._session_factory) as session:
            model = session.get(CustomerModel, customer_id)
            if model is None:
                raise CustomerNotFoundError(customer_id)
            return model.to_dto()

    def fetch_all(self) -> list[Customer]:
        with session_scope(self._session_factory) as session:
            models = session.execute(
                select(CustomerModel).order_by(CustomerModel.id)
            ).scalars().all()
            return [m.to_dto() for m in models]

    def create_customer(self, currency: Currency) -> Customer:
        with session_scope(self._session_factory) as session:
            model = CustomerModel(currency=currency.value)
            session.add(model)
            session.flush()
            return model.to_dto()
