"""
Module: billing_kernel.db.base
Responsibility: Declarative base class for all SQLAlchemy ORM models.  Holds
    the type annotation map so that every model uses identical column types.
Architecture position: Kernel > DB.  This is the lowest-level import target
    within the kernel.  ALL model files import from here.  This module MUST NOT
    import from models/, services/, domain/, or outer layers.

Invariants enforced:
    - Decimal precision: Python Decimal maps to Numeric(38, 9).  NEVER use
      float for monetary amounts.
    - Integer primary keys: invoices and customers are addressed by the
      integer IDs the payment provider knows them by.
"""

from decimal import Decimal
from typing import ClassVar

from sqlalchemy import Numeric
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Guarantees:
        - Decimal maps to Numeric(38, 9) -- financial-grade precision.
    """

    type_annotation_map: ClassVar[dict] = {
        Decimal: Numeric(38, 9),
    }
