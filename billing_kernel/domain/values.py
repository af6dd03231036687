"""
Values -- Immutable, self-validating monetary value objects.

Responsibility:
    Pairs every invoice amount with its currency.  Amounts are Decimal only;
    floats are rejected at construction.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from enum import Enum


class Currency(str, Enum):
    """Currencies the billing system invoices in."""

    EUR = "EUR"
    USD = "USD"
    DKK = "DKK"
    SEK = "SEK"
    GBP = "GBP"


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount value object.

    Contract:
        Pairs a Decimal amount with its Currency -- they are NEVER separated.

    Guarantees:
        - Immutable and hashable.
        - ``amount`` is always a Decimal (str/int inputs are converted, float
          is rejected).
        - ``currency`` is always a Currency member.
    """

    amount: Decimal
    currency: Currency

    def __post_init__(self) -> None:
        if isinstance(self.amount, float):
            raise TypeError("Money amount must not be float")
        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, "amount", Decimal(str(self.amount)))
            except (InvalidOperation, ValueError) as e:
                raise ValueError(f"Invalid amount: {self.amount}") from e

        if not isinstance(self.currency, Currency):
            object.__setattr__(self, "currency", Currency(self.currency))

    def __str__(self) -> str:
        return f"{self.amount} {self.currency.value}"
