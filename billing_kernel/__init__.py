"""
Billing Kernel

Invoice storage, payment-provider contract, domain values and the
structured logging / exception foundations shared by the billing engine.
"""

__version__ = "0.1.0"
