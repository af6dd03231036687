"""Billing run services: charger, per-customer worker, run fan-out, scheduler."""
