"""
billing_batch -- Billing run orchestration and scheduling.

Charges every customer's pending invoices through the payment provider,
one concurrent worker per customer, with a customer-scoped fail-fast
policy: a declined charge stops further charges for that customer in the
same run, while gateway faults and non-pending invoices are skipped.

Architecture:
    billing_batch/ is a top-level package.  Nothing in billing_kernel/
    imports from billing_batch.

Invariants:
    - An invoice is marked PAID only after the provider confirmed the charge.
    - Within one customer, charges are strictly sequential in store order.
    - Customers are billed independently of each other.
    - Unrecognised exceptions abort the whole run and reach the caller.
    - Clock injection (no datetime.now() calls outside SystemClock).
"""
