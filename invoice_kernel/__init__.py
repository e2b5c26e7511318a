"""
Invoice Kernel - transition authorization for tokenized invoices

A pure, deterministic predicate deciding whether a proposed transaction may
move an invoice from its prior state:
- Assignment of the receivable to a factor
- Stable-asset settlement gated by a compliance authority
- Issuer attestation of off-ledger settlement
- Cancellation of unpaid invoices
"""

__version__ = "0.1.0"
