"""
Transaction context -- the read-only view of a proposed transaction.

Supplied by the hosting runtime once per attempted transition. The domain
layer never holds a ledger handle; everything a rule may look at is in this
snapshot.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from invoice_kernel.domain.interval import POSIXTimeRange
from invoice_kernel.domain.values import Address, PubKeyHash, Value


@dataclass(frozen=True)
class TxOut:
    """A transaction output: destination address, value, optional inline datum."""

    address: Address
    value: Value
    datum: Any = None


@dataclass(frozen=True)
class TransactionContext:
    """
    Immutable snapshot of a candidate transaction.

    Contract:
        Carries the signer set, the ordered outputs and the validity range.
        ``tx_id`` is diagnostic only and never consulted by a rule.

    Guarantees:
        - signatories is a frozenset (membership only, no multiplicity)
        - outputs is a tuple in transaction order
    """

    signatories: frozenset[PubKeyHash] = field(default_factory=frozenset)
    outputs: tuple[TxOut, ...] = ()
    valid_range: POSIXTimeRange = field(default_factory=POSIXTimeRange.always)
    tx_id: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.signatories, frozenset):
            object.__setattr__(self, "signatories", frozenset(self.signatories))
        if not isinstance(self.outputs, tuple):
            object.__setattr__(self, "outputs", tuple(self.outputs))
