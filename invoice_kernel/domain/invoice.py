"""
Invoice -- the invoice record and the actions that may be taken on it.

Responsibility:
    Defines InvoiceState (the prior state carried by a transaction) and the
    closed set of actions: AssignTo, Pay, MarkPaid, Cancel.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Records are frozen; a transition never mutates a state, it only
      certifies a proposed successor.
    - ``amount > 0`` is NOT checked here. It is a payment-time rule.

Lifecycle:
    ACTIVE_UNASSIGNED --AssignTo--> ACTIVE_ASSIGNED
    ACTIVE_*          --Pay / MarkPaid--> PAID      (terminal)
    ACTIVE_*          --Cancel--> CANCELLED         (terminal)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import ClassVar, Union

from invoice_kernel.domain.interval import POSIXTime
from invoice_kernel.domain.values import AssetClass, PubKeyHash


@unique
class InvoiceStatus(str, Enum):
    """State-machine view of an invoice."""

    ACTIVE_UNASSIGNED = "active_unassigned"
    ACTIVE_ASSIGNED = "active_assigned"
    PAID = "paid"
    CANCELLED = "cancelled"


TERMINAL_STATUSES: frozenset[InvoiceStatus] = frozenset(
    {InvoiceStatus.PAID, InvoiceStatus.CANCELLED}
)


@dataclass(frozen=True)
class InvoiceState:
    """
    Prior invoice state carried by a transaction.

    Contract:
        ``assigned_to`` is None while the issuer still holds the
        receivable; otherwise it names the factor who bought it.
        ``document_hash`` is an opaque off-chain fingerprint, carried and
        never interpreted.
    """

    issuer: PubKeyHash
    buyer: PubKeyHash
    amount: int
    due_at: POSIXTime
    paid: bool
    document_hash: bytes
    assigned_to: PubKeyHash | None
    settlement_asset: AssetClass
    compliance_authority: PubKeyHash

    @property
    def recipient(self) -> PubKeyHash:
        """Current holder of the receivable."""
        return self.assigned_to if self.assigned_to is not None else self.issuer

    @property
    def status(self) -> InvoiceStatus:
        # A cancelled invoice is consumed, so no record ever reports CANCELLED.
        if self.paid:
            return InvoiceStatus.PAID
        if self.assigned_to is not None:
            return InvoiceStatus.ACTIVE_ASSIGNED
        return InvoiceStatus.ACTIVE_UNASSIGNED

    @property
    def reference(self) -> str:
        """Short reference for logs."""
        return self.document_hash.hex()[:16]


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------


@unique
class ActionKind(str, Enum):
    ASSIGN = "assign"
    PAY = "pay"
    MARK_PAID = "markpaid"
    CANCEL = "cancel"


@dataclass(frozen=True)
class AssignTo:
    """Transfer the right to receive settlement to ``factor``."""

    kind: ClassVar[ActionKind] = ActionKind.ASSIGN

    factor: PubKeyHash


@dataclass(frozen=True)
class Pay:
    """
    Settle the invoice.

    ``amount_paid`` and ``paid_at`` are declared by the caller. They are
    compared against the invoice amount and validity range but are never
    matched against the value actually delivered.
    """

    kind: ClassVar[ActionKind] = ActionKind.PAY

    amount_paid: int
    paid_at: POSIXTime


@dataclass(frozen=True)
class MarkPaid:
    """Issuer attests that settlement happened off-ledger."""

    kind: ClassVar[ActionKind] = ActionKind.MARK_PAID


@dataclass(frozen=True)
class Cancel:
    """Issuer voids the invoice."""

    kind: ClassVar[ActionKind] = ActionKind.CANCEL


InvoiceAction = Union[AssignTo, Pay, MarkPaid, Cancel]
