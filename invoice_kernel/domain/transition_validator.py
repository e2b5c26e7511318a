"""
TransitionValidator -- Pure authorization of invoice state transitions.

Responsibility:
    Decides, for a prior InvoiceState, one requested action and the
    context of the proposed transaction, whether the transition is legal.
    One rule set per action; each rule set is a conjunction of named
    conditions.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O. Depends only on the
    context readers and the invoice model.

Invariants enforced:
    - A settled invoice is never reassigned or cancelled.
    - Settlement requires the buyer's and the compliance authority's
      signatures, and at least the invoice amount of the settlement asset
      delivered to the current holder of the receivable.
    - Determinism: identical inputs give an identical result, including the
      set of satisfied and violated conditions.

Failure modes:
    - UnsupportedActionError for an action outside the closed set.
    - Rule violations are NOT raised; they are returned in TransitionResult.
      ``raise_for_rejection()`` converts them to TransitionRejectedError.

Preserved behaviors:
    - MarkPaid does not look at ``paid``; it is an attestation and may be
      repeated.
    - Pay's declared ``amount_paid`` is only compared with the invoice
      amount. The binding monetary check is the delivered value.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique

from invoice_kernel.domain.context import TransactionContext
from invoice_kernel.domain.invoice import (
    ActionKind,
    AssignTo,
    Cancel,
    InvoiceAction,
    InvoiceState,
    MarkPaid,
    Pay,
)
from invoice_kernel.domain.readers import (
    TimeCheck,
    amount_delivered_to,
    is_signed_by,
    is_time_reachable,
)
from invoice_kernel.exceptions import (
    TransitionRejectedError,
    UnsupportedActionError,
)
from invoice_kernel.logging_config import get_logger

logger = get_logger("domain.transition_validator")


@unique
class TransitionRule(str, Enum):
    """Every named condition a transition may have to satisfy."""

    ASSIGN_ISSUER_SIGNED = "assign.issuer_signed"
    ASSIGN_NOT_PAID = "assign.not_paid"
    PAY_BUYER_SIGNED = "pay.buyer_signed"
    PAY_AMOUNT_POSITIVE = "pay.amount_positive"
    PAY_AMOUNT_COVERS_INVOICE = "pay.amount_covers_invoice"
    PAY_TIME_REACHABLE = "pay.time_reachable"
    PAY_RECIPIENT_FUNDED = "pay.recipient_funded"
    PAY_COMPLIANCE_SIGNED = "pay.compliance_signed"
    MARKPAID_ISSUER_SIGNED = "markpaid.issuer_signed"
    CANCEL_ISSUER_SIGNED = "cancel.issuer_signed"
    CANCEL_NOT_PAID = "cancel.not_paid"

    @property
    def label(self) -> str:
        """Fixed diagnostic label surfaced as the rejection reason."""
        return _LABELS[self]

    @property
    def trace(self) -> str:
        """Label as traced by the on-ledger script."""
        return _TRACES.get(self, f"{self.value.split('.')[0]}: {self.label}")


_LABELS: dict[TransitionRule, str] = {
    TransitionRule.ASSIGN_ISSUER_SIGNED: "only issuer can assign",
    TransitionRule.ASSIGN_NOT_PAID: "cannot assign if already paid",
    TransitionRule.PAY_BUYER_SIGNED: "buyer signature required",
    TransitionRule.PAY_AMOUNT_POSITIVE: "amountPaid must be positive",
    TransitionRule.PAY_AMOUNT_COVERS_INVOICE: "amountPaid must be >= invoice amount",
    TransitionRule.PAY_TIME_REACHABLE: "timestamp reachable in tx",
    TransitionRule.PAY_RECIPIENT_FUNDED: "destination must receive stable token",
    TransitionRule.PAY_COMPLIANCE_SIGNED: "kyc authority signature required",
    TransitionRule.MARKPAID_ISSUER_SIGNED: "issuer signature required",
    TransitionRule.CANCEL_ISSUER_SIGNED: "issuer signature required",
    TransitionRule.CANCEL_NOT_PAID: "cannot cancel if already paid",
}

_TRACES: dict[TransitionRule, str] = {
    TransitionRule.PAY_COMPLIANCE_SIGNED: (
        "pay: kyc authority signature required for stable settlement"
    ),
}


@dataclass(frozen=True)
class RuleCheck:
    """Outcome of one named condition."""

    rule: TransitionRule
    passed: bool


@dataclass(frozen=True)
class TransitionResult:
    """
    Result of validating one transition.

    Contract:
        ``checks`` lists every condition of the action's rule set in rule
        order. ``reason`` is the first failing rule, or None when accepted.

    Guarantees:
        - Immutable (frozen dataclass)
        - bool(result) == result.accepted
    """

    action: ActionKind
    checks: tuple[RuleCheck, ...]

    @property
    def accepted(self) -> bool:
        return all(check.passed for check in self.checks)

    @property
    def reason(self) -> TransitionRule | None:
        for check in self.checks:
            if not check.passed:
                return check.rule
        return None

    @property
    def label(self) -> str | None:
        reason = self.reason
        return reason.label if reason is not None else None

    @property
    def violations(self) -> tuple[TransitionRule, ...]:
        return tuple(c.rule for c in self.checks if not c.passed)

    def raise_for_rejection(self) -> None:
        """Raise TransitionRejectedError if the transition was rejected."""
        reason = self.reason
        if reason is not None:
            raise TransitionRejectedError(reason, reason.label, self.action.value)

    def __bool__(self) -> bool:
        return self.accepted


# ---------------------------------------------------------------------------
# Rule sets
# ---------------------------------------------------------------------------


def _assign_checks(
    state: InvoiceState, action: AssignTo, context: TransactionContext
) -> tuple[RuleCheck, ...]:
    # The successor's assigned_to == action.factor is the builder's duty.
    return (
        RuleCheck(
            TransitionRule.ASSIGN_ISSUER_SIGNED,
            is_signed_by(context, state.issuer),
        ),
        RuleCheck(TransitionRule.ASSIGN_NOT_PAID, not state.paid),
    )


def _pay_checks(
    state: InvoiceState,
    action: Pay,
    context: TransactionContext,
    time_check: TimeCheck,
) -> tuple[RuleCheck, ...]:
    asset = state.settlement_asset
    delivered = amount_delivered_to(
        context, state.recipient, asset.currency_symbol, asset.token_name
    )
    return (
        RuleCheck(
            TransitionRule.PAY_BUYER_SIGNED,
            is_signed_by(context, state.buyer),
        ),
        RuleCheck(TransitionRule.PAY_AMOUNT_POSITIVE, action.amount_paid > 0),
        RuleCheck(
            TransitionRule.PAY_AMOUNT_COVERS_INVOICE,
            action.amount_paid >= state.amount,
        ),
        RuleCheck(
            TransitionRule.PAY_TIME_REACHABLE,
            is_time_reachable(context, action.paid_at, time_check),
        ),
        RuleCheck(TransitionRule.PAY_RECIPIENT_FUNDED, delivered >= state.amount),
        RuleCheck(
            TransitionRule.PAY_COMPLIANCE_SIGNED,
            is_signed_by(context, state.compliance_authority),
        ),
    )


def _mark_paid_checks(
    state: InvoiceState, action: MarkPaid, context: TransactionContext
) -> tuple[RuleCheck, ...]:
    return (
        RuleCheck(
            TransitionRule.MARKPAID_ISSUER_SIGNED,
            is_signed_by(context, state.issuer),
        ),
    )


def _cancel_checks(
    state: InvoiceState, action: Cancel, context: TransactionContext
) -> tuple[RuleCheck, ...]:
    return (
        RuleCheck(
            TransitionRule.CANCEL_ISSUER_SIGNED,
            is_signed_by(context, state.issuer),
        ),
        RuleCheck(TransitionRule.CANCEL_NOT_PAID, not state.paid),
    )


def validate_transition(
    state: InvoiceState,
    action: InvoiceAction,
    context: TransactionContext,
    *,
    time_check: TimeCheck = TimeCheck.REACHABLE,
) -> TransitionResult:
    """Validate one proposed transition of an invoice."""
    if isinstance(action, AssignTo):
        checks = _assign_checks(state, action, context)
    elif isinstance(action, Pay):
        checks = _pay_checks(state, action, context, TimeCheck(time_check))
    elif isinstance(action, MarkPaid):
        checks = _mark_paid_checks(state, action, context)
    elif isinstance(action, Cancel):
        checks = _cancel_checks(state, action, context)
    else:
        raise UnsupportedActionError(type(action).__name__)

    result = TransitionResult(action=action.kind, checks=checks)

    if result.accepted:
        logger.info(
            "transition_accepted",
            extra={
                "action_kind": action.kind.value,
                "invoice_status": state.status.value,
                "rule_count": len(checks),
            },
        )
    else:
        reason = result.reason
        logger.warning(
            "transition_rejected",
            extra={
                "action_kind": action.kind.value,
                "invoice_status": state.status.value,
                "rule": reason.value,
                "label": reason.label,
                "violations": [r.value for r in result.violations],
            },
        )
    return result
