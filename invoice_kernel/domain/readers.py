"""
Context readers -- pure queries over a TransactionContext.

Responsibility:
    The leaf layer of the validator. Answers "who signed", "how much of an
    asset landed at a principal's key address" and "is an instant reachable
    within the validity window". No rule logic lives here.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
"""

from __future__ import annotations

from enum import Enum, unique

from invoice_kernel.domain.context import TransactionContext
from invoice_kernel.domain.interval import POSIXTime, POSIXTimeRange
from invoice_kernel.domain.values import (
    Address,
    CurrencySymbol,
    PubKeyHash,
    TokenName,
)


@unique
class TimeCheck(str, Enum):
    """How a claimed instant is checked against the validity range."""

    REACHABLE = "reachable"
    """The range admits some instant >= t."""

    CONTAINED = "contained"
    """
    Ledger ``contains (from t)``: the range's lower bound is at or after t.

    Bounds are compared as given, so an empty range such as ``[5, -inf]``
    passes for t <= 5.
    """


def is_signed_by(context: TransactionContext, principal: PubKeyHash) -> bool:
    """True iff principal is in the signer set."""
    return principal in context.signatories


def amount_delivered_to(
    context: TransactionContext,
    principal: PubKeyHash,
    currency_symbol: CurrencySymbol,
    token_name: TokenName,
) -> int:
    """
    Sum of one asset across outputs paid to the principal's plain key address.

    Outputs to a script address, or to the principal's key combined with a
    staking part, do not count.
    """
    destination = Address.for_pub_key(principal)
    return sum(
        out.value.value_of(currency_symbol, token_name)
        for out in context.outputs
        if out.address == destination
    )


def is_time_reachable(
    context: TransactionContext,
    t: POSIXTime,
    mode: TimeCheck = TimeCheck.REACHABLE,
) -> bool:
    """Check a claimed instant against the transaction's validity range."""
    if TimeCheck(mode) is TimeCheck.CONTAINED:
        return POSIXTimeRange.from_(t).contains(context.valid_range)
    return context.valid_range.overlaps(POSIXTimeRange.from_(t))


def is_past_due(
    context: TransactionContext,
    due_at: POSIXTime,
    mode: TimeCheck = TimeCheck.REACHABLE,
) -> bool:
    """True iff the due date is reachable within the validity range."""
    return is_time_reachable(context, due_at, mode)
