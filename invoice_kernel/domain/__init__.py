"""
Pure domain layer.

This module contains the invoice model, the transaction context, the
context readers and the transition validator, with NO dependencies on:
- Configuration
- Time/clock
- I/O

All domain objects are immutable and deterministic.
"""

from invoice_kernel.domain.context import TransactionContext, TxOut
from invoice_kernel.domain.interval import (
    BEFORE_START,
    PAST_END,
    LowerBound,
    POSIXTime,
    POSIXTimeRange,
    UpperBound,
)
from invoice_kernel.domain.invoice import (
    ActionKind,
    AssignTo,
    Cancel,
    InvoiceAction,
    InvoiceState,
    InvoiceStatus,
    MarkPaid,
    Pay,
)
from invoice_kernel.domain.readers import (
    TimeCheck,
    amount_delivered_to,
    is_past_due,
    is_signed_by,
    is_time_reachable,
)
from invoice_kernel.domain.transition_validator import (
    RuleCheck,
    TransitionResult,
    TransitionRule,
    validate_transition,
)
from invoice_kernel.domain.values import (
    Address,
    AssetClass,
    CurrencySymbol,
    PubKeyCredential,
    PubKeyHash,
    ScriptCredential,
    StakingHash,
    StakingPtr,
    TokenName,
    Value,
)

__all__ = [
    # Values
    "Address",
    "AssetClass",
    "CurrencySymbol",
    "PubKeyCredential",
    "PubKeyHash",
    "ScriptCredential",
    "StakingHash",
    "StakingPtr",
    "TokenName",
    "Value",
    # Time
    "BEFORE_START",
    "PAST_END",
    "LowerBound",
    "POSIXTime",
    "POSIXTimeRange",
    "UpperBound",
    # Context
    "TransactionContext",
    "TxOut",
    # Invoice
    "ActionKind",
    "AssignTo",
    "Cancel",
    "InvoiceAction",
    "InvoiceState",
    "InvoiceStatus",
    "MarkPaid",
    "Pay",
    # Readers
    "TimeCheck",
    "amount_delivered_to",
    "is_past_due",
    "is_signed_by",
    "is_time_reachable",
    # Validator
    "RuleCheck",
    "TransitionResult",
    "TransitionRule",
    "validate_transition",
]
