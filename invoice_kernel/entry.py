"""
Entry adapter -- untyped payloads in, permit/abort signal out.

Responsibility:
    Decodes the datum (prior invoice state), redeemer (requested action)
    and script context, runs the transition validator, and converts the
    outcome into the signal the hosting runtime expects: return normally to
    permit, raise to void the transaction.

Failure modes:
    - DecodeError (any subclass): a payload is malformed. Raised before any
      business rule runs. Decoding is all-or-nothing.
    - ValidationAbortedError: decoding succeeded and a rule failed. Carries
      the first failing rule and its label.

Both derive from InvoiceKernelError so callers can handle "transaction
voided" uniformly.
"""

from __future__ import annotations

from typing import Any

from invoice_kernel.codec.data import coerce
from invoice_kernel.codec.decoders import (
    decode_action,
    decode_invoice_state,
    decode_script_context,
)
from invoice_kernel.domain.readers import TimeCheck
from invoice_kernel.domain.transition_validator import (
    TransitionResult,
    validate_transition,
)
from invoice_kernel.exceptions import DecodeError, ValidationAbortedError
from invoice_kernel.logging_config import LogContext, get_logger

logger = get_logger("entry")

ABORT_TRACE = "InvoiceFactor: validation failed"


def evaluate(
    datum: Any,
    redeemer: Any,
    context: Any,
    *,
    time_check: TimeCheck = TimeCheck.REACHABLE,
) -> TransitionResult:
    """
    Decode the three payloads and validate the transition.

    Payloads may be data nodes, detailed-schema JSON text, or parsed JSON
    objects.

    Raises:
        DecodeError: If any payload fails to decode.
    """
    logger.debug("decode_started")
    try:
        state = decode_invoice_state(coerce(datum))
        action = decode_action(coerce(redeemer))
        tx = decode_script_context(coerce(context))
    except DecodeError as e:
        logger.warning(
            "decode_failed",
            extra={"path": e.path, "reason": e.reason, "error_code": e.code},
        )
        raise

    with LogContext.bind(
        tx_id=tx.tx_id,
        invoice_ref=state.reference,
        action=action.kind.value,
    ):
        return validate_transition(state, action, tx, time_check=time_check)


def run_validator(
    datum: Any,
    redeemer: Any,
    context: Any,
    *,
    time_check: TimeCheck = TimeCheck.REACHABLE,
    abort_trace: str = ABORT_TRACE,
) -> None:
    """
    Permit (return None) or void (raise) the proposed transition.

    Raises:
        DecodeError: If any payload fails to decode.
        ValidationAbortedError: If any rule of the requested action fails.
    """
    result = evaluate(datum, redeemer, context, time_check=time_check)
    reason = result.reason
    if reason is not None:
        raise ValidationAbortedError(
            reason, reason.label, result.action.value, abort_trace
        )
