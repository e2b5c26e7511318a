"""
Tests for the entry adapter: untyped payloads in, permit/abort out.
"""

import json

import pytest

from invoice_kernel.codec.data import Constr, dumps, to_json
from invoice_kernel.codec.decoders import (
    encode_action,
    encode_invoice_state,
    encode_script_context,
)
from invoice_kernel.domain.interval import POSIXTimeRange
from invoice_kernel.domain.invoice import AssignTo, Cancel, MarkPaid, Pay
from invoice_kernel.domain.readers import TimeCheck
from invoice_kernel.domain.transition_validator import TransitionRule
from invoice_kernel.entry import ABORT_TRACE, evaluate, run_validator
from invoice_kernel.exceptions import (
    DecodeError,
    InvoiceKernelError,
    MalformedDataError,
    TransitionRejectedError,
    ValidationAbortedError,
)

from tests.factories import (
    BUYER,
    FACTOR,
    ISSUER,
    T0,
    make_context,
    make_state,
    settlement_context,
)


def _payloads(state, action, context):
    return (
        encode_invoice_state(state),
        encode_action(action),
        encode_script_context(context),
    )


class TestRunValidator:
    def test_permitted_settlement_returns_none(self):
        datum, redeemer, ctx = _payloads(make_state(), Pay(1000, T0), settlement_context())
        assert run_validator(datum, redeemer, ctx) is None

    def test_rejection_aborts_with_label(self):
        datum, redeemer, ctx = _payloads(
            make_state(), Pay(1000, T0), settlement_context(signers=[BUYER])
        )
        with pytest.raises(ValidationAbortedError) as exc_info:
            run_validator(datum, redeemer, ctx)
        err = exc_info.value
        assert err.rule is TransitionRule.PAY_COMPLIANCE_SIGNED
        assert err.label == "kyc authority signature required"
        assert err.code == "VALIDATION_ABORTED"
        assert str(err) == f"{ABORT_TRACE}: pay: kyc authority signature required"

    def test_abort_is_a_rejection(self):
        datum, redeemer, ctx = _payloads(
            make_state(paid=True), Cancel(), make_context(signers=[ISSUER])
        )
        with pytest.raises(TransitionRejectedError):
            run_validator(datum, redeemer, ctx)

    def test_custom_abort_trace(self):
        datum, redeemer, ctx = _payloads(make_state(), MarkPaid(), make_context())
        with pytest.raises(ValidationAbortedError) as exc_info:
            run_validator(datum, redeemer, ctx, abort_trace="Custom")
        assert str(exc_info.value).startswith("Custom: markpaid:")
        assert exc_info.value.trace == "Custom"

    def test_time_check_passed_through(self):
        ctx = settlement_context(valid_range=POSIXTimeRange.from_(T0))
        datum, redeemer, encoded = _payloads(make_state(), Pay(1000, T0 + 5), ctx)
        run_validator(datum, redeemer, encoded)
        with pytest.raises(ValidationAbortedError) as exc_info:
            run_validator(datum, redeemer, encoded, time_check=TimeCheck.CONTAINED)
        assert exc_info.value.rule is TransitionRule.PAY_TIME_REACHABLE


class TestDecodeFailures:
    def test_malformed_datum_is_fatal(self):
        _, redeemer, ctx = _payloads(make_state(), MarkPaid(), make_context(signers=[ISSUER]))
        with pytest.raises(DecodeError):
            run_validator(Constr(0, (b"\x01",)), redeemer, ctx)

    def test_malformed_redeemer_json(self):
        datum, _, ctx = _payloads(make_state(), MarkPaid(), make_context(signers=[ISSUER]))
        with pytest.raises(MalformedDataError):
            run_validator(datum, "{broken", ctx)

    def test_decode_runs_before_rules(self, captured_logs):
        """A bad context is rejected even when the action would be permitted."""
        datum, redeemer, _ = _payloads(
            make_state(), MarkPaid(), make_context(signers=[ISSUER])
        )
        with pytest.raises(DecodeError):
            run_validator(datum, redeemer, Constr(0))
        messages = [r["message"] for r in captured_logs()]
        assert "decode_failed" in messages
        assert "transition_accepted" not in messages
        assert "transition_rejected" not in messages

    def test_deeply_nested_redeemer_is_a_decode_error(self, captured_logs):
        datum, _, ctx = _payloads(make_state(), MarkPaid(), make_context(signers=[ISSUER]))
        redeemer = '{"list":[' * 5000 + '{"int":1}' + "]}" * 5000
        with pytest.raises(MalformedDataError):
            run_validator(datum, redeemer, ctx)
        assert "decode_failed" in [r["message"] for r in captured_logs()]

    def test_both_error_classes_share_a_base(self):
        datum, redeemer, ctx = _payloads(make_state(), Cancel(), make_context())
        for args in [(datum, redeemer, ctx), (datum, Constr(9), ctx)]:
            with pytest.raises(InvoiceKernelError):
                run_validator(*args)


class TestEvaluate:
    def test_accepts_json_text_and_objects(self):
        datum, redeemer, ctx = _payloads(
            make_state(), AssignTo(FACTOR), make_context(signers=[ISSUER])
        )
        result = evaluate(dumps(datum), to_json(redeemer), json.dumps(to_json(ctx)))
        assert result.accepted

    def test_returns_rejection_without_raising(self):
        datum, redeemer, ctx = _payloads(
            make_state(), AssignTo(FACTOR), make_context(signers=[BUYER])
        )
        result = evaluate(datum, redeemer, ctx)
        assert not result.accepted
        assert result.label == "only issuer can assign"

    def test_log_context_bound_during_validation(self, captured_logs):
        datum, redeemer, ctx = _payloads(
            make_state(), Cancel(), make_context(signers=[ISSUER])
        )
        evaluate(datum, redeemer, ctx)
        record = next(
            r for r in captured_logs() if r["message"] == "transition_accepted"
        )
        assert record["action"] == "cancel"
        assert record["tx_id"] == "ab" * 32
        assert record["invoice_ref"] == "de" * 8

    def test_idempotent_on_identical_payloads(self):
        datum, redeemer, ctx = _payloads(
            make_state(assigned_to=FACTOR), Pay(1000, T0), settlement_context()
        )
        first = evaluate(datum, redeemer, ctx)
        second = evaluate(datum, redeemer, ctx)
        assert first == second
        assert first.reason is TransitionRule.PAY_RECIPIENT_FUNDED
