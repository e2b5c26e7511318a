"""
Unit tests for the typed exception hierarchy.

Verifies:
- Every exception class carries a distinct machine-readable code
- Structured attributes survive construction
- Decode failures and rule violations share one base class
"""

import inspect

import pytest

from invoice_kernel import exceptions
from invoice_kernel.exceptions import (
    DataTypeError,
    DecodeError,
    FieldCountError,
    InvoiceKernelError,
    MalformedDataError,
    TransitionError,
    TransitionRejectedError,
    UnexpectedConstructorError,
    UnsupportedActionError,
    ValidationAbortedError,
)
from invoice_kernel.domain.transition_validator import TransitionRule


def _exception_classes():
    return [
        obj
        for _, obj in inspect.getmembers(exceptions, inspect.isclass)
        if issubclass(obj, InvoiceKernelError)
    ]


class TestCodes:
    def test_codes_unique(self):
        codes = [cls.code for cls in _exception_classes()]
        assert len(codes) == len(set(codes))

    def test_codes_upper_snake(self):
        for cls in _exception_classes():
            assert cls.code == cls.code.upper()
            assert " " not in cls.code


class TestHierarchy:
    @pytest.mark.parametrize(
        "cls",
        [MalformedDataError, UnexpectedConstructorError, FieldCountError, DataTypeError],
    )
    def test_decode_errors(self, cls):
        assert issubclass(cls, DecodeError)

    def test_transition_errors(self):
        assert issubclass(ValidationAbortedError, TransitionRejectedError)
        assert issubclass(TransitionRejectedError, TransitionError)
        assert issubclass(UnsupportedActionError, TransitionError)

    def test_single_taxonomy(self):
        assert issubclass(DecodeError, InvoiceKernelError)
        assert issubclass(TransitionError, InvoiceKernelError)


class TestStructuredData:
    def test_malformed(self):
        err = MalformedDataError("$.fields[0]", "invalid hex 'zz'")
        assert err.path == "$.fields[0]"
        assert err.reason == "invalid hex 'zz'"
        assert "$.fields[0]" in str(err)

    def test_unexpected_constructor(self):
        err = UnexpectedConstructorError("redeemer", 5, (0, 1, 2, 3))
        assert err.tag == 5
        assert err.expected == (0, 1, 2, 3)

    def test_data_type(self):
        err = DataTypeError("datum.amount", "int", "bytes")
        assert err.expected == "int"
        assert err.received == "bytes"

    def test_rejection(self):
        err = TransitionRejectedError(
            TransitionRule.ASSIGN_NOT_PAID, "cannot assign if already paid", "assign"
        )
        assert err.rule_code == "ASSIGN_NOT_PAID"
        assert str(err) == "assign: cannot assign if already paid"

    def test_abort_message_carries_trace(self):
        err = ValidationAbortedError(
            TransitionRule.CANCEL_NOT_PAID,
            "cannot cancel if already paid",
            "cancel",
            "InvoiceFactor: validation failed",
        )
        assert str(err) == (
            "InvoiceFactor: validation failed: cancel: cannot cancel if already paid"
        )
        assert err.label == "cannot cancel if already paid"

    def test_unsupported_action(self):
        err = UnsupportedActionError("Refund")
        assert err.action_type == "Refund"
