"""
Typed Exception Hierarchy for the Invoice Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

A transition is either permitted or voided. Callers that build and resubmit
transactions need to know *why* a candidate was voided without parsing
message strings:

  1. Every error has a TYPED exception class (catch by type, not message)
  2. Every exception has a CODE attribute (machine-readable, API-safe)
  3. Exceptions carry structured DATA (the failing path, rule, label)

Example - WRONG way to handle errors:
    try:
        run_validator(datum, redeemer, context)
    except Exception as e:
        if "kyc" in str(e):  # FRAGILE - message might change
            request_compliance_signature()

Example - RIGHT way (what this module enables):
    try:
        run_validator(datum, redeemer, context)
    except TransitionRejectedError as e:
        if e.rule_code == "PAY_COMPLIANCE_SIGNED":
            request_compliance_signature()
    except DecodeError as e:
        log.error("bad payload", extra={"path": e.path, "code": e.code})

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from InvoiceKernelError:

    InvoiceKernelError (base)
    |
    +-- DecodeError
    |   +-- MalformedDataError
    |   +-- UnexpectedConstructorError
    |   +-- FieldCountError
    |   +-- DataTypeError
    |
    +-- TransitionError
        +-- TransitionRejectedError
        |   +-- ValidationAbortedError
        +-- UnsupportedActionError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Decode          | MALFORMED_DATA              | Payload is not valid ledger data JSON
                | UNEXPECTED_CONSTRUCTOR      | Constructor tag not valid for the type
                | FIELD_COUNT_MISMATCH        | Constructor has the wrong arity
                | DATA_TYPE_MISMATCH          | Expected int/bytes/list/map/constr
----------------|-----------------------------|-----------------------------------------
Transition      | TRANSITION_REJECTED         | A rule conjunct evaluated to false
                | VALIDATION_ABORTED          | Entry adapter abort signal
                | UNSUPPORTED_ACTION          | Action type outside the closed set

===============================================================================
DESIGN DECISIONS
===============================================================================

1. Decode failures and rule violations share one base class so that call
   sites can handle "transaction voided" uniformly.

2. Only the FIRST failing rule is reported. The rule set is a conjunction;
   one false conjunct is sufficient to void the transaction.

===============================================================================
"""

from typing import Any


class InvoiceKernelError(Exception):
    """
    Base exception for all invoice kernel errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "INVOICE_KERNEL_ERROR"


# Decode-related exceptions


class DecodeError(InvoiceKernelError):
    """
    Base exception for payload decode failures.

    Always fatal: the transaction is voided before any business rule runs.
    """

    code: str = "DECODE_ERROR"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot decode {path}: {reason}")


class MalformedDataError(DecodeError):
    """Payload is not a well-formed ledger data document."""

    code: str = "MALFORMED_DATA"


class UnexpectedConstructorError(DecodeError):
    """Constructor tag is not one of the tags valid for the target type."""

    code: str = "UNEXPECTED_CONSTRUCTOR"

    def __init__(self, path: str, tag: int, expected: tuple[int, ...]):
        self.tag = tag
        self.expected = expected
        super().__init__(
            path, f"constructor {tag} not in {list(expected)}"
        )


class FieldCountError(DecodeError):
    """Constructor carries the wrong number of fields."""

    code: str = "FIELD_COUNT_MISMATCH"

    def __init__(self, path: str, tag: int, expected: int, received: int):
        self.tag = tag
        self.expected = expected
        self.received = received
        super().__init__(
            path,
            f"constructor {tag} expects {expected} field(s), got {received}",
        )


class DataTypeError(DecodeError):
    """Data node has the wrong primitive kind."""

    code: str = "DATA_TYPE_MISMATCH"

    def __init__(self, path: str, expected: str, received: str):
        self.expected = expected
        self.received = received
        super().__init__(path, f"expected {expected}, got {received}")


# Transition-related exceptions


class TransitionError(InvoiceKernelError):
    """Base exception for transition evaluation errors."""

    code: str = "TRANSITION_ERROR"


class TransitionRejectedError(TransitionError):
    """
    A rule conjunct of the requested action evaluated to false.

    Carries the first failing rule only (rules are AND-ed).
    """

    code: str = "TRANSITION_REJECTED"

    def __init__(self, rule: Any, label: str, action: str):
        self.rule = rule
        self.rule_code = getattr(rule, "name", str(rule))
        self.label = label
        self.action = action
        super().__init__(f"{action}: {label}")


class ValidationAbortedError(TransitionRejectedError):
    """
    Abort signal raised by the entry adapter.

    The message is prefixed with the script-level trace so that the hosting
    runtime surfaces both the generic failure and the rule label.
    """

    code: str = "VALIDATION_ABORTED"

    def __init__(self, rule: Any, label: str, action: str, trace: str):
        self.trace = trace
        super().__init__(rule, label, action)
        self.args = (f"{trace}: {action}: {label}",)


class UnsupportedActionError(TransitionError):
    """Action object is not one of AssignTo, Pay, MarkPaid, Cancel."""

    code: str = "UNSUPPORTED_ACTION"

    def __init__(self, action_type: str):
        self.action_type = action_type
        super().__init__(f"Unsupported invoice action: {action_type}")
