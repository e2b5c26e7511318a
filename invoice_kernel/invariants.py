"""
Kernel Invariants Contract.

These invariants are structural law. They are hardcoded in the transition
validator. No ValidatorSettings value may override them.

This module exists solely to declare these invariants explicitly. The
enforcement lives in invoice_kernel.domain.transition_validator and
invoice_kernel.codec.decoders.
"""

from enum import Enum, unique


@unique
class KernelInvariant(str, Enum):
    """Non-configurable invariants enforced by the kernel.

    Configuration may influence *how* a claimed instant is checked against
    the validity range, but never *whether* these rules apply.
    """

    PAID_IS_TERMINAL = "paid_is_terminal"
    """A paid invoice is never reassigned or cancelled."""

    COMPLIANCE_GATE = "compliance_gate"
    """Every stable-asset settlement carries the compliance authority's
    signature. There is no exemption path."""

    RECIPIENT_FUNDED = "recipient_funded"
    """Settlement delivers at least the invoice amount of the settlement
    asset to the current holder of the receivable (factor if assigned,
    issuer otherwise)."""

    ISSUER_AUTHORITY = "issuer_authority"
    """Only the issuer may assign, attest payment, or cancel."""

    ALL_OR_NOTHING_DECODE = "all_or_nothing_decode"
    """A malformed payload voids the transaction before any rule runs."""

    DETERMINISM = "determinism"
    """Identical inputs yield an identical decision and identical
    satisfied/violated conditions."""


# All invariants as a frozenset for programmatic checks.
ALL_KERNEL_INVARIANTS: frozenset[KernelInvariant] = frozenset(KernelInvariant)

# The kernel package may not import from these packages.
# This is enforced by tests/architecture/test_kernel_boundary.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = ("invoice_config",)
