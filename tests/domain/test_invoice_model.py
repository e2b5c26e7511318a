"""
Tests for the invoice model and value objects.

These tests verify:
- Records are immutable
- Recipient selection (factor when assigned, issuer otherwise)
- State-machine status derivation
- Value bag arithmetic
"""

from dataclasses import replace

import pytest

from invoice_kernel.domain.invoice import (
    ActionKind,
    AssignTo,
    Cancel,
    InvoiceStatus,
    MarkPaid,
    Pay,
)
from invoice_kernel.domain.values import (
    Address,
    CurrencySymbol,
    PubKeyHash,
    TokenName,
    Value,
)

from tests.factories import FACTOR, ISSUER, STABLE, make_state


class TestInvoiceState:
    def test_state_is_frozen(self):
        state = make_state()
        with pytest.raises(AttributeError):
            state.paid = True

    def test_recipient_defaults_to_issuer(self):
        assert make_state().recipient == ISSUER

    def test_recipient_is_factor_when_assigned(self):
        assert make_state(assigned_to=FACTOR).recipient == FACTOR

    def test_non_positive_amount_allowed_at_construction(self):
        """amount > 0 is a payment-time rule, not a construction rule."""
        assert make_state(amount=0).amount == 0
        assert make_state(amount=-5).amount == -5

    def test_status_unassigned(self):
        assert make_state().status is InvoiceStatus.ACTIVE_UNASSIGNED

    def test_status_assigned(self):
        assert make_state(assigned_to=FACTOR).status is InvoiceStatus.ACTIVE_ASSIGNED

    def test_status_paid_wins_over_assignment(self):
        state = replace(make_state(assigned_to=FACTOR), paid=True)
        assert state.status is InvoiceStatus.PAID

    def test_reference_is_document_hash_prefix(self):
        assert make_state().reference == "de" * 8


class TestActions:
    def test_action_kinds(self):
        assert AssignTo(FACTOR).kind is ActionKind.ASSIGN
        assert Pay(1, 2).kind is ActionKind.PAY
        assert MarkPaid().kind is ActionKind.MARK_PAID
        assert Cancel().kind is ActionKind.CANCEL

    def test_actions_compare_by_value(self):
        assert Pay(1000, 5) == Pay(1000, 5)
        assert MarkPaid() == MarkPaid()
        assert AssignTo(FACTOR) != AssignTo(ISSUER)


class TestValues:
    def test_pub_key_hash_requires_bytes(self):
        with pytest.raises(TypeError):
            PubKeyHash("01" * 28)

    def test_pub_key_hash_hex_roundtrip(self):
        assert PubKeyHash.from_hex(ISSUER.hex()) == ISSUER

    def test_value_of_missing_asset_is_zero(self):
        assert Value().value_of(CurrencySymbol(b"x"), TokenName(b"y")) == 0

    def test_zero_quantities_dropped(self):
        assert Value.of(STABLE, 0).is_zero
        assert Value.of(STABLE, 0) == Value()

    def test_addition_is_pointwise(self):
        total = Value.of(STABLE, 400) + Value.of(STABLE, 600) + Value.lovelace(5)
        assert total.value_of(STABLE.currency_symbol, STABLE.token_name) == 1000
        assert total.value_of(CurrencySymbol(b""), TokenName(b"")) == 5

    def test_float_quantity_rejected(self):
        with pytest.raises(TypeError):
            Value.of(STABLE, 1.5)

    def test_plain_address_has_no_staking_part(self):
        address = Address.for_pub_key(ISSUER)
        assert address.staking_credential is None
        assert address.pub_key_hash == ISSUER
