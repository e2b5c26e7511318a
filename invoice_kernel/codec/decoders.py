"""
Typed decoders (and their inverse encoders) for the validator's payloads.

Responsibility:
    Turns untyped data (datum, redeemer, script context) into the typed
    domain model, all-or-nothing. Constructor layouts follow the ledger's
    derived data encoding: constructors are tagged in declaration order
    starting at 0 and carry their fields positionally.

        InvoiceState   Constr 0 [issuer, buyer, amount, dueAt, paid,
                                 documentHash, assignedTo, currencySymbol,
                                 tokenName, complianceAuthority]
        Bool           False = Constr 0 [], True = Constr 1 []
        Maybe a        Just = Constr 0 [a], Nothing = Constr 1 []
        InvoiceAction  AssignTo = 0 [pkh], Pay = 1 [amount, time],
                       MarkPaid = 2 [], Cancel = 3 []

Failure modes:
    Every mismatch raises a DecodeError subclass carrying the data path of
    the offending node. No partial result is ever returned.
"""

from __future__ import annotations

import math
from typing import Any

from invoice_kernel.codec.data import Constr, DataMap, PlutusData, kind_of
from invoice_kernel.domain.context import TransactionContext, TxOut
from invoice_kernel.domain.interval import LowerBound, POSIXTimeRange, UpperBound
from invoice_kernel.domain.invoice import (
    AssignTo,
    Cancel,
    InvoiceAction,
    InvoiceState,
    MarkPaid,
    Pay,
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
from invoice_kernel.exceptions import (
    DataTypeError,
    FieldCountError,
    UnexpectedConstructorError,
    UnsupportedActionError,
)
from invoice_kernel.logging_config import get_logger

logger = get_logger("codec.decoders")

TX_INFO_FIELD_COUNT = 12


# ---------------------------------------------------------------------------
# Primitive expectations
# ---------------------------------------------------------------------------


def _int(node: Any, path: str) -> int:
    if isinstance(node, bool) or not isinstance(node, int):
        raise DataTypeError(path, "int", kind_of(node))
    return node


def _bytes(node: Any, path: str) -> bytes:
    if not isinstance(node, bytes):
        raise DataTypeError(path, "bytes", kind_of(node))
    return node


def _list(node: Any, path: str) -> list:
    if not isinstance(node, list):
        raise DataTypeError(path, "list", kind_of(node))
    return node


def _map(node: Any, path: str) -> DataMap:
    if not isinstance(node, DataMap):
        raise DataTypeError(path, "map", kind_of(node))
    return node


def _constr(node: Any, path: str, arities: dict[int, int]) -> Constr:
    """Expect a constructor whose tag is a key of ``arities`` with that arity."""
    if not isinstance(node, Constr):
        raise DataTypeError(path, "constr", kind_of(node))
    if node.tag not in arities:
        raise UnexpectedConstructorError(path, node.tag, tuple(sorted(arities)))
    expected = arities[node.tag]
    if len(node.fields) != expected:
        raise FieldCountError(path, node.tag, expected, len(node.fields))
    return node


def _bool(node: Any, path: str) -> bool:
    return _constr(node, path, {0: 0, 1: 0}).tag == 1


def _maybe(node: Any, path: str, decode_item) -> Any:
    c = _constr(node, path, {0: 1, 1: 0})
    if c.tag == 1:
        return None
    return decode_item(c.fields[0], f"{path}.just")


def _pkh(node: Any, path: str) -> PubKeyHash:
    return PubKeyHash(_bytes(node, path))


# ---------------------------------------------------------------------------
# Invoice state & action
# ---------------------------------------------------------------------------


def decode_invoice_state(node: PlutusData, path: str = "datum") -> InvoiceState:
    """Decode the prior invoice state (the datum)."""
    c = _constr(node, path, {0: 10})
    f = c.fields
    return InvoiceState(
        issuer=_pkh(f[0], f"{path}.issuer"),
        buyer=_pkh(f[1], f"{path}.buyer"),
        amount=_int(f[2], f"{path}.amount"),
        due_at=_int(f[3], f"{path}.due_at"),
        paid=_bool(f[4], f"{path}.paid"),
        document_hash=_bytes(f[5], f"{path}.document_hash"),
        assigned_to=_maybe(f[6], f"{path}.assigned_to", _pkh),
        settlement_asset=AssetClass(
            CurrencySymbol(_bytes(f[7], f"{path}.currency_symbol")),
            TokenName(_bytes(f[8], f"{path}.token_name")),
        ),
        compliance_authority=_pkh(f[9], f"{path}.compliance_authority"),
    )


def decode_action(node: PlutusData, path: str = "redeemer") -> InvoiceAction:
    """Decode the requested action (the redeemer)."""
    c = _constr(node, path, {0: 1, 1: 2, 2: 0, 3: 0})
    if c.tag == 0:
        return AssignTo(factor=_pkh(c.fields[0], f"{path}.factor"))
    if c.tag == 1:
        return Pay(
            amount_paid=_int(c.fields[0], f"{path}.amount_paid"),
            paid_at=_int(c.fields[1], f"{path}.paid_at"),
        )
    if c.tag == 2:
        return MarkPaid()
    return Cancel()


# ---------------------------------------------------------------------------
# Script context
# ---------------------------------------------------------------------------


def _credential(node: Any, path: str):
    c = _constr(node, path, {0: 1, 1: 1})
    raw = _bytes(c.fields[0], f"{path}.hash")
    if c.tag == 0:
        return PubKeyCredential(PubKeyHash(raw))
    return ScriptCredential(raw)


def _staking_credential(node: Any, path: str):
    c = _constr(node, path, {0: 1, 1: 3})
    if c.tag == 0:
        return StakingHash(_credential(c.fields[0], f"{path}.credential"))
    return StakingPtr(
        _int(c.fields[0], f"{path}.slot"),
        _int(c.fields[1], f"{path}.tx_index"),
        _int(c.fields[2], f"{path}.cert_index"),
    )


def decode_address(node: Any, path: str = "address") -> Address:
    c = _constr(node, path, {0: 2})
    return Address(
        _credential(c.fields[0], f"{path}.credential"),
        _maybe(c.fields[1], f"{path}.staking", _staking_credential),
    )


def decode_value(node: Any, path: str = "value") -> Value:
    outer = _map(node, path)
    entries: dict[CurrencySymbol, dict[TokenName, int]] = {}
    for i, (cs_node, tokens_node) in enumerate(outer.pairs):
        cs = CurrencySymbol(_bytes(cs_node, f"{path}[{i}].k"))
        tokens = entries.setdefault(cs, {})
        for j, (tn_node, qty_node) in enumerate(
            _map(tokens_node, f"{path}[{i}].v").pairs
        ):
            tn = TokenName(_bytes(tn_node, f"{path}[{i}].v[{j}].k"))
            qty = _int(qty_node, f"{path}[{i}].v[{j}].v")
            tokens[tn] = tokens.get(tn, 0) + qty
    return Value(entries)


def _output_datum(node: Any, path: str) -> Any:
    c = _constr(node, path, {0: 0, 1: 1, 2: 1})
    if c.tag == 0:
        return None
    if c.tag == 1:
        return _bytes(c.fields[0], f"{path}.hash")
    return c.fields[0]


def decode_tx_out(node: Any, path: str = "output") -> TxOut:
    c = _constr(node, path, {0: 4})
    address = decode_address(c.fields[0], f"{path}.address")
    value = decode_value(c.fields[1], f"{path}.value")
    datum = _output_datum(c.fields[2], f"{path}.datum")
    _maybe(c.fields[3], f"{path}.reference_script", _bytes)
    return TxOut(address=address, value=value, datum=datum)


def _extended(node: Any, path: str) -> int | float:
    c = _constr(node, path, {0: 0, 1: 1, 2: 0})
    if c.tag == 0:
        return -math.inf
    if c.tag == 2:
        return math.inf
    return _int(c.fields[0], f"{path}.finite")


def decode_interval(node: Any, path: str = "valid_range") -> POSIXTimeRange:
    c = _constr(node, path, {0: 2})
    lower = _constr(c.fields[0], f"{path}.lower", {0: 2})
    upper = _constr(c.fields[1], f"{path}.upper", {0: 2})
    lo_value = _extended(lower.fields[0], f"{path}.lower.bound")
    lo_closed = _bool(lower.fields[1], f"{path}.lower.closed")
    hi_value = _extended(upper.fields[0], f"{path}.upper.bound")
    hi_closed = _bool(upper.fields[1], f"{path}.upper.closed")
    # -inf below and +inf above are the unbounded ends; the reversed
    # infinities are kept as PAST_END / BEFORE_START.
    return POSIXTimeRange(
        LowerBound(None if lo_value == -math.inf else lo_value, lo_closed),
        UpperBound(None if hi_value == math.inf else hi_value, hi_closed),
    )


def _tx_id(node: Any, path: str) -> bytes:
    c = _constr(node, path, {0: 1})
    return _bytes(c.fields[0], f"{path}.bytes")


def _tx_out_ref(node: Any, path: str) -> None:
    c = _constr(node, path, {0: 2})
    _tx_id(c.fields[0], f"{path}.tx_id")
    _int(c.fields[1], f"{path}.index")


def _tx_in_info(node: Any, path: str) -> TxOut:
    c = _constr(node, path, {0: 2})
    _tx_out_ref(c.fields[0], f"{path}.out_ref")
    return decode_tx_out(c.fields[1], f"{path}.resolved")


def _script_purpose(node: Any, path: str) -> None:
    # Minting, Spending, Rewarding, Certifying
    _constr(node, path, {0: 1, 1: 1, 2: 1, 3: 1})


def decode_script_context(
    node: PlutusData, path: str = "context"
) -> TransactionContext:
    """
    Decode a script context into a TransactionContext.

    Outputs, validity range, signatories and tx id are decoded into the
    model. Inputs, fee, mint, certificates, withdrawals, redeemers and
    datums are decoded and shape-checked but not retained.
    """
    ctx = _constr(node, path, {0: 2})
    info_path = f"{path}.tx_info"
    info = _constr(ctx.fields[0], info_path, {0: TX_INFO_FIELD_COUNT}).fields
    _script_purpose(ctx.fields[1], f"{path}.purpose")

    for i, item in enumerate(_list(info[0], f"{info_path}.inputs")):
        _tx_in_info(item, f"{info_path}.inputs[{i}]")
    for i, item in enumerate(_list(info[1], f"{info_path}.reference_inputs")):
        _tx_in_info(item, f"{info_path}.reference_inputs[{i}]")
    outputs = tuple(
        decode_tx_out(item, f"{info_path}.outputs[{i}]")
        for i, item in enumerate(_list(info[2], f"{info_path}.outputs"))
    )
    decode_value(info[3], f"{info_path}.fee")
    decode_value(info[4], f"{info_path}.mint")
    _list(info[5], f"{info_path}.dcert")
    _map(info[6], f"{info_path}.wdrl")
    valid_range = decode_interval(info[7], f"{info_path}.valid_range")
    signatories = frozenset(
        _pkh(item, f"{info_path}.signatories[{i}]")
        for i, item in enumerate(_list(info[8], f"{info_path}.signatories"))
    )
    _map(info[9], f"{info_path}.redeemers")
    _map(info[10], f"{info_path}.data")
    tx_id = _tx_id(info[11], f"{info_path}.id")

    logger.debug(
        "script_context_decoded",
        extra={
            "output_count": len(outputs),
            "signatory_count": len(signatories),
        },
    )
    return TransactionContext(
        signatories=signatories,
        outputs=outputs,
        valid_range=valid_range,
        tx_id=tx_id.hex(),
    )


# ---------------------------------------------------------------------------
# Encoders
# ---------------------------------------------------------------------------

_FALSE = Constr(0)
_TRUE = Constr(1)
_NOTHING = Constr(1)


def _enc_bool(value: bool) -> Constr:
    return _TRUE if value else _FALSE


def _enc_maybe(value: Any, encode_item) -> Constr:
    if value is None:
        return _NOTHING
    return Constr(0, (encode_item(value),))


def encode_invoice_state(state: InvoiceState) -> Constr:
    return Constr(
        0,
        (
            state.issuer.raw,
            state.buyer.raw,
            state.amount,
            state.due_at,
            _enc_bool(state.paid),
            state.document_hash,
            _enc_maybe(state.assigned_to, lambda p: p.raw),
            state.settlement_asset.currency_symbol.raw,
            state.settlement_asset.token_name.raw,
            state.compliance_authority.raw,
        ),
    )


def encode_action(action: InvoiceAction) -> Constr:
    if isinstance(action, AssignTo):
        return Constr(0, (action.factor.raw,))
    if isinstance(action, Pay):
        return Constr(1, (action.amount_paid, action.paid_at))
    if isinstance(action, MarkPaid):
        return Constr(2)
    if isinstance(action, Cancel):
        return Constr(3)
    raise UnsupportedActionError(type(action).__name__)


def _enc_credential(credential) -> Constr:
    if isinstance(credential, PubKeyCredential):
        return Constr(0, (credential.pub_key_hash.raw,))
    return Constr(1, (credential.script_hash,))


def _enc_staking(staking) -> Constr:
    if isinstance(staking, StakingHash):
        return Constr(0, (_enc_credential(staking.credential),))
    return Constr(1, (staking.slot, staking.tx_index, staking.cert_index))


def encode_address(address: Address) -> Constr:
    return Constr(
        0,
        (
            _enc_credential(address.credential),
            _enc_maybe(address.staking_credential, _enc_staking),
        ),
    )


def encode_value(value: Value) -> DataMap:
    grouped: dict[bytes, list[tuple[bytes, int]]] = {}
    for cs, tn, qty in value.flatten():
        grouped.setdefault(cs.raw, []).append((tn.raw, qty))
    return DataMap(
        tuple(
            (cs, DataMap(tuple(sorted(tokens))))
            for cs, tokens in sorted(grouped.items())
        )
    )


def encode_tx_out(out: TxOut) -> Constr:
    if out.datum is None:
        datum = Constr(0)
    elif isinstance(out.datum, bytes):
        datum = Constr(1, (out.datum,))
    else:
        datum = Constr(2, (out.datum,))
    return Constr(
        0, (encode_address(out.address), encode_value(out.value), datum, _NOTHING)
    )


def _enc_bound(value: int | float | None, closed: bool, infinity_tag: int) -> Constr:
    if value is None:
        extended = Constr(infinity_tag)
    elif value == math.inf:
        extended = Constr(2)
    elif value == -math.inf:
        extended = Constr(0)
    else:
        extended = Constr(1, (value,))
    return Constr(0, (extended, _enc_bool(closed)))


def encode_interval(valid_range: POSIXTimeRange) -> Constr:
    return Constr(
        0,
        (
            _enc_bound(valid_range.lower.value, valid_range.lower.closed, 0),
            _enc_bound(valid_range.upper.value, valid_range.upper.closed, 2),
        ),
    )


def encode_script_context(
    context: TransactionContext,
    *,
    spent_ref: tuple[bytes, int] = (b"\x00" * 32, 0),
) -> Constr:
    """Encode a TransactionContext as a spending script context."""
    tx_id = bytes.fromhex(context.tx_id) if context.tx_id else b"\x00" * 32
    out_ref = Constr(0, (Constr(0, (spent_ref[0],)), spent_ref[1]))
    info = Constr(
        0,
        (
            [],
            [],
            [encode_tx_out(o) for o in context.outputs],
            DataMap(),
            DataMap(),
            [],
            DataMap(),
            encode_interval(context.valid_range),
            sorted(p.raw for p in context.signatories),
            DataMap(),
            DataMap(),
            Constr(0, (tx_id,)),
        ),
    )
    return Constr(0, (info, Constr(1, (out_ref,))))
