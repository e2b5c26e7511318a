"""Untyped ledger data and the typed decoders built on it."""

from invoice_kernel.codec.data import (
    Constr,
    DataMap,
    PlutusData,
    dumps,
    from_json,
    loads,
    to_json,
)
from invoice_kernel.codec.decoders import (
    decode_action,
    decode_invoice_state,
    decode_script_context,
    encode_action,
    encode_invoice_state,
    encode_script_context,
)

__all__ = [
    "Constr",
    "DataMap",
    "PlutusData",
    "dumps",
    "from_json",
    "loads",
    "to_json",
    "decode_action",
    "decode_invoice_state",
    "decode_script_context",
    "encode_action",
    "encode_invoice_state",
    "encode_script_context",
]
