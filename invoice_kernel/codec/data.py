"""
Untyped ledger data.

The hosting runtime hands the validator three untyped payloads. Each is a
tree of five node kinds:

    Constr(tag, fields)   constructor application
    DataMap(pairs)        ordered key/value pairs
    list                  ordered items
    int                   arbitrary precision integer
    bytes                 byte string

Payloads travel as the detailed JSON schema used by ledger tooling::

    {"constructor": 0, "fields": [{"int": 1000}, {"bytes": "ab01"}]}
    {"list": [{"int": 1}]}
    {"map": [{"k": {"bytes": ""}, "v": {"int": 5}}]}

Parsing is strict: unknown keys, extra keys and wrong primitive types are
rejected with MalformedDataError naming the JSON path.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Union

from invoice_kernel.exceptions import MalformedDataError


@dataclass(frozen=True)
class Constr:
    """Constructor ``tag`` applied to ``fields``."""

    tag: int
    fields: tuple["PlutusData", ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.fields, tuple):
            object.__setattr__(self, "fields", tuple(self.fields))


@dataclass(frozen=True)
class DataMap:
    """Ordered association list; duplicate keys are kept as given."""

    pairs: tuple[tuple["PlutusData", "PlutusData"], ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.pairs, tuple):
            object.__setattr__(self, "pairs", tuple(tuple(p) for p in self.pairs))


PlutusData = Union[Constr, DataMap, list, int, bytes]


def kind_of(node: Any) -> str:
    """Human-readable node kind used in decode errors."""
    if isinstance(node, Constr):
        return "constr"
    if isinstance(node, DataMap):
        return "map"
    if isinstance(node, list):
        return "list"
    if isinstance(node, bool):
        return "bool"
    if isinstance(node, int):
        return "int"
    if isinstance(node, bytes):
        return "bytes"
    return type(node).__name__


# ---------------------------------------------------------------------------
# JSON (detailed schema)
# ---------------------------------------------------------------------------


def from_json(obj: Any, path: str = "$") -> PlutusData:
    """Parse one detailed-schema JSON node."""
    try:
        return _parse_node(obj, path)
    except RecursionError as e:
        raise MalformedDataError(path, "nesting too deep") from e


def _parse_node(obj: Any, path: str) -> PlutusData:
    if not isinstance(obj, dict):
        raise MalformedDataError(path, f"expected object, got {type(obj).__name__}")

    keys = set(obj)
    if keys == {"constructor", "fields"}:
        tag = obj["constructor"]
        if isinstance(tag, bool) or not isinstance(tag, int) or tag < 0:
            raise MalformedDataError(path, f"invalid constructor tag {tag!r}")
        fields = obj["fields"]
        if not isinstance(fields, list):
            raise MalformedDataError(path, "constructor fields must be a list")
        return Constr(
            tag,
            tuple(
                _parse_node(item, f"{path}.fields[{i}]")
                for i, item in enumerate(fields)
            ),
        )

    if keys == {"int"}:
        value = obj["int"]
        if isinstance(value, bool) or not isinstance(value, int):
            raise MalformedDataError(path, f"invalid int {value!r}")
        return value

    if keys == {"bytes"}:
        value = obj["bytes"]
        if not isinstance(value, str):
            raise MalformedDataError(path, "bytes must be a hex string")
        try:
            return bytes.fromhex(value)
        except ValueError as e:
            raise MalformedDataError(path, f"invalid hex {value!r}") from e

    if keys == {"list"}:
        items = obj["list"]
        if not isinstance(items, list):
            raise MalformedDataError(path, "list must be a JSON array")
        return [_parse_node(item, f"{path}.list[{i}]") for i, item in enumerate(items)]

    if keys == {"map"}:
        entries = obj["map"]
        if not isinstance(entries, list):
            raise MalformedDataError(path, "map must be a JSON array")
        pairs = []
        for i, entry in enumerate(entries):
            if not isinstance(entry, dict) or set(entry) != {"k", "v"}:
                raise MalformedDataError(
                    f"{path}.map[{i}]", "map entry must have exactly 'k' and 'v'"
                )
            pairs.append(
                (
                    _parse_node(entry["k"], f"{path}.map[{i}].k"),
                    _parse_node(entry["v"], f"{path}.map[{i}].v"),
                )
            )
        return DataMap(tuple(pairs))

    raise MalformedDataError(path, f"unrecognized node keys {sorted(keys)}")


def to_json(node: PlutusData) -> Any:
    """Render a data node in the detailed JSON schema."""
    if isinstance(node, Constr):
        return {"constructor": node.tag, "fields": [to_json(f) for f in node.fields]}
    if isinstance(node, DataMap):
        return {"map": [{"k": to_json(k), "v": to_json(v)} for k, v in node.pairs]}
    if isinstance(node, list):
        return {"list": [to_json(item) for item in node]}
    if isinstance(node, bool):
        raise TypeError("bool is not ledger data; use Constr(0) / Constr(1)")
    if isinstance(node, int):
        return {"int": node}
    if isinstance(node, (bytes, bytearray)):
        return {"bytes": bytes(node).hex()}
    raise TypeError(f"Object of type {type(node).__name__} is not ledger data")


def loads(text: str | bytes) -> PlutusData:
    """Parse a JSON document into a data node."""
    try:
        obj = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise MalformedDataError("$", f"invalid JSON: {e}") from e
    except RecursionError as e:
        raise MalformedDataError("$", "nesting too deep") from e
    return from_json(obj)


def dumps(node: PlutusData) -> str:
    """Serialize a data node to canonical JSON (sorted keys, no whitespace)."""
    return json.dumps(to_json(node), sort_keys=True, separators=(",", ":"))


def coerce(payload: Any) -> PlutusData:
    """
    Accept a data node, a JSON string, or an already-parsed JSON object.

    ``str`` payloads are JSON text and ``dict`` payloads are parsed JSON.
    ``bytes`` is a byte-string data node, never JSON text.
    """
    if isinstance(payload, str):
        return loads(payload)
    if isinstance(payload, dict):
        return from_json(payload)
    return payload
