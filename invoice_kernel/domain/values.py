"""
Values -- Immutable ledger value objects.

Responsibility:
    Provides the identity and asset types that every other domain module
    works with: principals (PubKeyHash), asset identifiers (CurrencySymbol,
    TokenName, AssetClass), output addresses (Credential, StakingCredential,
    Address) and the multi-asset Value bag carried by transaction outputs.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by every other domain module. No outward dependencies.

Invariants enforced:
    - Identifiers wrap ``bytes`` and are hashable; two identifiers are equal
      iff their bytes are equal.
    - Value quantities are Python ``int`` (unbounded), never float.
    - Value never stores zero quantities; ``value_of`` on a missing asset
      returns 0.

Failure modes:
    - TypeError on construction with non-bytes identifiers or non-int
      quantities.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType


def _require_bytes(value: object, name: str) -> bytes:
    if isinstance(value, bytearray):
        return bytes(value)
    if not isinstance(value, bytes):
        raise TypeError(f"{name} must be bytes, not {type(value).__name__}")
    return value


@dataclass(frozen=True, slots=True)
class PubKeyHash:
    """Hash of a public key: the identity of a principal."""

    raw: bytes

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw", _require_bytes(self.raw, "PubKeyHash"))

    @classmethod
    def from_hex(cls, value: str) -> PubKeyHash:
        return cls(bytes.fromhex(value))

    def hex(self) -> str:
        return self.raw.hex()

    def __str__(self) -> str:
        return self.raw.hex()


@dataclass(frozen=True, slots=True)
class CurrencySymbol:
    """Minting policy hash of an asset. Empty bytes is the native asset."""

    raw: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "raw", _require_bytes(self.raw, "CurrencySymbol")
        )

    @classmethod
    def from_hex(cls, value: str) -> CurrencySymbol:
        return cls(bytes.fromhex(value))

    def hex(self) -> str:
        return self.raw.hex()

    def __str__(self) -> str:
        return self.raw.hex()


@dataclass(frozen=True, slots=True)
class TokenName:
    """Asset name under a currency symbol."""

    raw: bytes = b""

    def __post_init__(self) -> None:
        object.__setattr__(self, "raw", _require_bytes(self.raw, "TokenName"))

    @classmethod
    def from_str(cls, value: str) -> TokenName:
        return cls(value.encode("utf-8"))

    def __str__(self) -> str:
        try:
            return self.raw.decode("utf-8")
        except UnicodeDecodeError:
            return self.raw.hex()


ADA_SYMBOL = CurrencySymbol(b"")
ADA_TOKEN = TokenName(b"")


@dataclass(frozen=True, slots=True)
class AssetClass:
    """A (currency symbol, token name) pair naming one fungible asset."""

    currency_symbol: CurrencySymbol
    token_name: TokenName

    def __str__(self) -> str:
        return f"{self.currency_symbol}.{self.token_name}"


# ---------------------------------------------------------------------------
# Addresses
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PubKeyCredential:
    """Payment credential locked by a key signature."""

    pub_key_hash: PubKeyHash


@dataclass(frozen=True, slots=True)
class ScriptCredential:
    """Payment credential locked by a validator script."""

    script_hash: bytes


Credential = PubKeyCredential | ScriptCredential


@dataclass(frozen=True, slots=True)
class StakingHash:
    """Staking part given by a credential."""

    credential: Credential


@dataclass(frozen=True, slots=True)
class StakingPtr:
    """Staking part given by a pointer into the certificate history."""

    slot: int
    tx_index: int
    cert_index: int


StakingCredential = StakingHash | StakingPtr


@dataclass(frozen=True, slots=True)
class Address:
    """
    Output destination.

    Two addresses with the same payment credential but different staking
    parts are different addresses.
    """

    credential: Credential
    staking_credential: StakingCredential | None = None

    @classmethod
    def for_pub_key(cls, pkh: PubKeyHash) -> Address:
        """The plain key address of a principal: no script, no staking part."""
        return cls(PubKeyCredential(pkh), None)

    @property
    def pub_key_hash(self) -> PubKeyHash | None:
        if isinstance(self.credential, PubKeyCredential):
            return self.credential.pub_key_hash
        return None


# ---------------------------------------------------------------------------
# Multi-asset value
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Value:
    """
    Multi-asset value carried by a transaction output.

    Contract:
        Maps CurrencySymbol -> TokenName -> quantity. Quantities are ints;
        zero entries are dropped on construction so that equal bags compare
        equal regardless of how they were built.

    Non-goals:
        - Does NOT enforce non-negativity (minting values may be negative).
        - Is NOT an accounting ledger; there is no conversion between assets.
    """

    _entries: Mapping[CurrencySymbol, Mapping[TokenName, int]] = field(
        default_factory=dict
    )

    def __post_init__(self) -> None:
        cleaned: dict[CurrencySymbol, Mapping[TokenName, int]] = {}
        for cs, tokens in self._entries.items():
            if not isinstance(cs, CurrencySymbol):
                raise TypeError(
                    f"Value keys must be CurrencySymbol, not {type(cs).__name__}"
                )
            inner: dict[TokenName, int] = {}
            for tn, qty in tokens.items():
                if not isinstance(tn, TokenName):
                    raise TypeError(
                        f"Value token keys must be TokenName, not {type(tn).__name__}"
                    )
                if isinstance(qty, bool) or not isinstance(qty, int):
                    raise TypeError(
                        f"Value quantities must be int, not {type(qty).__name__}"
                    )
                if qty:
                    inner[tn] = qty
            if inner:
                cleaned[cs] = MappingProxyType(inner)
        object.__setattr__(self, "_entries", MappingProxyType(cleaned))

    @classmethod
    def singleton(cls, cs: CurrencySymbol, tn: TokenName, quantity: int) -> Value:
        return cls({cs: {tn: quantity}})

    @classmethod
    def lovelace(cls, quantity: int) -> Value:
        return cls.singleton(ADA_SYMBOL, ADA_TOKEN, quantity)

    @classmethod
    def of(cls, asset: AssetClass, quantity: int) -> Value:
        return cls.singleton(asset.currency_symbol, asset.token_name, quantity)

    def value_of(self, cs: CurrencySymbol, tn: TokenName) -> int:
        """Quantity of one asset; 0 when the asset is absent."""
        return self._entries.get(cs, {}).get(tn, 0)

    @property
    def is_zero(self) -> bool:
        return not self._entries

    def flatten(self) -> Iterator[tuple[CurrencySymbol, TokenName, int]]:
        for cs, tokens in self._entries.items():
            for tn, qty in tokens.items():
                yield cs, tn, qty

    def __iter__(self) -> Iterator[tuple[CurrencySymbol, TokenName, int]]:
        return self.flatten()

    def __add__(self, other: Value) -> Value:
        if not isinstance(other, Value):
            return NotImplemented
        merged: dict[CurrencySymbol, dict[TokenName, int]] = {}
        for cs, tn, qty in (*self.flatten(), *other.flatten()):
            bucket = merged.setdefault(cs, {})
            bucket[tn] = bucket.get(tn, 0) + qty
        return Value(merged)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Value):
            return NotImplemented
        return sorted(
            (cs.raw, tn.raw, q) for cs, tn, q in self.flatten()
        ) == sorted((cs.raw, tn.raw, q) for cs, tn, q in other.flatten())

    def __hash__(self) -> int:
        return hash(frozenset((cs, tn, q) for cs, tn, q in self.flatten()))

    def __repr__(self) -> str:
        parts = ", ".join(
            f"{cs}.{tn}={q}" for cs, tn, q in self.flatten()
        )
        return f"Value({parts})"
