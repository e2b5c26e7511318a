"""
Interval -- Transaction validity ranges over POSIX time.

Responsibility:
    Models the validity window a transaction declares, and the queries the
    context readers need over it (membership, containment, overlap).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - POSIX times are integer milliseconds. Open bounds are normalized to
      the adjacent integer, so ``(1, 3)`` and ``[2, 2]`` describe the same
      set of instants.
    - A bound value of ``None`` is unbounded: -inf on a lower bound, +inf
      on an upper bound.
    - PAST_END on a lower bound and BEFORE_START on an upper bound are the
      reversed infinities a ledger range may carry; such a range is empty.

Non-goals:
    - No wall clock. A range is a claim made by the transaction proposer,
      never a reading of the current time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

POSIXTime = int

# Reversed infinities: a lower bound past every instant, an upper bound
# before every instant. Only decoded ledger ranges carry them.
PAST_END = math.inf
BEFORE_START = -math.inf


@dataclass(frozen=True, slots=True)
class LowerBound:
    """Lower end of a range. ``value=None`` means negative infinity."""

    value: POSIXTime | float | None
    closed: bool = True

    def effective(self) -> POSIXTime | float:
        """Smallest instant admitted by this bound."""
        if self.value is None:
            return -math.inf
        return self.value if self.closed else self.value + 1


@dataclass(frozen=True, slots=True)
class UpperBound:
    """Upper end of a range. ``value=None`` means positive infinity."""

    value: POSIXTime | float | None
    closed: bool = True

    def effective(self) -> POSIXTime | float:
        """Largest instant admitted by this bound."""
        if self.value is None:
            return math.inf
        return self.value if self.closed else self.value - 1


def _admits_an_instant(lo: POSIXTime | float, hi: POSIXTime | float) -> bool:
    return lo <= hi and lo != math.inf and hi != -math.inf


@dataclass(frozen=True, slots=True)
class POSIXTimeRange:
    """
    A (possibly unbounded) range of POSIX instants.

    Guarantees:
        - Immutable and hashable.
        - All predicates are total; empty ranges are legal values.
        - ``contains`` compares bounds, as the ledger does, so an empty
          range is contained only when its bounds are.
    """

    lower: LowerBound
    upper: UpperBound

    @classmethod
    def always(cls) -> POSIXTimeRange:
        return cls(LowerBound(None), UpperBound(None))

    @classmethod
    def never(cls) -> POSIXTimeRange:
        return cls(LowerBound(1), UpperBound(0))

    @classmethod
    def from_(cls, t: POSIXTime) -> POSIXTimeRange:
        """``[t, +inf)``"""
        return cls(LowerBound(t), UpperBound(None))

    @classmethod
    def to(cls, t: POSIXTime) -> POSIXTimeRange:
        """``(-inf, t]``"""
        return cls(LowerBound(None), UpperBound(t))

    @classmethod
    def interval(cls, start: POSIXTime, end: POSIXTime) -> POSIXTimeRange:
        """``[start, end]``"""
        return cls(LowerBound(start), UpperBound(end))

    def is_empty(self) -> bool:
        return not _admits_an_instant(self.lower.effective(), self.upper.effective())

    def member(self, t: POSIXTime) -> bool:
        return self.lower.effective() <= t <= self.upper.effective()

    def contains(self, other: POSIXTimeRange) -> bool:
        """True iff both bounds of ``other`` lie within this range's bounds."""
        return (
            self.lower.effective() <= other.lower.effective()
            and other.upper.effective() <= self.upper.effective()
        )

    def overlaps(self, other: POSIXTimeRange) -> bool:
        """True iff the two ranges share at least one instant."""
        return _admits_an_instant(
            max(self.lower.effective(), other.lower.effective()),
            min(self.upper.effective(), other.upper.effective()),
        )
