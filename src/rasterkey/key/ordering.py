# src/rasterkey/key/ordering.py

"""
This module defines a four-valued partial-order comparison result.

Scales on a multi-scale key compare with it so that overlapping ranges
are detected as INCOMPARABLE instead of being forced into a total order.
"""

import logging
from enum import Enum

from rasterkey.exceptions import IncomparableError

log = logging.getLogger(__name__)

__all__ = ["PartialOrder"]

class PartialOrder(Enum):
    """
    Result of comparing two partially ordered things.

    Options:
        LESS_THAN: This precedes that.
        EQUAL_TO: This and that are the same.
        MORE_THAN: This follows that.
        INCOMPARABLE: Neither precedes the other.
    """
    LESS_THAN = "less_than"
    EQUAL_TO = "equal_to"
    MORE_THAN = "more_than"
    INCOMPARABLE = "incomparable"

    def comparator(self) -> int:
        """
        Convert to a total-order comparator value (-1, 0 or 1).

        Raises:
            IncomparableError: If this is INCOMPARABLE.
        """
        if self is PartialOrder.INCOMPARABLE:
            raise IncomparableError("Incomparable items have no comparator value")
        return {
            PartialOrder.LESS_THAN: -1,
            PartialOrder.EQUAL_TO: 0,
            PartialOrder.MORE_THAN: 1,
        }[self]

    @classmethod
    def from_comparator(cls, comparator: int) -> "PartialOrder":
        if comparator < 0:
            return cls.LESS_THAN
        if comparator > 0:
            return cls.MORE_THAN
        return cls.EQUAL_TO

    def generalise(self, other: "PartialOrder") -> "PartialOrder":
        """
        Combine two results into the weakest one consistent with both.

        LESS_THAN and EQUAL_TO generalise to LESS_THAN, MORE_THAN and
        EQUAL_TO to MORE_THAN. Anything else that differs is INCOMPARABLE.
        """
        if self is other:
            return self
        if PartialOrder.INCOMPARABLE in (self, other):
            return PartialOrder.INCOMPARABLE
        if self.comparator() <= 0 and other.comparator() <= 0:
            return PartialOrder.LESS_THAN
        if self.comparator() >= 0 and other.comparator() >= 0:
            return PartialOrder.MORE_THAN
        return PartialOrder.INCOMPARABLE

    def strict_generalise(self, other: "PartialOrder") -> "PartialOrder":
        """Return this result if both agree, INCOMPARABLE otherwise."""
        return self if self is other else PartialOrder.INCOMPARABLE

    @property
    def is_less(self) -> bool:
        return self is PartialOrder.LESS_THAN

    @property
    def is_less_or_equal(self) -> bool:
        return self in (PartialOrder.LESS_THAN, PartialOrder.EQUAL_TO)

    @property
    def is_equal(self) -> bool:
        return self is PartialOrder.EQUAL_TO

    @property
    def is_more_or_equal(self) -> bool:
        return self in (PartialOrder.MORE_THAN, PartialOrder.EQUAL_TO)

    @property
    def is_more(self) -> bool:
        return self is PartialOrder.MORE_THAN

    @property
    def is_strict(self) -> bool:
        """True for LESS_THAN or MORE_THAN."""
        return self in (PartialOrder.LESS_THAN, PartialOrder.MORE_THAN)

    @property
    def is_comparable(self) -> bool:
        return self is not PartialOrder.INCOMPARABLE
