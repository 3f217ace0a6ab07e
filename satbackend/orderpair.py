"""Pairs and elements of an order relation over 64-bit items."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from satbackend.edges import E_NULL, Edge

_UINT_MASK = 0xFFFFFFFF


@dataclass
class OrderPair:
    """An ordered pair of items with the constraint that ``first`` precedes ``second``."""

    first: int = 0
    second: int = 0
    constraint: Edge = E_NULL

    def negated_constraint(self) -> Edge:
        """The constraint for the swapped pair."""
        return self.constraint.negate()

    def constraint_value(self, cnf) -> bool:
        """Value of the constraint in the model found by ``cnf``'s solver."""
        return cnf.get_value(self.constraint)

    def negated_constraint_value(self, cnf) -> bool:
        """Value of the negated constraint in the model found by ``cnf``'s solver."""
        return cnf.get_value(self.constraint.negate())


class OrderElement:
    """An item of an order together with the element it stands for.

    Two order elements are equal when their items are equal; the element
    plays no part in equality or hashing.
    """

    __slots__ = ("item", "element")

    def __init__(self, item: int, element: Any = None) -> None:
        self.item = item
        self.element = element

    def __hash__(self) -> int:
        return self.item & _UINT_MASK

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OrderElement):
            return self.item == other.item
        return NotImplemented

    def __repr__(self) -> str:
        return f"OrderElement(item={self.item!r}, element={self.element!r})"