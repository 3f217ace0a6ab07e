"""Incremental CNF expressions over integer literals.

A literal is a non-zero integer; its absolute value names a variable and a
negative sign marks negation.  A :class:`CNFExpr` is a conjunction of unit
literals and of clauses, where each clause is a :class:`LitVector`.
"""

from __future__ import annotations

from typing import Iterable, Iterator

#: Number of leading literals that a :class:`LitVector` keeps sorted by
#: magnitude; later literals are appended without searching.
MERGESIZE = 5


class LitVector:
    """A small collection of literals, kept sorted by magnitude in its prefix.

    Adding a literal whose complement is already present empties the vector:
    whether that means true or false depends on whether the vector is read
    as a conjunction or a disjunction.
    """

    __slots__ = ("_literals",)

    def __init__(self, literals: Iterable[int] = ()) -> None:
        self._literals: list[int] = []
        for literal in literals:
            self.add_literal(literal)

    @classmethod
    def _from_list(cls, literals: list[int]) -> "LitVector":
        vector = cls()
        vector._literals = literals
        return vector

    def add_literal(self, literal: int) -> None:
        """Insert ``literal``, ignoring duplicates and emptying on a complement."""
        literals = self._literals
        magnitude = abs(literal)
        position = min(len(literals), MERGESIZE)
        for index, current in enumerate(literals[:MERGESIZE]):
            current_magnitude = abs(current)
            if current_magnitude > magnitude:
                position = index
                break
            if current_magnitude == magnitude:
                if current == -literal:
                    literals.clear()
                return
        if len(literals) < MERGESIZE:
            literals.insert(position, literal)
        else:
            literals.append(literal)

    def merge(self, other: "LitVector") -> "LitVector":
        """Return the union of both vectors, or an empty vector on a complement."""
        left = self._literals[:MERGESIZE]
        right = other._literals[:MERGESIZE]
        merged: list[int] = []
        i = j = 0
        while i < len(left) and j < len(right):
            a, b = left[i], right[j]
            if abs(a) < abs(b):
                merged.append(a)
                i += 1
            elif abs(a) > abs(b):
                merged.append(b)
                j += 1
            elif a == b:
                merged.append(a)
                i += 1
                j += 1
            else:
                return LitVector()
        merged.extend(left[i:])
        merged.extend(right[j:])
        merged.extend(self._literals[MERGESIZE:])
        merged.extend(other._literals[MERGESIZE:])
        return LitVector._from_list(merged)

    def merge_literal(self, literal: int) -> "LitVector":
        """Return a copy of this vector with ``literal`` added."""
        result = self.copy()
        result.add_literal(literal)
        return result

    def copy(self) -> "LitVector":
        return LitVector._from_list(list(self._literals))

    def clear(self) -> None:
        self._literals.clear()

    def __len__(self) -> int:
        return len(self._literals)

    def __iter__(self) -> Iterator[int]:
        return iter(self._literals)

    def __getitem__(self, index: int) -> int:
        return self._literals[index]

    def __eq__(self, other: object) -> bool:
        if isinstance(other, LitVector):
            return self._literals == other._literals
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"LitVector({self._literals!r})"


class CNFExpr:
    """A formula in conjunctive normal form built up incrementally.

    When the expression holds no literals at all, ``is_true`` tells whether
    it stands for the constant true or the constant false.
    """

    def __init__(self, is_true: bool = False) -> None:
        self.is_true = is_true
        self.clauses: list[LitVector] = []
        self.singletons = LitVector()

    @classmethod
    def from_bool(cls, is_true: bool) -> "CNFExpr":
        return cls(is_true)

    @classmethod
    def from_literal(cls, literal: int) -> "CNFExpr":
        expr = cls(False)
        expr.singletons.add_literal(literal)
        return expr

    @property
    def lit_size(self) -> int:
        """Total number of literal occurrences in the expression."""
        return len(self.singletons) + sum(len(clause) for clause in self.clauses)

    def clear(self, is_true: bool) -> None:
        """Reset the expression to a constant."""
        self.clauses = []
        self.singletons = LitVector()
        self.is_true = is_true

    def always_true(self) -> bool:
        return self.lit_size == 0 and self.is_true

    def always_false(self) -> bool:
        return self.lit_size == 0 and not self.is_true

    def clause_count(self) -> int:
        return len(self.singletons) + len(self.clauses)

    def copy_from(self, other: "CNFExpr") -> None:
        """Replace this expression's contents with a copy of ``other``."""
        self.singletons = other.singletons.copy()
        self.clauses = [clause.copy() for clause in other.clauses]
        self.is_true = other.is_true

    def conjoin_literal(self, literal: int) -> None:
        """Replace the expression with ``self AND literal``."""
        if self.always_false():
            return
        self.singletons.add_literal(literal)
        if not self.singletons:
            self.clear(False)

    def disjoin_literal(self, literal: int) -> None:
        """Replace the expression with ``self OR literal``."""
        if self.lit_size == 0:
            if not self.is_true:
                self.singletons.add_literal(literal)
            return

        new_clauses: list[LitVector] = []
        for clause in self.clauses:
            clause.add_literal(literal)
            if clause:
                new_clauses.append(clause)

        has_same = False
        for single in self.singletons:
            if single == literal:
                has_same = True
            elif single != -literal:
                new_clauses.append(LitVector((literal, single)))

        self.clauses = new_clauses
        self.singletons = LitVector((literal,) if has_same else ())
        if self.lit_size == 0:
            self.is_true = True

    def conjoin(self, other: "CNFExpr") -> None:
        """Replace the expression with ``self AND other``; ``other`` is left intact."""
        if other.lit_size == 0:
            if not other.is_true:
                self.clear(False)
            return
        if self.lit_size == 0:
            if self.is_true:
                self.copy_from(other)
            return
        for literal in other.singletons:
            self.singletons.add_literal(literal)
            if not self.singletons:
                self.clear(False)
                return
        self.clauses.extend(clause.copy() for clause in other.clauses)

    def disjoin(self, other: "CNFExpr") -> None:
        """Replace the expression with ``self OR other``; ``other`` is left intact."""
        if other.lit_size == 0:
            if other.is_true:
                self.clear(True)
            return
        if self.lit_size == 0:
            if not self.is_true:
                self.copy_from(other)
            return
        if other.lit_size == 1 and len(other.singletons) == 1:
            self.disjoin_literal(other.singletons[0])
            return
        if self.lit_size == 1 and len(self.singletons) == 1:
            literal = self.singletons[0]
            self.copy_from(other)
            self.disjoin_literal(literal)
            return

        merged: list[LitVector] = []
        for mine in self.singletons:
            for clause in other.clauses:
                combined = clause.merge_literal(mine)
                if combined:
                    merged.append(combined)
        for theirs in other.singletons:
            for clause in self.clauses:
                combined = clause.merge_literal(theirs)
                if combined:
                    merged.append(combined)
        for mine_clause in self.clauses:
            for their_clause in other.clauses:
                combined = mine_clause.merge(their_clause)
                if combined:
                    merged.append(combined)

        kept = LitVector()
        for mine in self.singletons:
            for theirs in other.singletons:
                if mine == theirs:
                    kept.add_literal(mine)
                elif mine != -theirs:
                    merged.append(LitVector((mine, theirs)))

        self.singletons = kept
        self.clauses = merged
        if self.lit_size == 0:
            self.is_true = True

    def __str__(self) -> str:
        text = " ^ ".join(str(literal) for literal in self.singletons)
        for clause in self.clauses:
            text += " ^ (" + " v ".join(str(literal) for literal in clause) + ")"
        return text

    def __repr__(self) -> str:
        return f"CNFExpr(is_true={self.is_true!r}, text={str(self)!r})"