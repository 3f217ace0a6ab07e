"""Boolean constraint graphs built from AND, ITE and IFF nodes.

An :class:`Edge` points either at a variable (or the constant true), or at
a :class:`Node`, and may carry a negation.  Constructors simplify as they
build: constants are folded, duplicates are removed and contradictions
collapse to false.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable

_node_ids = itertools.count(1)


class NodeType(Enum):
    AND = 0
    ITE = 1
    IFF = 2


@dataclass(eq=False)
class Node:
    """An interior node of a constraint graph; compared by identity."""

    type: NodeType
    edges: tuple["Edge", ...]
    id: int = field(default_factory=lambda: next(_node_ids))

    def __len__(self) -> int:
        return len(self.edges)


@dataclass(frozen=True)
class Edge:
    """A possibly negated reference to a variable, constant or node.

    Variable number 0 stands for the constant true; its negation is false.
    An edge with neither a node nor a variable is the null edge.
    """

    node: Node | None = None
    var: int | None = None
    negated: bool = False

    def negate(self) -> "Edge":
        return Edge(self.node, self.var, not self.negated)

    def negate_if(self, negate: bool) -> "Edge":
        return self.negate() if negate else self

    def non_negated(self) -> "Edge":
        return Edge(self.node, self.var, False)

    def is_negated(self) -> bool:
        return self.negated

    def is_node(self) -> bool:
        return self.node is not None

    def is_var_or_const(self) -> bool:
        return self.var is not None

    def is_const(self) -> bool:
        return self.var == 0

    def is_null(self) -> bool:
        return self.node is None and self.var is None

    def same_node_var(self, other: "Edge") -> bool:
        """Whether both edges refer to the same node or variable, ignoring sign."""
        return self.node is other.node and self.var == other.var

    def same_node_opposite_sign(self, other: "Edge") -> bool:
        return self.same_node_var(other) and self.negated != other.negated

    def literal(self) -> int:
        """The signed variable number of a variable or constant edge."""
        if self.var is None:
            raise ValueError("edge does not refer to a variable")
        return -self.var if self.negated else self.var

    def _key(self) -> tuple[int, int, bool]:
        if self.node is not None:
            return (1, self.node.id, self.negated)
        if self.var is not None:
            return (0, self.var, self.negated)
        return (-1, 0, self.negated)

    def __lt__(self, other: "Edge") -> bool:
        return self._key() < other._key()


E_TRUE = Edge(var=0)
E_FALSE = Edge(var=0, negated=True)
E_NULL = Edge()


def var_edge(number: int) -> Edge:
    """Return the positive edge of variable ``number``."""
    if number < 1:
        raise ValueError("variable numbers start at 1")
    return Edge(var=number)


def create_node(node_type: NodeType, edges: Iterable[Edge]) -> Edge:
    """Build a node without simplification and return a positive edge to it."""
    return Edge(node=Node(node_type, tuple(edges)))


def clone_edge(edge: Edge) -> Edge:
    """Deep-copy the graph below ``edge``, keeping its sign."""
    if edge.node is None:
        return edge
    children = tuple(clone_edge(child) for child in edge.node.edges)
    return Edge(node=Node(edge.node.type, children), negated=edge.negated)


def constraint_and(edges: Iterable[Edge]) -> Edge:
    """Conjunction of ``edges`` with constant folding and de-duplication."""
    ordered = sorted(edges, key=Edge._key)
    if not ordered:
        raise ValueError("conjunction of no edges")

    start = 0
    while start < len(ordered) and ordered[start] == E_TRUE:
        start += 1
    remaining = ordered[start:]
    if not remaining:
        return E_TRUE
    if len(remaining) == 1:
        return remaining[0]
    if remaining[0] == E_FALSE:
        return E_FALSE

    unique = [remaining[0]]
    for edge in remaining[1:]:
        last = unique[-1]
        if last.same_node_var(edge):
            if last.negated != edge.negated:
                return E_FALSE
        else:
            unique.append(edge)

    if len(unique) == 1:
        return unique[0]

    if len(unique) == 2:
        first, second = unique
        if all(
            e.node is not None
            and e.negated
            and e.node.type is NodeType.AND
            and len(e.node.edges) == 2
            for e in unique
        ):
            a0, a1 = first.node.edges
            b0, b1 = second.node.edges
            if a0.same_node_opposite_sign(b0):
                return constraint_ite(a0, a1, b1).negate()
            if a0.same_node_opposite_sign(b1):
                return constraint_ite(a0, a1, b0).negate()
            if a1.same_node_opposite_sign(b0):
                return constraint_ite(a1, a0, b1).negate()
            if a1.same_node_opposite_sign(b1):
                return constraint_ite(a1, a0, b0).negate()

    return create_node(NodeType.AND, unique)


def constraint_or(edges: Iterable[Edge]) -> Edge:
    return constraint_and(edge.negate() for edge in edges).negate()


def constraint_and2(left: Edge, right: Edge) -> Edge:
    return constraint_and((left, right))


def constraint_or2(left: Edge, right: Edge) -> Edge:
    return constraint_and2(left.negate(), right.negate()).negate()


def constraint_implies(left: Edge, right: Edge) -> Edge:
    return constraint_and((left, right.negate())).negate()


def constraint_iff(left: Edge, right: Edge) -> Edge:
    negate = left.negated != right.negated
    lpos = left.non_negated()
    rpos = right.non_negated()
    if lpos == rpos:
        result = E_TRUE
    elif lpos < rpos:
        result = rpos if lpos.is_const() else create_node(NodeType.IFF, (lpos, rpos))
    else:
        result = lpos if rpos.is_const() else create_node(NodeType.IFF, (rpos, lpos))
    return result.negate_if(negate)


def constraint_xor(left: Edge, right: Edge) -> Edge:
    return constraint_iff(left, right).negate()


def constraint_ite(cond: Edge, thenedge: Edge, elseedge: Edge) -> Edge:
    """If-then-else with the usual simplifications."""
    if cond.negated:
        cond = cond.negate()
        thenedge, elseedge = elseedge, thenedge

    negate = thenedge.negated
    if negate:
        thenedge = thenedge.negate()
        elseedge = elseedge.negate()

    if cond == E_TRUE:
        result = thenedge
    elif thenedge == E_TRUE or cond == thenedge:
        result = constraint_or((cond, elseedge))
    elif elseedge == E_TRUE or cond.same_node_opposite_sign(elseedge):
        result = constraint_implies(cond, thenedge)
    elif elseedge == E_FALSE or cond == elseedge:
        result = constraint_and((cond, thenedge))
    elif thenedge == elseedge:
        result = thenedge
    elif thenedge.same_node_opposite_sign(elseedge):
        if cond < thenedge:
            result = create_node(NodeType.IFF, (cond, thenedge))
        else:
            result = create_node(NodeType.IFF, (thenedge, cond))
    else:
        result = create_node(NodeType.ITE, (cond, thenedge, elseedge))
    return result.negate_if(negate)


_NODE_NAMES = {NodeType.AND: "and", NodeType.ITE: "ite", NodeType.IFF: "iff"}


def format_edge(edge: Edge) -> str:
    """Render ``edge`` as a prefix expression; negated ANDs print as ``or``."""
    if edge.node is None:
        if edge.var is None:
            return "null"
        if edge.is_const():
            return "F" if edge.negated else "T"
        return str(edge.literal())
    node = edge.node
    if edge.negated and node.type is NodeType.AND:
        inner = " ".join(format_edge(child.negate()) for child in node.edges)
        return f"or({inner})"
    prefix = "!" if edge.negated else ""
    inner = " ".join(format_edge(child) for child in node.edges)
    return f"{prefix}{_NODE_NAMES[node.type]}({inner})"