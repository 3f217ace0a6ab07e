"""Conversion of constraint graphs to clauses sent to a SAT solver.

Graphs are flattened into conjunctions of clauses; where distributing a
disjunction would blow up, a fresh proxy variable is introduced.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Sequence, Union

from satbackend.edges import (
    E_FALSE,
    E_TRUE,
    Edge,
    NodeType,
    constraint_and,
    constraint_and2,
    constraint_iff,
    constraint_implies,
    constraint_or,
    constraint_or2,
    create_node,
    var_edge,
)
from satbackend.inc_solver import IncrementalSolver, SolverResult

logger = logging.getLogger(__name__)

_Item = Union[Edge, list[Edge]]


class Polarity(IntEnum):
    """Which directions of a proxy equivalence are required."""

    UNDEFINED = 0
    TRUE = 1
    FALSE = 2
    BOTHTRUEFALSE = 3


@dataclass
class _CNFForm:
    """A conjunction whose items are single literals or clauses."""

    items: list[_Item] = field(default_factory=list)
    num_vars: int = 0


def _as_clause(item: _Item) -> list[Edge]:
    return [item] if isinstance(item, Edge) else list(item)


def _disjoin_literal(form: _CNFForm, literal: Edge) -> _CNFForm:
    form.items = [
        [literal, item] if isinstance(item, Edge) else item + [literal]
        for item in form.items
    ]
    form.num_vars += len(form.items)
    return form


class CNF:
    """Clause generator bound to a solver."""

    def __init__(self, solver=None) -> None:
        self.solver = solver if solver is not None else IncrementalSolver()
        self.varcount = 1
        self.clausecount = 0
        self.solve_time = 0
        self.encode_time = 0
        self.unsat = False

    def reset(self) -> None:
        self.solver.reset()
        self.varcount = 1
        self.clausecount = 0
        self.solve_time = 0
        self.encode_time = 0
        self.unsat = False

    def new_var(self) -> Edge:
        edge = var_edge(self.varcount)
        self.varcount += 1
        return edge

    def simplify(self, edge: Edge) -> _CNFForm:
        """Flatten ``edge`` into a conjunction of literals and clauses."""
        if edge.is_var_or_const():
            return _CNFForm([edge], 1)
        node = edge.node
        if not edge.negated:
            if node.type is NodeType.AND:
                form = _CNFForm()
                for child in node.edges:
                    part = self.simplify(child)
                    form.items.extend(part.items)
                    form.num_vars += part.num_vars
                return form
            cond, then_edge = node.edges[0], node.edges[1]
            else_edge = then_edge.negate() if node.type is NodeType.IFF else node.edges[2]
            then_cons = create_node(NodeType.AND, (cond, then_edge.negate())).negate()
            else_cons = create_node(NodeType.AND, (cond.negate(), else_edge.negate())).negate()
            result = self.simplify(then_cons)
            else_form = self.simplify(else_cons)
            result.items.extend(else_form.items)
            result.num_vars += else_form.num_vars
            return result

        if node.type is NodeType.AND:
            form = self.simplify(node.edges[0].negate())
            for child in node.edges[1:]:
                form = self._disjoin(form, self.simplify(child.negate()))
            return form
        cond, then_edge = node.edges[0], node.edges[1]
        else_edge = then_edge.negate() if node.type is NodeType.IFF else node.edges[2]
        then_cons = create_node(NodeType.AND, (cond, then_edge.negate()))
        else_cons = create_node(NodeType.AND, (cond.negate(), else_edge.negate()))
        combined = create_node(NodeType.AND, (then_cons.negate(), else_cons.negate())).negate()
        return self.simplify(combined)

    def _disjoin(self, newvec: _CNFForm, cnfform: _CNFForm) -> _CNFForm:
        new_count = len(newvec.items)
        cnf_count = len(cnfform.items)
        new_vars = newvec.num_vars
        cnf_vars = cnfform.num_vars

        if cnf_count > 3 or (
            cnf_count * new_vars + new_count * cnf_vars
            > cnf_count + new_count + new_vars + cnf_vars
        ):
            proxy = self.new_var()
            if new_count > cnf_count:
                self.output_cnf_or(newvec, proxy.negate())
                return _disjoin_literal(cnfform, proxy)
            self.output_cnf_or(cnfform, proxy.negate())
            return _disjoin_literal(newvec, proxy)

        if new_count == 1 or cnf_count == 1:
            many, single = (newvec, cnfform) if cnf_count == 1 else (cnfform, newvec)
            item = single.items[0]
            if isinstance(item, Edge):
                _disjoin_literal(many, item)
            else:
                # Clause entries carry no literal count of their own, so
                # the running total is left as it was.
                many.items = [
                    (other + item) if isinstance(other, list) else (item + [other])
                    for other in many.items
                ]
            return many

        result = _CNFForm()
        for nedge in newvec.items:
            for cedge in cnfform.items:
                both_literals = isinstance(nedge, Edge) and isinstance(cedge, Edge)
                if both_literals and cedge == nedge:
                    result.items.append(cedge)
                    result.num_vars += 1
                elif not (both_literals and nedge.same_node_opposite_sign(cedge)):
                    clause = _as_clause(nedge) + _as_clause(cedge)
                    result.items.append(clause)
                    result.num_vars += len(clause)
        return result

    def add_clause(self, literals: Sequence[int]) -> None:
        self.clausecount += 1
        self.solver.add_clause(literals)

    def freeze_variable(self, edge: Edge) -> None:
        self.solver.freeze(edge.literal())

    @staticmethod
    def _literals(clause: list[Edge]) -> list[int]:
        literals = [edge.literal() for edge in clause]
        if 0 in literals:
            raise ValueError("constant in clause")
        return literals

    def output_cnf(self, cnfform: _CNFForm) -> None:
        """Send every item of ``cnfform`` to the solver as a clause."""
        for item in cnfform.items:
            self.add_clause(self._literals(_as_clause(item)))

    def output_cnf_or(self, cnfform: _CNFForm, eorvar: Edge) -> None:
        """Send ``cnfform OR eorvar`` to the solver."""
        orvar = eorvar.literal()
        if orvar == 0:
            raise ValueError("disjunct must be a variable")
        for item in cnfform.items:
            self.add_clause(self._literals(_as_clause(item)) + [orvar])

    def generate_proxy(self, expression: Edge, proxy: Edge, polarity: Polarity) -> None:
        """Tie ``proxy`` to ``expression`` in the directions ``polarity`` asks for."""
        if polarity == Polarity.UNDEFINED:
            raise ValueError("proxy polarity is undefined")
        if polarity in (Polarity.TRUE, Polarity.BOTHTRUEFALSE):
            self.output_cnf_or(self.simplify(expression), proxy.negate())
        if polarity in (Polarity.FALSE, Polarity.BOTHTRUEFALSE):
            self.output_cnf_or(self.simplify(expression.negate()), proxy)

    def add_constraint(self, constraint: Edge) -> None:
        if constraint == E_TRUE:
            return
        if constraint == E_FALSE:
            self.unsat = True
            return
        if self.unsat:
            return
        self.output_cnf(self.simplify(constraint))

    def solve(self) -> SolverResult:
        start = time.perf_counter_ns()
        logger.debug("#Clauses = %d\t#Vars = %d", self.clausecount, self.varcount)
        result = SolverResult.UNSAT if self.unsat else self.solver.solve()
        self.solve_time = time.perf_counter_ns() - start
        logger.debug("CNF Encode time: %f", self.encode_time / 1e9)
        logger.debug("SAT Solving time: %f", self.solve_time / 1e9)
        return result

    def get_value(self, var: Edge) -> bool:
        literal = var.literal()
        return (literal < 0) ^ bool(self.solver.get_value(abs(literal)))


def generate_binary_constraint(variables: Sequence[Edge], value: int) -> Edge:
    """Constraint that the bits ``variables`` spell out ``value``."""
    terms = [
        var if (value >> bit) & 1 else var.negate()
        for bit, var in enumerate(variables)
    ]
    return constraint_and(terms)


def generate_lt_value_constraint(variables: Sequence[Edge], value: int) -> Edge:
    """Constraint that the number encoded by ``variables`` is below ``value``."""
    conjuncts: list[Edge] = []
    while True:
        flips = [
            var.negate() for bit, var in enumerate(variables) if (value >> bit) & 1
        ]
        if not flips:
            return constraint_and(conjuncts)
        conjuncts.append(constraint_or(flips))
        value += value & -value


def generate_equiv_constraint(var1: Sequence[Edge], var2: Sequence[Edge]) -> Edge:
    if not var1:
        return E_TRUE
    return constraint_and([constraint_iff(a, b) for a, b in zip(var1, var2, strict=True)])


def _generate_comparison(first: Edge, var1: Sequence[Edge], var2: Sequence[Edge]) -> Edge:
    result = first
    for a, b in zip(var1[1:], var2[1:], strict=True):
        less = constraint_and2(a.negate(), b)
        equal = constraint_and2(constraint_iff(a, b), result)
        result = constraint_or2(less, equal)
    return result


def generate_lt_constraint(var1: Sequence[Edge], var2: Sequence[Edge]) -> Edge:
    """Constraint that ``var1`` encodes a smaller number than ``var2``."""
    if not var1:
        return E_FALSE
    return _generate_comparison(constraint_and2(var1[0].negate(), var2[0]), var1, var2)


def generate_lte_constraint(var1: Sequence[Edge], var2: Sequence[Edge]) -> Edge:
    """Constraint that ``var1`` encodes a number no larger than ``var2``."""
    if not var1:
        return E_TRUE
    return _generate_comparison(constraint_implies(var1[0], var2[0]), var1, var2)