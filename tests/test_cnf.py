from itertools import product

import pytest

from satbackend.cnf import (
    CNF,
    Polarity,
    generate_binary_constraint,
    generate_equiv_constraint,
    generate_lt_constraint,
    generate_lt_value_constraint,
    generate_lte_constraint,
)
from satbackend.edges import (
    E_FALSE,
    E_TRUE,
    NodeType,
    constraint_and,
    constraint_and2,
    constraint_iff,
    constraint_implies,
    constraint_ite,
    constraint_or,
    constraint_or2,
    constraint_xor,
    var_edge,
)
from satbackend.inc_solver import SolverResult


class RecordingSolver:
    def __init__(self, values=None, result=SolverResult.SAT):
        self.clauses = []
        self.frozen = []
        self.values = values or {}
        self.result = result
        self.solve_calls = 0
        self.resets = 0

    def add_clause(self, literals):
        self.clauses.append(list(literals))

    def freeze(self, variable):
        self.frozen.append(variable)

    def solve(self):
        self.solve_calls += 1
        return self.result

    def get_value(self, variable):
        return self.values.get(variable, False)

    def reset(self):
        self.clauses.clear()
        self.resets += 1


def evaluate(edge, assignment):
    if edge.node is None:
        value = True if edge.var == 0 else assignment[edge.var]
    else:
        kids = [evaluate(child, assignment) for child in edge.node.edges]
        if edge.node.type is NodeType.AND:
            value = all(kids)
        elif edge.node.type is NodeType.ITE:
            value = kids[1] if kids[0] else kids[2]
        else:
            value = kids[0] == kids[1]
    return value != edge.negated


def satisfied(clauses, assignment):
    return all(any(assignment[abs(l)] == (l > 0) for l in clause) for clause in clauses)


def holds(clauses, base, extra):
    return any(
        satisfied(clauses, {**base, **dict(zip(extra, bits))})
        for bits in product((False, True), repeat=len(extra))
    )


def encoded(bits):
    return sum(1 << i for i, bit in enumerate(bits) if bit)


def make(n):
    solver = RecordingSolver()
    cnf = CNF(solver)
    return cnf, solver, [cnf.new_var() for _ in range(n)]


BUILDERS = [
    (3, lambda v: constraint_and([v[0], v[1].negate(), v[2]])),
    (8, lambda v: constraint_or([constraint_and2(v[i], v[i + 1]) for i in range(0, 8, 2)])),
    (3, lambda v: constraint_ite(v[0], v[1], v[2])),
    (3, lambda v: constraint_ite(v[0], v[1], v[2]).negate()),
    (3, lambda v: constraint_iff(v[0], constraint_and2(v[1], v[2]))),
    (3, lambda v: constraint_xor(v[0], constraint_or2(v[1], v[2]))),
    (4, lambda v: constraint_implies(constraint_or2(v[0], v[1]), constraint_and2(v[2], v[3]))),
    (4, lambda v: constraint_or2(constraint_iff(v[0], v[1]), constraint_iff(v[2], v[3]))),
    (6, lambda v: generate_lt_constraint(v[:3], v[3:])),
]


@pytest.mark.parametrize("count, build", BUILDERS)
def test_added_constraint_is_equisatisfiable(count, build):
    cnf, solver, variables = make(count)
    constraint = build(variables)
    cnf.add_constraint(constraint)
    proxies = list(range(count + 1, cnf.varcount))
    assert all(0 not in clause for clause in solver.clauses)
    assert cnf.clausecount == len(solver.clauses)
    for bits in product((False, True), repeat=count):
        base = dict(zip(range(1, count + 1), bits))
        assert holds(solver.clauses, base, proxies) == evaluate(constraint, base)


def test_wide_disjunction_introduces_proxies():
    cnf, solver, variables = make(8)
    cnf.add_constraint(constraint_or([constraint_and2(variables[i], variables[i + 1]) for i in range(0, 8, 2)]))
    assert cnf.varcount > 9


def test_new_var_numbers_increase():
    cnf, _, variables = make(3)
    assert [v.literal() for v in variables] == [1, 2, 3]
    assert cnf.varcount == 4


def test_single_variable_constraint_is_unit_clause():
    cnf, solver, variables = make(1)
    cnf.add_constraint(variables[0])
    assert solver.clauses == [[1]]
    assert cnf.clausecount == 1


def test_true_constraint_adds_nothing():
    cnf, solver, _ = make(1)
    cnf.add_constraint(E_TRUE)
    assert solver.clauses == []
    assert cnf.unsat is False


def test_false_constraint_makes_unsat_without_solving():
    cnf, solver, variables = make(1)
    cnf.add_constraint(E_FALSE)
    cnf.add_constraint(variables[0])
    assert cnf.unsat is True
    assert solver.clauses == []
    assert cnf.solve() == SolverResult.UNSAT
    assert solver.solve_calls == 0


def test_solve_asks_solver():
    cnf, solver, variables = make(1)
    cnf.add_constraint(variables[0])
    assert cnf.solve() == SolverResult.SAT
    assert solver.solve_calls == 1
    assert cnf.solve_time >= 0


def test_get_value_respects_sign():
    solver = RecordingSolver(values={1: True})
    cnf = CNF(solver)
    v = cnf.new_var()
    assert cnf.get_value(v) is True
    assert cnf.get_value(v.negate()) is False


def test_freeze_variable_passes_literal():
    cnf, solver, variables = make(2)
    cnf.freeze_variable(variables[1])
    assert solver.frozen == [2]


def test_reset_restarts_numbering():
    cnf, solver, variables = make(2)
    cnf.add_constraint(E_FALSE)
    cnf.reset()
    assert cnf.varcount == 1
    assert cnf.unsat is False
    assert solver.resets == 1
    assert cnf.new_var() == variables[0]


def test_constant_in_clause_is_rejected():
    cnf, _, _ = make(1)
    with pytest.raises(ValueError):
        cnf.output_cnf(cnf.simplify(E_TRUE))


@pytest.mark.parametrize(
    "polarity, expected",
    [
        (Polarity.TRUE, lambda p, e: (not p) or e),
        (Polarity.FALSE, lambda p, e: p or not e),
        (Polarity.BOTHTRUEFALSE, lambda p, e: p == e),
    ],
)
def test_generate_proxy(polarity, expected):
    cnf, solver, variables = make(3)
    expression = constraint_and2(variables[0], constraint_or2(variables[1], variables[2]))
    proxy = cnf.new_var()
    cnf.generate_proxy(expression, proxy, polarity)
    extra = list(range(5, cnf.varcount))
    for bits in product((False, True), repeat=4):
        base = dict(zip(range(1, 5), bits))
        assert holds(solver.clauses, base, extra) == expected(base[4], evaluate(expression, base))


def test_undefined_polarity_is_rejected():
    cnf, _, variables = make(2)
    with pytest.raises(ValueError):
        cnf.generate_proxy(variables[0], variables[1], Polarity.UNDEFINED)


VARS3 = [var_edge(i) for i in (1, 2, 3)]


def assignments(n):
    for bits in product((False, True), repeat=n):
        yield bits, dict(zip(range(1, n + 1), bits))


@pytest.mark.parametrize("value", range(8))
def test_binary_constraint_matches_value(value):
    constraint = generate_binary_constraint(VARS3, value)
    for bits, assignment in assignments(3):
        assert evaluate(constraint, assignment) == (encoded(bits) == value)


@pytest.mark.parametrize("value", range(1, 8))
def test_lt_value_constraint(value):
    constraint = generate_lt_value_constraint(VARS3, value)
    for bits, assignment in assignments(3):
        assert evaluate(constraint, assignment) == (encoded(bits) < value)


def test_lt_value_zero_is_rejected():
    with pytest.raises(ValueError):
        generate_lt_value_constraint(VARS3, 0)


VARS_A = [var_edge(i) for i in (1, 2, 3)]
VARS_B = [var_edge(i) for i in (4, 5, 6)]


@pytest.mark.parametrize(
    "generate, relation",
    [
        (generate_equiv_constraint, lambda a, b: a == b),
        (generate_lt_constraint, lambda a, b: a < b),
        (generate_lte_constraint, lambda a, b: a <= b),
    ],
)
def test_comparison_constraints(generate, relation):
    constraint = generate(VARS_A, VARS_B)
    for bits, assignment in assignments(6):
        assert evaluate(constraint, assignment) == relation(encoded(bits[:3]), encoded(bits[3:]))


def test_empty_comparisons():
    assert generate_equiv_constraint([], []) == E_TRUE
    assert generate_lt_constraint([], []) == E_FALSE
    assert generate_lte_constraint([], []) == E_TRUE