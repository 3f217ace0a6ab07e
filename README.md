# satbackend

Building blocks for turning Boolean constraints into CNF clauses and handing
them to an external SAT solver program.

## Modules

- `satbackend.cnfexpr`: `LitVector` and `CNFExpr`, a small algebra of CNF
  expressions over integer literals. A literal is a non-zero integer, and a
  negative sign marks negation. `CNFExpr` supports `conjoin_literal`,
  `disjoin_literal`, `conjoin` and `disjoin`, along with `always_true`,
  `always_false` and `clause_count`. `str()` renders an expression as text.
- `satbackend.edges`: constraint graphs made of `Edge` values that point at
  variables, at the constant true, or at `Node`s of type `NodeType.AND`,
  `ITE` or `IFF`. The constructors `constraint_and`, `constraint_or`,
  `constraint_and2`, `constraint_or2`, `constraint_implies`,
  `constraint_iff`, `constraint_xor` and `constraint_ite` simplify as they
  build. They fold constants, remove duplicates and collapse contradictions
  to false. `var_edge`, `create_node` and `clone_edge` make and copy edges.
  `format_edge` prints a graph as a prefix expression, with negated ANDs
  shown as `or(...)`. `E_TRUE`, `E_FALSE` and `E_NULL` are the constant and
  null edges.
- `satbackend.cnf`: `CNF` numbers variables (`new_var`) and flattens graphs
  into clauses (`simplify`). Where distributing a disjunction would grow too
  large, it introduces proxy variables. It sends clauses to a solver
  (`add_constraint`, `add_clause`, `output_cnf`, `output_cnf_or`,
  `generate_proxy`), then solves and reads the model (`solve`, `get_value`).
  `Polarity` selects which directions of a proxy equivalence are emitted.
  The module also provides helpers for bit-vector encodings:
  - `generate_binary_constraint`
  - `generate_lt_value_constraint`
  - `generate_equiv_constraint`
  - `generate_lt_constraint`
  - `generate_lte_constraint`
- `satbackend.inc_solver`: `IncrementalSolver`, which starts a solver
  program and streams clauses to it through a buffered pipe. `SolverResult`
  names the status codes and commands. `SolverError` reports failures.
- `satbackend.orderpair`: `OrderPair`, a pair of items with the edge stating
  that `first` precedes `second`, and `OrderElement`, an item compared and
  hashed by its value alone.

## Installing

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
from satbackend.cnfexpr import CNFExpr

expr = CNFExpr.from_literal(1)
expr.disjoin_literal(2)
expr.conjoin_literal(-3)
print(expr)  # -3 ^ (1 v 2)
```

```python
from satbackend.edges import var_edge, constraint_and2, constraint_or2, format_edge

a, b, c = var_edge(1), var_edge(2), var_edge(3)
formula = constraint_and2(constraint_or2(a, b), c.negate())
print(format_edge(formula))  # and(-3 or(1 2))
```

## Solving

`IncrementalSolver(command="sat_solver", timeout=-1)` runs the given
program. The default is one named `sat_solver` on the `PATH`. The
connection works as follows:

- Clauses go to the program's standard input as native-endian 32-bit
  integers, and each clause ends with `0`.
- The program answers on file descriptor 3 with a status, a variable count
  and one value per variable.
- The program's standard output is written to a file named `log_file` in the
  current directory.

A negative `timeout` (or `None`) waits without limit. When the timeout runs
out, `solve` returns `SolverResult.INDETER`. The solver is a context manager
and stops the process on exit.

```python
from satbackend.cnf import CNF
from satbackend.edges import constraint_or2
from satbackend.inc_solver import IncrementalSolver, SolverResult

with IncrementalSolver() as solver:
    cnf = CNF(solver)
    x, y = cnf.new_var(), cnf.new_var()
    cnf.add_constraint(constraint_or2(x, y))
    cnf.add_constraint(x.negate())
    solver.finished_clauses()
    if cnf.solve() == SolverResult.SAT:
        print(cnf.get_value(y))
```

## What it does not do

- The package contains no SAT solver of its own. Solving needs an external
  program that speaks the integer protocol described above.
- The solver interface uses POSIX pipes and file descriptors, so it runs
  only on POSIX systems.
- There is no higher-level modelling layer. Sets, elements, functions,
  predicates and orders are not encoded for you. Only the graph, clause and
  pair building blocks described here are provided.
- There is no command-line program.