"""Constraint graphs, CNF conversion and a pipe interface to an external SAT solver."""

__version__ = "0.1.0"
__all__ = ["cnfexpr", "edges", "inc_solver", "cnf", "orderpair"]