"""Clause streaming to an external SAT solver process.

The solver program reads native-endian 32-bit integers on its standard
input: clauses terminated by ``0``, an empty clause ending the clause
section, and then the commands :attr:`SolverResult.FREEZE` (followed by a
variable) and :attr:`SolverResult.RUNSOLVER`.  It answers on file
descriptor :data:`IS_OUT_FD` with a status, a variable count and one value
per variable.  Its standard output goes to :data:`LOG_FILE`.
"""

from __future__ import annotations

import os
import select
import struct
import subprocess
from enum import IntEnum
from typing import Iterable, Sequence

IS_OUT_FD = 3
IS_BUFFERSIZE = 1024
NOTIMEOUT = -1
DEFAULT_COMMAND = "sat_solver"
LOG_FILE = "log_file"

_INT = struct.Struct("=i")


class SolverResult(IntEnum):
    UNSAT = 0
    SAT = 1
    INDETER = 2
    FREEZE = 3
    RUNSOLVER = 4


class SolverError(RuntimeError):
    """Raised when talking to the solver process fails."""


class IncrementalSolver:
    """A running solver process fed with clauses through a buffered pipe.

    ``timeout`` is the number of seconds to wait for an answer; a negative
    value or ``None`` waits without limit.
    """

    def __init__(
        self,
        command: str | os.PathLike | Sequence[str] = DEFAULT_COMMAND,
        timeout: float | None = NOTIMEOUT,
    ) -> None:
        if isinstance(command, (str, os.PathLike)):
            self.command = [os.fspath(command)]
        else:
            self.command = [os.fspath(part) for part in command]
        self.timeout = timeout
        self._buffer: list[int] = []
        self._solution: list[int] = [0]
        self._process: subprocess.Popen | None = None
        self._from_solver_fd: int | None = None
        self._start()

    def _start(self) -> None:
        read_fd, write_fd = os.pipe()

        def redirect_output() -> None:
            if write_fd != IS_OUT_FD:
                os.dup2(write_fd, IS_OUT_FD)
            else:
                os.set_inheritable(IS_OUT_FD, True)

        try:
            log_fd = os.open(LOG_FILE, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o700)
            try:
                self._process = subprocess.Popen(
                    self.command,
                    stdin=subprocess.PIPE,
                    stdout=log_fd,
                    close_fds=False,
                    preexec_fn=redirect_output,
                )
            finally:
                os.close(log_fd)
        except BaseException:
            os.close(read_fd)
            raise
        finally:
            os.close(write_fd)
        self._from_solver_fd = read_fd

    def _kill(self) -> None:
        process = self._process
        if process is not None and process.stdin is not None:
            try:
                process.stdin.close()
            except OSError:
                pass
        if self._from_solver_fd is not None:
            os.close(self._from_solver_fd)
            self._from_solver_fd = None
        if process is not None:
            if process.poll() is None:
                process.kill()
            process.wait()
        self._process = None

    def add_clause_literal(self, literal: int) -> None:
        """Queue one integer for the solver."""
        self._buffer.append(literal)
        if len(self._buffer) >= IS_BUFFERSIZE:
            self.flush()

    def add_clause(self, literals: Iterable[int]) -> None:
        """Queue a whole clause followed by its terminating zero."""
        self._buffer.extend(literals)
        self._buffer.append(0)
        if len(self._buffer) >= IS_BUFFERSIZE:
            self.flush()

    def finished_clauses(self) -> None:
        """End the clause section with an empty clause."""
        self.add_clause_literal(0)

    def freeze(self, variable: int) -> None:
        self.add_clause_literal(SolverResult.FREEZE)
        self.add_clause_literal(variable)

    def solve(self) -> SolverResult:
        self.start_solve()
        return self.get_solution()

    def start_solve(self) -> None:
        self.add_clause_literal(SolverResult.RUNSOLVER)
        self.flush()

    def get_solution(self) -> SolverResult:
        """Read the solver's answer; on timeout return ``INDETER``."""
        status = self._read_status()
        if status == SolverResult.INDETER:
            return SolverResult.INDETER
        try:
            result = SolverResult(status)
        except ValueError:
            raise SolverError(f"unexpected solver status {status}") from None
        count = self._read_int()
        data = self._read_exact(count * _INT.size)
        self._solution = [0, *struct.unpack(f"={count}i", data)]
        return result

    def get_value(self, variable: int) -> bool:
        return bool(self._solution[variable])

    def reset(self) -> None:
        """Discard queued clauses and restart the solver process."""
        self._kill()
        self._buffer.clear()
        self._start()

    def flush(self) -> None:
        """Write all queued integers to the solver."""
        process = self._process
        if process is None or process.stdin is None:
            raise SolverError("solver is closed")
        if self._buffer:
            data = struct.pack(f"={len(self._buffer)}i", *self._buffer)
            try:
                process.stdin.write(data)
                process.stdin.flush()
            except OSError as error:
                raise SolverError(f"write to solver failed: {error}") from error
        self._buffer.clear()

    def close(self) -> None:
        self._kill()

    def __enter__(self) -> "IncrementalSolver":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _read_status(self) -> int:
        if self._from_solver_fd is None:
            raise SolverError("solver is closed")
        wait = None if self.timeout is None or self.timeout < 0 else self.timeout
        ready, _, _ = select.select([self._from_solver_fd], [], [], wait)
        if not ready:
            return SolverResult.INDETER
        return self._read_int()

    def _read_int(self) -> int:
        return _INT.unpack(self._read_exact(_INT.size))[0]

    def _read_exact(self, size: int) -> bytes:
        if self._from_solver_fd is None:
            raise SolverError("solver is closed")
        chunks: list[bytes] = []
        remaining = size
        while remaining > 0:
            chunk = os.read(self._from_solver_fd, remaining)
            if not chunk:
                raise SolverError("solver closed its output")
            chunks.append(chunk)
            remaining -= len(chunk)
        return b"".join(chunks)