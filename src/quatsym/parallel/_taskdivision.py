from __future__ import annotations
from typing import Optional, Sequence, TypeVar

import numpy as np

from quatsym import log, MPI
from quatsym.utils import ceildiv


T = TypeVar("T")


class TaskDivision:
    """Contiguous blocks of independent tasks (such as candidate rotation orders)
    assigned to the processes of a communicator, in rank order."""

    n_tot: int  #: Total number of tasks over all processes
    n_procs: int  #: Number of processes to split over
    i_proc: int  #: Rank of current process
    n_each: int  #: Number of tasks on each process (till we run out)
    n_prev: np.ndarray  #: Cumulative task counts (n_procs+1 ints)
    i_start: int  #: Task start index on current process
    i_stop: int  #: Task stop index on current process
    n_mine: int  #: Number of tasks on current process

    def __init__(
        self, *, n_tot: int, n_procs: int, i_proc: int, name: Optional[str] = None
    ) -> None:
        """Split `n_tot` tasks into `n_procs` blocks of (at most) `n_each`.
        If `name` is given, log the block size and resulting load imbalance."""
        self.n_tot = n_tot
        self.n_procs = n_procs
        self.i_proc = i_proc
        self.n_each = max(1, ceildiv(n_tot, n_procs))
        self.n_prev = np.minimum(n_tot, self.n_each * np.arange(n_procs + 1))
        self.i_start = int(self.n_prev[i_proc])
        self.i_stop = int(self.n_prev[i_proc + 1])
        self.n_mine = self.i_stop - self.i_start
        if name:
            imbalance = 100.0 * (1.0 - n_tot / (self.n_each * n_procs))
            log.info(
                f"{name} division:  n_tot: {n_tot}  "
                f"n_each: {self.n_each}  imbalance: {imbalance:.0f}%"
            )

    @classmethod
    def over(
        cls, n_tot: int, comm: Optional[MPI.Comm], name: Optional[str] = None
    ) -> TaskDivision:
        """Divide `n_tot` tasks over `comm`, or keep all locally if `comm` is None."""
        if comm is None:
            return cls(n_tot=n_tot, n_procs=1, i_proc=0, name=name)
        return cls(n_tot=n_tot, n_procs=comm.size, i_proc=comm.rank, name=name)

    def whose(self, i: int) -> int:
        """Rank of the process that owns task `i`."""
        return i // self.n_each

    def is_mine(self, i: int) -> bool:
        """Whether task `i` belongs to this process."""
        return self.i_start <= i < self.i_stop

    def mine(self, tasks: Sequence[T]) -> Sequence[T]:
        """Select the local share of `tasks` (which must have length `n_tot`)."""
        assert len(tasks) == self.n_tot
        return tasks[self.i_start : self.i_stop]


def gather_ordered(results: list[T], comm: Optional[MPI.Comm]) -> list[T]:
    """Concatenate per-process `results` from all of `comm` in rank order.
    Combined with `TaskDivision`, this restores the serial task order."""
    if comm is None or comm.size == 1:
        return list(results)
    return [result for chunk in comm.allgather(results) for result in chunk]
