"""Run configuration: MPI communicator, torch device and threads of this process.
On import, every process of `mpi4py.MPI.COMM_WORLD` computes on one CPU thread in
double precision. `init` then assigns threads (and optionally a GPU) from the
environment: SLURM_CPUS_PER_TASK when run under slurm, otherwise an equal share
of the physical cores of the node. Symmetry searches work on small tensors, so
a GPU is only used when QUATSYM_USE_CUDA=1 is set.
"""
# List exported symbols for doc generation
__all__ = (
    "MPI",
    "comm",
    "i_proc",
    "n_procs",
    "is_head",
    "cpu",
    "device",
    "use_cuda",
    "init",
    "clock",
    "report_end",
)

import os
import time
import datetime
from typing import Optional

import numpy as np
import torch
from psutil import cpu_count
from mpi4py import MPI

from quatsym import log


comm: MPI.Comm = MPI.COMM_WORLD  #: Communicator shared by all QuatSym processes
i_proc: int = comm.rank  #: Rank within `comm`
n_procs: int = comm.size  #: Size of `comm`
is_head: bool = i_proc == 0  #: Whether this process reports results
cpu: torch.device = torch.device("cpu")  #: CPU torch device
device: torch.device = cpu  #: Device on which tensors are created
use_cuda: bool = False  #: Whether `device` is a CUDA GPU
t_start: float = time.time()  #: Reference time of `clock` (reset by `init`)

torch.set_default_dtype(torch.float64)
torch.set_num_threads(1)  # until init divides the cores between processes


def init(
    *, comm_override: Optional[MPI.Comm] = None, cores_override: Optional[int] = None
) -> None:
    """Assign hardware to this process and report the totals over `comm`.
    Collective: every process of `comm` must call it.

    Parameters
    ----------
    comm_override
        Communicator to use instead of `mpi4py.MPI.COMM_WORLD`.
    cores_override
        Number of torch threads per process, instead of the value derived
        from SLURM_CPUS_PER_TASK or from the physical cores of the node.
    """
    global t_start, comm, i_proc, n_procs, is_head, device, use_cuda
    t_start = time.time()
    log.info(f"Start time: {time.ctime(t_start)}")
    if comm_override:
        comm = comm_override
        i_proc = comm.rank
        n_procs = comm.size
        is_head = i_proc == 0

    use_cuda = torch.cuda.is_available() and (
        os.environ.get("QUATSYM_USE_CUDA", "0").lower() in {"1", "yes"}
    )
    device = torch.device("cuda:0") if use_cuda else cpu

    n_threads = cores_override or _threads_from_environment()
    torch.set_num_threads(n_threads)

    totals = np.array([n_threads, int(use_cuda)])
    comm.Allreduce(MPI.IN_PLACE, totals, op=MPI.SUM)
    log.info(
        f"Run totals: {n_procs} processes, {totals[0]} threads, {totals[1]} GPUs"
    )


def _threads_from_environment() -> int:
    slurm_threads = os.environ.get("SLURM_CPUS_PER_TASK")
    if slurm_threads:
        return int(slurm_threads)
    # Share physical cores equally between processes on this node:
    comm_node = comm.Split_type(MPI.COMM_TYPE_SHARED)
    n_cores = cpu_count(logical=False) or 1
    i_node, n_node = comm_node.Get_rank(), comm_node.Get_size()
    comm_node.Free()
    return max(1, ((i_node + 1) * n_cores) // n_node - (i_node * n_cores) // n_node)


def clock() -> float:
    """Seconds elapsed since `init` (or import, if `init` was not called)."""
    return time.time() - t_start


def report_end() -> None:
    """Log the end time and total duration of the run."""
    t_stop = time.time()
    duration = datetime.timedelta(seconds=t_stop - t_start)
    log.info(f"\nEnd time: {time.ctime(t_stop)} (Duration: {duration})")
