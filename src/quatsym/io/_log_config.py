from __future__ import annotations
from typing import Optional, Union
import logging
import sys

import numpy as np
import torch

from quatsym import rc, log, MPI


def log_config(
    *,
    output_file: Optional[str] = None,
    mpi_log: Optional[str] = None,
    mpi_comm: Optional[MPI.Comm] = None,
    append: bool = True,
    verbose: bool = False,
) -> None:
    """Set up reporting from the `quatsym.log` logger. Until this is called,
    only warnings and errors are reported, from every process. Call this once
    at start-up, or configure `quatsym.log` directly for anything else.

    Parameters
    ----------
    output_file
        File for the log of the head process; None logs to stdout.
    mpi_log
        Prefix of per-process log files <mpi_log>.<rank> for the other
        processes; None silences them below warning level.
    mpi_comm
        Communicator defining the head process (default: COMM_WORLD).
    append
        Append to existing log files, instead of overwriting them.
    verbose
        Also report debug messages (every accepted rotation, cache statistics
        of the neighbor search), prefixed by module and line number.
    """
    rank = (mpi_comm or MPI.COMM_WORLD).Get_rank()
    if rank == 0:
        filename = output_file
    else:
        filename = f"{mpi_log}.{rank}" if mpi_log else None
    handler = get_handler(filename, "a" if append else "w")
    prefix = "[%(module)s:%(lineno)d] " if verbose else ""
    handler.setFormatter(logging.Formatter(prefix + "%(message)s"))
    log.handlers.clear()
    log.addHandler(handler)
    if rank == 0 or mpi_log:
        log.setLevel(logging.DEBUG if verbose else logging.INFO)
    else:
        log.setLevel(logging.WARNING)


def get_handler(filename: Optional[str], mode: str) -> logging.Handler:
    """File handler for `filename`, or a stdout handler if it is None."""
    if filename:
        return logging.FileHandler(filename, mode=mode)
    return logging.StreamHandler(sys.stdout)


def fmt(tensor: Union[torch.Tensor, np.ndarray], **kwargs) -> str:
    """Compact text for a tensor or array in log messages: 4 digits and small
    values suppressed by default. Other `kwargs` go to `numpy.array2string`."""
    if isinstance(tensor, torch.Tensor):
        tensor = tensor.detach().to(rc.cpu).numpy()
    options = dict(precision=4, suppress_small=True, separator=", ")
    options.update(kwargs)
    return np.array2string(tensor, **options)
