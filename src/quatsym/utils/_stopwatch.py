from __future__ import annotations
from typing import ClassVar, Optional
import functools
import time

import numpy as np
import torch

from quatsym import rc, log


class StopWatch:
    """Wall-clock profiler for named blocks of code.
    Construct a StopWatch at the start of a block and `stop` it at the end,
    use it as a context manager, or wrap whole functions with `stopwatch`.
    Durations accumulate per name over the run; `print_stats` logs a summary."""

    __slots__ = ["name", "t_start"]
    name: str  #: Name under which durations are collected
    t_start: Optional[float]  #: Start of the running interval (None once stopped)

    _stats: ClassVar[dict[str, list[float]]] = {}  #: Durations by name

    def __init__(self, name: str) -> None:
        self.name = name
        self.t_start = self._now()

    @staticmethod
    def _now() -> float:
        if rc.use_cuda:
            torch.cuda.synchronize()  # include queued GPU work
        return time.time()

    def stop(self) -> None:
        """Record the elapsed time (only the first call after start counts)."""
        if self.t_start is None:
            return
        self._stats.setdefault(self.name, []).append(self._now() - self.t_start)
        self.t_start = None

    def __enter__(self) -> StopWatch:
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    @classmethod
    def reset(cls) -> None:
        """Discard all collected durations."""
        cls._stats.clear()

    @classmethod
    def n_calls(cls, name: str) -> int:
        """Number of durations recorded under `name`."""
        return len(cls._stats.get(name, []))

    @classmethod
    def print_stats(cls) -> None:
        """Log median, median absolute deviation, count and total per name."""
        log.info("")
        t_total = 0.0
        n_total = 0
        for name, durations in sorted(cls._stats.items()):
            t = np.array(durations)
            t_mid = np.median(t)
            t_mad = np.median(abs(t - t_mid))
            t_total += t.sum()
            n_total += len(t)
            log.info(
                f"StopWatch: {name:30s}  {t_mid:10.6f} +/- {t_mad:10.6f}"
                f" s, {len(t):4d} calls, {t.sum():10.6f} s total"
            )
        log.info(
            f'StopWatch: {"Total":30s}    {"-"*25} {n_total:5d}'
            f" calls, {t_total:10.6f} s total"
        )


def stopwatch(_func=None, *, name: Optional[str] = None):
    """Decorator timing every call of a function with `StopWatch`, under the
    function's `__qualname__` or `name` if given (`@stopwatch(name=...)`).
    Calls that raise are timed as well."""

    def decorate(func):
        watch_name = func.__qualname__ if name is None else name

        @functools.wraps(func)
        def timed(*args, **kwargs):
            with StopWatch(watch_name):
                return func(*args, **kwargs)

        return timed

    return decorate if _func is None else decorate(_func)
