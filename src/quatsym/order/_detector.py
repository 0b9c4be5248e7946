from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional
import math

import torch

from quatsym import log, MPI
from quatsym.io import InvalidInputException, TensorCompatible, cast_points
from quatsym.parallel import TaskDivision, gather_ordered
from quatsym.utils import stopwatch
from ._axis import RotationAxis
from ._similarity import similarity


class OrderDetectionFailed(Exception):
    """Order of a rotation axis could not be determined (order unknown).
    The underlying geometric or numerical failure is chained as `__cause__`."""


@dataclass
class OrderResult:
    """Outcome of `RotationOrderDetector.calculate_order`."""

    order: Optional[int]  #: Detected order, or None if detection failed
    scores: dict[int, float] = field(default_factory=dict)  #: Score by order
    error: Optional[OrderDetectionFailed] = None  #: Failure, if any

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> int:
        """Detected order, raising the failure if detection failed."""
        if self.error is not None:
            raise self.error
        assert self.order is not None
        return self.order


class RotationOrderDetector:
    """Brute-force order of a rotation axis, from how self-similar a structure
    stays under rotations by 2 pi / k for each candidate order k."""

    max_order: int  #: Highest order tried
    min_score: float  #: Minimum similarity (0 to 1) to accept an order above 1
    tie_tolerance: float  #: Scores this close to the best favor higher orders
    comm: Optional[MPI.Comm]  #: Processes to split candidate orders over

    def __init__(
        self,
        max_order: int = 8,
        min_score: float = 0.5,
        *,
        tie_tolerance: float = 1e-3,
        comm: Optional[MPI.Comm] = None,
    ) -> None:
        """Configure order detection.

        Parameters
        ----------
        max_order
            Highest rotation order to test.
        min_score
            Minimum self-similarity at every non-trivial rotation step of an
            order, for that order to be reported instead of 1.
        tie_tolerance
            Orders scoring within this of the best score are considered equally
            good, and the highest of them is reported. A true 6-fold axis is also
            a perfect 2- and 3-fold axis, so ties are the rule and not the
            exception.
        comm
            Communicator to divide candidate orders over; all processes must
            call `calculate_order` collectively. Default None runs serially.
        """
        if max_order < 1:
            raise ValueError(f"max_order must be positive (got {max_order})")
        self.max_order = max_order
        self.min_score = min_score
        self.tie_tolerance = tie_tolerance
        self.comm = comm

    @stopwatch(name="RotationOrderDetector.scores")
    def scores(self, axis: RotationAxis, atoms: torch.Tensor) -> dict[int, float]:
        """Worst similarity over the k - 1 non-trivial rotation steps of each
        order k in 2 .. `max_order`, keyed by order."""
        if not (torch.isfinite(atoms).all() and torch.isfinite(axis.point).all()):
            raise ValueError("Atoms and rotation axis must be finite")
        orders = list(range(2, self.max_order + 1))
        division = TaskDivision.over(len(orders), self.comm)
        local = [self.order_score(axis, atoms, k) for k in division.mine(orders)]
        return dict(zip(orders, gather_ordered(local, self.comm)))

    def order_score(self, axis: RotationAxis, atoms: torch.Tensor, order: int) -> float:
        """Worst similarity to `atoms` over repeated rotations by 2 pi / `order`."""
        angle = 2.0 * math.pi / order
        rotated = atoms  # fresh working copy for each order
        worst = math.inf
        for _ in range(1, order):
            rotated = axis.rotate(rotated, angle)
            score = similarity(atoms, rotated)
            if not math.isfinite(score):
                raise ValueError(f"Non-finite similarity {score} for order {order}")
            worst = min(worst, score)
        return worst

    def best_order(self, scores: dict[int, float]) -> int:
        """Highest order scoring above `min_score` and within `tie_tolerance` of
        the best score, or 1 if no order clears `min_score`."""
        eligible = {k: s for k, s in scores.items() if s > self.min_score}
        if not eligible:
            return 1
        best_score = max(eligible.values())
        threshold = best_score - self.tie_tolerance
        return max(k for k, s in eligible.items() if s >= threshold)

    def calculate_order(
        self, axis: RotationAxis, atoms: TensorCompatible
    ) -> OrderResult:
        """Order of `axis` for the structure with coordinates `atoms` (N x 3).
        Failures are returned in `OrderResult.error`, never as order 1."""
        try:
            points = cast_points(atoms, name="atoms")
            scores = self.scores(axis, points)
        except (InvalidInputException, ValueError, RuntimeError, IndexError) as err:
            failure = OrderDetectionFailed(f"Order detection failed: {err}")
            failure.__cause__ = err
            log.warning(str(failure))
            return OrderResult(order=None, error=failure)
        order = self.best_order(scores)
        log.info(
            f"Rotation order {order} for {axis} (scores: "
            + ", ".join(f"{k}: {s:.3f}" for k, s in scores.items())
            + ")"
        )
        return OrderResult(order=order, scores=scores)
