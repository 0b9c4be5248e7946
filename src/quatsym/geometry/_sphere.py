from __future__ import annotations
import math

import torch

from quatsym import rc


class SphereSampler:
    """Deterministic, roughly uniform set of directions on the unit sphere.
    Directions lie on a golden-angle (Fibonacci) spiral running from the north
    to the south pole, so that both hemispheres are covered equally and the
    `i`-th direction depends only on `i` and `axis_count`."""

    GOLDEN_ANGLE: float = math.pi * (3.0 - math.sqrt(5.0))  #: Azimuthal increment

    axis_count: int  #: Number of sampled directions
    _axes: torch.Tensor  #: All directions (axis_count x 3)

    def __init__(self, axis_count: int = 1000) -> None:
        if axis_count < 1:
            raise ValueError(f"axis_count must be positive (got {axis_count})")
        self.axis_count = axis_count
        self._axes = torch.tensor(
            [self._direction(i) for i in range(axis_count)], device=rc.device
        )

    def _direction(self, i: int) -> tuple[float, float, float]:
        z = 1.0 - (2 * i + 1) / self.axis_count
        r = math.sqrt(max(0.0, 1.0 - z * z))
        phi = (i * self.GOLDEN_ANGLE) % (2.0 * math.pi)
        return (r * math.cos(phi), r * math.sin(phi), z)

    def axis(self, i: int) -> torch.Tensor:
        """Unit vector of the `i`-th sampled direction."""
        if not 0 <= i < self.axis_count:
            raise IndexError(f"Axis index {i} out of range [0, {self.axis_count})")
        return self._axes[i]

    def axes(self) -> torch.Tensor:
        """All sampled directions (axis_count x 3)."""
        return self._axes.clone()

    def __len__(self) -> int:
        return self.axis_count
