from __future__ import annotations
import math

import torch

from quatsym import log


Cell = tuple[int, int, int]


class DistanceBox:
    """Bucketed neighbor lookup over a fixed set of points.
    Points are hashed into cubic cells with edge equal to the search `threshold`,
    so that every point within `threshold` of a query lies in one of the 27 cells
    surrounding the query's cell. Candidate lists are cached per query cell,
    which pays off when the same neighborhoods are queried repeatedly, as in a
    rotation search over many candidate transformations of one point set."""

    points: torch.Tensor  #: Indexed point set (N x 3)
    threshold: float  #: Neighbor search radius (inclusive)
    n_queries: int  #: Number of `neighbors` queries so far
    n_cache_hits: int  #: Number of queries answered from the candidate cache
    _cells: dict[Cell, list[int]]  #: Point indices in each occupied cell
    _cache: dict[Cell, torch.Tensor]  #: Candidate indices around each queried cell

    def __init__(self, points: torch.Tensor, threshold: float) -> None:
        if not (math.isfinite(threshold) and threshold > 0.0):
            raise ValueError(
                f"DistanceBox threshold must be positive (got {threshold})"
            )
        self.points = points
        self.threshold = threshold
        self.n_queries = 0
        self.n_cache_hits = 0
        self._cells = {}
        for i_point, cell in enumerate(self.cells_of(points)):
            self._cells.setdefault(cell, []).append(i_point)
        self._cache = {}

    def cells_of(self, points: torch.Tensor) -> list[Cell]:
        """Integer cell coordinates of each of `points` (N x 3)."""
        indices = torch.floor(points / self.threshold).to(torch.long)
        return [tuple(cell) for cell in indices.tolist()]

    def candidates(self, cell: Cell) -> torch.Tensor:
        """Indices of points in the 27 cells around `cell` (sorted)."""
        result = self._cache.get(cell)
        if result is not None:
            self.n_cache_hits += 1
            return result
        ix, iy, iz = cell
        found: list[int] = []
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                for dz in (-1, 0, 1):
                    found.extend(self._cells.get((ix + dx, iy + dy, iz + dz), ()))
        result = torch.tensor(
            sorted(found), dtype=torch.long, device=self.points.device
        )
        self._cache[cell] = result
        return result

    def neighbors(self, point: torch.Tensor) -> torch.Tensor:
        """Indices of all points within `threshold` of `point` (sorted)."""
        return self._neighbors(point, self.cells_of(point.view(1, 3))[0])

    def neighbors_each(self, points: torch.Tensor) -> list[torch.Tensor]:
        """`neighbors` for each row of `points` (N x 3), sharing one cell lookup."""
        return [
            self._neighbors(point, cell)
            for point, cell in zip(points, self.cells_of(points))
        ]

    def _neighbors(self, point: torch.Tensor, cell: Cell) -> torch.Tensor:
        self.n_queries += 1
        candidates = self.candidates(cell)
        if not len(candidates):
            return candidates
        dist_sq = (self.points[candidates] - point).square().sum(dim=-1)
        return candidates[dist_sq <= self.threshold**2]

    def clear_cache(self) -> None:
        """Forget cached candidate lists (eg. between independent search passes)."""
        if self._cache:
            log.debug(
                f"DistanceBox: {self.n_queries} queries,"
                f" {self.n_cache_hits} answered from {len(self._cache)} cached cells"
            )
        self._cache.clear()
