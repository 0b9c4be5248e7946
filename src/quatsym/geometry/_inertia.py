from __future__ import annotations
from enum import Enum
from typing import Optional

import torch


class SymmetryClass(Enum):
    """Classification of a point set by degeneracy of its principal moments."""

    ASYMMETRIC = "asymmetric"  #: all three principal moments differ
    SYMMETRIC_TOP = "symmetric-top"  #: two principal moments coincide
    SPHERICAL = "spherical"  #: all principal moments coincide


def principal_moments(
    points: torch.Tensor, weights: Optional[torch.Tensor] = None
) -> torch.Tensor:
    """Principal moments of inertia (ascending) of `points` (N x 3) about their
    (weighted) centroid. Unit weights are used if `weights` is None."""
    if weights is None:
        weights = torch.ones(len(points), device=points.device, dtype=points.dtype)
    center = (weights @ points) / weights.sum()
    r = points - center
    r_sq = (r * r).sum(dim=-1)
    eye = torch.eye(3, device=points.device, dtype=points.dtype)
    inertia = (weights * r_sq).sum() * eye
    inertia -= torch.einsum("i, ia, ib -> ab", weights, r, r)
    return torch.linalg.eigvalsh(inertia)


def symmetry_class(moments: torch.Tensor, tolerance: float = 0.05) -> SymmetryClass:
    """Classify ascending principal `moments`: adjacent moments count as equal
    when their relative difference (a - b) / (a + b) is below `tolerance`."""
    i_a, i_b, i_c = moments.tolist()
    if i_c <= 0.0:
        return SymmetryClass.SPHERICAL  # single point: all moments vanish
    low_equal = (i_b - i_a) <= tolerance * (i_b + i_a)
    high_equal = (i_c - i_b) <= tolerance * (i_c + i_b)
    if low_equal and high_equal:
        return SymmetryClass.SPHERICAL
    if low_equal or high_equal:
        return SymmetryClass.SYMMETRIC_TOP
    return SymmetryClass.ASYMMETRIC
