"""Least-squares rigid superposition of index-aligned point sets (Kabsch)."""
from __future__ import annotations

import torch

from ._transform import homogeneous, axis_angle


def superpose_at_origin(
    moving: torch.Tensor, fixed: torch.Tensor
) -> tuple[torch.Tensor, tuple[torch.Tensor, float]]:
    """Optimal rigid superposition of `moving` onto `fixed` (both N x 3,
    corresponding by index), minimizing the sum of squared distances.

    Returns
    -------
    transform
        4 x 4 rigid transform mapping `moving` onto `fixed`. For two permuted
        copies of the same centered set, this is a pure rotation about the
        shared centroid at the origin.
    axis_angle
        Axis (unit 3-vector) and angle (radians, in [0, pi]) of its rotation.
    """
    if moving.shape != fixed.shape:
        raise ValueError(
            f"Cannot superpose point sets of shapes {tuple(moving.shape)}"
            f" and {tuple(fixed.shape)}"
        )
    center_moving = moving.mean(dim=0)
    center_fixed = fixed.mean(dim=0)
    covariance = (moving - center_moving).T @ (fixed - center_fixed)
    U, _, Vh = torch.linalg.svd(covariance)
    # Correct for reflection, so that det(rot) = +1:
    d = torch.sign(torch.linalg.det(Vh.T @ U.T))
    D = torch.diag(torch.stack((torch.ones_like(d), torch.ones_like(d), d)))
    rot = Vh.T @ D @ U.T
    transform = homogeneous(rot, center_fixed - rot @ center_moving)
    return transform, axis_angle(rot)


def rmsd(a: torch.Tensor, b: torch.Tensor) -> float:
    """Root-mean-square distance between index-aligned points of `a` and `b`."""
    if a.shape != b.shape:
        raise ValueError(f"Shape mismatch {tuple(a.shape)} vs {tuple(b.shape)}")
    return float((a - b).square().sum(dim=-1).mean().sqrt().item())
