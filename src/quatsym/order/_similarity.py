"""Alignment-free comparison of point sets without residue correspondence."""
from __future__ import annotations

import torch


def superposition_distance(points1: torch.Tensor, points2: torch.Tensor) -> float:
    """Mean distance from each point (of either set) to its nearest point in
    the other set, averaged over both sets together. Zero for identical sets;
    the sets may differ in size but must not be empty."""
    if not (len(points1) and len(points2)):
        raise ValueError("Cannot compare empty point sets")
    dist = torch.cdist(points1, points2, compute_mode="donot_use_mm_for_euclid_dist")
    total = dist.min(dim=1).values.sum() + dist.min(dim=0).values.sum()
    return float(total.item()) / (len(points1) + len(points2))


def similarity(points1: torch.Tensor, points2: torch.Tensor) -> float:
    """Similarity in (0, 1] derived from `superposition_distance`,
    equal to 1 for identical sets and decreasing with distance."""
    return 1.0 / (1.0 + superposition_distance(points1, points2))
