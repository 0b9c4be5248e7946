from __future__ import annotations
from typing import Sequence

import torch

from quatsym.geometry import transform_points
from ._subunits import Subunits


class SuperpositionScorer:
    """Whole-structure quality of a candidate symmetry operation, evaluated on
    the atoms of each subunit rather than just the subunit centers."""

    GTS_CUTOFFS: tuple[float, ...] = (1.0, 2.0, 4.0, 8.0)  #: Distance cutoffs in A

    subunits: Subunits

    def __init__(self, subunits: Subunits) -> None:
        self.subunits = subunits

    def fit_score(
        self, transformation: torch.Tensor, permutation: Sequence[int]
    ) -> float:
        """Global distance test score of the worst-fitting subunit (0 to 100).
        For each subunit i, its atoms after `transformation` are compared with
        the atoms of subunit `permutation[i]` over their common leading atoms;
        the score is 100 times the fraction of atoms within each of
        `GTS_CUTOFFS`, averaged over cutoffs."""
        cutoffs = torch.tensor(self.GTS_CUTOFFS, device=transformation.device)
        worst = 100.0
        for i, j in enumerate(permutation):
            moved = transform_points(transformation, self.subunits.atoms[i])
            target = self.subunits.atoms[j]
            n_common = min(len(moved), len(target))
            dist = (moved[:n_common] - target[:n_common]).norm(dim=-1)
            within = (dist[:, None] <= cutoffs[None, :]).to(dist.dtype)
            worst = min(worst, 100.0 * float(within.mean().item()))
        return worst

    def full_atom_rmsd(
        self, transformation: torch.Tensor, permutation: Sequence[int]
    ) -> float:
        """RMSD over all atoms of all subunits after `transformation`, each
        subunit i compared with subunit `permutation[i]`. Returns -1.0 if any
        mapped pair differs in atom count, meaning the subunits are not
        equivalent (pseudo-symmetry) and no atom-level RMSD exists."""
        sum_sq = 0.0
        n_atoms = 0
        for i, j in enumerate(permutation):
            moved = transform_points(transformation, self.subunits.atoms[i])
            target = self.subunits.atoms[j]
            if len(moved) != len(target):
                return -1.0
            sum_sq += float((moved - target).square().sum().item())
            n_atoms += len(moved)
        return (sum_sq / n_atoms) ** 0.5
