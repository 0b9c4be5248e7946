from __future__ import annotations
from typing import Optional, Sequence

import torch

from quatsym.io import (
    InvalidInputException,
    TensorCompatible,
    cast_points,
)
from quatsym.geometry import SymmetryClass, principal_moments, symmetry_class


class Subunits:
    """Centers, atoms and sequence-cluster labels of the repeated subunits of an
    assembly. Two subunits can only be related by symmetry when their cluster
    ids match (unless pseudo-symmetry is allowed by the solver)."""

    centers: torch.Tensor  #: Subunit centers (n_subunits x 3)
    atoms: tuple[torch.Tensor, ...]  #: Atom coordinates of each subunit (n_atoms x 3)
    cluster_ids: tuple[int, ...]  #: Sequence-cluster id of each subunit

    def __init__(
        self,
        *,
        centers: Optional[TensorCompatible] = None,
        atoms: Optional[Sequence[TensorCompatible]] = None,
        cluster_ids: Optional[Sequence[int]] = None,
    ) -> None:
        """Initialize from subunit `centers` and/or per-subunit `atoms`.

        Parameters
        ----------
        centers
            Center of each subunit (n_subunits x 3).
            Defaults to the mean atom position of each subunit in `atoms`.
        atoms
            Coordinates of the atoms (eg. C-alpha trace) of each subunit,
            used to score candidate symmetry operations beyond the centers.
            Defaults to each subunit represented by its center alone.
        cluster_ids
            Sequence-cluster id of each subunit. Defaults to all equal.
        """
        if centers is None and atoms is None:
            raise InvalidInputException("At least one of centers, atoms must be given")
        if atoms is not None:
            self.atoms = tuple(
                cast_points(a, name=f"atoms[{i}]") for i, a in enumerate(atoms)
            )
            if any(not len(a) for a in self.atoms):
                raise InvalidInputException("Every subunit needs at least one atom")
        if centers is None:
            self.centers = torch.stack([a.mean(dim=0) for a in self.atoms])
        else:
            self.centers = cast_points(centers, name="centers")
        n_subunits = len(self.centers)
        if not n_subunits:
            raise InvalidInputException("Need at least one subunit")
        if atoms is None:
            self.atoms = tuple(center.view(1, 3).clone() for center in self.centers)
        if len(self.atoms) != n_subunits:
            raise InvalidInputException(
                f"Got atoms for {len(self.atoms)} subunits, but {n_subunits} centers"
            )
        if cluster_ids is None:
            cluster_ids = [0] * n_subunits
        self.cluster_ids = tuple(int(c) for c in cluster_ids)
        if len(self.cluster_ids) != n_subunits:
            raise InvalidInputException(
                f"Got {len(self.cluster_ids)} cluster ids for {n_subunits} subunits"
            )
        for t in (self.centers, *self.atoms):
            if not torch.isfinite(t).all():
                raise InvalidInputException("Subunit coordinates must be finite")

    @property
    def n_subunits(self) -> int:
        return len(self.centers)

    @property
    def centroid(self) -> torch.Tensor:
        """Mean of subunit centers."""
        return self.centers.mean(dim=0)

    @property
    def centered(self) -> torch.Tensor:
        """Subunit centers relative to `centroid`."""
        return self.centers - self.centroid

    def moments_of_inertia(self) -> torch.Tensor:
        """Principal moments (ascending) of the unit-mass subunit centers."""
        return principal_moments(self.centers)

    def symmetry_class(self, tolerance: float = 0.05) -> SymmetryClass:
        """Asymmetric / symmetric-top / spherical class of the subunit centers."""
        return symmetry_class(self.moments_of_inertia(), tolerance)
