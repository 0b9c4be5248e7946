from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Optional, Sequence

import torch

from quatsym import log
from quatsym.io import fmt
from ._permutation import Permutation


@dataclass(frozen=True, eq=False)
class Rotation:
    """One verified symmetry operation of a set of subunits.
    Holds its own copies of all tensors, so it does not change with the solver."""

    permutation: Permutation  #: Subunit i is mapped onto subunit permutation[i]
    transformation: torch.Tensor  #: Rigid transform (4 x 4) in original coordinates
    axis: torch.Tensor  #: Unit rotation axis (3,)
    angle: float  #: Rotation angle in radians, in [0, pi]
    subunit_rmsd: float  #: RMSD of superposed subunit centers
    fit_score: float  #: Worst per-subunit global distance test score (0 to 100)
    fold: int  #: Order of the operation (1 for the identity)

    @classmethod
    def create(
        cls,
        permutation: Sequence[int],
        transformation: torch.Tensor,
        axis: torch.Tensor,
        angle: float,
        subunit_rmsd: float,
        fit_score: float,
        fold: int,
    ) -> Rotation:
        """Construct with defensive copies of the permutation and tensors."""
        return cls(
            permutation=tuple(int(i) for i in permutation),
            transformation=transformation.detach().clone(),
            axis=axis.detach().clone(),
            angle=float(angle),
            subunit_rmsd=float(subunit_rmsd),
            fit_score=float(fit_score),
            fold=int(fold),
        )

    @property
    def is_identity(self) -> bool:
        return self.fold == 1

    def __repr__(self) -> str:
        return (
            f"Rotation(fold={self.fold}, permutation={list(self.permutation)},"
            f" axis={fmt(self.axis, precision=3)}, angle={self.angle:.4f},"
            f" subunit_rmsd={self.subunit_rmsd:.3f}, fit_score={self.fit_score:.1f})"
        )


class RotationGroup:
    """Ordered, append-only collection of verified rotations, with pairwise
    distinct permutations. The first member of a solved group is the identity."""

    AXIS_TOLERANCE: float = 0.99  #: |cos| above which two axes count as the same
    PERPENDICULAR_TOLERANCE: float = 0.1  #: |cos| below which axes are perpendicular

    _rotations: list[Rotation]
    _permutations: set[Permutation]

    def __init__(self) -> None:
        self._rotations = []
        self._permutations = set()

    def add(self, rotation: Rotation) -> bool:
        """Append `rotation` unless its permutation is already present."""
        if rotation.permutation in self._permutations:
            return False
        self._rotations.append(rotation)
        self._permutations.add(rotation.permutation)
        return True

    @property
    def order(self) -> int:
        """Number of symmetry operations found (including the identity)."""
        return len(self._rotations)

    def __len__(self) -> int:
        return len(self._rotations)

    def __getitem__(self, i: int) -> Rotation:
        return self._rotations[i]

    def __iter__(self) -> Iterator[Rotation]:
        return iter(list(self._rotations))

    def permutations(self) -> list[Permutation]:
        return [rotation.permutation for rotation in self._rotations]

    def has_permutation(self, permutation: Sequence[int]) -> bool:
        return tuple(permutation) in self._permutations

    @property
    def highest_fold(self) -> int:
        return max((rotation.fold for rotation in self._rotations), default=1)

    @property
    def principal_axis(self) -> Optional[torch.Tensor]:
        """Axis of the first rotation with the highest fold (None if trivial)."""
        fold = self.highest_fold
        if fold == 1:
            return None
        return next(r.axis for r in self._rotations if r.fold == fold)

    def distinct_axes(self, fold: int) -> list[torch.Tensor]:
        """Distinct rotation axes (up to sign) among rotations of `fold`."""
        axes: list[torch.Tensor] = []
        for rotation in self._rotations:
            if rotation.fold != fold:
                continue
            if all(abs(float(rotation.axis @ a)) < self.AXIS_TOLERANCE for a in axes):
                axes.append(rotation.axis)
        return axes

    @property
    def point_group(self) -> str:
        """Schoenflies symbol of the rotation group (C1, Cn, Dn, T, O or I)."""
        n_max = self.highest_fold
        if self.order <= 1 or n_max == 1:
            return "C1"
        principal_axes = self.distinct_axes(n_max)
        if n_max > 2 and len(principal_axes) > 1:
            polyhedral = {3: "T", 4: "O", 5: "I"}.get(n_max)
            if polyhedral is not None:
                return polyhedral
        if n_max == 2 and len(principal_axes) == 3 and self.order == 4:
            return "D2"
        principal = principal_axes[0]
        n_perpendicular = sum(
            abs(float(axis @ principal)) < self.PERPENDICULAR_TOLERANCE
            for axis in self.distinct_axes(2)
        )
        if n_max > 2 and n_perpendicular and self.order == 2 * n_max:
            return f"D{n_max}"
        return f"C{n_max}"

    def report(self) -> None:
        """Log the symmetry operations."""
        log.info(f"Rotation group {self.point_group} of order {self.order}:")
        for rotation in self._rotations:
            log.info(
                f"- fold: {rotation.fold}  axis: {fmt(rotation.axis, precision=4)}"
                f"  angle: {rotation.angle:.4f}  rmsd: {rotation.subunit_rmsd:.3f}"
                f"  fit: {rotation.fit_score:.1f}"
                f"  permutation: {list(rotation.permutation)}"
            )
