from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional
import math

import torch

from quatsym import rc, log
from quatsym.io import InvalidInputException
from quatsym.utils import stopwatch
from quatsym.geometry import (
    DistanceBox,
    SphereSampler,
    SymmetryClass,
    rmsd,
    rotation_matrix,
    superpose_at_origin,
    transform_points,
    translation,
)
from ._parameters import SolverParameters
from ._permutation import (
    Permutation,
    PermutationGroup,
    identity_permutation,
    permutation_order,
)
from ._rotation import Rotation, RotationGroup
from ._scorer import SuperpositionScorer
from ._subunits import Subunits


@dataclass
class SearchContext:
    """Mutable state of one rotation search, owned by a single `solve` call.
    Nothing in here outlives the search except `rotations`, whose members
    hold their own copies of all data."""

    original: torch.Tensor  #: Subunit centers relative to their centroid (n x 3)
    scratch: torch.Tensor  #: Working coordinates, overwritten for every candidate
    box: DistanceBox  #: Neighbor lookup over `original`
    distance_threshold: float  #: Neighbor radius and limit on permutation RMSD
    scorer: SuperpositionScorer  #: Atom-level scoring of candidate operations
    to_original: torch.Tensor  #: Translation (4 x 4) from centered to input frame
    to_centered: torch.Tensor  #: Translation (4 x 4) from input to centered frame
    rotations: RotationGroup = field(default_factory=RotationGroup)
    seen: set[Permutation] = field(default_factory=set)  #: Permutations tried so far


class RotationSolver:
    """Rotational point-group symmetry of an assembly of subunits.
    Rotations about sampled axes through the centroid of the subunit centers,
    by angles commensurate with the number of subunits, are turned into subunit
    permutations by nearest-neighbor matching. Each new permutation is then
    verified by optimal superposition of the permuted centers, and scored on
    the atoms of all subunits. Every verified rotation also triggers testing
    of all further permutations implied by closure of the group found so far.
    Assemblies of exactly two subunits need a different strategy and are
    rejected on construction."""

    subunits: Subunits  #: Subunits whose symmetry is sought
    parameters: SolverParameters  #: Thresholds and search limits
    sampler: SphereSampler  #: Candidate rotation axes
    _result: Optional[RotationGroup]  #: Cached result of `symmetry_operations`

    def __init__(
        self,
        subunits: Subunits,
        parameters: Optional[SolverParameters] = None,
        **kwargs,
    ) -> None:
        """Prepare symmetry search of `subunits`.

        Parameters
        ----------
        subunits
            Centers, atoms and sequence-cluster ids of the subunits.
        parameters
            Thresholds and search limits; defaults to `SolverParameters()`.
        kwargs
            Individual parameters (eg. `rmsd_threshold=2.0`), overriding
            those in `parameters`.
        """
        if subunits.n_subunits == 2:
            raise InvalidInputException(
                "RotationSolver cannot be applied to subunits with 2 centers"
            )
        if parameters is None:
            parameters = SolverParameters.from_dict(kwargs)
        elif kwargs:
            parameters = parameters.updated(**kwargs)
        self.subunits = subunits
        self.parameters = parameters
        self.sampler = SphereSampler(parameters.n_axes)
        self._result = None

    @property
    def symmetry_operations(self) -> RotationGroup:
        """Rotation group of the subunits (solved on first access)."""
        if self._result is None:
            self._result = self.solve()
        return self._result

    @stopwatch(name="RotationSolver.solve")
    def solve(self) -> RotationGroup:
        """Search for all rotations mapping the subunits onto themselves.
        Always returns a new group, starting with the identity; a group of
        order 1 means that no symmetry was found."""
        context = self.initialize()
        max_sym_ops = self.max_symmetry_operations()
        angles = self.angles()
        log.info(
            f"Rotation search: {self.subunits.n_subunits} subunits, up to"
            f" {max_sym_ops} operations, {len(angles)} angles x"
            f" {self.sampler.axis_count} axes,"
            f" distance threshold {context.distance_threshold:.3f}"
        )
        if context.rotations.order < max_sym_ops:
            self._search(context, angles, max_sym_ops)
        self.complete_rotation_group(context)
        context.box.clear_cache()
        log.info(
            f"Found rotation group {context.rotations.point_group}"
            f" of order {context.rotations.order}  t[s]: {rc.clock():.2f}"
        )
        return context.rotations

    def initialize(self) -> SearchContext:
        """Set up the search state, seeded with the identity operation."""
        centroid = self.subunits.centroid
        original = self.subunits.centered.clone()
        distance_threshold = self.distance_threshold()
        context = SearchContext(
            original=original,
            scratch=torch.empty_like(original),
            box=DistanceBox(original, distance_threshold),
            distance_threshold=distance_threshold,
            scorer=SuperpositionScorer(self.subunits),
            to_original=translation(centroid),
            to_centered=translation(-centroid),
        )
        identity = identity_permutation(self.subunits.n_subunits)
        eye = torch.eye(4, device=original.device, dtype=original.dtype)
        context.seen.add(identity)
        context.rotations.add(
            Rotation.create(
                identity,
                eye,
                axis=eye[2, :3],
                angle=0.0,
                subunit_rmsd=0.0,
                fit_score=context.scorer.fit_score(eye, identity),
                fold=1,
            )
        )
        return context

    def distance_threshold(self) -> float:
        """Neighbor radius for permutation matching: the smallest distance
        between subunit centers, but no less than the RMSD thresholds."""
        threshold = max(
            self.parameters.rmsd_threshold, self.parameters.subunit_rmsd_threshold
        )
        n = self.subunits.n_subunits
        if n > 1:
            centers = self.subunits.centers
            dist = torch.cdist(
                centers, centers, compute_mode="donot_use_mm_for_euclid_dist"
            )
            i, j = torch.triu_indices(n, n, offset=1, device=centers.device)
            threshold = max(threshold, float(dist[i, j].min().item()))
        return threshold

    def max_symmetry_operations(self) -> int:
        """Upper bound on the group order: the subunit count, capped at
        `max_order` for spherical assemblies with a multiple of 60 subunits."""
        n = self.subunits.n_subunits
        if n % 60 == 0 and (
            self.subunits.symmetry_class() == SymmetryClass.SPHERICAL
        ):
            return min(n, self.parameters.max_order)
        return n

    def angles(self) -> list[float]:
        """Candidate rotation angles: equally spaced in [0, 2 pi), including pi
        for an odd count, as needed for perpendicular 2-folds in dihedral groups."""
        n = self.max_symmetry_operations()
        angles = [i * 2.0 * math.pi / n for i in range(n)]
        if n % 2:
            angles.append(math.pi)
            angles.sort()
        return angles

    def _search(
        self, context: SearchContext, angles: list[float], max_sym_ops: int
    ) -> None:
        for i_axis in range(self.sampler.axis_count):
            axis = self.sampler.axis(i_axis)
            for angle in angles:
                rot = rotation_matrix(axis, angle)
                torch.matmul(context.original, rot.T, out=context.scratch)
                permutation = self.get_permutation(context)
                if not self.is_valid_permutation(context, permutation):
                    continue
                if self.evaluate_permutation(context, permutation):
                    self.complete_rotation_group(context)
                if context.rotations.order >= max_sym_ops:
                    log.debug(f"All operations found after {i_axis + 1} axes")
                    return

    def get_permutation(self, context: SearchContext) -> Permutation:
        """Match each point of `context.scratch` to its nearest original center.
        Returns an empty permutation if some point has no neighbor within the
        distance threshold, if the overall RMSD of the matching exceeds it,
        or if the matching is not one-to-one."""
        points = context.scratch
        n = len(points)
        permutation = []
        sum_sq = 0.0
        for point, neighbors in zip(points, context.box.neighbors_each(points)):
            if not len(neighbors):
                return ()
            dist_sq = (context.original[neighbors] - point).square().sum(dim=-1)
            i_min = int(dist_sq.argmin().item())
            permutation.append(int(neighbors[i_min].item()))
            sum_sq += float(dist_sq[i_min].item())
        if math.sqrt(sum_sq / n) > context.distance_threshold:
            return ()
        if len(set(permutation)) != n:
            return ()
        return tuple(permutation)

    def is_valid_permutation(
        self, context: SearchContext, permutation: Permutation
    ) -> bool:
        """Check a candidate permutation, and mark it as seen if it is new."""
        if not permutation:
            return False
        if not (
            self.parameters.pseudo_symmetry_allowed or self.check_clusters(permutation)
        ):
            return False
        # Only one identity-like (fold = 1) operation:
        fold = permutation_order(permutation)
        if context.rotations.order > 1 and fold == 1:
            return False
        if fold == 0 or self.subunits.n_subunits % fold:
            return False
        if permutation in context.seen:
            return False
        context.seen.add(permutation)
        return True

    def check_clusters(self, permutation: Permutation) -> bool:
        """Whether every subunit maps onto one of the same sequence cluster."""
        cluster_ids = self.subunits.cluster_ids
        return all(cluster_ids[i] == cluster_ids[j] for i, j in enumerate(permutation))

    def evaluate_permutation(
        self, context: SearchContext, permutation: Permutation
    ) -> bool:
        """Verify `permutation` by superposition and add it to the group if all
        thresholds pass. Returns whether a rotation was added."""
        parameters = self.parameters
        original = context.original
        context.scratch.copy_(original[list(permutation)])
        fold = permutation_order(permutation)

        # Rotation carrying each center onto its image, about the centroid:
        transform, (axis, angle) = superpose_at_origin(original, context.scratch)
        subunit_rmsd = rmsd(transform_points(transform, original), context.scratch)
        if subunit_rmsd >= parameters.subunit_rmsd_threshold:
            return False

        # Score on all atoms in the input frame:
        transformation = context.to_original @ transform @ context.to_centered
        fit_score = context.scorer.fit_score(transformation, permutation)
        if fit_score <= parameters.fit_score_threshold:
            return False
        full_rmsd = context.scorer.full_atom_rmsd(transformation, permutation)
        if full_rmsd < 0.0 and not parameters.pseudo_symmetry_allowed:
            return False
        if full_rmsd >= parameters.rmsd_threshold:
            return False

        rotation = Rotation.create(
            permutation,
            transformation,
            axis,
            angle,
            subunit_rmsd,
            fit_score,
            fold,
        )
        if not context.rotations.add(rotation):
            return False
        log.debug(f"Accepted {rotation}")
        return True

    def complete_rotation_group(self, context: SearchContext) -> None:
        """Verify the operations implied by closure of the group found so far."""
        group = PermutationGroup(context.rotations.permutations())
        group.complete()
        if group.order == context.rotations.order:
            return  # already closed
        log.debug(
            f"Completing rotation group: {context.rotations.order} of"
            f" {group.order} implied operations verified"
        )
        for permutation in group:
            if self.is_valid_permutation(context, permutation):
                self.evaluate_permutation(context, permutation)
