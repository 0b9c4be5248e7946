"""Quaternary (point-group) symmetry of assemblies of repeated subunits."""
# List exported symbols for doc generation
__all__ = (
    "Permutation",
    "identity_permutation",
    "is_bijection",
    "permutation_order",
    "compose",
    "inverse",
    "PermutationGroup",
    "Subunits",
    "Rotation",
    "RotationGroup",
    "SuperpositionScorer",
    "SolverParameters",
    "SearchContext",
    "RotationSolver",
)

from ._permutation import (
    Permutation,
    identity_permutation,
    is_bijection,
    permutation_order,
    compose,
    inverse,
    PermutationGroup,
)
from ._subunits import Subunits
from ._rotation import Rotation, RotationGroup
from ._scorer import SuperpositionScorer
from ._parameters import SolverParameters
from ._solver import SearchContext, RotationSolver
