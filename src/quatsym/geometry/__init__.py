"""Rigid-body geometry: rotations, superposition, sampling and spatial lookup."""
# List exported symbols for doc generation
__all__ = (
    "normalize",
    "rotation_matrix",
    "axis_angle",
    "homogeneous",
    "translation",
    "transform_points",
    "rotate_about_axis",
    "superpose_at_origin",
    "rmsd",
    "SymmetryClass",
    "principal_moments",
    "symmetry_class",
    "SphereSampler",
    "DistanceBox",
)

from ._transform import (
    normalize,
    rotation_matrix,
    axis_angle,
    homogeneous,
    translation,
    transform_points,
    rotate_about_axis,
)
from ._superposition import superpose_at_origin, rmsd
from ._inertia import SymmetryClass, principal_moments, symmetry_class
from ._sphere import SphereSampler
from ._distance_box import DistanceBox
