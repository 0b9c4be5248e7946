"""Rotational order of a known symmetry axis by brute-force self-similarity."""
# List exported symbols for doc generation
__all__ = (
    "superposition_distance",
    "similarity",
    "RotationAxis",
    "OrderDetectionFailed",
    "OrderResult",
    "RotationOrderDetector",
)

from ._similarity import superposition_distance, similarity
from ._axis import RotationAxis
from ._detector import OrderDetectionFailed, OrderResult, RotationOrderDetector
