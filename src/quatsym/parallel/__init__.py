"""Division of independent tasks over MPI processes."""
# List exported symbols for doc generation
__all__ = ("TaskDivision", "gather_ordered")

from ._taskdivision import TaskDivision, gather_ordered
