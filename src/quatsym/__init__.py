"""QuatSym: rotational symmetry detection for assemblies of repeated subunits"""
# List exported symbols for doc generation
__all__ = (
    "log",
    "MPI",
    "rc",
    "io",
    "parallel",
    "utils",
    "geometry",
    "symmetry",
    "order",
    "__version__",
)

# Module import definition
from ._log import log
from mpi4py import MPI
from . import rc, io, parallel, utils
from . import geometry, symmetry, order

__version__: str = "0.3.0"
