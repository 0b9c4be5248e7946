"""I/O functionality including logging, input conversion and parameter files."""
# List exported symbols for doc generation
__all__ = (
    "log_config",
    "fmt",
    "InvalidInputException",
    "TensorCompatible",
    "cast_tensor",
    "cast_points",
    "dict",
    "yaml",
)

from ._log_config import log_config, fmt
from ._error import InvalidInputException
from ._tensor import TensorCompatible, cast_tensor, cast_points
from . import dict, yaml
