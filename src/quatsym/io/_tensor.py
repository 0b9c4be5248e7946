from __future__ import annotations
from typing import Union, Sequence

import torch
import numpy as np

from quatsym import rc
from . import InvalidInputException


TensorCompatible = Union[torch.Tensor, np.ndarray, float, Sequence[float]]


def cast_tensor(t: TensorCompatible) -> torch.Tensor:
    """Convert `t` to a floating-point torch tensor on current device.
    Useful to handle input from yaml, numpy or python code on an equal footing."""
    if isinstance(t, torch.Tensor):
        return t.to(rc.device, dtype=torch.get_default_dtype())
    if isinstance(t, np.ndarray):
        return torch.from_numpy(t).to(rc.device, dtype=torch.get_default_dtype())
    try:
        return torch.tensor(t, device=rc.device, dtype=torch.get_default_dtype())
    except (ValueError, TypeError):
        raise InvalidInputException(f"Could not convert {t} to a tensor")


def cast_points(t: TensorCompatible, name: str = "points") -> torch.Tensor:
    """Convert `t` to an N x 3 tensor of Cartesian points (a copy).
    A single point of shape (3,) is promoted to a 1 x 3 set."""
    points = cast_tensor(t).clone()
    if points.dim() == 1 and points.shape[0] == 3:
        points = points.view(1, 3)
    if points.dim() != 2 or points.shape[1] != 3:
        raise InvalidInputException(
            f"{name} must have shape N x 3 (got {tuple(points.shape)})"
        )
    return points
