from typing import TypeVar

import numpy as np


IntLike = TypeVar("IntLike", int, np.ndarray)


def ceildiv(num: IntLike, den: IntLike) -> IntLike:
    """Compute ceil(num/den) with purely integer operations"""
    return (num + den - 1) // den
