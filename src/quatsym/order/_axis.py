from __future__ import annotations
from typing import Optional

import torch

from quatsym.io import TensorCompatible, cast_tensor
from quatsym.geometry import axis_angle, normalize, rotate_about_axis


class RotationAxis:
    """Line in space about which a structure is rotated."""

    direction: torch.Tensor  #: Unit direction vector (3,)
    point: torch.Tensor  #: Any point on the axis (3,)

    def __init__(
        self, direction: TensorCompatible, point: Optional[TensorCompatible] = None
    ) -> None:
        """Axis along `direction` through `point` (default: the origin).
        Raises ValueError if `direction` has zero length or is not finite."""
        self.direction = normalize(cast_tensor(direction).flatten())
        if point is None:
            self.point = torch.zeros_like(self.direction)
        else:
            self.point = cast_tensor(point).flatten().clone()
        if self.direction.shape != (3,) or self.point.shape != (3,):
            raise ValueError("Rotation axis direction and point must be 3-vectors")

    @classmethod
    def from_transform(cls, transform: torch.Tensor) -> RotationAxis:
        """Axis of the rotational part of rigid `transform` (4 x 4).
        The point on the axis is the least-squares fixed point of the transform,
        which removes any screw translation along the axis."""
        rot = transform[:3, :3]
        axis, angle = axis_angle(rot)
        if angle < 1e-6:
            raise ValueError("Transform has no rotational part to define an axis")
        eye = torch.eye(3, device=rot.device, dtype=rot.dtype)
        point = torch.linalg.pinv(eye - rot) @ transform[:3, 3]
        return cls(axis, point)

    def rotate(self, points: torch.Tensor, angle: float) -> torch.Tensor:
        """Rotate `points` (N x 3) by `angle` radians about this axis."""
        return rotate_about_axis(points, self.direction, angle, self.point)

    def __repr__(self) -> str:
        return (
            f"RotationAxis(direction={self.direction.tolist()},"
            f" point={self.point.tolist()})"
        )
