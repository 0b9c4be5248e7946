from __future__ import annotations
from typing import Optional
import math

import torch

from quatsym import rc


def normalize(v: torch.Tensor) -> torch.Tensor:
    """Unit vector along `v`. Raises ValueError for zero or non-finite `v`."""
    norm = float(v.norm().item())
    if not (math.isfinite(norm) and norm > 0.0):
        raise ValueError(f"Cannot normalize vector of length {norm}")
    return v / norm


def rotation_matrix(axis: torch.Tensor, angle: float) -> torch.Tensor:
    """Rotation (3 x 3) by `angle` radians about `axis` (Rodrigues formula)."""
    k = normalize(axis.to(rc.device, dtype=torch.get_default_dtype()))
    K = torch.zeros((3, 3), device=k.device, dtype=k.dtype)
    K[0, 1], K[0, 2] = -k[2], k[1]
    K[1, 0], K[1, 2] = k[2], -k[0]
    K[2, 0], K[2, 1] = -k[1], k[0]
    eye = torch.eye(3, device=k.device, dtype=k.dtype)
    return eye + math.sin(angle) * K + (1.0 - math.cos(angle)) * (K @ K)


def axis_angle(rot: torch.Tensor) -> tuple[torch.Tensor, float]:
    """Axis (unit 3-vector) and angle in [0, pi] of proper rotation `rot` (3 x 3).
    The identity returns the z axis with zero angle."""
    rot = rot[:3, :3]
    cos_angle = min(1.0, max(-1.0, 0.5 * (float(rot.trace().item()) - 1.0)))
    angle = math.acos(cos_angle)
    antisym = torch.stack(
        (rot[2, 1] - rot[1, 2], rot[0, 2] - rot[2, 0], rot[1, 0] - rot[0, 1])
    )
    if angle < 1e-10:
        return torch.tensor([0.0, 0.0, 1.0], device=rot.device, dtype=rot.dtype), 0.0
    if math.pi - angle > 1e-4:
        return normalize(antisym), angle

    # Near pi, read the axis off the symmetric part cos 1 + (1 - cos) k k^T:
    eye = torch.eye(3, device=rot.device, dtype=rot.dtype)
    kk = (0.5 * (rot + rot.T) - cos_angle * eye) / (1.0 - cos_angle)
    i_max = int(kk.diagonal().argmax().item())
    axis = normalize(kk[:, i_max])
    if float((axis @ antisym).item()) < 0.0:
        axis = -axis  # sign follows residual antisymmetric part, if any
    return axis, angle


def homogeneous(
    rot: torch.Tensor, trans: Optional[torch.Tensor] = None
) -> torch.Tensor:
    """Rigid transform (4 x 4) with rotation `rot` and translation `trans`."""
    result = torch.eye(4, device=rot.device, dtype=rot.dtype)
    result[:3, :3] = rot
    if trans is not None:
        result[:3, 3] = trans
    return result


def translation(vec: torch.Tensor) -> torch.Tensor:
    """Pure translation (4 x 4) by `vec`."""
    result = torch.eye(4, device=vec.device, dtype=vec.dtype)
    result[:3, 3] = vec
    return result


def transform_points(transform: torch.Tensor, points: torch.Tensor) -> torch.Tensor:
    """Apply rigid `transform` (4 x 4) to `points` (N x 3)."""
    return points @ transform[:3, :3].T + transform[:3, 3]


def rotate_about_axis(
    points: torch.Tensor,
    axis: torch.Tensor,
    angle: float,
    origin: Optional[torch.Tensor] = None,
) -> torch.Tensor:
    """Rotate `points` (N x 3) by `angle` about `axis` passing through `origin`."""
    rot = rotation_matrix(axis, angle)
    if origin is None:
        return points @ rot.T
    return (points - origin) @ rot.T + origin
