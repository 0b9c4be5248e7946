import math

import pytest
import torch

from quatsym import rc
from . import (
    axis_angle,
    homogeneous,
    normalize,
    rmsd,
    rotate_about_axis,
    rotation_matrix,
    superpose_at_origin,
    transform_points,
    translation,
)


def get_random_points(n: int = 10, seed: int = 0) -> torch.Tensor:
    generator = torch.Generator().manual_seed(seed)
    return (10.0 * torch.rand((n, 3), generator=generator)).to(rc.device)


@pytest.mark.mpi_skip
def test_rotation_matrix():
    rot = rotation_matrix(torch.tensor([0.0, 0.0, 2.0]), 0.5 * math.pi)
    x, y = torch.eye(3)[:2]
    assert torch.allclose(rot @ x, y)
    rot = rotation_matrix(torch.tensor([1.0, -2.0, 0.5]), 1.2)
    assert torch.allclose(rot @ rot.T, torch.eye(3))
    assert abs(float(torch.linalg.det(rot)) - 1.0) < 1e-12


@pytest.mark.mpi_skip
def test_normalize_degenerate():
    with pytest.raises(ValueError):
        normalize(torch.zeros(3))
    with pytest.raises(ValueError):
        normalize(torch.tensor([math.nan, 0.0, 1.0]))


@pytest.mark.mpi_skip
@pytest.mark.parametrize("angle", [0.3, 1.5, 2.5, math.pi - 1e-6, math.pi])
def test_axis_angle(angle):
    axis = normalize(torch.tensor([0.3, -0.4, 0.8]))
    axis_out, angle_out = axis_angle(rotation_matrix(axis, angle))
    assert abs(angle_out - angle) < 1e-6
    cos = float(axis_out @ axis)
    if angle < math.pi - 1e-4:
        assert cos > 1.0 - 1e-9
    else:
        assert abs(cos) > 1.0 - 1e-6  # sign is arbitrary for a half turn


@pytest.mark.mpi_skip
def test_axis_angle_identity():
    axis, angle = axis_angle(torch.eye(3))
    assert angle == 0.0
    assert axis.tolist() == [0.0, 0.0, 1.0]


@pytest.mark.mpi_skip
def test_transform_composition():
    points = get_random_points()
    shift = torch.tensor([1.0, 2.0, -3.0])
    rot = rotation_matrix(torch.tensor([1.0, 1.0, 0.0]), 0.7)
    transform = homogeneous(rot, shift)
    expected = points @ rot.T + shift
    assert torch.allclose(transform_points(transform, points), expected)
    combined = translation(shift) @ homogeneous(rot)
    assert torch.allclose(combined, transform)


@pytest.mark.mpi_skip
def test_rotate_about_axis():
    origin = torch.tensor([5.0, 5.0, 0.0])
    points = torch.tensor([[6.0, 5.0, 1.0], [5.0, 5.0, 2.0]])
    rotated = rotate_about_axis(points, torch.tensor([0.0, 0.0, 1.0]), math.pi, origin)
    assert torch.allclose(rotated, torch.tensor([[4.0, 5.0, 1.0], [5.0, 5.0, 2.0]]))


@pytest.mark.mpi_skip
def test_superposition():
    points = get_random_points()
    rot = rotation_matrix(torch.tensor([0.2, 0.9, -0.3]), 2.0)
    shift = torch.tensor([-4.0, 0.5, 7.0])
    target = points @ rot.T + shift
    transform, (axis, angle) = superpose_at_origin(points, target)
    assert torch.allclose(transform[:3, :3], rot, atol=1e-10)
    assert torch.allclose(transform[:3, 3], shift, atol=1e-10)
    assert rmsd(transform_points(transform, points), target) < 1e-10
    assert abs(angle - 2.0) < 1e-10
    assert float(axis @ normalize(torch.tensor([0.2, 0.9, -0.3]))) > 1.0 - 1e-10


@pytest.mark.mpi_skip
def test_superposition_proper():
    """Mirror images must be superposed by a proper rotation."""
    points = get_random_points(seed=1)
    mirrored = points * torch.tensor([1.0, 1.0, -1.0])
    transform, _ = superpose_at_origin(points, mirrored)
    assert abs(float(torch.linalg.det(transform[:3, :3])) - 1.0) < 1e-10


@pytest.mark.mpi_skip
def test_rmsd_shape_mismatch():
    with pytest.raises(ValueError):
        rmsd(torch.zeros((3, 3)), torch.zeros((4, 3)))
