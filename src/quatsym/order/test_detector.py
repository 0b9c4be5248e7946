from __future__ import annotations
import math

import pytest
import torch

from quatsym import rc
from quatsym.io import InvalidInputException, log_config
from quatsym.geometry import homogeneous, rotation_matrix, translation
from . import (
    OrderDetectionFailed,
    RotationAxis,
    RotationOrderDetector,
    similarity,
    superposition_distance,
)


#: Compact, irregular motif about 8 A from the z axis.
MOTIF = ((8.0, 0.0, 0.0), (8.5, 0.3, 0.2), (7.6, -0.4, 0.5), (8.2, 0.1, -0.6))


def get_structure(order: int) -> torch.Tensor:
    """Atoms of `order` copies of the motif related by rotations about z."""
    motif = torch.tensor(MOTIF, device=rc.device)
    z_axis = torch.tensor([0.0, 0.0, 1.0])
    return torch.cat(
        [
            motif @ rotation_matrix(z_axis, 2 * math.pi * i / order).T
            for i in range(order)
        ]
    )


@pytest.mark.mpi_skip
def test_similarity():
    atoms = get_structure(6)
    assert superposition_distance(atoms, atoms) == 0.0
    assert similarity(atoms, atoms) == 1.0
    far = atoms + torch.tensor([0.0, 0.0, 50.0], device=atoms.device)
    assert superposition_distance(atoms, far) > 0.0
    assert 0.0 < similarity(atoms, far) < 0.1
    assert superposition_distance(atoms[:3], atoms) > 0.0  # unequal sizes
    with pytest.raises(ValueError):
        superposition_distance(atoms[:0], atoms)


@pytest.mark.mpi_skip
def test_six_fold():
    atoms = get_structure(6)
    detector = RotationOrderDetector(max_order=8, min_score=0.5)
    result = detector.calculate_order(RotationAxis([0.0, 0.0, 1.0]), atoms)
    assert result.ok
    assert result.unwrap() == 6
    assert sorted(result.scores) == list(range(2, 9))
    for order in (2, 3, 6):
        assert result.scores[order] > 1.0 - 1e-6
    for order in (4, 5, 7, 8):
        assert result.scores[order] < 0.5


@pytest.mark.mpi_skip
def test_shifted_axis():
    """Order must not depend on where the structure sits in space."""
    offset = torch.tensor([3.0, -2.0, 7.0], device=rc.device)
    atoms = get_structure(3) + offset
    axis = RotationAxis([0.0, 0.0, 2.0], offset)
    assert RotationOrderDetector().calculate_order(axis, atoms).unwrap() == 3


@pytest.mark.mpi_skip
def test_asymmetric():
    atoms = torch.tensor(MOTIF)
    result = RotationOrderDetector().calculate_order(RotationAxis([0, 0, 1]), atoms)
    assert result.unwrap() == 1
    assert max(result.scores.values()) < 0.5


@pytest.mark.mpi_skip
def test_failure():
    result = RotationOrderDetector().calculate_order(
        RotationAxis([0.0, 0.0, 1.0]), torch.zeros((0, 3))
    )
    assert not result.ok
    assert result.order is None
    assert isinstance(result.error.__cause__, ValueError)
    with pytest.raises(OrderDetectionFailed):
        result.unwrap()


@pytest.mark.mpi_skip
@pytest.mark.parametrize(
    "point, atom_shift",
    [
        ([0.0, 0.0, 0.0], math.nan),
        ([math.nan, 0.0, 0.0], 0.0),
        ([0.0, 0.0, 0.0], math.inf),
    ],
)
def test_non_finite(point, atom_shift):
    atoms = get_structure(4)
    atoms[0, 0] += atom_shift
    result = RotationOrderDetector().calculate_order(
        RotationAxis([0.0, 0.0, 1.0], point), atoms
    )
    assert not result.ok
    assert result.order is None
    assert isinstance(result.error.__cause__, ValueError)


@pytest.mark.mpi_skip
def test_bad_shape():
    result = RotationOrderDetector().calculate_order(
        RotationAxis([0.0, 0.0, 1.0]), [[1.0, 2.0]]
    )
    assert not result.ok
    assert result.order is None
    assert isinstance(result.error.__cause__, InvalidInputException)


@pytest.mark.mpi_skip
def test_axis():
    with pytest.raises(ValueError):
        RotationAxis([0.0, 0.0, 0.0])
    axis = RotationAxis([0.0, 0.0, 5.0], [1.0, 1.0, 0.0])
    assert axis.direction.tolist() == [0.0, 0.0, 1.0]
    rotated = axis.rotate(torch.tensor([[2.0, 1.0, 3.0]]), math.pi)
    assert torch.allclose(rotated, torch.tensor([[0.0, 1.0, 3.0]]))


@pytest.mark.mpi_skip
def test_axis_from_transform():
    center = torch.tensor([1.0, 2.0, 0.0])
    z_axis = torch.tensor([0.0, 0.0, 1.0])
    transform = (
        translation(center)
        @ homogeneous(rotation_matrix(z_axis, 0.5 * math.pi))
        @ translation(-center)
    )
    axis = RotationAxis.from_transform(transform)
    assert torch.allclose(axis.direction, z_axis)
    assert torch.allclose(axis.point, center, atol=1e-12)
    with pytest.raises(ValueError):
        RotationAxis.from_transform(torch.eye(4))


@pytest.mark.mpi
def test_parallel():
    atoms = get_structure(6)
    axis = RotationAxis([0.0, 0.0, 1.0])
    serial = RotationOrderDetector().calculate_order(axis, atoms)
    parallel = RotationOrderDetector(comm=rc.comm).calculate_order(axis, atoms)
    assert parallel.order == serial.order == 6
    assert parallel.scores == serial.scores


def main():
    """Report order scores of test structures."""
    log_config(verbose=True)
    rc.init()
    axis = RotationAxis([0.0, 0.0, 1.0])
    for order in range(1, 9):
        RotationOrderDetector().calculate_order(axis, get_structure(order))


if __name__ == "__main__":
    main()
