from __future__ import annotations
from typing import Sequence
import math

import pytest
import torch

from quatsym.geometry import homogeneous, normalize, rotation_matrix
from . import Rotation, RotationGroup


def make_group(operations: Sequence[tuple[Sequence[float], int]]) -> RotationGroup:
    """Group of the identity plus rotations given as (axis, fold) pairs.
    Permutations are placeholders that only need to be distinct."""
    group = RotationGroup()
    n = len(operations) + 1
    for i, (axis, fold) in enumerate([((0.0, 0.0, 1.0), 1), *operations]):
        axis_t = normalize(torch.tensor([float(x) for x in axis]))
        angle = 0.0 if fold == 1 else 2 * math.pi / fold
        group.add(
            Rotation.create(
                [(j + i) % n for j in range(n)],
                homogeneous(rotation_matrix(axis_t, angle)),
                axis_t,
                angle,
                0.0,
                100.0,
                fold,
            )
        )
    return group


@pytest.mark.mpi_skip
@pytest.mark.parametrize(
    "operations, point_group",
    [
        ([], "C1"),
        ([((0, 0, 1), 2)], "C2"),
        ([((0, 0, 1), 4), ((0, 0, 1), 2), ((0, 0, -1), 4)], "C4"),
        ([((1, 0, 0), 2), ((0, 1, 0), 2), ((0, 0, 1), 2)], "D2"),
        (
            [((0, 0, 1), 3), ((0, 0, -1), 3), ((1, 0, 0), 2), ((-0.5, 0.866, 0), 2),
             ((-0.5, -0.866, 0), 2)],
            "D3",
        ),
        ([((1, 1, 1), 3), ((1, -1, -1), 3)], "T"),
        ([((1, 0, 0), 4), ((0, 1, 0), 4)], "O"),
    ],
)
def test_point_group(operations, point_group):
    group = make_group(operations)
    assert group.order == len(operations) + 1
    assert group.point_group == point_group


@pytest.mark.mpi_skip
def test_add_duplicate():
    group = make_group([((0, 0, 1), 2)])
    assert not group.add(group[1])
    assert group.order == 2
    assert group.has_permutation(group[1].permutation)
    assert group.highest_fold == 2
    assert group.principal_axis is not None
    assert torch.allclose(group.principal_axis, torch.tensor([0.0, 0.0, 1.0]))
    assert make_group([]).principal_axis is None
