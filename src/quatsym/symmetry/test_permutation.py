import pytest

from . import (
    PermutationGroup,
    compose,
    identity_permutation,
    inverse,
    is_bijection,
    permutation_order,
)


@pytest.mark.mpi_skip
@pytest.mark.parametrize(
    "p, order",
    [
        ((0, 1, 2), 1),
        ((1, 2, 0), 3),
        ((1, 0, 3, 4, 2), 6),
        ((2, 3, 0, 1), 2),
        ((0, 0, 1), 0),
        ((), 0),
    ],
)
def test_order(p, order):
    assert permutation_order(p) == order


@pytest.mark.mpi_skip
def test_compose():
    p = (1, 2, 0)
    assert compose(p, p) == (2, 0, 1)
    assert inverse(p) == (2, 0, 1)
    assert compose(p, inverse(p)) == identity_permutation(3)
    assert compose((1, 0, 2), (0, 2, 1)) == (1, 2, 0)  # apply right one first
    assert is_bijection(compose(p, (0, 2, 1)))
    with pytest.raises(ValueError):
        compose((0, 1), (0, 1, 2))


@pytest.mark.mpi_skip
@pytest.mark.parametrize(
    "generators, order",
    [
        ([(1, 2, 3, 0)], 4),
        ([(1, 2, 0), (0, 2, 1)], 6),
        ([(1, 0, 2, 3), (0, 1, 3, 2)], 4),
        ([(0, 1, 2)], 1),
    ],
)
def test_complete(generators, order):
    group = PermutationGroup(generators)
    group.complete()
    assert group.order == order
    assert group.is_closed()
    assert identity_permutation(len(generators[0])) in group
    for p in generators:
        assert inverse(p) in group
    # Cayley table rows and columns are permutations of the members:
    table = group.group_table()
    assert (table >= 0).all()
    for i in range(order):
        assert sorted(table[i].tolist()) == list(range(order))
        assert sorted(table[:, i].tolist()) == list(range(order))


@pytest.mark.mpi_skip
def test_add():
    group = PermutationGroup()
    assert group.add([1, 0, 2])
    assert not group.add((1, 0, 2))
    assert group.order == 1
    assert group[0] == (1, 0, 2)
    assert group.group_table().tolist() == [[-1]]  # identity missing till complete
    with pytest.raises(ValueError):
        group.add((0, 1))
