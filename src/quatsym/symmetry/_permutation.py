from __future__ import annotations
from typing import Iterable, Iterator, Sequence
import math

import torch


Permutation = tuple[int, ...]  #: Image of each index: p[i] is where i is mapped


def identity_permutation(n: int) -> Permutation:
    """Identity permutation on `n` elements."""
    return tuple(range(n))


def is_bijection(p: Sequence[int]) -> bool:
    """Whether `p` maps 0..n-1 one-to-one onto itself."""
    return sorted(p) == list(range(len(p)))


def permutation_order(p: Sequence[int]) -> int:
    """Smallest k > 0 with p^k = identity (lcm of cycle lengths).
    Returns 0 if `p` is empty or not a bijection, which has no finite order."""
    if not p or not is_bijection(p):
        return 0
    visited = [False] * len(p)
    cycle_lengths = []
    for start in range(len(p)):
        if visited[start]:
            continue
        length = 0
        i = start
        while not visited[i]:
            visited[i] = True
            i = p[i]
            length += 1
        cycle_lengths.append(length)
    return math.lcm(*cycle_lengths)


def compose(p: Sequence[int], q: Sequence[int]) -> Permutation:
    """Permutation applying `q` first and then `p`: (p . q)[i] = p[q[i]]."""
    if len(p) != len(q):
        raise ValueError(f"Cannot compose permutations of lengths {len(p)}, {len(q)}")
    return tuple(p[j] for j in q)


def inverse(p: Sequence[int]) -> Permutation:
    """Inverse permutation of bijection `p`."""
    result = [0] * len(p)
    for i, j in enumerate(p):
        result[j] = i
    return tuple(result)


class PermutationGroup:
    """Set of permutations that can be completed to its closure under composition.
    Used to predict the group elements implied by a partial set of symmetry
    operations, so that they can be verified directly rather than rediscovered."""

    _permutations: list[Permutation]  #: Members in order of addition
    _known: set[Permutation]  #: Same members, for fast lookup

    def __init__(self, generators: Iterable[Sequence[int]] = ()) -> None:
        self._permutations = []
        self._known = set()
        for p in generators:
            self.add(p)

    def add(self, p: Sequence[int]) -> bool:
        """Add `p` unless already present; return whether it was new."""
        p = tuple(p)
        if p in self._known:
            return False
        if self._permutations and len(p) != len(self._permutations[0]):
            raise ValueError(
                f"Permutation length {len(p)} differs from group's"
                f" {len(self._permutations[0])}"
            )
        self._permutations.append(p)
        self._known.add(p)
        return True

    def complete(self) -> None:
        """Extend to the closure of the current members under composition.
        Breadth-first: products of the newest members with the generators are
        added until a level produces no new permutation."""
        generators = list(self._permutations)
        current_level = list(self._permutations)
        while current_level:
            next_level = []
            for p in current_level:
                for generator in generators:
                    product = compose(p, generator)
                    if product not in self._known:
                        self._permutations.append(product)
                        self._known.add(product)
                        next_level.append(product)
            current_level = next_level

    def is_closed(self) -> bool:
        """Whether the composition of every pair of members is a member."""
        return all(
            compose(p, q) in self._known
            for p in self._permutations
            for q in self._permutations
        )

    def group_table(self) -> torch.Tensor:
        """Cayley table: entry [i, j] is the index of member i composed with j.
        Entries are -1 where the product is not a member (incomplete group)."""
        index = {p: i for i, p in enumerate(self._permutations)}
        return torch.tensor(
            [
                [index.get(compose(p, q), -1) for q in self._permutations]
                for p in self._permutations
            ],
            dtype=torch.long,
        ).view(self.order, self.order)

    @property
    def order(self) -> int:
        """Number of members."""
        return len(self._permutations)

    def __len__(self) -> int:
        return len(self._permutations)

    def __getitem__(self, i: int) -> Permutation:
        return self._permutations[i]

    def __iter__(self) -> Iterator[Permutation]:
        return iter(list(self._permutations))

    def __contains__(self, p: object) -> bool:
        return isinstance(p, Sequence) and tuple(p) in self._known
