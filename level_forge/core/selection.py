"""Rank-biased parent selection over a population sorted best-first."""

from __future__ import annotations

import random
from typing import Sequence, TypeVar

T = TypeVar("T")

DEFAULT_RANK_BOUND = 49


def select_rank(t: float, size: int, rank_bound: int = DEFAULT_RANK_BOUND) -> int:
    """Map a uniform draw ``t`` in [0, 1) to a rank.

    Returns the highest rank ``i`` with ``t <= 2**-i``, so rank 0 takes about
    half the mass, rank 1 a quarter, and so on. The scan starts at the lower
    of ``rank_bound`` and the last valid index, so the result is always a
    valid index into a population of ``size``.
    """
    if size <= 0:
        raise IndexError("cannot select from an empty population")
    for i in range(min(rank_bound, size - 1), -1, -1):
        if t <= 2.0 ** -i:
            return i
    return 0


def weighted_pick(
    population: Sequence[T],
    rng: random.Random,
    rank_bound: int = DEFAULT_RANK_BOUND,
) -> T:
    return population[select_rank(rng.random(), len(population), rank_bound)]
