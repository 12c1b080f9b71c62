"""Tests for rank-biased selection."""

from __future__ import annotations

import random
from collections import Counter

import pytest

from level_forge.core.selection import select_rank, weighted_pick


class FixedRandom:
    """Stands in for random.Random with a fixed uniform draw."""

    def __init__(self, value: float):
        self.value = value

    def random(self) -> float:
        return self.value


class TestSelectRank:
    def test_zero_draw_hits_rank_bound(self):
        assert select_rank(0.0, 50) == 49
        assert select_rank(0.0, 200) == 49

    def test_zero_draw_clamped_to_population(self):
        assert select_rank(0.0, 10) == 9
        assert select_rank(0.0, 1) == 0

    def test_high_draw_picks_leader(self):
        assert select_rank(0.75, 50) == 0
        assert select_rank(0.999, 50) == 0

    def test_geometric_bands(self):
        assert select_rank(0.5, 50) == 1
        assert select_rank(0.3, 50) == 1
        assert select_rank(0.2, 50) == 2
        assert select_rank(0.1, 50) == 3

    def test_custom_bound(self):
        assert select_rank(0.0, 50, rank_bound=5) == 5

    def test_empty_population(self):
        with pytest.raises(IndexError):
            select_rank(0.5, 0)


class TestWeightedPick:
    def test_never_indexes_past_population(self):
        population = ["a", "b", "c"]
        assert weighted_pick(population, FixedRandom(0.0)) == "c"

    def test_every_draw_in_range(self):
        population = list(range(7))
        rng = random.Random(3)
        for _ in range(500):
            assert weighted_pick(population, rng) in population

    def test_biased_toward_leader(self):
        population = list(range(50))
        rng = random.Random(42)
        picks = Counter(weighted_pick(population, rng) for _ in range(2000))
        assert 0.4 < picks[0] / 2000 < 0.6
        assert picks[0] > picks[1] > picks[3]
        assert sum(picks[i] for i in range(6)) / 2000 > 0.95
