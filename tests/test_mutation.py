"""Tests for mutation operators."""

from __future__ import annotations

import random
from unittest.mock import patch

import pytest

from level_forge.core import tiles
from level_forge.core.generator import build_flat_level, generate_level
from level_forge.core.hills import build_hill
from level_forge.core.level import Level
from level_forge.core.mutation import (
    MutationKind,
    Mutator,
    build_pipe,
    find_reasonable_height,
    remove_random_coin,
    remove_random_enemy,
    remove_random_pipe,
)
from level_forge.core.protocols import SpriteKind, SpriteTemplate


def _make_level() -> Level:
    """40x10 flat level, grass on row 8."""
    return build_flat_level(40, 10, floor=8)


def _tube_cells(level: Level) -> list[tuple[int, int]]:
    tube = {tiles.TUBE_TOP_LEFT, tiles.TUBE_TOP_RIGHT, tiles.TUBE_SIDE_LEFT, tiles.TUBE_SIDE_RIGHT}
    return [
        (x, y)
        for x in range(level.width)
        for y in range(level.height)
        if level.get_block(x, y) in tube
    ]


class TestReasonableHeight:
    def test_drops_to_ground(self):
        level = _make_level()
        assert find_reasonable_height(level, 3, 0, 1, random.Random(0)) == 7

    def test_hover_within_spread(self):
        level = _make_level()
        rng = random.Random(4)
        for _ in range(50):
            assert 3 <= find_reasonable_height(level, 3, 0, 5, rng) <= 7

    def test_never_rises_above_start(self):
        level = _make_level()
        rng = random.Random(4)
        for _ in range(20):
            assert find_reasonable_height(level, 3, 6, 5, rng) >= 6


class TestPipes:
    def test_build_pipe(self):
        level = _make_level()
        assert build_pipe(5, 7, level, random.Random(0))
        assert level.get_block(5, 7) == tiles.TUBE_SIDE_LEFT
        assert level.get_block(6, 7) == tiles.TUBE_SIDE_RIGHT
        tops = level.cells(tiles.TUBE_TOP_LEFT)
        assert len(tops) == 1
        x, top = tops[0]
        assert x == 5
        assert 4 <= top <= 6
        assert level.get_block(6, top) == tiles.TUBE_TOP_RIGHT

    def test_blocked_footprint(self):
        level = _make_level()
        level.set_block(6, 6, tiles.COIN)
        before = level.clone()
        assert not build_pipe(5, 7, level, random.Random(0))
        assert level == before

    def test_outside_grid(self):
        level = _make_level()
        assert not build_pipe(39, 7, level, random.Random(0))
        assert not build_pipe(5, 0, level, random.Random(0))
        assert not build_pipe(-1, 7, level, random.Random(0))
        assert _tube_cells(level) == []

    def test_remove_pipe_keeps_ground(self):
        level = _make_level()
        assert build_pipe(5, 7, level, random.Random(2))
        assert remove_random_pipe(level, random.Random(0))
        assert _tube_cells(level) == []
        assert level.get_block(5, 8) == tiles.GRASS
        assert level.get_block(5, 9) == tiles.GROUND

    def test_remove_pipe_none(self):
        assert not remove_random_pipe(_make_level(), random.Random(0))


class TestRemovals:
    def test_remove_coin(self):
        level = _make_level()
        level.set_block(2, 3, tiles.COIN)
        level.set_block(9, 5, tiles.COIN)
        assert remove_random_coin(level, random.Random(1))
        assert len(level.cells(tiles.COIN)) == 1

    def test_remove_coin_none(self):
        level = _make_level()
        before = level.clone()
        assert not remove_random_coin(level, random.Random(1))
        assert level == before

    def test_remove_enemy(self):
        level = _make_level()
        level.set_sprite_template(2, 7, SpriteTemplate(SpriteKind.GOOMBA))
        level.set_sprite_template(3, 7, SpriteTemplate(SpriteKind.FLOWER))
        assert remove_random_enemy(level, random.Random(1))
        assert level.enemy_cells() == []
        assert level.get_sprite_template(3, 7) is not None

    def test_remove_enemy_none(self):
        assert not remove_random_enemy(_make_level(), random.Random(1))


class TestMutator:
    def test_add_coin_rests_above_ground(self):
        level = _make_level()
        assert Mutator(random.Random(1)).add_coin(level)
        coins = level.cells(tiles.COIN)
        assert len(coins) == 1
        assert coins[0][1] < 8

    def test_add_coin_full_level(self):
        level = Level(4, 3)
        for x in range(4):
            for y in range(3):
                level.set_block(x, y, tiles.GROUND)
        mutator = Mutator(random.Random(1), max_placement_attempts=10)
        assert not mutator.add_coin(level)

    def test_add_enemy_places_goomba(self):
        level = _make_level()
        assert Mutator(random.Random(2)).add_enemy(level)
        enemies = level.enemy_cells()
        assert len(enemies) == 1
        x, y = enemies[0]
        assert y < 8
        assert level.get_sprite_template(x, y).kind is SpriteKind.GOOMBA

    def test_add_hill_gated_by_chance(self):
        level = _make_level()
        mutator = Mutator(random.Random(0), hill_chance=1)
        assert mutator.add_hill(level)
        assert level.cells(tiles.HILL_TOP_LEFT)

    def test_add_hill_declined(self):
        level = _make_level()
        before = level.clone()
        mutator = Mutator(random.Random(0), hill_chance=1000)
        with patch.object(mutator.rng, "randrange", return_value=7):
            assert not mutator.add_hill(level)
        assert level == before

    def test_remove_hill_disabled_by_default(self):
        level = _make_level()
        assert build_hill(level, 2, random.Random(5))
        before = level.clone()
        assert not Mutator(random.Random(0)).remove_hill(level)
        assert level == before

    def test_remove_hill_enabled(self):
        level = _make_level()
        assert build_hill(level, 2, random.Random(5))
        corners = len(level.cells(tiles.HILL_TOP_LEFT))
        mutator = Mutator(random.Random(0), enable_hill_removal=True)
        assert mutator.remove_hill(level)
        assert len(level.cells(tiles.HILL_TOP_LEFT)) < corners

    def test_add_pipe_on_grass(self):
        level = _make_level()
        assert Mutator(random.Random(6)).add_pipe(level)
        assert len(level.cells(tiles.TUBE_TOP_LEFT)) == 1

    def test_add_pipe_without_grass(self):
        level = Level(20, 10)
        assert not Mutator(random.Random(6), max_pipe_attempts=20).add_pipe(level)
        assert _tube_cells(level) == []

    def test_mutate_applies_one_operator(self):
        mutator = Mutator(random.Random(0))
        level = _make_level()
        with patch.object(mutator, "apply", return_value=True) as apply:
            result = mutator.mutate(level)
        assert result is level
        apply.assert_called_once()
        kind, passed = apply.call_args.args
        assert isinstance(kind, MutationKind)
        assert passed is level

    @pytest.mark.parametrize("kind", list(MutationKind))
    def test_every_operator_keeps_geometry(self, kind):
        level = generate_level(60, 12, seed=int(kind))
        Mutator(random.Random(int(kind)), hill_chance=1, enable_hill_removal=True).apply(kind, level)
        assert (level.width, level.height) == (60, 12)
        level.validate()

    def test_many_mutations_keep_geometry(self):
        level = generate_level(60, 12, seed=9)
        mutator = Mutator(random.Random(9), enable_hill_removal=True)
        for _ in range(300):
            mutator.mutate(level)
        assert (level.width, level.height) == (60, 12)
        level.validate()
