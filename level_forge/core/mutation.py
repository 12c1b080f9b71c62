"""Mutation operators for level candidates.

``Mutator.mutate`` applies exactly one of eight edits, chosen uniformly:

0. add coin      1. remove coin
2. add enemy     3. remove enemy
4. add hill      5. remove hill (off unless enabled)
6. add pipe      7. remove pipe

Operators that cannot find a target leave the level unchanged.
"""

from __future__ import annotations

import enum
import logging
import random

from level_forge.core import tiles
from level_forge.core.hills import DEFAULT_MAX_ATTEMPTS as DEFAULT_HILL_ATTEMPTS
from level_forge.core.hills import DEFAULT_MAX_LENGTH as DEFAULT_HILL_LENGTH
from level_forge.core.hills import build_hill, remove_hill
from level_forge.core.level import Level
from level_forge.core.protocols import SpriteKind, SpriteTemplate

logger = logging.getLogger("level_forge.mutation")

PIPE_WIDTH = 2
PIPE_CLEAR_DEPTH = 6
COIN_HOVER = 5
ENEMY_HOVER = 3


class MutationKind(enum.IntEnum):
    ADD_COIN = 0
    REMOVE_COIN = 1
    ADD_ENEMY = 2
    REMOVE_ENEMY = 3
    ADD_HILL = 4
    REMOVE_HILL = 5
    ADD_PIPE = 6
    REMOVE_PIPE = 7


def find_reasonable_height(
    level: Level, x: int, y: int, spread: int, rng: random.Random
) -> int:
    """Drop from the empty cell (x, y) to just above the first solid cell,
    then lift by a random 0..spread-1 rows without rising above ``y``."""
    floor = y
    while floor < level.height and level.get_block(x, floor) == tiles.EMPTY:
        floor += 1
    return max(y, floor - 1 - rng.randrange(spread))


def random_empty_cell(
    level: Level, rng: random.Random, max_attempts: int
) -> tuple[int, int] | None:
    for _ in range(max_attempts):
        x = rng.randrange(level.width)
        y = rng.randrange(level.height)
        if level.get_block(x, y) == tiles.EMPTY:
            return x, y
    return None


def remove_random_coin(level: Level, rng: random.Random) -> bool:
    coins = level.cells(tiles.COIN)
    if not coins:
        return False
    x, y = rng.choice(coins)
    level.set_block(x, y, tiles.EMPTY)
    return True


def remove_random_enemy(level: Level, rng: random.Random) -> bool:
    enemies = level.enemy_cells()
    if not enemies:
        return False
    x, y = rng.choice(enemies)
    level.set_sprite_template(x, y, None)
    return True


def build_pipe(x: int, y: int, level: Level, rng: random.Random) -> bool:
    """Build a 2-wide pipe whose base is at row ``y``, growing upward.

    Fails without touching the level when any cell of the footprint is
    occupied or outside the grid.
    """
    pipe_height = 2 + rng.randrange(3)
    top = y - pipe_height + 1
    if x < 0 or x + PIPE_WIDTH > level.width or top < 0 or y >= level.height:
        return False
    for i in range(pipe_height):
        for j in range(PIPE_WIDTH):
            if level.get_block(x + j, y - i) != tiles.EMPTY:
                return False

    for i in range(pipe_height - 1):
        level.set_block(x, y - i, tiles.TUBE_SIDE_LEFT)
        level.set_block(x + 1, y - i, tiles.TUBE_SIDE_RIGHT)
    level.set_block(x, top, tiles.TUBE_TOP_LEFT)
    level.set_block(x + 1, top, tiles.TUBE_TOP_RIGHT)
    return True


def remove_random_pipe(level: Level, rng: random.Random) -> bool:
    """Clear a 2x6 box under a random pipe top, keeping the ground line."""
    tops = level.cells(tiles.TUBE_TOP_LEFT)
    if not tops:
        return False
    x, y = rng.choice(tops)
    for i in range(PIPE_CLEAR_DEPTH):
        for j in range(PIPE_WIDTH):
            if level.get_block(x + j, y + i) in tiles.GROUND_LINE_TILES:
                continue
            level.set_block(x + j, y + i, tiles.EMPTY)
    return True


class Mutator:
    """Applies one random edit to a level in place."""

    def __init__(
        self,
        rng: random.Random,
        hill_chance: int = 20,
        hill_max_length: int = DEFAULT_HILL_LENGTH,
        hill_max_attempts: int = DEFAULT_HILL_ATTEMPTS,
        max_pipe_attempts: int = 100,
        max_placement_attempts: int = 1000,
        enable_hill_removal: bool = False,
    ):
        self.rng = rng
        self.hill_chance = hill_chance
        self.hill_max_length = hill_max_length
        self.hill_max_attempts = hill_max_attempts
        self.max_pipe_attempts = max_pipe_attempts
        self.max_placement_attempts = max_placement_attempts
        self.enable_hill_removal = enable_hill_removal
        self._operators = {
            MutationKind.ADD_COIN: self.add_coin,
            MutationKind.REMOVE_COIN: self.remove_coin,
            MutationKind.ADD_ENEMY: self.add_enemy,
            MutationKind.REMOVE_ENEMY: self.remove_enemy,
            MutationKind.ADD_HILL: self.add_hill,
            MutationKind.REMOVE_HILL: self.remove_hill,
            MutationKind.ADD_PIPE: self.add_pipe,
            MutationKind.REMOVE_PIPE: self.remove_pipe,
        }

    def mutate(self, level: Level) -> Level:
        kind = MutationKind(self.rng.randrange(len(MutationKind)))
        self.apply(kind, level)
        return level

    def apply(self, kind: MutationKind, level: Level) -> bool:
        """Run one operator. Returns whether the level changed."""
        changed = self._operators[kind](level)
        logger.debug("%s -> %s", kind.name.lower(), "changed" if changed else "no-op")
        return changed

    def add_coin(self, level: Level) -> bool:
        cell = random_empty_cell(level, self.rng, self.max_placement_attempts)
        if cell is None:
            return False
        x, y = cell
        y = find_reasonable_height(level, x, y, COIN_HOVER, self.rng)
        level.set_block(x, y, tiles.COIN)
        return True

    def remove_coin(self, level: Level) -> bool:
        return remove_random_coin(level, self.rng)

    def add_enemy(self, level: Level) -> bool:
        cell = random_empty_cell(level, self.rng, self.max_placement_attempts)
        if cell is None:
            return False
        x, y = cell
        y = find_reasonable_height(level, x, y, ENEMY_HOVER, self.rng)
        level.set_sprite_template(x, y, SpriteTemplate(SpriteKind.GOOMBA))
        return True

    def remove_enemy(self, level: Level) -> bool:
        return remove_random_enemy(level, self.rng)

    def add_hill(self, level: Level) -> bool:
        if self.rng.randrange(self.hill_chance) != 0:
            return False
        x = self.rng.randrange(level.width)
        return build_hill(level, x, self.rng, self.hill_max_length, self.hill_max_attempts)

    def remove_hill(self, level: Level) -> bool:
        # Levels often have no hill at all; removal only runs when asked for.
        if not self.enable_hill_removal:
            return False
        return remove_hill(level, self.rng)

    def add_pipe(self, level: Level) -> bool:
        for _ in range(self.max_pipe_attempts):
            x = self.rng.randrange(level.width)
            y = self.rng.randrange(level.height)
            if level.get_block(x, y) == tiles.GRASS and build_pipe(x, y - 1, level, self.rng):
                return True
        return False

    def remove_pipe(self, level: Level) -> bool:
        return remove_random_pipe(level, self.rng)
