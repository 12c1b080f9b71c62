"""Single-point crossover that never splits a hill or pipe in half.

The offspring is parent A's columns left of the split and parent B's columns
from the split to the right edge. Cells along the seam are patched so that
platforms keep grass tops and exposed edges, and goal markers from B are
dropped.
"""

from __future__ import annotations

import logging
import random

from level_forge.core import tiles
from level_forge.core.level import Level

logger = logging.getLogger("level_forge.crossover")

DEFAULT_MAX_SPLIT_ATTEMPTS = 100


def is_safe_split(level: Level, x: int) -> bool:
    """True when no cell in column ``x`` belongs to a fragile structure."""
    return not any(level.get_block(x, y) in tiles.FRAGILE_TILES for y in range(level.height))


def find_split_column(
    parent_a: Level,
    parent_b: Level,
    rng: random.Random,
    max_attempts: int = DEFAULT_MAX_SPLIT_ATTEMPTS,
) -> int:
    """Draw split columns until one is safe in both parents.

    After ``max_attempts`` draws the last column drawn is used as is.
    """
    split = rng.randrange(parent_a.width)
    for _ in range(max_attempts):
        if is_safe_split(parent_a, split) and is_safe_split(parent_b, split):
            return split
        split = rng.randrange(parent_a.width)
    logger.debug("No safe split after %d attempts, splitting at column %d", max_attempts, split)
    return split


def _seam_block(base: Level, donor: Level, x: int, y: int) -> int:
    block = donor.get_block(x, y)
    if block in tiles.GOAL_TILES:
        return tiles.EMPTY
    if x <= 0 or x >= base.width - 1:
        return block

    right_empty = donor.get_block(x + 1, y) == tiles.EMPTY
    left_empty = base.get_block(x - 1, y) == tiles.EMPTY

    if right_empty and left_empty:
        return tiles.EMPTY
    if (
        block in (tiles.GROUND, tiles.LEFT_POCKET_GRASS, tiles.RIGHT_POCKET_GRASS)
        and donor.get_block(x, y - 1) == tiles.EMPTY
    ):
        return tiles.GRASS
    if right_empty:
        if block == tiles.GROUND:
            return tiles.RIGHT_GRASS_EDGE
        if block == tiles.GRASS:
            return tiles.RIGHT_UP_GRASS_EDGE
        return block
    if left_empty:
        if block == tiles.GROUND:
            return tiles.LEFT_GRASS_EDGE
        if block == tiles.GRASS:
            return tiles.LEFT_UP_GRASS_EDGE
        return block
    return block


def crossover(
    parent_a: Level,
    parent_b: Level,
    rng: random.Random,
    max_split_attempts: int = DEFAULT_MAX_SPLIT_ATTEMPTS,
) -> Level:
    """Recombine two parents into a new level. Neither parent is modified."""
    if (parent_a.width, parent_a.height) != (parent_b.width, parent_b.height):
        raise ValueError(
            f"Parents differ in size: {parent_a.width}x{parent_a.height} "
            f"vs {parent_b.width}x{parent_b.height}"
        )
    split = find_split_column(parent_a, parent_b, rng, max_split_attempts)
    child = parent_a.clone()

    # Left neighbours are read from the child, so they see the patched column.
    for x in range(split, child.width):
        for y in range(child.height):
            child.set_block(x, y, _seam_block(child, parent_b, x, y))
            child.set_sprite_template(x, y, parent_b.get_sprite_template(x, y))
    return child
