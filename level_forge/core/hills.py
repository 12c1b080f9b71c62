"""Stepped hill terrain.

A hill is a stack of overlapping flat-topped layers raised on a flat stretch
of grass. Each layer is narrower than the footprint, sits 2-4 rows above the
previous one and may not start or end right beside an earlier layer's edge.
"""

from __future__ import annotations

import logging
import random

from level_forge.core import tiles
from level_forge.core.level import Level

logger = logging.getLogger("level_forge.hills")

DEFAULT_MAX_LENGTH = 20
DEFAULT_MAX_ATTEMPTS = 100


def find_grass_row(level: Level, x: int) -> int | None:
    """Topmost grass-top row in column ``x``."""
    for y in range(level.height):
        if level.get_block(x, y) == tiles.GRASS:
            return y
    return None


def _is_flat(level: Level, x0: int, length: int, ground: int) -> bool:
    if x0 + length > level.width:
        return False
    return all(level.get_block(x, ground) == tiles.GRASS for x in range(x0, x0 + length))


def _hill_tile(x: int, y: int, left: int, right: int, top: int) -> int:
    col = tiles.HILL_FILL_COL
    if x == left:
        col = tiles.HILL_EDGE_LEFT_COL
    if x == right:
        col = tiles.HILL_EDGE_RIGHT_COL
    row = tiles.HILL_TOP_ROW if y == top else tiles.HILL_BODY_ROW
    return tiles.tile(col, row)


def _raise_layers(level: Level, x0: int, length: int, ground: int, rng: random.Random) -> int:
    occupied = [False] * length
    top = ground
    layers = 0
    while True:
        top -= 2 + rng.randrange(3)
        if top <= 0:
            break
        width = rng.randrange(5) + 3
        if length - width - 2 <= 0:
            break
        start = rng.randrange(length - width - 2) + x0 + 1
        offset = start - x0
        if (
            occupied[offset]
            or occupied[offset + width]
            or occupied[offset - 1]
            or occupied[offset + width + 1]
        ):
            break
        occupied[offset] = True
        occupied[offset + width] = True
        last = rng.randrange(4) == 0

        right = start + width - 1
        for x in range(start, start + width):
            for y in range(top, ground):
                block = level.get_block(x, y)
                if block == tiles.EMPTY:
                    level.set_block(x, y, _hill_tile(x, y, start, right, top))
                elif block == tiles.HILL_TOP_LEFT:
                    level.set_block(x, y, tiles.HILL_TOP_LEFT_IN)
                elif block == tiles.HILL_TOP_RIGHT:
                    level.set_block(x, y, tiles.HILL_TOP_RIGHT_IN)
        layers += 1
        if last:
            break
    return layers


def build_hill(
    level: Level,
    x0: int,
    rng: random.Random,
    max_length: int = DEFAULT_MAX_LENGTH,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> bool:
    """Raise a hill on flat grass starting at column ``x0``.

    When the ground under the footprint is not flat a new random column is
    tried, up to ``max_attempts`` relocations. Returns False if no spot was
    found; the level is then untouched.
    """
    for _ in range(max_attempts + 1):
        length = min(rng.randrange(10) + 10, max_length)
        ground = find_grass_row(level, x0)
        if ground is not None and _is_flat(level, x0, length, ground):
            layers = _raise_layers(level, x0, length, ground, rng)
            logger.debug("Hill at x=%d length=%d with %d layer(s)", x0, length, layers)
            return True
        x0 = rng.randrange(level.width)
    logger.debug("No flat ground for a hill after %d attempts", max_attempts)
    return False


def remove_hill(level: Level, rng: random.Random, max_span: int = 15) -> bool:
    """Flatten one hill layer, chosen at random by its top-left corner.

    The layer's extent is traced right along its top row to the top-right
    corner and down to the ground line; only hill tiles inside that box are
    cleared, so coins, pipes and ground survive.
    """
    corners = level.cells(tiles.HILL_TOP_LEFT)
    if not corners:
        return False
    x, y = rng.choice(corners)

    width = 1
    while width < max_span and level.get_block(x + width, y) in tiles.HILL_TILES:
        if level.get_block(x + width, y) in (tiles.HILL_TOP_RIGHT, tiles.HILL_TOP_RIGHT_IN):
            width += 1
            break
        width += 1
    height = 1
    while height < max_span and level.get_block(x, y + height) in tiles.HILL_TILES:
        height += 1

    for xx in range(x, x + width):
        for yy in range(y, y + height):
            if level.get_block(xx, yy) in tiles.HILL_TILES:
                level.set_block(xx, yy, tiles.EMPTY)
    return True
