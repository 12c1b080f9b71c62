"""Random level construction for the initial population.

A level is a run of ground segments at varying floor heights separated by
gaps, decorated with hills, pipes, coin runs and enemies, with a goal in
the end zone. Each level draws from its own ``random.Random(seed)``.
"""

from __future__ import annotations

import random

from level_forge.core import tiles
from level_forge.core.hills import build_hill, find_grass_row
from level_forge.core.level import Level, LevelType
from level_forge.core.mutation import build_pipe
from level_forge.core.protocols import PlayerProfile, SpriteKind, SpriteTemplate

START_ZONE = 10
END_ZONE = 12
GOAL_OFFSET = 4
MAX_GOAL_HEIGHT = 8
MIN_GROUND_ROWS = 1
MAX_GROUND_ROWS = 4

_GAP_CHANCE = {
    LevelType.OVERGROUND: 0.2,
    LevelType.UNDERGROUND: 0.2,
    LevelType.CASTLE: 0.35,
}


def build_ground(level: Level, x0: int, length: int, floor: int) -> None:
    """Fill columns ``x0 .. x0+length-1`` with grass on ``floor`` and ground below."""
    for x in range(x0, min(x0 + length, level.width)):
        level.set_block(x, floor, tiles.GRASS)
        for y in range(floor + 1, level.height):
            level.set_block(x, y, tiles.GROUND)


def build_flat_level(
    width: int, height: int, floor: int | None = None, level_type: LevelType = LevelType.OVERGROUND
) -> Level:
    """A level that is one unbroken stretch of ground."""
    level = Level(width, height, level_type)
    build_ground(level, 0, width, height - 2 if floor is None else floor)
    return level


def fix_edges(level: Level) -> None:
    """Swap ground beside open air for the matching grass-edge tile.

    The grid border counts as solid.
    """
    for x in range(level.width):
        for y in range(level.height):
            block = level.blocks[x][y]
            if block not in (tiles.GRASS, tiles.GROUND):
                continue
            left_open = x > 0 and level.blocks[x - 1][y] == tiles.EMPTY
            right_open = x < level.width - 1 and level.blocks[x + 1][y] == tiles.EMPTY
            if block == tiles.GRASS:
                if left_open:
                    level.blocks[x][y] = tiles.LEFT_UP_GRASS_EDGE
                elif right_open:
                    level.blocks[x][y] = tiles.RIGHT_UP_GRASS_EDGE
            elif left_open:
                level.blocks[x][y] = tiles.LEFT_GRASS_EDGE
            elif right_open:
                level.blocks[x][y] = tiles.RIGHT_GRASS_EDGE


def place_goal(level: Level, x: int, floor: int) -> None:
    """Two goal posts with a bar between them, standing on ``floor``."""
    post = min(MAX_GOAL_HEIGHT, floor - 1)
    if post < 2 or x + 2 >= level.width:
        return
    top = floor - post
    level.set_block(x, top, tiles.BLUE_GOAL_TOP)
    level.set_block(x + 2, top, tiles.PURPLE_GOAL_TOP)
    for y in range(top + 1, floor):
        level.set_block(x, y, tiles.BLUE_GOAL)
        level.set_block(x + 2, y, tiles.PURPLE_GOAL)
    level.set_block(x + 1, top + 1, tiles.GOAL_BAR_END)
    level.set_block(x + 1, top + 2, tiles.GOAL_BAR)


def _surface_cells(level: Level, x_min: int, x_max: int) -> list[tuple[int, int]]:
    """Empty cells directly on top of a grass tile."""
    cells = []
    for x in range(x_min, x_max):
        for y in range(1, level.height):
            if level.blocks[x][y] == tiles.GRASS and level.blocks[x][y - 1] == tiles.EMPTY:
                cells.append((x, y - 1))
    return cells


def _add_coin_runs(level: Level, rng: random.Random, target: int, x_max: int) -> None:
    placed = 0
    surface = _surface_cells(level, START_ZONE, x_max)
    rng.shuffle(surface)
    for x, y in surface:
        if placed >= target:
            break
        row = y - rng.randrange(3)
        for dx in range(rng.randint(1, 5)):
            if placed >= target or not level.in_bounds(x + dx, row):
                break
            if level.blocks[x + dx][row] == tiles.EMPTY:
                level.blocks[x + dx][row] = tiles.COIN
                placed += 1


def _add_enemies(level: Level, rng: random.Random, target: int, x_max: int) -> None:
    surface = [
        (x, y)
        for x, y in _surface_cells(level, START_ZONE, x_max)
        if level.sprites[x][y] is None
    ]
    rng.shuffle(surface)
    for x, y in surface[:target]:
        kind = SpriteKind.GOOMBA if rng.random() < 0.7 else SpriteKind.GREEN_KOOPA
        level.set_sprite_template(x, y, SpriteTemplate(kind, winged=rng.random() < 0.1))


def generate_level(
    width: int,
    height: int,
    seed: int | None = None,
    level_type: LevelType = LevelType.OVERGROUND,
    profile: PlayerProfile | None = None,
) -> Level:
    """Build one random level.

    With a profile, the number of coins and enemies scattered is drawn
    around the profile's targets so the first generation starts near them.
    """
    rng = random.Random(seed)
    level = Level(width, height, level_type)
    lowest_floor = max(height - 1 - MIN_GROUND_ROWS, 0)
    highest_floor = min(max(height - 1 - MAX_GROUND_ROWS, 2), lowest_floor)
    floor = rng.randint(highest_floor, lowest_floor)

    exit_x = max(width - END_ZONE, 0)
    start = min(START_ZONE, exit_x)
    build_ground(level, 0, start, floor)
    x = start
    gap_chance = _GAP_CHANCE[level_type]
    while x < exit_x:
        if rng.random() < gap_chance and x + 6 < exit_x:
            x += rng.randint(2, 4)
            continue
        length = min(rng.randint(4, 12), exit_x - x)
        floor = min(max(floor + rng.randint(-2, 2), highest_floor), lowest_floor)
        build_ground(level, x, length, floor)
        x += length

    # Decorate before the end zone exists so hills and pipes stay out of it.
    if level_type != LevelType.CASTLE:
        for _ in range(rng.randrange(3)):
            hill_x = rng.randrange(START_ZONE, max(exit_x, START_ZONE + 1))
            build_hill(level, hill_x, rng, max_attempts=10)

    for _ in range(rng.randrange(4)):
        for _attempt in range(20):
            px = rng.randrange(START_ZONE, max(exit_x - 2, START_ZONE + 1))
            py = find_grass_row(level, px)
            if py is not None and build_pipe(px, py - 1, level, rng):
                break

    build_ground(level, exit_x, width - exit_x, floor)
    if level_type == LevelType.UNDERGROUND:
        for cx in range(width):
            level.set_block(cx, 0, tiles.GROUND)

    fix_edges(level)
    place_goal(level, exit_x + GOAL_OFFSET, floor)

    if profile is not None:
        coin_target = rng.randint(0, 2 * profile.coins)
        enemy_target = rng.randint(0, 2 * profile.kills)
    else:
        coin_target = rng.randint(0, width // 8)
        enemy_target = rng.randint(0, width // 20)
    _add_coin_runs(level, rng, coin_target, exit_x)
    _add_enemies(level, rng, enemy_target, exit_x)
    return level
