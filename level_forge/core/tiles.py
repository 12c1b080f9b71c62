"""Tile codes for the level sheet.

Codes address the 16-column tile sheet as ``col + row * 16``. Zero is the
empty tile.
"""

from __future__ import annotations


def tile(col: int, row: int) -> int:
    """Sheet coordinates -> tile code."""
    return col + row * 16


EMPTY = 0

GROUND = tile(1, 9)
GRASS = tile(1, 8)
LEFT_GRASS_EDGE = tile(0, 9)
RIGHT_GRASS_EDGE = tile(2, 9)
LEFT_UP_GRASS_EDGE = tile(0, 8)
RIGHT_UP_GRASS_EDGE = tile(2, 8)
LEFT_POCKET_GRASS = tile(3, 9)
RIGHT_POCKET_GRASS = tile(3, 8)

COIN = tile(2, 2)
CANNON_TOP = tile(14, 0)

HILL_TOP_LEFT = tile(4, 8)
HILL_TOP = tile(5, 8)
HILL_TOP_RIGHT = tile(6, 8)
HILL_LEFT = tile(4, 9)
HILL_FILL = tile(5, 9)
HILL_RIGHT = tile(6, 9)
HILL_TOP_LEFT_IN = tile(4, 11)
HILL_TOP_RIGHT_IN = tile(6, 11)

TUBE_TOP_LEFT = tile(10, 0)
TUBE_TOP_RIGHT = tile(11, 0)
TUBE_SIDE_LEFT = tile(10, 1)
TUBE_SIDE_RIGHT = tile(11, 1)

BLUE_GOAL_TOP = tile(12, 4)
BLUE_GOAL = tile(12, 5)
PURPLE_GOAL_TOP = tile(13, 4)
PURPLE_GOAL = tile(13, 5)
GOAL_BAR = tile(13, 3)
GOAL_BAR_END = tile(12, 3)

# Hill layers pick their tile from these sheet columns/rows.
HILL_EDGE_LEFT_COL = 4
HILL_FILL_COL = 5
HILL_EDGE_RIGHT_COL = 6
HILL_TOP_ROW = 8
HILL_BODY_ROW = 9

# Multi-cell structures a crossover split must not cut through.
FRAGILE_TILES = frozenset({HILL_FILL, HILL_LEFT, HILL_RIGHT, TUBE_SIDE_LEFT, TUBE_SIDE_RIGHT})

GOAL_TILES = frozenset(
    {GOAL_BAR, GOAL_BAR_END, PURPLE_GOAL, PURPLE_GOAL_TOP, BLUE_GOAL, BLUE_GOAL_TOP}
)

# Tiles the player has to jump onto or over.
JUMP_TILES = frozenset({HILL_TOP_LEFT, CANNON_TOP, LEFT_GRASS_EDGE, TUBE_TOP_LEFT})

# Ground line tiles kept when a pipe is torn down.
GROUND_LINE_TILES = frozenset({GROUND, GRASS})

GROUND_TILES = frozenset(
    {
        GROUND,
        LEFT_GRASS_EDGE,
        RIGHT_GRASS_EDGE,
        LEFT_POCKET_GRASS,
        RIGHT_POCKET_GRASS,
    }
)
SURFACE_TILES = frozenset({GRASS, LEFT_UP_GRASS_EDGE, RIGHT_UP_GRASS_EDGE})

HILL_TILES = frozenset(
    {
        HILL_TOP_LEFT,
        HILL_TOP,
        HILL_TOP_RIGHT,
        HILL_LEFT,
        HILL_FILL,
        HILL_RIGHT,
        HILL_TOP_LEFT_IN,
        HILL_TOP_RIGHT_IN,
    }
)

GLYPHS: dict[int, str] = {
    EMPTY: "-",
    COIN: "o",
    CANNON_TOP: "B",
    TUBE_TOP_LEFT: "T",
    TUBE_TOP_RIGHT: "T",
    TUBE_SIDE_LEFT: "|",
    TUBE_SIDE_RIGHT: "|",
}
GLYPHS.update({t: "X" for t in GROUND_TILES})
GLYPHS.update({t: "=" for t in SURFACE_TILES})
GLYPHS.update({t: "^" for t in (HILL_TOP_LEFT, HILL_TOP, HILL_TOP_RIGHT)})
GLYPHS.update({t: "^" for t in (HILL_TOP_LEFT_IN, HILL_TOP_RIGHT_IN)})
GLYPHS.update({t: "h" for t in (HILL_LEFT, HILL_FILL, HILL_RIGHT)})
GLYPHS.update({t: "F" for t in GOAL_TILES})


def glyph(code: int) -> str:
    return GLYPHS.get(code, "?")
