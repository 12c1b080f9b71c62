"""Concrete tile grid used by the evolution engine.

Blocks are stored column-major (``blocks[x][y]``) so whole columns can be
copied and scanned cheaply. Row 0 is the top of the level.
"""

from __future__ import annotations

import enum
from typing import Any

from level_forge.core import tiles
from level_forge.core.protocols import SpriteTemplate


class LevelGeometryError(ValueError):
    """Raised when a grid's matrices disagree with its declared size."""


class LevelType(enum.Enum):
    OVERGROUND = 0
    UNDERGROUND = 1
    CASTLE = 2


class Level:
    """A width x height tile grid with a parallel sprite grid."""

    def __init__(self, width: int, height: int, level_type: LevelType = LevelType.OVERGROUND):
        if width <= 0 or height <= 0:
            raise LevelGeometryError(f"Level size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.level_type = level_type
        self.blocks: list[list[int]] = [[tiles.EMPTY] * height for _ in range(width)]
        self.sprites: list[list[SpriteTemplate | None]] = [
            [None] * height for _ in range(width)
        ]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_block(self, x: int, y: int) -> int:
        """Read a tile. Columns clamp into range; rows outside the grid are empty."""
        if y < 0 or y >= self.height:
            return tiles.EMPTY
        x = min(max(x, 0), self.width - 1)
        return self.blocks[x][y]

    def set_block(self, x: int, y: int, code: int) -> None:
        """Write a tile. Writes outside the grid are ignored."""
        if self.in_bounds(x, y):
            self.blocks[x][y] = code

    def get_sprite_template(self, x: int, y: int) -> SpriteTemplate | None:
        if not self.in_bounds(x, y):
            return None
        return self.sprites[x][y]

    def set_sprite_template(self, x: int, y: int, template: SpriteTemplate | None) -> None:
        if self.in_bounds(x, y):
            self.sprites[x][y] = template

    def is_empty(self, x: int, y: int) -> bool:
        return self.get_block(x, y) == tiles.EMPTY

    def cells(self, code: int) -> list[tuple[int, int]]:
        """All (x, y) holding the given tile code."""
        return [
            (x, y)
            for x, column in enumerate(self.blocks)
            for y, block in enumerate(column)
            if block == code
        ]

    def enemy_cells(self) -> list[tuple[int, int]]:
        return [
            (x, y)
            for x, column in enumerate(self.sprites)
            for y, sprite in enumerate(column)
            if sprite is not None and sprite.is_enemy
        ]

    def clone(self) -> Level:
        """Deep copy. Sprite templates are immutable and shared."""
        copy = Level.__new__(Level)
        copy.width = self.width
        copy.height = self.height
        copy.level_type = self.level_type
        copy.blocks = [list(column) for column in self.blocks]
        copy.sprites = [list(column) for column in self.sprites]
        return copy

    def validate(self) -> None:
        """Check both matrices match the declared width and height."""
        if len(self.blocks) != self.width:
            raise LevelGeometryError(
                f"Tile matrix has {len(self.blocks)} columns, expected {self.width}"
            )
        if len(self.sprites) != self.width:
            raise LevelGeometryError(
                f"Sprite matrix has {len(self.sprites)} columns, expected {self.width}"
            )
        for x in range(self.width):
            if len(self.blocks[x]) != self.height:
                raise LevelGeometryError(
                    f"Tile column {x} has {len(self.blocks[x])} rows, expected {self.height}"
                )
            if len(self.sprites[x]) != self.height:
                raise LevelGeometryError(
                    f"Sprite column {x} has {len(self.sprites[x])} rows, expected {self.height}"
                )

    def to_ascii(self) -> str:
        """One text row per grid row; enemies drawn as ``E``."""
        rows = []
        for y in range(self.height):
            chars = []
            for x in range(self.width):
                sprite = self.sprites[x][y]
                if sprite is not None and sprite.is_enemy:
                    chars.append("E")
                else:
                    chars.append(tiles.glyph(self.blocks[x][y]))
            rows.append("".join(chars))
        return "\n".join(rows)

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "level_type": self.level_type.name.lower(),
            "rows": self.to_ascii().split("\n"),
            "sprites": [
                {"x": x, "y": y, **sprite.to_dict()}
                for x, column in enumerate(self.sprites)
                for y, sprite in enumerate(column)
                if sprite is not None
            ],
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Level):
            return NotImplemented
        return (
            self.width == other.width
            and self.height == other.height
            and self.blocks == other.blocks
            and self.sprites == other.sprites
        )

    def __repr__(self) -> str:
        return f"Level({self.width}x{self.height}, {self.level_type.name.lower()})"
