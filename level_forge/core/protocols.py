"""Core protocol types and data classes for level-forge.

Defines what the evolution engine consumes from the outside world:

1. PlayerProfile - Target coin/jump/kill counts for the level being evolved
2. SpriteTemplate - A typed sprite placed in a grid cell
3. TileGrid - The 2D tile + sprite grid the operators read and write
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


class SpriteKind(enum.Enum):
    """Sprite types that can be placed in a level cell."""

    RED_KOOPA = "red_koopa"
    GREEN_KOOPA = "green_koopa"
    GOOMBA = "goomba"
    SPIKY = "spiky"
    FLOWER = "flower"

    @property
    def is_enemy(self) -> bool:
        return self in ENEMY_KINDS


# Enemies the player can stomp, and so has to jump over or onto.
ENEMY_KINDS = frozenset(
    {SpriteKind.RED_KOOPA, SpriteKind.GREEN_KOOPA, SpriteKind.GOOMBA, SpriteKind.SPIKY}
)


@dataclass(frozen=True)
class SpriteTemplate:
    """A sprite placement. Immutable, so grid copies can share instances."""

    kind: SpriteKind
    winged: bool = False

    @property
    def is_enemy(self) -> bool:
        return self.kind.is_enemy

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind.value, "winged": self.winged}


@dataclass(frozen=True)
class PlayerProfile:
    """Target gameplay counts observed from a player's sessions."""

    coins: int = 0
    jumps: int = 0
    kills: int = 0

    def __post_init__(self) -> None:
        for name in ("coins", "jumps", "kills"):
            value = getattr(self, name)
            if value < 0:
                raise ValueError(f"PlayerProfile.{name} must be >= 0, got {value}")

    def to_dict(self) -> dict[str, int]:
        return {"coins": self.coins, "jumps": self.jumps, "kills": self.kills}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PlayerProfile:
        return cls(
            coins=int(data.get("coins", 0)),
            jumps=int(data.get("jumps", 0)),
            kills=int(data.get("kills", 0)),
        )


# --- Protocols ---


@runtime_checkable
class TileGrid(Protocol):
    """A width x height grid of tile codes with a parallel sprite grid."""

    width: int
    height: int

    def get_block(self, x: int, y: int) -> int: ...
    def set_block(self, x: int, y: int, code: int) -> None: ...
    def get_sprite_template(self, x: int, y: int) -> SpriteTemplate | None: ...
    def set_sprite_template(self, x: int, y: int, template: SpriteTemplate | None) -> None: ...
    def clone(self) -> TileGrid: ...
