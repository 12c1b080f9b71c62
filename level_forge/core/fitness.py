"""Fitness of a level against a player profile.

Each of coins, jumps and kills is turned into a ``count / target`` ratio and
reshaped so that undershoot is penalized linearly, a moderate overshoot sits
on a perfect-match plateau, a larger overshoot decays toward zero and a gross
overshoot scores -1. The fitness is the mean of the three reshaped terms.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from level_forge.core import tiles
from level_forge.core.protocols import PlayerProfile, TileGrid


@dataclass(frozen=True)
class ReshapeCurve:
    """Ratio bounds: (1.0, plateau_end] -> 1.0, (plateau_end, cutoff] -> decay."""

    plateau_end: float
    cutoff: float


COIN_CURVE = ReshapeCurve(plateau_end=1.5, cutoff=2.0)
JUMP_CURVE = ReshapeCurve(plateau_end=1.5, cutoff=2.0)
KILL_CURVE = ReshapeCurve(plateau_end=2.0, cutoff=3.0)


@dataclass(frozen=True)
class ElementCounts:
    coins: int = 0
    jumps: int = 0
    enemies: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {"coins": self.coins, "jumps": self.jumps, "enemies": self.enemies}


def count_elements(level: TileGrid) -> ElementCounts:
    """Single pass over the grid counting coins, jump obstacles and enemies.

    Every enemy also counts as a jump, since the player has to get over it.
    """
    coins = 0
    jumps = 0
    enemies = 0
    for x in range(level.width):
        for y in range(level.height):
            block = level.get_block(x, y)
            if block == tiles.COIN:
                coins += 1
            elif block in tiles.JUMP_TILES:
                jumps += 1
            sprite = level.get_sprite_template(x, y)
            if sprite is not None and sprite.is_enemy:
                enemies += 1
                jumps += 1
    return ElementCounts(coins=coins, jumps=jumps, enemies=enemies)


def ratio(count: int, target: int) -> float:
    """count / target, with a zero target contributing nothing."""
    if target == 0:
        return 0.0
    return count / target


def reshape_ratio(value: float, curve: ReshapeCurve) -> float:
    if math.isnan(value):
        return 0.0
    if value > curve.cutoff:
        return -1.0
    if value > curve.plateau_end:
        return 1.0 / (2.0 * value)
    if value > 1.0:
        return 1.0
    return value


def evaluate_counts(counts: ElementCounts, profile: PlayerProfile) -> float:
    coin_fit = reshape_ratio(ratio(counts.coins, profile.coins), COIN_CURVE)
    jump_fit = reshape_ratio(ratio(counts.jumps, profile.jumps), JUMP_CURVE)
    kill_fit = reshape_ratio(ratio(counts.enemies, profile.kills), KILL_CURVE)

    fitness = (coin_fit + jump_fit + kill_fit) / 3.0
    if math.isnan(fitness) or math.isinf(fitness):
        return 0.0
    return fitness


def evaluate(level: TileGrid, profile: PlayerProfile) -> float:
    """Fitness in [-1, 1]; total over every grid and profile."""
    return evaluate_counts(count_elements(level), profile)
