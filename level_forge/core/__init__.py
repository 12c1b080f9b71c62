"""Core modules for the level-forge evolution engine."""

from level_forge.core.crossover import crossover, find_split_column
from level_forge.core.evolve import (
    Candidate,
    EvolutionConfig,
    EvolutionConfigError,
    EvolutionResult,
    GenerationStats,
    GeneticAlgorithm,
    TruncationPolicy,
)
from level_forge.core.fitness import ElementCounts, count_elements, evaluate
from level_forge.core.generator import build_flat_level, generate_level
from level_forge.core.hills import build_hill, remove_hill
from level_forge.core.level import Level, LevelGeometryError, LevelType
from level_forge.core.mutation import (
    MutationKind,
    Mutator,
    build_pipe,
    remove_random_coin,
    remove_random_enemy,
    remove_random_pipe,
)
from level_forge.core.protocols import PlayerProfile, SpriteKind, SpriteTemplate, TileGrid
from level_forge.core.selection import select_rank, weighted_pick

__all__ = [
    # crossover
    "crossover",
    "find_split_column",
    # evolve
    "Candidate",
    "EvolutionConfig",
    "EvolutionConfigError",
    "EvolutionResult",
    "GenerationStats",
    "GeneticAlgorithm",
    "TruncationPolicy",
    # fitness
    "ElementCounts",
    "count_elements",
    "evaluate",
    # generator
    "build_flat_level",
    "generate_level",
    # hills
    "build_hill",
    "remove_hill",
    # level
    "Level",
    "LevelGeometryError",
    "LevelType",
    # mutation
    "MutationKind",
    "Mutator",
    "build_pipe",
    "remove_random_coin",
    "remove_random_enemy",
    "remove_random_pipe",
    # protocols
    "PlayerProfile",
    "SpriteKind",
    "SpriteTemplate",
    "TileGrid",
    # selection
    "select_rank",
    "weighted_pick",
]
