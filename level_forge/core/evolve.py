"""Generational driver for evolving a level toward a player profile.

Each ``step()`` is one generation:

1. Sort the population best-first.
2. Breed offspring (rank-biased parents, crossover or clone, optional
   mutation, evaluation) until the population reaches ``max_population``.
3. Sum every fitness into an aggregate signal and record its change.
4. Sort again and cut back to the survivors.
5. Replace the best-ever candidate with a copy of the new leader if fitter.

The loop stops on an iteration bound; the aggregate-signal change is
tracked for reporting only.
"""

from __future__ import annotations

import enum
import logging
import math
import random
from dataclasses import dataclass, field
from typing import Any, Callable

from level_forge.core.crossover import crossover
from level_forge.core.fitness import ElementCounts, count_elements, evaluate
from level_forge.core.generator import generate_level
from level_forge.core.level import Level, LevelGeometryError, LevelType
from level_forge.core.mutation import Mutator
from level_forge.core.protocols import PlayerProfile
from level_forge.core.selection import weighted_pick

logger = logging.getLogger("level_forge.evolve")


class EvolutionConfigError(ValueError):
    """Raised for evolution settings that cannot work."""


class TruncationPolicy(enum.Enum):
    """How the grown population is cut back each generation.

    TOP_K keeps the ``steady_state_size`` fittest. THINNING keeps the
    ``steady_state_size`` fittest and the ``steady_state_size`` least fit,
    and drops every other rank in between.
    """

    TOP_K = "top-k"
    THINNING = "thinning"


@dataclass
class EvolutionConfig:
    steady_state_size: int = 10
    max_population: int = 50
    crossover_probability: float = 0.90
    mutation_probability: float = 0.60
    max_iterations: int = 10000
    delta_threshold: float = 0.00005  # informational, not a stop condition
    rank_bound: int = 49
    truncation: TruncationPolicy = TruncationPolicy.TOP_K
    seed: int | None = None

    # Bounded retries
    max_split_attempts: int = 100
    max_pipe_attempts: int = 100
    max_placement_attempts: int = 1000
    hill_max_attempts: int = 100

    # Hills
    hill_chance: int = 20  # add-hill mutation builds one with probability 1/hill_chance
    hill_max_length: int = 20
    enable_hill_removal: bool = False

    def validate(self) -> None:
        if self.steady_state_size < 1:
            raise EvolutionConfigError(
                f"steady_state_size must be >= 1, got {self.steady_state_size}"
            )
        if self.max_population <= self.steady_state_size:
            raise EvolutionConfigError(
                f"max_population ({self.max_population}) must exceed "
                f"steady_state_size ({self.steady_state_size})"
            )
        for name in ("crossover_probability", "mutation_probability"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise EvolutionConfigError(f"{name} must be in [0, 1], got {value}")
        for name in (
            "max_iterations",
            "rank_bound",
            "max_split_attempts",
            "max_pipe_attempts",
            "max_placement_attempts",
            "hill_max_attempts",
            "hill_chance",
            "hill_max_length",
        ):
            value = getattr(self, name)
            if value < 1:
                raise EvolutionConfigError(f"{name} must be >= 1, got {value}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EvolutionConfig:
        """Build from a TOML/JSON table, ignoring unknown keys."""
        known = {f for f in cls.__dataclass_fields__}
        kwargs = {k.replace("-", "_"): v for k, v in data.items()}
        kwargs = {k: v for k, v in kwargs.items() if k in known}
        if "truncation" in kwargs and not isinstance(kwargs["truncation"], TruncationPolicy):
            kwargs["truncation"] = TruncationPolicy(kwargs["truncation"])
        return cls(**kwargs)


@dataclass
class Candidate:
    """A level tagged with the fitness of its last evaluation."""

    level: Level
    fitness: float = 0.0

    def clone(self) -> Candidate:
        return Candidate(level=self.level.clone(), fitness=self.fitness)


@dataclass
class GenerationStats:
    generation: int
    population_size: int
    top_fitness: float
    total_fitness: float
    delta_error: float
    best_fitness: float
    plateaued: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "generation": self.generation,
            "population_size": self.population_size,
            "top_fitness": self.top_fitness,
            "total_fitness": self.total_fitness,
            "delta_error": self.delta_error if math.isfinite(self.delta_error) else None,
            "best_fitness": self.best_fitness,
            "plateaued": self.plateaued,
        }


@dataclass
class EvolutionResult:
    profile: PlayerProfile
    best_fitness: float
    best_counts: ElementCounts
    best_level: Level
    total_generations: int = 0
    convergence_reason: str = ""  # max_iterations | generation_limit
    history: list[GenerationStats] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "profile": self.profile.to_dict(),
            "best_fitness": self.best_fitness,
            "best_counts": self.best_counts.to_dict(),
            "total_generations": self.total_generations,
            "convergence_reason": self.convergence_reason,
            "history": [g.to_dict() for g in self.history],
            "level": self.best_level.to_dict(),
        }

    def to_markdown(self) -> str:
        lines: list[str] = []
        lines.append("# Evolution Result")
        lines.append("")
        lines.append(f"**Generations:** {self.total_generations}")
        lines.append(f"**Convergence reason:** {self.convergence_reason}")
        lines.append(f"**Best fitness:** {self.best_fitness:.4f}")
        lines.append("")

        lines.append("## Counts")
        lines.append(f"- Coins: {self.best_counts.coins} (target {self.profile.coins})")
        lines.append(f"- Jumps: {self.best_counts.jumps} (target {self.profile.jumps})")
        lines.append(f"- Enemies: {self.best_counts.enemies} (target {self.profile.kills})")
        lines.append("")

        if self.history:
            lines.append("## Fitness Log")
            improved_at = [
                g for i, g in enumerate(self.history)
                if i == 0 or g.best_fitness > self.history[i - 1].best_fitness
            ]
            for g in improved_at:
                lines.append(f"- **Generation {g.generation}**: best={g.best_fitness:.4f}")
            lines.append("")

        return "\n".join(lines)


def truncate(population: list[Candidate], keep: int, policy: TruncationPolicy) -> None:
    """Cut a best-first population back in place."""
    if policy is TruncationPolicy.TOP_K:
        del population[keep:]
        return
    # Removing at i while the bound shrinks drops every other middle rank.
    i = keep
    while i < len(population) - keep:
        del population[i]
        i += 1


class GeneticAlgorithm:
    """Evolves a population of levels toward a player profile."""

    def __init__(
        self,
        width: int,
        height: int,
        seed: int | None = None,
        level_type: LevelType = LevelType.OVERGROUND,
        profile: PlayerProfile | None = None,
        config: EvolutionConfig | None = None,
        level_factory: Callable[[int, int, int, LevelType, PlayerProfile], Level] | None = None,
    ):
        self.config = config or EvolutionConfig()
        self.config.validate()
        self.width = width
        self.height = height
        self.level_type = level_type
        self.profile = profile or PlayerProfile()
        self.rng = random.Random(self.config.seed if seed is None else seed)
        self.mutator = Mutator(
            self.rng,
            hill_chance=self.config.hill_chance,
            hill_max_length=self.config.hill_max_length,
            hill_max_attempts=self.config.hill_max_attempts,
            max_pipe_attempts=self.config.max_pipe_attempts,
            max_placement_attempts=self.config.max_placement_attempts,
            enable_hill_removal=self.config.enable_hill_removal,
        )
        self.iteration_count = 0
        self.prev_error = math.inf
        self.delta_error = self.config.delta_threshold
        self.history: list[GenerationStats] = []

        factory = level_factory or generate_level
        self.population: list[Candidate] = []
        for _ in range(self.config.steady_state_size):
            level = factory(width, height, self.rng.getrandbits(63), level_type, self.profile)
            self._check_geometry(level)
            self.population.append(Candidate(level, self.evaluate(level)))
        self._sort()
        self.best = self.population[0].clone()

    def _check_geometry(self, level: Level) -> None:
        level.validate()
        if (level.width, level.height) != (self.width, self.height):
            raise LevelGeometryError(
                f"Generated level is {level.width}x{level.height}, "
                f"expected {self.width}x{self.height}"
            )

    def evaluate(self, level: Level) -> float:
        return evaluate(level, self.profile)

    def _sort(self) -> None:
        self.population.sort(key=lambda c: c.fitness, reverse=True)

    def _select(self) -> Candidate:
        return weighted_pick(self.population, self.rng, self.config.rank_bound)

    def breed(self) -> Candidate:
        """One offspring: owned copy of the parents, never an alias."""
        parent_a = self._select()
        parent_b = self._select()
        if self.rng.random() <= self.config.crossover_probability:
            level = crossover(
                parent_a.level, parent_b.level, self.rng, self.config.max_split_attempts
            )
        elif self.rng.random() <= 0.5:
            level = parent_a.level.clone()
        else:
            level = parent_b.level.clone()

        if self.rng.random() <= self.config.mutation_probability:
            level = self.mutator.mutate(level)
        return Candidate(level, self.evaluate(level))

    def step(self) -> None:
        """Advance one generation."""
        self.iteration_count += 1
        self._sort()

        while len(self.population) < self.config.max_population:
            self.population.append(self.breed())

        error = sum(c.fitness for c in self.population)
        self.delta_error = abs(error - self.prev_error)
        self.prev_error = error

        self._sort()
        truncate(self.population, self.config.steady_state_size, self.config.truncation)

        leader = self.population[0]
        if leader.fitness > self.best.fitness:
            self.best = leader.clone()
            self.best.fitness = self.evaluate(self.best.level)
            logger.debug(
                "Generation %d: new best fitness %.4f", self.iteration_count, self.best.fitness
            )

        self.history.append(
            GenerationStats(
                generation=self.iteration_count,
                population_size=len(self.population),
                top_fitness=leader.fitness,
                total_fitness=error,
                delta_error=self.delta_error,
                best_fitness=self.best.fitness,
                plateaued=self.delta_error < self.config.delta_threshold,
            )
        )

    def is_converged(self) -> bool:
        return self.iteration_count > self.config.max_iterations

    def best_result(self) -> Candidate:
        """The best-ever candidate; logs its fitness and element counts."""
        counts = count_elements(self.best.level)
        logger.info("Fitness rating: %s", self.best.fitness)
        logger.info("Number of coins: %d", counts.coins)
        logger.info("Number of jumps: %d", counts.jumps)
        logger.info("Number of enemies: %d", counts.enemies)
        return self.best

    def run(
        self,
        max_generations: int | None = None,
        on_generation_complete: Callable[[GenerationStats], None] | None = None,
    ) -> EvolutionResult:
        """Step until converged or ``max_generations`` more generations have run."""
        reason = "max_iterations"
        ran = 0
        while not self.is_converged():
            if max_generations is not None and ran >= max_generations:
                reason = "generation_limit"
                break
            self.step()
            ran += 1
            if on_generation_complete:
                on_generation_complete(self.history[-1])

        best = self.best_result()
        return EvolutionResult(
            profile=self.profile,
            best_fitness=best.fitness,
            best_counts=count_elements(best.level),
            best_level=best.level,
            total_generations=self.iteration_count,
            convergence_reason=reason,
            history=list(self.history),
        )
