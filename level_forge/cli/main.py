"""CLI entry point for level-forge.

Commands:
    levelforge evolve    Evolve a level toward a player profile
    levelforge sample    Generate one random level and score it

Settings are resolved in order:
    1. Command-line flags
    2. level-forge.toml in cwd ([level-forge] and [level-forge.evolve])
    3. Built-in defaults
"""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from level_forge.core.level import LevelType

console = Console()
err_console = Console(stderr=True)

LEVEL_TYPES = {t.name.lower(): t for t in LevelType}


def _load_config_toml() -> dict[str, Any]:
    """Load level-forge.toml from cwd if it exists."""
    toml_path = Path.cwd() / "level-forge.toml"
    if not toml_path.exists():
        return {}
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]
    with open(toml_path, "rb") as f:
        return tomllib.load(f)


def _resolve(cli_value: Any, section: dict[str, Any], key: str, default: Any) -> Any:
    """CLI flag > TOML value > default."""
    if cli_value is not None:
        return cli_value
    return section.get(key, default)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


def _build_profile(section: dict[str, Any], coins, jumps, kills):
    from level_forge.core.protocols import PlayerProfile

    profile_toml = section.get("profile", {})
    try:
        return PlayerProfile(
            coins=_resolve(coins, profile_toml, "coins", 0),
            jumps=_resolve(jumps, profile_toml, "jumps", 0),
            kills=_resolve(kills, profile_toml, "kills", 0),
        )
    except ValueError as exc:
        console.print(f"[red]{exc}[/red]")
        sys.exit(1)


def _print_counts_table(counts, profile, fitness: float) -> None:
    table = Table(title="Best Level")
    table.add_column("Element", style="bold")
    table.add_column("Count", justify="right")
    table.add_column("Target", justify="right")
    table.add_row("Coins", str(counts.coins), str(profile.coins))
    table.add_row("Jumps", str(counts.jumps), str(profile.jumps))
    table.add_row("Enemies", str(counts.enemies), str(profile.kills))
    console.print()
    console.print(table)
    console.print(f"[bold]Fitness:[/bold] {fitness:.4f}")
    console.print()


def _print_history_table(history, every: int) -> None:
    table = Table(title="Generations")
    table.add_column("Gen", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Top", justify="right")
    table.add_column("Best", justify="right")
    table.add_column("Delta", justify="right")
    for g in history:
        if g.generation % every and g is not history[-1]:
            continue
        table.add_row(
            str(g.generation),
            str(g.population_size),
            f"{g.top_fitness:.4f}",
            f"{g.best_fitness:.4f}",
            f"{g.delta_error:.5f}",
        )
    console.print(table)


# --- CLI group and commands ---


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Debug logging from the engine")
@click.pass_context
def cli(ctx, verbose: bool):
    """level-forge: evolve tile-grid levels toward a player profile."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["toml"] = _load_config_toml()
    _setup_logging(verbose)


@cli.command()
@click.option("--coins", default=None, type=int, help="Target coins collected")
@click.option("--jumps", default=None, type=int, help="Target jumps performed")
@click.option("--kills", default=None, type=int, help="Target enemies defeated")
@click.option("--width", default=None, type=int, help="Level width in tiles")
@click.option("--height", default=None, type=int, help="Level height in tiles")
@click.option("--type", "level_type", default=None, type=click.Choice(sorted(LEVEL_TYPES)), help="Level variant")
@click.option("--seed", default=None, type=int, help="Seed for a reproducible run")
@click.option("--generations", "-g", default=None, type=int, help="Stop after N generations")
@click.option("--truncation", default=None, type=click.Choice(["top-k", "thinning"]), help="Survivor policy")
@click.option("--show-level", is_flag=True, help="Print the best level as text")
@click.option("--json-output", "json_out", is_flag=True, help="Machine-readable JSON output")
@click.pass_context
def evolve(
    ctx,
    coins: int | None,
    jumps: int | None,
    kills: int | None,
    width: int | None,
    height: int | None,
    level_type: str | None,
    seed: int | None,
    generations: int | None,
    truncation: str | None,
    show_level: bool,
    json_out: bool,
):
    """Evolve a level toward a player profile."""
    from level_forge.core.evolve import EvolutionConfig, EvolutionConfigError, GeneticAlgorithm

    lf_section = ctx.obj["toml"].get("level-forge", {})
    evolve_toml = dict(lf_section.get("evolve", {}))
    profile = _build_profile(lf_section, coins, jumps, kills)

    # Keep engine INFO lines out of the JSON document.
    logging.getLogger("level_forge").setLevel(logging.WARNING if json_out else logging.NOTSET)

    if truncation is not None:
        evolve_toml["truncation"] = truncation
    if seed is not None:
        evolve_toml["seed"] = seed
    resolved_generations = _resolve(generations, evolve_toml, "generations", 100)

    try:
        config = EvolutionConfig.from_dict(evolve_toml)
        ga = GeneticAlgorithm(
            width=_resolve(width, lf_section, "width", 160),
            height=_resolve(height, lf_section, "height", 15),
            level_type=LEVEL_TYPES[_resolve(level_type, lf_section, "type", "overground")],
            profile=profile,
            config=config,
        )
    except (EvolutionConfigError, ValueError, KeyError) as exc:
        console.print(f"[red]Invalid configuration: {exc}[/red]")
        sys.exit(1)

    def on_generation_complete(stats):
        if not json_out and not ctx.obj["verbose"] and stats.generation % 10 == 0:
            console.print(
                f"  Generation {stats.generation}: best={stats.best_fitness:.4f} "
                f"top={stats.top_fitness:.4f}",
                highlight=False,
            )

    result = ga.run(max_generations=resolved_generations, on_generation_complete=on_generation_complete)

    if json_out:
        click.echo(json.dumps(result.to_dict(), indent=2, default=str))
        return

    _print_history_table(result.history, every=max(1, len(result.history) // 10))
    _print_counts_table(result.best_counts, profile, result.best_fitness)
    if show_level:
        console.print(result.best_level.to_ascii(), highlight=False, markup=False)
    click.echo(result.to_markdown())


@cli.command()
@click.option("--coins", default=None, type=int, help="Target coins collected")
@click.option("--jumps", default=None, type=int, help="Target jumps performed")
@click.option("--kills", default=None, type=int, help="Target enemies defeated")
@click.option("--width", default=None, type=int, help="Level width in tiles")
@click.option("--height", default=None, type=int, help="Level height in tiles")
@click.option("--type", "level_type", default=None, type=click.Choice(sorted(LEVEL_TYPES)), help="Level variant")
@click.option("--seed", default=None, type=int, help="Topology seed")
@click.option("--json-output", "json_out", is_flag=True, help="Machine-readable JSON output")
@click.pass_context
def sample(
    ctx,
    coins: int | None,
    jumps: int | None,
    kills: int | None,
    width: int | None,
    height: int | None,
    level_type: str | None,
    seed: int | None,
    json_out: bool,
):
    """Generate one random level and score it against the profile."""
    from level_forge.core.fitness import count_elements, evaluate
    from level_forge.core.generator import generate_level

    lf_section = ctx.obj["toml"].get("level-forge", {})
    profile = _build_profile(lf_section, coins, jumps, kills)
    try:
        level = generate_level(
            _resolve(width, lf_section, "width", 160),
            _resolve(height, lf_section, "height", 15),
            seed,
            LEVEL_TYPES[_resolve(level_type, lf_section, "type", "overground")],
            profile,
        )
    except (ValueError, KeyError) as exc:
        console.print(f"[red]Invalid configuration: {exc}[/red]")
        sys.exit(1)
    counts = count_elements(level)
    fitness = evaluate(level, profile)

    if json_out:
        data = {
            "fitness": fitness,
            "counts": counts.to_dict(),
            "profile": profile.to_dict(),
            "level": level.to_dict(),
        }
        click.echo(json.dumps(data, indent=2))
        return

    console.print(level.to_ascii(), highlight=False, markup=False)
    _print_counts_table(counts, profile, fitness)


if __name__ == "__main__":
    cli()
