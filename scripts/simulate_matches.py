#!/usr/bin/env python3
"""Run simulated match cycles and compare traditional and context-aware Elo."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from domain.config import DEFAULT_CONFIG_DIR, SimulationSystemConfig, load_simulation_configs
from domain.pipeline import SimulationEngine, run_simulation
from domain.ratings.registry import get_all

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Context-aware Elo match simulation.",
)


def _load_config(config_dir: Path, config_name: str | None) -> SimulationSystemConfig:
    configs = load_simulation_configs(config_dir)
    if config_name is None:
        return configs[0]

    matching = [config for config in configs if config_name in (config.name, config.file_path.name)]
    if not matching:
        raise typer.BadParameter(
            f"No config named '{config_name}' found in {config_dir}",
            param_hint="--config-name",
        )
    return matching[0]


def _validate_system(system: str) -> str:
    available = [descriptor.name for descriptor in get_all()]
    if system not in available:
        raise typer.BadParameter(
            f"Unsupported rating system '{system}'. Choose one of: {', '.join(available)}.",
            param_hint="--system",
        )
    return system


def _configure_logging(log_level: str) -> None:
    level = getattr(logging, log_level.upper(), None)
    if not isinstance(level, int):
        raise typer.BadParameter(f"Unknown log level '{log_level}'", param_hint="--log-level")
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


@app.command("run")
def run(
    config_dir: Annotated[
        Path,
        typer.Option("--config-dir", help="Directory of simulation TOML configs."),
    ] = DEFAULT_CONFIG_DIR,
    config_name: Annotated[
        str | None,
        typer.Option("--config-name", help="System name or file name; defaults to the first config."),
    ] = None,
    players: Annotated[
        int | None,
        typer.Option("--players", help="Players to add; defaults to the config batch size."),
    ] = None,
    matches: Annotated[int, typer.Option("--matches", help="Match cycles to run.")] = 10,
    seed: Annotated[int | None, typer.Option("--seed", help="Seed for reproducible runs.")] = None,
    system: Annotated[
        str,
        typer.Option("--system", help="Rating system committed back into the pool."),
    ] = "traditional",
    log_level: Annotated[str, typer.Option("--log-level")] = "WARNING",
) -> None:
    """Generate a pool, then run match cycles and commit one system's ratings."""
    if matches < 0:
        raise typer.BadParameter("--matches must be >= 0")
    if players is not None and players < 0:
        raise typer.BadParameter("--players must be >= 0")
    _configure_logging(log_level)
    _validate_system(system)

    config = _load_config(config_dir, config_name)
    engine = SimulationEngine.from_config(config, seed=seed)
    engine.add_players(players)
    engine.generate_practice_hours()
    typer.echo(f"config={config.file_path.name} system={config.name} pool_size={len(engine.pool)}")

    summaries = run_simulation(engine, matches=matches, system=system, echo=typer.echo)

    pool = engine.players()
    mean_rating = sum(player.rating for player in pool) / len(pool) if pool else 0.0
    typer.echo(
        "completed "
        f"matches={len(summaries)} "
        f"committed_system={system} "
        f"pool_size={len(pool)} "
        f"mean_rating={mean_rating:.3f}"
    )


@app.command("pool")
def pool(
    config_dir: Annotated[Path, typer.Option("--config-dir")] = DEFAULT_CONFIG_DIR,
    config_name: Annotated[str | None, typer.Option("--config-name")] = None,
    players: Annotated[int | None, typer.Option("--players")] = None,
    seed: Annotated[int | None, typer.Option("--seed")] = None,
) -> None:
    """Generate a pool with practice hours and list it."""
    config = _load_config(config_dir, config_name)
    engine = SimulationEngine.from_config(config, seed=seed)
    engine.add_players(players)
    for player in engine.generate_practice_hours():
        familiarity = player.map_familiarity or {}
        familiarity_text = " ".join(
            f"{map_name.name.lower()}={value:.2f}" for map_name, value in familiarity.items()
        )
        best_map = player.best_map.value if player.best_map is not None else "-"
        typer.echo(f"{player.player_id} rating={player.rating:.3f} best_map={best_map} {familiarity_text}")


if __name__ == "__main__":
    app()
