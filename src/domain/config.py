"""Load simulation system definitions from TOML files."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from domain.config_base import BaseSystemConfig, load_system_configs, parse_system_metadata
from domain.matchmaking import MatchmakingParameters
from domain.outcome import DEFAULT_INACTIVITY_TIERS, DEFAULT_NETWORK_TIERS, OutcomeParameters
from domain.pool import PoolParameters
from domain.ratings.elo.context_calculator import ContextEloParameters
from domain.sampling import SamplingTier

ROOT_DIR = Path(__file__).resolve().parents[2]
DEFAULT_CONFIG_DIR = ROOT_DIR / "configs" / "simulation"

_TABLE_KEYS: dict[str, frozenset[str]] = {
    "pool": frozenset({"batch_size", "max_practice_hours"}),
    "matchmaking": frozenset({"match_size", "team_size"}),
    "network": frozenset({"tiers"}),
    "inactivity": frozenset({"tiers"}),
    "performance": frozenset(
        {
            "max_kills",
            "low_performance_threshold",
            "low_performance_floor_probability",
            "low_performance_max_kills",
            "severe_inactivity_threshold",
            "poor_network_threshold",
        }
    ),
    "rating": frozenset(
        {"k_factor", "scale_factor", "latency_weight", "map_familiarity_weight", "inactivity_weight"}
    ),
}


@dataclass(frozen=True)
class SimulationParameters:
    """Every tunable constant of one simulation, grouped by component."""

    pool: PoolParameters = field(default_factory=PoolParameters)
    matchmaking: MatchmakingParameters = field(default_factory=MatchmakingParameters)
    outcome: OutcomeParameters = field(default_factory=OutcomeParameters)
    rating: ContextEloParameters = field(default_factory=ContextEloParameters)


@dataclass(frozen=True)
class SimulationSystemConfig(BaseSystemConfig):
    """Configuration for one named simulation setup."""

    parameters: SimulationParameters

    def as_config_json(self) -> dict[str, Any]:
        pool = self.parameters.pool
        matchmaking = self.parameters.matchmaking
        outcome = self.parameters.outcome
        rating = self.parameters.rating
        return {
            "batch_size": pool.batch_size,
            "max_practice_hours": pool.max_practice_hours,
            "match_size": matchmaking.match_size,
            "team_size": matchmaking.team_size,
            "network_tiers": [_tier_json(tier) for tier in outcome.network_tiers],
            "inactivity_tiers": [_tier_json(tier) for tier in outcome.inactivity_tiers],
            "max_kills": outcome.max_kills,
            "low_performance_threshold": outcome.low_performance_threshold,
            "low_performance_floor_probability": outcome.low_performance_floor_probability,
            "severe_inactivity_threshold": outcome.severe_inactivity_threshold,
            "poor_network_threshold": outcome.poor_network_threshold,
            "k_factor": rating.k_factor,
            "scale_factor": rating.rating_sensitivity,
            "latency_weight": rating.latency_weight,
            "map_familiarity_weight": rating.map_familiarity_weight,
            "inactivity_weight": rating.inactivity_weight,
        }


def _tier_json(tier: SamplingTier) -> dict[str, float]:
    return {"probability": tier.probability, "low": tier.low, "high": tier.high}


def load_simulation_configs(config_dir: Path = DEFAULT_CONFIG_DIR) -> list[SimulationSystemConfig]:
    """Load and validate all simulation TOML config files in a directory."""
    return load_system_configs(
        config_dir,
        _parse_simulation_config,
        duplicate_name_label="simulation",
    )


def _parse_simulation_config(raw: dict[str, Any], file_path: Path) -> SimulationSystemConfig:
    name, description = parse_system_metadata(raw, file_path)
    pool_raw = _table(raw, "pool", file_path)
    matchmaking_raw = _table(raw, "matchmaking", file_path)
    network_raw = _table(raw, "network", file_path)
    inactivity_raw = _table(raw, "inactivity", file_path)
    performance_raw = _table(raw, "performance", file_path)
    rating_raw = _table(raw, "rating", file_path)

    pool = PoolParameters(
        batch_size=int(pool_raw.get("batch_size", 50)),
        max_practice_hours=int(pool_raw.get("max_practice_hours", 30)),
    )
    if pool.batch_size < 0:
        raise ValueError(f"{file_path}: [pool].batch_size must be >= 0")
    if pool.max_practice_hours < 0:
        raise ValueError(f"{file_path}: [pool].max_practice_hours must be >= 0")

    matchmaking = MatchmakingParameters(
        match_size=int(matchmaking_raw.get("match_size", 10)),
        team_size=int(matchmaking_raw.get("team_size", 5)),
    )
    if matchmaking.team_size <= 0:
        raise ValueError(f"{file_path}: [matchmaking].team_size must be > 0")
    if matchmaking.match_size != matchmaking.team_size * 2:
        raise ValueError(f"{file_path}: [matchmaking].match_size must be twice team_size")

    outcome = OutcomeParameters(
        network_tiers=_parse_tiers(network_raw, DEFAULT_NETWORK_TIERS, file_path=file_path, table="network"),
        inactivity_tiers=_parse_tiers(
            inactivity_raw,
            DEFAULT_INACTIVITY_TIERS,
            file_path=file_path,
            table="inactivity",
        ),
        max_kills=int(performance_raw.get("max_kills", 20)),
        low_performance_threshold=float(performance_raw.get("low_performance_threshold", 0.3)),
        low_performance_floor_probability=float(
            performance_raw.get("low_performance_floor_probability", 0.95)
        ),
        low_performance_max_kills=int(performance_raw.get("low_performance_max_kills", 2)),
        severe_inactivity_threshold=float(performance_raw.get("severe_inactivity_threshold", 0.5)),
        poor_network_threshold=float(performance_raw.get("poor_network_threshold", 0.5)),
    )
    _validate_outcome(file_path=file_path, outcome=outcome)

    rating = ContextEloParameters(
        k_factor=float(rating_raw.get("k_factor", 0.1)),
        rating_sensitivity=float(rating_raw.get("scale_factor", 10.0)),
        latency_weight=float(rating_raw.get("latency_weight", 0.02)),
        map_familiarity_weight=float(rating_raw.get("map_familiarity_weight", 0.0002)),
        inactivity_weight=float(rating_raw.get("inactivity_weight", 0.06)),
    )
    _validate_rating(file_path=file_path, rating=rating)

    return SimulationSystemConfig(
        name=name,
        description=description,
        file_path=file_path,
        parameters=SimulationParameters(
            pool=pool,
            matchmaking=matchmaking,
            outcome=outcome,
            rating=rating,
        ),
    )


def _table(raw: dict[str, Any], table: str, file_path: Path) -> dict[str, Any]:
    table_raw = raw.get(table, {})
    unknown = sorted(set(table_raw) - _TABLE_KEYS[table])
    if unknown:
        raise ValueError(f"{file_path}: [{table}] has unknown keys: {unknown}")
    return table_raw


def _parse_tiers(
    table_raw: dict[str, Any],
    default: tuple[SamplingTier, ...],
    *,
    file_path: Path,
    table: str,
) -> tuple[SamplingTier, ...]:
    tiers_raw = table_raw.get("tiers")
    if tiers_raw is None:
        return default
    if not tiers_raw:
        raise ValueError(f"{file_path}: [{table}].tiers must not be empty")

    tiers = tuple(
        SamplingTier(
            probability=float(item["probability"]),
            low=float(item["low"]),
            high=float(item["high"]),
        )
        for item in tiers_raw
    )
    total = sum(tier.probability for tier in tiers)
    if abs(total - 1.0) > 1e-9:
        raise ValueError(f"{file_path}: [{table}].tiers probabilities must sum to 1")
    for tier in tiers:
        if tier.low > tier.high:
            raise ValueError(f"{file_path}: [{table}].tiers has low > high")
    return tiers


def _validate_outcome(*, file_path: Path, outcome: OutcomeParameters) -> None:
    for tier in outcome.network_tiers:
        if tier.low < 0.0 or tier.high > 1.0:
            raise ValueError(f"{file_path}: [network].tiers ranges must be within [0, 1]")
    for tier in outcome.inactivity_tiers:
        if tier.low <= 0.0 or tier.high >= 1.0:
            raise ValueError(f"{file_path}: [inactivity].tiers ranges must be within (0, 1)")
    if outcome.max_kills < 1:
        raise ValueError(f"{file_path}: [performance].max_kills must be >= 1")
    if not 0.0 <= outcome.low_performance_floor_probability <= 1.0:
        raise ValueError(f"{file_path}: [performance].low_performance_floor_probability must be between 0 and 1")
    if outcome.low_performance_max_kills < 0:
        raise ValueError(f"{file_path}: [performance].low_performance_max_kills must be >= 0")


def _validate_rating(*, file_path: Path, rating: ContextEloParameters) -> None:
    if rating.k_factor <= 0.0:
        raise ValueError(f"{file_path}: [rating].k_factor must be > 0")
    if rating.rating_sensitivity <= 0.0:
        raise ValueError(f"{file_path}: [rating].scale_factor must be > 0")
    if rating.latency_weight < 0.0:
        raise ValueError(f"{file_path}: [rating].latency_weight must be >= 0")
    if rating.map_familiarity_weight < 0.0:
        raise ValueError(f"{file_path}: [rating].map_familiarity_weight must be >= 0")
    if rating.inactivity_weight < 0.0:
        raise ValueError(f"{file_path}: [rating].inactivity_weight must be >= 0")


__all__ = [
    "DEFAULT_CONFIG_DIR",
    "SimulationParameters",
    "SimulationSystemConfig",
    "load_simulation_configs",
]
