"""Shared types for the match simulator and its rating systems."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType


class MapName(str, Enum):
    """Playable maps, in tie-break precedence order."""

    MAP_A = "Map A"
    MAP_B = "Map B"
    MAP_C = "Map C"


ALL_MAPS: tuple[MapName, ...] = tuple(MapName)


class RankDelta(str, Enum):
    """Direction of the most recent rating change."""

    INCREASED = "increased"
    DECREASED = "decreased"
    UNCHANGED = "unchanged"

    @classmethod
    def between(cls, previous: float, current: float) -> RankDelta:
        if current > previous:
            return cls.INCREASED
        if current < previous:
            return cls.DECREASED
        return cls.UNCHANGED


class TeamSide(str, Enum):
    A = "Team A"
    B = "Team B"


@dataclass(frozen=True)
class Player:
    """Snapshot of one pooled player.

    Records are never mutated in place; every stage returns new snapshots and
    the pool owner commits them.
    """

    player_id: str
    rating: float
    previous_rating: float | None = None
    rank_delta: RankDelta | None = None
    best_map: MapName | None = None
    practice_hours: Mapping[MapName, int] | None = None
    map_familiarity: Mapping[MapName, float] | None = None

    def __post_init__(self) -> None:
        # Per-map values are copied into read-only views so snapshots never share state.
        for name in ("practice_hours", "map_familiarity"):
            value = getattr(self, name)
            if value is not None:
                object.__setattr__(self, name, MappingProxyType(dict(value)))


@dataclass(frozen=True)
class MatchParticipant:
    """Per-match samples for one player. Valid for a single match only."""

    player: Player
    network_quality: float
    inactivity_fraction: float
    kills: int
    deaths: int
    kill_death_ratio: float
    map_familiarity_for_selected_map: float = 0.0

    @property
    def player_id(self) -> str:
        return self.player.player_id

    @property
    def rating(self) -> float:
        return self.player.rating

    @property
    def performance(self) -> float:
        return self.network_quality * (1.0 - self.inactivity_fraction)


@dataclass(frozen=True)
class MatchSelection:
    """Two teams picked for one match."""

    team_a: tuple[Player, ...]
    team_b: tuple[Player, ...]

    @property
    def players(self) -> tuple[Player, ...]:
        return self.team_a + self.team_b


@dataclass(frozen=True)
class MatchResult:
    """Win/loss decision for one simulated match."""

    winner: TeamSide
    team_a_mean_kd: float
    team_b_mean_kd: float


@dataclass(frozen=True)
class SimulatedMatch:
    """Canonical match outcome payload used by rating calculators."""

    selected_map: MapName
    team_a: tuple[MatchParticipant, ...]
    team_b: tuple[MatchParticipant, ...]
    result: MatchResult

    @property
    def participants(self) -> tuple[MatchParticipant, ...]:
        return self.team_a + self.team_b


def clamp_rating(value: float) -> float:
    """Clamp a rating into [0, 1]."""
    return max(0.0, min(1.0, value))


def mean_rating(players: tuple[Player, ...] | tuple[MatchParticipant, ...]) -> float:
    return sum(player.rating for player in players) / float(len(players))


__all__ = [
    "ALL_MAPS",
    "MapName",
    "MatchParticipant",
    "MatchResult",
    "MatchSelection",
    "Player",
    "RankDelta",
    "SimulatedMatch",
    "TeamSide",
    "clamp_rating",
    "mean_rating",
]
