"""Staged simulation engine: pool generation, matchmaking, outcome and ratings."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, replace
from random import Random
from typing import Any, TypeVar

from domain.common import MapName, MatchSelection, Player, SimulatedMatch, TeamSide
from domain.config import SimulationParameters, SimulationSystemConfig
from domain.errors import MissingFamiliarityDataError, PipelineStageError
from domain.familiarity import MapFamiliarityCalculator
from domain.matchmaking import Matchmaker, rating_spread
from domain.outcome import MatchOutcomeSimulator
from domain.pool import PlayerPool
from domain.protocol import PipelineStage
from domain.ratings.elo.calculator import ExpectedOutcome, TraditionalEloEvent
from domain.ratings.elo.context_calculator import ContextEloEvent
from domain.ratings.registry import get as get_rating_system

logger = logging.getLogger("context_elo.pipeline")

T = TypeVar("T")

TRADITIONAL = "traditional"
CONTEXT_AWARE = "context_aware"


@dataclass(frozen=True)
class RatingUpdate:
    """Both rating systems' results for one match, computed from the same expectation."""

    outcome: ExpectedOutcome
    traditional: tuple[TraditionalEloEvent, ...]
    context_aware: tuple[ContextEloEvent, ...]

    def events_for(self, system: str) -> tuple[Any, ...]:
        if system == TRADITIONAL:
            return self.traditional
        if system == CONTEXT_AWARE:
            return self.context_aware
        raise ValueError(f"Unsupported rating system '{system}'")

    def team_events(self, system: str, side: TeamSide) -> tuple[Any, ...]:
        return tuple(event for event in self.events_for(system) if event.side == side)


@dataclass(frozen=True)
class MatchCycleSummary:
    """Outcome for one completed match cycle."""

    match_number: int
    selected_map: MapName
    winner: TeamSide
    team_a_mean_kd: float
    team_b_mean_kd: float
    team_a_expected: float
    rating_spread: float
    committed_system: str
    mean_traditional_delta: float
    mean_context_delta: float


class SimulationEngine:
    """Owns the pool and walks one match at a time through explicit stages."""

    def __init__(
        self,
        params: SimulationParameters | None = None,
        *,
        rng: Random | None = None,
    ) -> None:
        self.params = params or SimulationParameters()
        self.rng = rng or Random()
        self.pool = PlayerPool(
            self.params.pool,
            rng=self.rng,
            familiarity_calculator=MapFamiliarityCalculator(),
        )
        self.matchmaker = Matchmaker(self.params.matchmaking, rng=self.rng)
        self.outcome_simulator = MatchOutcomeSimulator(self.params.outcome, rng=self.rng)
        self.traditional_calculator = get_rating_system(TRADITIONAL).create_calculator(self.params.rating)
        self.context_calculator = get_rating_system(CONTEXT_AWARE).create_calculator(self.params.rating)

        self._stage = PipelineStage.UNINITIALIZED
        self._selection: MatchSelection | None = None
        self._match: SimulatedMatch | None = None
        self._ratings: RatingUpdate | None = None
        self._matches_completed = 0

    @classmethod
    def from_config(cls, config: SimulationSystemConfig, *, seed: int | None = None) -> SimulationEngine:
        return cls(config.parameters, rng=Random(seed))

    @property
    def stage(self) -> PipelineStage:
        return self._stage

    @property
    def selection(self) -> MatchSelection | None:
        return self._selection

    @property
    def match(self) -> SimulatedMatch | None:
        return self._match

    @property
    def ratings(self) -> RatingUpdate | None:
        return self._ratings

    @property
    def matches_completed(self) -> int:
        return self._matches_completed

    def players(self) -> tuple[Player, ...]:
        return self.pool.snapshot()

    def _require(self, operation: str, stage: PipelineStage, payload: T | None) -> T:
        """Return the open match payload for an entry point that needs `stage`."""
        if self._stage != stage or payload is None:
            raise PipelineStageError(operation, self._stage, (stage,))
        return payload

    def _transition(self, stage: PipelineStage) -> None:
        logger.info("stage %s -> %s", self._stage.value, stage.value)
        self._stage = stage

    def _discard_match(self) -> None:
        self._selection = None
        self._match = None
        self._ratings = None

    def add_players(self, count: int | None = None) -> tuple[Player, ...]:
        """Grow the pool. New players have no hours, so familiarity must be regenerated."""
        players = self.pool.add_players(count)
        self._discard_match()
        self._transition(PipelineStage.UNINITIALIZED)
        return players

    def generate_practice_hours(self) -> tuple[Player, ...]:
        players = self.pool.generate_practice_hours()
        self._discard_match()
        self._transition(PipelineStage.HOURS_GENERATED)
        return players

    def start_match(self) -> MatchSelection | None:
        """Pick two teams, or return None when the pool is too small."""
        if self._stage == PipelineStage.UNINITIALIZED:
            raise MissingFamiliarityDataError(
                "start_match",
                self._stage,
                (
                    PipelineStage.HOURS_GENERATED,
                    PipelineStage.MATCH_SELECTED,
                    PipelineStage.OUTCOME_SIMULATED,
                    PipelineStage.RATING_COMPUTED,
                ),
            )

        self._discard_match()
        selection = self.matchmaker.start_match(self.pool.snapshot())
        if selection is None:
            self._transition(PipelineStage.HOURS_GENERATED)
            return None

        self._selection = selection
        self._transition(PipelineStage.MATCH_SELECTED)
        return selection

    def simulate_outcome(self) -> SimulatedMatch:
        selection = self._require("simulate_outcome", PipelineStage.MATCH_SELECTED, self._selection)

        self._match = self.outcome_simulator.simulate(selection)
        self._transition(PipelineStage.OUTCOME_SIMULATED)
        return self._match

    def compute_ratings(self) -> RatingUpdate:
        match = self._require("compute_ratings", PipelineStage.OUTCOME_SIMULATED, self._match)

        outcome = self.traditional_calculator.expected_outcome(match)
        self._ratings = RatingUpdate(
            outcome=outcome,
            traditional=tuple(self.traditional_calculator.process_match(match, outcome)),
            context_aware=tuple(self.context_calculator.process_match(match, outcome)),
        )
        self._transition(PipelineStage.RATING_COMPUTED)
        return self._ratings

    def commit_ratings(self, system: str = TRADITIONAL) -> tuple[Player, ...]:
        """Write one system's post-match ratings back into the pool and close the cycle."""
        ratings = self._require("commit_ratings", PipelineStage.RATING_COMPUTED, self._ratings)

        updated = [
            replace(
                self.pool.get(event.player_id),
                rating=event.post_rating,
                previous_rating=event.pre_rating,
                rank_delta=event.rank_delta,
            )
            for event in ratings.events_for(system)
        ]
        players = self.pool.commit(updated)
        self._matches_completed += 1
        logger.info("committed system=%s players=%d", system, len(updated))

        self._discard_match()
        self._transition(PipelineStage.HOURS_GENERATED)
        return players

    def run_match_cycle(self, system: str = TRADITIONAL) -> MatchCycleSummary | None:
        """Select, simulate, rate and commit one match."""
        selection = self.start_match()
        if selection is None:
            return None

        match = self.simulate_outcome()
        ratings = self.compute_ratings()
        summary = MatchCycleSummary(
            match_number=self._matches_completed + 1,
            selected_map=match.selected_map,
            winner=match.result.winner,
            team_a_mean_kd=match.result.team_a_mean_kd,
            team_b_mean_kd=match.result.team_b_mean_kd,
            team_a_expected=ratings.outcome.team_a_expected,
            rating_spread=rating_spread(sorted(selection.players, key=lambda player: player.rating)),
            committed_system=system,
            mean_traditional_delta=_mean_delta(ratings.traditional),
            mean_context_delta=_mean_delta(ratings.context_aware),
        )
        self.commit_ratings(system)
        return summary


def _mean_delta(events: tuple[Any, ...]) -> float:
    if not events:
        return 0.0
    return sum(event.rating_delta for event in events) / float(len(events))


def run_simulation(
    engine: SimulationEngine,
    *,
    matches: int,
    system: str = TRADITIONAL,
    echo: Callable[[str], None] | None = None,
) -> list[MatchCycleSummary]:
    """Run up to ``matches`` cycles, stopping early if the pool is too small."""
    if matches < 0:
        raise ValueError("matches must be >= 0")

    summaries: list[MatchCycleSummary] = []
    for _ in range(matches):
        summary = engine.run_match_cycle(system)
        if summary is None:
            if echo is not None:
                echo(
                    f"insufficient pool pool_size={len(engine.pool)} "
                    f"required={engine.params.matchmaking.match_size}"
                )
            break

        summaries.append(summary)
        if echo is not None:
            echo(
                f"match={summary.match_number} "
                f"map={summary.selected_map.value} "
                f"winner={summary.winner.value} "
                f"kd_a={summary.team_a_mean_kd:.2f} "
                f"kd_b={summary.team_b_mean_kd:.2f} "
                f"expected_a={summary.team_a_expected:.4f} "
                f"spread={summary.rating_spread:.3f} "
                f"traditional_delta={summary.mean_traditional_delta:+.4f} "
                f"context_delta={summary.mean_context_delta:+.4f}"
            )
    return summaries


__all__ = [
    "CONTEXT_AWARE",
    "MatchCycleSummary",
    "RatingUpdate",
    "SimulationEngine",
    "TRADITIONAL",
    "run_simulation",
]
