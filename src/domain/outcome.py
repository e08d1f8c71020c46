"""Stochastic match outcome: network, inactivity, kills/deaths and map."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from math import floor
from random import Random

from domain.common import ALL_MAPS, MapName, MatchParticipant, MatchSelection, Player, SimulatedMatch
from domain.resolver import resolve_match
from domain.sampling import PiecewiseUniformSampler, SamplingTier

logger = logging.getLogger("context_elo.outcome")

DEFAULT_NETWORK_TIERS: tuple[SamplingTier, ...] = (
    SamplingTier(probability=0.80, low=0.80, high=1.00),
    SamplingTier(probability=0.15, low=0.50, high=0.79),
    SamplingTier(probability=0.05, low=0.10, high=0.49),
)

DEFAULT_INACTIVITY_TIERS: tuple[SamplingTier, ...] = (
    SamplingTier(probability=0.70, low=0.10, high=0.30),
    SamplingTier(probability=0.20, low=0.30, high=0.60),
    SamplingTier(probability=0.10, low=0.60, high=0.90),
)


@dataclass(frozen=True)
class OutcomeParameters:
    network_tiers: tuple[SamplingTier, ...] = DEFAULT_NETWORK_TIERS
    inactivity_tiers: tuple[SamplingTier, ...] = DEFAULT_INACTIVITY_TIERS
    sample_decimals: int = 2
    max_kills: int = 20
    low_performance_threshold: float = 0.3
    low_performance_floor_probability: float = 0.95
    low_performance_max_kills: int = 2
    severe_inactivity_threshold: float = 0.5
    poor_network_threshold: float = 0.5
    severe_inactivity_deaths: tuple[int, int] = (10, 19)
    poor_network_deaths: tuple[int, int] = (8, 19)
    baseline_deaths: tuple[int, int] = (1, 15)
    maps: tuple[MapName, ...] = ALL_MAPS


def kill_death_ratio(kills: int, deaths: int) -> float:
    return round(kills / max(1, deaths), 2)


class MatchOutcomeSimulator:
    """Synthesize per-player samples for both teams and decide the winner."""

    def __init__(self, params: OutcomeParameters | None = None, *, rng: Random | None = None) -> None:
        self.params = params or OutcomeParameters()
        self.rng = rng or Random()
        self.network_sampler = PiecewiseUniformSampler(
            self.params.network_tiers,
            decimals=self.params.sample_decimals,
        )
        self.inactivity_sampler = PiecewiseUniformSampler(
            self.params.inactivity_tiers,
            decimals=self.params.sample_decimals,
        )

    def sample_network_quality(self) -> float:
        return self.network_sampler.sample(self.rng)

    def assign_inactivity(self, team_size: int) -> list[float]:
        """Exactly one uniformly chosen teammate gets a positive fraction."""
        fractions = [0.0] * team_size
        if team_size == 0:
            return fractions
        inactive_index = self.rng.randrange(team_size)
        fractions[inactive_index] = self.inactivity_sampler.sample(self.rng)
        return fractions

    def sample_kills(self, performance: float) -> int:
        ceiling = max(1, floor(self.params.max_kills * performance))
        if performance < self.params.low_performance_threshold:
            if self.rng.random() < self.params.low_performance_floor_probability:
                return self.rng.randint(0, self.params.low_performance_max_kills)
            return self.rng.randint(1, ceiling)
        return self.rng.randint(1, ceiling)

    def sample_deaths(self, *, network_quality: float, inactivity_fraction: float) -> int:
        if inactivity_fraction > self.params.severe_inactivity_threshold:
            low, high = self.params.severe_inactivity_deaths
        elif network_quality < self.params.poor_network_threshold:
            low, high = self.params.poor_network_deaths
        else:
            low, high = self.params.baseline_deaths
        return self.rng.randint(low, high)

    def select_map(self) -> MapName:
        return self.rng.choice(self.params.maps)

    def simulate_team(self, team: tuple[Player, ...]) -> tuple[MatchParticipant, ...]:
        network = [self.sample_network_quality() for _ in team]
        inactivity = self.assign_inactivity(len(team))

        participants: list[MatchParticipant] = []
        for player, network_quality, inactivity_fraction in zip(team, network, inactivity):
            performance = network_quality * (1.0 - inactivity_fraction)
            kills = self.sample_kills(performance)
            deaths = self.sample_deaths(
                network_quality=network_quality,
                inactivity_fraction=inactivity_fraction,
            )
            participants.append(
                MatchParticipant(
                    player=player,
                    network_quality=network_quality,
                    inactivity_fraction=inactivity_fraction,
                    kills=kills,
                    deaths=deaths,
                    kill_death_ratio=kill_death_ratio(kills, deaths),
                )
            )
            logger.debug(
                "player=%s network=%.2f inactivity=%.2f kills=%d deaths=%d",
                player.player_id,
                network_quality,
                inactivity_fraction,
                kills,
                deaths,
            )
        return tuple(participants)

    @staticmethod
    def with_map_familiarity(
        participants: tuple[MatchParticipant, ...],
        selected_map: MapName,
    ) -> tuple[MatchParticipant, ...]:
        """Read each player's familiarity with the selected map, 0 if never computed."""
        return tuple(
            replace(
                participant,
                map_familiarity_for_selected_map=float(
                    (participant.player.map_familiarity or {}).get(selected_map, 0.0)
                ),
            )
            for participant in participants
        )

    def simulate(self, selection: MatchSelection) -> SimulatedMatch:
        if not selection.team_a or not selection.team_b:
            raise ValueError("both teams need at least one player to simulate a match")

        team_a = self.simulate_team(selection.team_a)
        team_b = self.simulate_team(selection.team_b)

        selected_map = self.select_map()
        team_a = self.with_map_familiarity(team_a, selected_map)
        team_b = self.with_map_familiarity(team_b, selected_map)

        result = resolve_match(team_a, team_b)
        logger.info(
            "simulated map=%s winner=%s kd_a=%.2f kd_b=%.2f",
            selected_map.value,
            result.winner.value,
            result.team_a_mean_kd,
            result.team_b_mean_kd,
        )
        return SimulatedMatch(
            selected_map=selected_map,
            team_a=team_a,
            team_b=team_b,
            result=result,
        )


__all__ = [
    "DEFAULT_INACTIVITY_TIERS",
    "DEFAULT_NETWORK_TIERS",
    "MatchOutcomeSimulator",
    "OutcomeParameters",
    "kill_death_ratio",
]
