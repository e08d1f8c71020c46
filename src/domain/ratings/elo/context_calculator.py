"""Context-aware Elo: the traditional update plus latency, map and inactivity terms."""

from __future__ import annotations

from dataclasses import dataclass

from domain.common import MatchParticipant, RankDelta, SimulatedMatch, TeamSide
from domain.ratings.elo.calculator import EloParameters, ExpectedOutcome, TraditionalEloCalculator


@dataclass(frozen=True)
class ContextEloParameters(EloParameters):
    """Elo parameters plus weights for the additive context terms."""

    latency_weight: float = 0.02
    map_familiarity_weight: float = 0.0002
    inactivity_weight: float = 0.06
    factor_decimals: int = 4


@dataclass(frozen=True)
class ContextFactors:
    latency: float
    map: float
    inactivity: float
    total: float


@dataclass(frozen=True)
class ContextEloEvent:
    player_id: str
    side: TeamSide
    won: bool
    actual_score: float
    expected_score: float
    pre_rating: float
    elo_adjustment: float
    factors: ContextFactors
    rating_delta: float
    post_rating: float
    rank_delta: RankDelta
    k_factor: float


class ContextAwareEloCalculator(TraditionalEloCalculator):
    """Applies R' = R + K(S - E) + latency + map + inactivity from the pre-match rating.

    This is an alternative to the traditional update over the same starting
    point, not a second pass over its output.
    """

    def __init__(self, params: ContextEloParameters | None = None) -> None:
        params = params or ContextEloParameters()
        super().__init__(params=params)
        self.params = params

    def context_factors(self, participant: MatchParticipant) -> ContextFactors:
        # latency <= 0, map >= 0, inactivity <= 0
        latency = (participant.network_quality - 1.0) * self.params.latency_weight
        map_factor = participant.map_familiarity_for_selected_map * self.params.map_familiarity_weight
        inactivity = -(participant.inactivity_fraction * self.params.inactivity_weight)
        return ContextFactors(
            latency=latency,
            map=map_factor,
            inactivity=inactivity,
            total=latency + map_factor + inactivity,
        )

    def _rounded_factors(self, factors: ContextFactors) -> ContextFactors:
        decimals = self.params.factor_decimals
        return ContextFactors(
            latency=round(factors.latency, decimals),
            map=round(factors.map, decimals),
            inactivity=round(factors.inactivity, decimals),
            total=round(factors.total, decimals),
        )

    def process_match(
        self,
        match: SimulatedMatch,
        outcome: ExpectedOutcome | None = None,
    ) -> list[ContextEloEvent]:
        self._validate_match(match)
        outcome = outcome or self.expected_outcome(match)

        events: list[ContextEloEvent] = []
        for side, participant in self._sides(match):
            expected, actual = outcome.for_side(side)
            pre_rating = participant.rating
            elo_adjustment = self.params.k_factor * (actual - expected)
            factors = self.context_factors(participant)
            post_rating = self._bounded(pre_rating + elo_adjustment + factors.total)
            events.append(
                ContextEloEvent(
                    player_id=participant.player_id,
                    side=side,
                    won=bool(actual),
                    actual_score=actual,
                    expected_score=expected,
                    pre_rating=pre_rating,
                    elo_adjustment=elo_adjustment,
                    factors=self._rounded_factors(factors),
                    rating_delta=post_rating - pre_rating,
                    post_rating=post_rating,
                    rank_delta=RankDelta.between(pre_rating, post_rating),
                    k_factor=self.params.k_factor,
                )
            )
        return events
