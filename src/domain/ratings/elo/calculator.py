"""Traditional team-average Elo on the [0, 1] rating scale."""

from __future__ import annotations

from dataclasses import dataclass

from domain.common import MatchParticipant, RankDelta, SimulatedMatch, TeamSide, clamp_rating, mean_rating


@dataclass(frozen=True)
class EloParameters:
    k_factor: float = 0.1
    rating_sensitivity: float = 10.0
    rating_decimals: int = 3


@dataclass(frozen=True)
class TraditionalEloEvent:
    player_id: str
    side: TeamSide
    won: bool
    actual_score: float
    expected_score: float
    pre_rating: float
    rating_delta: float
    post_rating: float
    rank_delta: RankDelta
    k_factor: float


def calculate_expected_score(rating: float, opponent_rating: float, rating_sensitivity: float) -> float:
    """Compute the Elo expected score for one side.

    Ratings live in [0, 1], so the gap is multiplied by ``rating_sensitivity``
    instead of divided by a 400-point scale.
    """
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) * rating_sensitivity))


@dataclass(frozen=True)
class ExpectedOutcome:
    """Expected and actual scores for both sides of one match."""

    team_a_expected: float
    team_b_expected: float
    team_a_actual: float
    team_b_actual: float

    def for_side(self, side: TeamSide) -> tuple[float, float]:
        """Return (expected, actual) for one side."""
        if side == TeamSide.A:
            return self.team_a_expected, self.team_a_actual
        return self.team_b_expected, self.team_b_actual


class TraditionalEloCalculator:
    """Stateless per-match calculator; the pool owns the ratings."""

    def __init__(self, params: EloParameters | None = None) -> None:
        self.params = params or EloParameters()

    def _validate_match(self, match: SimulatedMatch) -> None:
        if not match.team_a or not match.team_b:
            raise ValueError("match is missing players for one or both teams")

        team_a_ids = {participant.player_id for participant in match.team_a}
        team_b_ids = {participant.player_id for participant in match.team_b}
        overlap = sorted(team_a_ids & team_b_ids)
        if overlap:
            raise ValueError(f"players appear on both teams: {overlap}")

    def expected_outcome(self, match: SimulatedMatch) -> ExpectedOutcome:
        team_a_expected = calculate_expected_score(
            rating=mean_rating(match.team_a),
            opponent_rating=mean_rating(match.team_b),
            rating_sensitivity=self.params.rating_sensitivity,
        )
        team_a_actual = 1.0 if match.result.winner == TeamSide.A else 0.0
        return ExpectedOutcome(
            team_a_expected=team_a_expected,
            team_b_expected=1.0 - team_a_expected,
            team_a_actual=team_a_actual,
            team_b_actual=1.0 - team_a_actual,
        )

    def _bounded(self, value: float) -> float:
        return round(clamp_rating(value), self.params.rating_decimals)

    def _sides(self, match: SimulatedMatch) -> list[tuple[TeamSide, MatchParticipant]]:
        return [(TeamSide.A, participant) for participant in match.team_a] + [
            (TeamSide.B, participant) for participant in match.team_b
        ]

    def process_match(
        self,
        match: SimulatedMatch,
        outcome: ExpectedOutcome | None = None,
    ) -> list[TraditionalEloEvent]:
        self._validate_match(match)
        outcome = outcome or self.expected_outcome(match)

        events: list[TraditionalEloEvent] = []
        for side, participant in self._sides(match):
            expected, actual = outcome.for_side(side)
            pre_rating = participant.rating
            post_rating = self._bounded(pre_rating + self.params.k_factor * (actual - expected))
            events.append(
                TraditionalEloEvent(
                    player_id=participant.player_id,
                    side=side,
                    won=bool(actual),
                    actual_score=actual,
                    expected_score=expected,
                    pre_rating=pre_rating,
                    rating_delta=post_rating - pre_rating,
                    post_rating=post_rating,
                    rank_delta=RankDelta.between(pre_rating, post_rating),
                    k_factor=self.params.k_factor,
                )
            )
        return events
