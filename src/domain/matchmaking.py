"""Similarity-based matchmaking over a rating-sorted pool."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from random import Random

from domain.common import MatchSelection, Player

logger = logging.getLogger("context_elo.matchmaking")


@dataclass(frozen=True)
class MatchmakingParameters:
    match_size: int = 10
    team_size: int = 5


def rating_spread(window: tuple[Player, ...] | list[Player]) -> float:
    """Spread of a rating-sorted window."""
    return window[-1].rating - window[0].rating


def select_candidates(players: tuple[Player, ...], *, match_size: int = 10) -> tuple[Player, ...]:
    """Pick the contiguous window of ``match_size`` sorted players with minimal spread.

    Returns an empty tuple when the pool is too small. The first window wins ties.
    """
    if len(players) < match_size:
        return ()

    sorted_players = sorted(players, key=lambda player: player.rating)
    best_start = 0
    best_spread = rating_spread(sorted_players[0:match_size])
    for start in range(1, len(sorted_players) - match_size + 1):
        spread = sorted_players[start + match_size - 1].rating - sorted_players[start].rating
        if spread < best_spread:
            best_spread = spread
            best_start = start

    return tuple(sorted_players[best_start : best_start + match_size])


def split_teams(selected: tuple[Player, ...], *, rng: Random, team_size: int = 5) -> MatchSelection:
    """Shuffle the selected players and cut them into two teams."""
    if len(selected) != team_size * 2:
        raise ValueError(f"expected {team_size * 2} players to split, got {len(selected)}")

    shuffled = list(selected)
    rng.shuffle(shuffled)
    return MatchSelection(
        team_a=tuple(shuffled[:team_size]),
        team_b=tuple(shuffled[team_size:]),
    )


class Matchmaker:
    """Select one homogeneous group and split it into two teams."""

    def __init__(self, params: MatchmakingParameters | None = None, *, rng: Random | None = None) -> None:
        self.params = params or MatchmakingParameters()
        if self.params.match_size != self.params.team_size * 2:
            raise ValueError(
                f"match_size={self.params.match_size} must be twice team_size={self.params.team_size}"
            )
        self.rng = rng or Random()

    def select_candidates(self, players: tuple[Player, ...]) -> tuple[Player, ...]:
        return select_candidates(players, match_size=self.params.match_size)

    def split_teams(self, selected: tuple[Player, ...]) -> MatchSelection:
        return split_teams(selected, rng=self.rng, team_size=self.params.team_size)

    def start_match(self, players: tuple[Player, ...]) -> MatchSelection | None:
        selected = self.select_candidates(players)
        if not selected:
            logger.warning(
                "insufficient pool for matchmaking pool_size=%d required=%d",
                len(players),
                self.params.match_size,
            )
            return None

        logger.info(
            "selected players=%d spread=%.3f",
            len(selected),
            rating_spread(selected),
        )
        return self.split_teams(selected)


__all__ = [
    "Matchmaker",
    "MatchmakingParameters",
    "rating_spread",
    "select_candidates",
    "split_teams",
]
