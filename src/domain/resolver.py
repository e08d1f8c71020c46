"""Team K/D aggregation into a win/loss decision."""

from __future__ import annotations

from domain.common import MatchParticipant, MatchResult, TeamSide


def mean_kill_death_ratio(team: tuple[MatchParticipant, ...]) -> float:
    return sum(participant.kill_death_ratio for participant in team) / float(len(team))


def resolve_match(team_a: tuple[MatchParticipant, ...], team_b: tuple[MatchParticipant, ...]) -> MatchResult:
    """Team A wins only on a strictly greater mean K/D; equal means go to team B."""
    if not team_a or not team_b:
        raise ValueError("cannot resolve a match with an empty team")

    team_a_kd = mean_kill_death_ratio(team_a)
    team_b_kd = mean_kill_death_ratio(team_b)
    return MatchResult(
        winner=TeamSide.A if team_a_kd > team_b_kd else TeamSide.B,
        team_a_mean_kd=round(team_a_kd, 2),
        team_b_mean_kd=round(team_b_kd, 2),
    )


__all__ = ["mean_kill_death_ratio", "resolve_match"]
