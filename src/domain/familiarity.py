"""Relative map familiarity derived from practice hours."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import replace

from domain.common import ALL_MAPS, MapName, Player


def average_practice_hours(players: tuple[Player, ...]) -> dict[MapName, float]:
    """Mean hours per map over players that have hours set.

    An empty player set or a zero mean is treated as 1 so ratios stay finite.
    """
    with_hours = [player.practice_hours for player in players if player.practice_hours is not None]
    averages: dict[MapName, float] = {}
    for map_name in ALL_MAPS:
        if not with_hours:
            averages[map_name] = 1.0
            continue
        mean_hours = sum(hours.get(map_name, 0) for hours in with_hours) / float(len(with_hours))
        averages[map_name] = mean_hours or 1.0
    return averages


def select_best_map(familiarity: Mapping[MapName, float]) -> MapName:
    """Highest familiarity wins; ties go to the earlier map in enumeration order."""
    best_map = ALL_MAPS[0]
    for map_name in ALL_MAPS[1:]:
        if familiarity.get(map_name, 0.0) > familiarity.get(best_map, 0.0):
            best_map = map_name
    return best_map


class MapFamiliarityCalculator:
    """Full recomputation of familiarity against the pool's current mean hours."""

    def __init__(self, *, decimals: int = 2) -> None:
        self.decimals = decimals

    def compute(self, players: tuple[Player, ...]) -> tuple[Player, ...]:
        averages = average_practice_hours(players)
        return tuple(self._apply(player, averages) for player in players)

    def _apply(self, player: Player, averages: dict[MapName, float]) -> Player:
        if player.practice_hours is None:
            return player

        familiarity = {
            map_name: round(100.0 * player.practice_hours.get(map_name, 0) / averages[map_name], self.decimals)
            for map_name in ALL_MAPS
        }
        return replace(
            player,
            map_familiarity=familiarity,
            best_map=select_best_map(familiarity),
        )


__all__ = ["MapFamiliarityCalculator", "average_practice_hours", "select_best_map"]
