"""Player pool ownership: generation, practice hours and committed updates."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from random import Random

from domain.common import ALL_MAPS, Player
from domain.familiarity import MapFamiliarityCalculator

logger = logging.getLogger("context_elo.pool")


@dataclass(frozen=True)
class PoolParameters:
    batch_size: int = 50
    max_practice_hours: int = 30
    rating_decimals: int = 3
    id_prefix: str = "P"
    id_width: int = 3


class PlayerPool:
    """Owns the player records; the only state that survives between matches."""

    def __init__(
        self,
        params: PoolParameters | None = None,
        *,
        rng: Random | None = None,
        familiarity_calculator: MapFamiliarityCalculator | None = None,
    ) -> None:
        self.params = params or PoolParameters()
        self.rng = rng or Random()
        self.familiarity_calculator = familiarity_calculator or MapFamiliarityCalculator()
        self._players: list[Player] = []
        self._index: dict[str, int] = {}
        self._next_sequence = 1

    def __len__(self) -> int:
        return len(self._players)

    def snapshot(self) -> tuple[Player, ...]:
        """Return the current players in creation order."""
        return tuple(self._players)

    def get(self, player_id: str) -> Player:
        try:
            return self._players[self._index[player_id]]
        except KeyError as exc:
            raise KeyError(f"Unknown player_id={player_id}") from exc

    def _format_id(self, sequence: int) -> str:
        return f"{self.params.id_prefix}{sequence:0{self.params.id_width}d}"

    def add_players(self, count: int | None = None) -> tuple[Player, ...]:
        """Append new players with sequential ids and uniform [0, 1] ratings."""
        count = self.params.batch_size if count is None else count
        if count < 0:
            raise ValueError(f"count must be >= 0, got {count}")

        for _ in range(count):
            player = Player(
                player_id=self._format_id(self._next_sequence),
                rating=round(self.rng.uniform(0.0, 1.0), self.params.rating_decimals),
            )
            self._index[player.player_id] = len(self._players)
            self._players.append(player)
            self._next_sequence += 1

        logger.info("added players=%d pool_size=%d", count, len(self._players))
        return self.snapshot()

    def generate_practice_hours(self) -> tuple[Player, ...]:
        """Resample hours for every player, then recompute familiarity eagerly."""
        with_hours = tuple(
            replace(
                player,
                practice_hours={
                    map_name: self.rng.randint(0, self.params.max_practice_hours) for map_name in ALL_MAPS
                },
            )
            for player in self._players
        )
        self._players = list(self.familiarity_calculator.compute(with_hours))
        logger.info("generated practice hours for players=%d", len(self._players))
        return self.snapshot()

    def recompute_familiarity(self) -> tuple[Player, ...]:
        self._players = list(self.familiarity_calculator.compute(tuple(self._players)))
        return self.snapshot()

    def commit(self, players: tuple[Player, ...] | list[Player]) -> tuple[Player, ...]:
        """Replace records by id with the given snapshots."""
        unknown = [player.player_id for player in players if player.player_id not in self._index]
        if unknown:
            raise ValueError(f"Cannot commit unknown players: {unknown}")

        for player in players:
            self._players[self._index[player.player_id]] = player
        logger.debug("committed players=%d", len(players))
        return self.snapshot()


__all__ = ["PlayerPool", "PoolParameters"]
