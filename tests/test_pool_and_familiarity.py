"""Unit tests for pool generation and map familiarity."""

from __future__ import annotations

from random import Random

import pytest

from domain.common import ALL_MAPS, MapName, Player
from domain.familiarity import MapFamiliarityCalculator, average_practice_hours, select_best_map
from domain.pool import PlayerPool, PoolParameters


def _hours(a: int, b: int, c: int) -> dict[MapName, int]:
    return {MapName.MAP_A: a, MapName.MAP_B: b, MapName.MAP_C: c}


def test_add_players_assigns_sequential_ids_and_rounded_ratings() -> None:
    pool = PlayerPool(rng=Random(11))
    players = pool.add_players(3)

    assert [player.player_id for player in players] == ["P001", "P002", "P003"]
    for player in players:
        assert 0.0 <= player.rating <= 1.0
        assert player.rating == round(player.rating, 3)
        assert player.previous_rating is None
        assert player.rank_delta is None
        assert player.best_map is None
        assert player.practice_hours is None


def test_add_players_defaults_to_batch_size() -> None:
    pool = PlayerPool(PoolParameters(batch_size=50), rng=Random(1))
    assert len(pool.add_players()) == 50


def test_add_players_continues_sequence_and_keeps_existing_players() -> None:
    pool = PlayerPool(rng=Random(5))
    first = pool.add_players(2)
    second = pool.add_players(2)

    assert second[:2] == first
    assert [player.player_id for player in second[2:]] == ["P003", "P004"]


def test_add_players_rejects_negative_count() -> None:
    with pytest.raises(ValueError, match="count must be >= 0"):
        PlayerPool().add_players(-1)


def test_generate_practice_hours_populates_familiarity() -> None:
    pool = PlayerPool(rng=Random(2))
    pool.add_players(20)
    players = pool.generate_practice_hours()

    for player in players:
        assert player.practice_hours is not None
        assert set(player.practice_hours) == set(ALL_MAPS)
        assert all(0 <= hours <= 30 for hours in player.practice_hours.values())
        assert player.map_familiarity is not None
        assert player.best_map in ALL_MAPS


def test_commit_replaces_records_and_rejects_unknown_ids() -> None:
    pool = PlayerPool(rng=Random(3))
    pool.add_players(2)
    updated = Player(player_id="P002", rating=0.25, previous_rating=0.5)

    pool.commit([updated])

    assert pool.get("P002") == updated
    with pytest.raises(ValueError, match="unknown players"):
        pool.commit([Player(player_id="P999", rating=0.1)])


def test_familiarity_is_relative_to_mean_hours() -> None:
    players = (
        Player(player_id="P001", rating=0.5, practice_hours=_hours(10, 20, 30)),
        Player(player_id="P002", rating=0.5, practice_hours=_hours(30, 20, 10)),
    )
    first, second = MapFamiliarityCalculator().compute(players)

    assert first.map_familiarity == {MapName.MAP_A: 50.0, MapName.MAP_B: 100.0, MapName.MAP_C: 150.0}
    assert first.best_map == MapName.MAP_C
    assert second.map_familiarity == {MapName.MAP_A: 150.0, MapName.MAP_B: 100.0, MapName.MAP_C: 50.0}
    assert second.best_map == MapName.MAP_A


def test_familiarity_rounds_to_two_decimals() -> None:
    players = (
        Player(player_id="P001", rating=0.5, practice_hours=_hours(1, 1, 1)),
        Player(player_id="P002", rating=0.5, practice_hours=_hours(2, 2, 2)),
    )
    first, _ = MapFamiliarityCalculator().compute(players)
    assert first.map_familiarity is not None
    assert first.map_familiarity[MapName.MAP_A] == pytest.approx(66.67)


def test_best_map_ties_go_to_first_listed_map() -> None:
    assert select_best_map({MapName.MAP_A: 80.0, MapName.MAP_B: 80.0, MapName.MAP_C: 80.0}) == MapName.MAP_A
    assert select_best_map({MapName.MAP_A: 10.0, MapName.MAP_B: 90.0, MapName.MAP_C: 90.0}) == MapName.MAP_B


def test_players_without_hours_pass_through_unchanged() -> None:
    no_hours = Player(player_id="P002", rating=0.4)
    players = (Player(player_id="P001", rating=0.5, practice_hours=_hours(5, 5, 5)), no_hours)
    _, passed = MapFamiliarityCalculator().compute(players)
    assert passed is no_hours


def test_zero_or_empty_means_are_treated_as_one() -> None:
    assert average_practice_hours(()) == {map_name: 1.0 for map_name in ALL_MAPS}

    players = (Player(player_id="P001", rating=0.5, practice_hours=_hours(0, 0, 4)),)
    (player,) = MapFamiliarityCalculator().compute(players)
    assert player.map_familiarity == {MapName.MAP_A: 0.0, MapName.MAP_B: 0.0, MapName.MAP_C: 100.0}


def test_familiarity_recompute_is_idempotent() -> None:
    pool = PlayerPool(rng=Random(9))
    pool.add_players(15)
    generated = pool.generate_practice_hours()

    recomputed = pool.recompute_familiarity()

    assert [player.map_familiarity for player in recomputed] == [player.map_familiarity for player in generated]
    assert [player.best_map for player in recomputed] == [player.best_map for player in generated]


def test_new_players_do_not_renormalize_existing_familiarity() -> None:
    pool = PlayerPool(rng=Random(4))
    pool.add_players(10)
    before = pool.generate_practice_hours()
    after = pool.add_players(5)

    assert [player.map_familiarity for player in after[:10]] == [player.map_familiarity for player in before]
    assert all(player.map_familiarity is None for player in after[10:])


def test_snapshot_map_values_are_read_only_and_detached() -> None:
    pool = PlayerPool(rng=Random(2))
    pool.add_players(3)
    player = pool.generate_practice_hours()[0]
    assert player.practice_hours is not None
    assert player.map_familiarity is not None

    with pytest.raises(TypeError):
        player.practice_hours[MapName.MAP_A] = 999  # type: ignore[index]
    with pytest.raises(TypeError):
        player.map_familiarity[MapName.MAP_A] = 999.0  # type: ignore[index]

    source = _hours(10, 20, 30)
    built = Player(player_id="X001", rating=0.5, practice_hours=source)
    source[MapName.MAP_A] = 999
    assert built.practice_hours == _hours(10, 20, 30)
    assert pool.get(player.player_id) == player
