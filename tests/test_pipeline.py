"""Tests for the staged simulation engine."""

from __future__ import annotations

from random import Random

import pytest

from domain.common import RankDelta, TeamSide
from domain.errors import MissingFamiliarityDataError, PipelineStageError
from domain.pipeline import CONTEXT_AWARE, TRADITIONAL, SimulationEngine, run_simulation
from domain.protocol import PipelineStage, RatingCalculator
from domain.ratings.elo.context_calculator import ContextEloParameters
from domain.ratings.registry import get, get_all


def _ready_engine(seed: int = 1, players: int = 30) -> SimulationEngine:
    engine = SimulationEngine(rng=Random(seed))
    engine.add_players(players)
    engine.generate_practice_hours()
    return engine


def test_registry_exposes_both_rating_systems() -> None:
    assert [descriptor.name for descriptor in get_all()] == ["context_aware", "traditional"]
    assert get("Traditional").name == "traditional"
    with pytest.raises(KeyError, match="No rating descriptor registered"):
        get("trueskill")


def test_registered_calculators_satisfy_rating_protocol() -> None:
    for descriptor in get_all():
        calculator = descriptor.create_calculator(ContextEloParameters())
        assert isinstance(calculator, RatingCalculator)


def test_new_engine_starts_uninitialized() -> None:
    engine = SimulationEngine(rng=Random(1))
    assert engine.stage == PipelineStage.UNINITIALIZED
    assert engine.players() == ()


def test_start_match_before_hours_raises_missing_familiarity() -> None:
    engine = SimulationEngine(rng=Random(1))
    engine.add_players(20)
    with pytest.raises(MissingFamiliarityDataError):
        engine.start_match()


def test_out_of_order_calls_raise_stage_errors() -> None:
    engine = _ready_engine()
    with pytest.raises(PipelineStageError, match="simulate_outcome"):
        engine.simulate_outcome()
    with pytest.raises(PipelineStageError, match="compute_ratings"):
        engine.compute_ratings()
    with pytest.raises(PipelineStageError, match="commit_ratings"):
        engine.commit_ratings()

    engine.start_match()
    with pytest.raises(PipelineStageError, match="compute_ratings"):
        engine.compute_ratings()


def test_insufficient_pool_returns_no_match() -> None:
    engine = _ready_engine(players=9)
    assert engine.start_match() is None
    assert engine.stage == PipelineStage.HOURS_GENERATED
    assert engine.selection is None


def test_stage_transitions_through_full_cycle() -> None:
    engine = _ready_engine()
    assert engine.stage == PipelineStage.HOURS_GENERATED

    selection = engine.start_match()
    assert selection is not None
    assert engine.stage == PipelineStage.MATCH_SELECTED
    assert len(selection.team_a) == 5
    assert len(selection.team_b) == 5

    match = engine.simulate_outcome()
    assert engine.stage == PipelineStage.OUTCOME_SIMULATED
    assert match.result.winner in (TeamSide.A, TeamSide.B)

    ratings = engine.compute_ratings()
    assert engine.stage == PipelineStage.RATING_COMPUTED
    assert len(ratings.traditional) == 10
    assert len(ratings.context_aware) == 10
    assert len(ratings.team_events(TRADITIONAL, TeamSide.A)) == 5

    engine.commit_ratings()
    assert engine.stage == PipelineStage.HOURS_GENERATED
    assert engine.match is None
    assert engine.matches_completed == 1


def test_both_systems_share_expected_scores_and_pre_ratings() -> None:
    engine = _ready_engine(seed=4)
    engine.start_match()
    engine.simulate_outcome()
    ratings = engine.compute_ratings()

    for traditional, context in zip(ratings.traditional, ratings.context_aware):
        assert traditional.player_id == context.player_id
        assert traditional.pre_rating == pytest.approx(context.pre_rating)
        assert traditional.expected_score == pytest.approx(context.expected_score)
        assert 0.0 <= traditional.post_rating <= 1.0
        assert 0.0 <= context.post_rating <= 1.0


def test_commit_writes_traditional_ratings_into_pool() -> None:
    engine = _ready_engine(seed=6)
    engine.start_match()
    engine.simulate_outcome()
    ratings = engine.compute_ratings()
    untouched_ids = {player.player_id for player in engine.players()} - {
        event.player_id for event in ratings.traditional
    }

    engine.commit_ratings(TRADITIONAL)

    for event in ratings.traditional:
        player = engine.pool.get(event.player_id)
        assert player.rating == pytest.approx(event.post_rating)
        assert player.previous_rating == pytest.approx(event.pre_rating)
        assert player.rank_delta == RankDelta.between(event.pre_rating, event.post_rating)
    for player_id in untouched_ids:
        assert engine.pool.get(player_id).previous_rating is None


def test_commit_context_aware_ratings() -> None:
    engine = _ready_engine(seed=8)
    engine.start_match()
    engine.simulate_outcome()
    ratings = engine.compute_ratings()

    engine.commit_ratings(CONTEXT_AWARE)

    for event in ratings.context_aware:
        assert engine.pool.get(event.player_id).rating == pytest.approx(event.post_rating)


def test_commit_unknown_system_raises_error() -> None:
    engine = _ready_engine()
    engine.start_match()
    engine.simulate_outcome()
    engine.compute_ratings()
    with pytest.raises(ValueError, match="Unsupported rating system"):
        engine.commit_ratings("trueskill")


def test_adding_players_discards_open_match_and_requires_new_hours() -> None:
    engine = _ready_engine()
    engine.start_match()

    engine.add_players(5)

    assert engine.stage == PipelineStage.UNINITIALIZED
    assert engine.selection is None
    with pytest.raises(MissingFamiliarityDataError):
        engine.start_match()


def test_run_simulation_echoes_one_line_per_match() -> None:
    engine = _ready_engine(seed=12, players=50)
    lines: list[str] = []

    summaries = run_simulation(engine, matches=5, system=CONTEXT_AWARE, echo=lines.append)

    assert len(summaries) == 5
    assert len(lines) == 5
    assert [summary.match_number for summary in summaries] == [1, 2, 3, 4, 5]
    assert all(summary.committed_system == CONTEXT_AWARE for summary in summaries)
    assert lines[0].startswith("match=1 ")
    assert engine.matches_completed == 5
    for player in engine.players():
        assert 0.0 <= player.rating <= 1.0


def test_run_simulation_stops_on_insufficient_pool() -> None:
    engine = _ready_engine(players=3)
    lines: list[str] = []

    summaries = run_simulation(engine, matches=3, echo=lines.append)

    assert summaries == []
    assert lines == ["insufficient pool pool_size=3 required=10"]


def test_same_seed_reproduces_simulation() -> None:
    first = run_simulation(_ready_engine(seed=33, players=40), matches=4)
    second = run_simulation(_ready_engine(seed=33, players=40), matches=4)
    assert first == second


def test_repeated_commit_raises_stage_error_naming_required_stage() -> None:
    engine = _ready_engine(seed=3)
    engine.run_match_cycle()

    with pytest.raises(PipelineStageError) as exc_info:
        engine.commit_ratings()

    assert exc_info.value.stage == PipelineStage.HOURS_GENERATED
    assert exc_info.value.allowed == (PipelineStage.RATING_COMPUTED,)


def test_simulate_after_insufficient_pool_raises_stage_error() -> None:
    engine = _ready_engine(players=9)
    engine.start_match()

    with pytest.raises(PipelineStageError, match="simulate_outcome is not allowed in stage=hours_generated"):
        engine.simulate_outcome()
