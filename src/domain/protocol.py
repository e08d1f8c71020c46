"""Shared protocols and enums for the simulation pipeline."""

from __future__ import annotations

from enum import Enum
from typing import Protocol, TypeVar, runtime_checkable


class PipelineStage(str, Enum):
    """Where the engine currently is in one generation/match cycle."""

    UNINITIALIZED = "uninitialized"
    HOURS_GENERATED = "hours_generated"
    MATCH_SELECTED = "match_selected"
    OUTCOME_SIMULATED = "outcome_simulated"
    RATING_COMPUTED = "rating_computed"


E = TypeVar("E", covariant=True)


@runtime_checkable
class RatingCalculator(Protocol[E]):
    """Base contract all per-match rating calculators satisfy."""

    def process_match(self, match: object) -> list[E]: ...


__all__ = ["PipelineStage", "RatingCalculator"]
