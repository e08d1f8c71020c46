"""Elo rating modules."""

from domain.ratings.elo.calculator import (
    EloParameters,
    ExpectedOutcome,
    TraditionalEloCalculator,
    TraditionalEloEvent,
    calculate_expected_score,
)
from domain.ratings.elo.context_calculator import (
    ContextAwareEloCalculator,
    ContextEloEvent,
    ContextEloParameters,
    ContextFactors,
)

__all__ = [
    "ContextAwareEloCalculator",
    "ContextEloEvent",
    "ContextEloParameters",
    "ContextFactors",
    "EloParameters",
    "ExpectedOutcome",
    "TraditionalEloCalculator",
    "TraditionalEloEvent",
    "calculate_expected_score",
]
