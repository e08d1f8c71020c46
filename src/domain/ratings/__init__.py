"""Rating-system domain modules."""

from domain.ratings.elo import (
    ContextAwareEloCalculator,
    ContextEloEvent,
    ContextEloParameters,
    ContextFactors,
    EloParameters,
    ExpectedOutcome,
    TraditionalEloCalculator,
    TraditionalEloEvent,
    calculate_expected_score,
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
