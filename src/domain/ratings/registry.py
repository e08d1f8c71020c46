"""Registry of available rating system implementations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable

from domain.protocol import RatingCalculator
from domain.ratings.elo.calculator import TraditionalEloCalculator
from domain.ratings.elo.context_calculator import ContextAwareEloCalculator, ContextEloParameters

CreateCalculatorFn = Callable[[ContextEloParameters], RatingCalculator[Any]]


@dataclass(frozen=True)
class RatingSystemDescriptor:
    """Everything required to run one rating system over a simulated match."""

    name: str
    description: str
    create_calculator: CreateCalculatorFn


_REGISTRY: dict[str, RatingSystemDescriptor] = {}


def register(descriptor: RatingSystemDescriptor) -> None:
    """Register one rating-system descriptor."""
    key = descriptor.name.lower()
    if key in _REGISTRY:
        raise ValueError(f"Duplicate rating descriptor registration for key={key}")
    _REGISTRY[key] = descriptor


def get_all() -> list[RatingSystemDescriptor]:
    """Return all registered descriptors in deterministic order."""
    return [_REGISTRY[key] for key in sorted(_REGISTRY.keys())]


def get(name: str) -> RatingSystemDescriptor:
    """Get one registered descriptor by name."""
    try:
        return _REGISTRY[name.lower()]
    except KeyError as exc:
        available = ", ".join(sorted(_REGISTRY.keys()))
        raise KeyError(f"No rating descriptor registered for {name}. Available: {available}") from exc


def _register_defaults() -> None:
    if _REGISTRY:
        return
    register(
        RatingSystemDescriptor(
            name="traditional",
            description="Team-average Elo driven only by win/loss.",
            create_calculator=TraditionalEloCalculator,
        )
    )
    register(
        RatingSystemDescriptor(
            name="context_aware",
            description="Elo plus latency, map familiarity and inactivity adjustments.",
            create_calculator=ContextAwareEloCalculator,
        )
    )


_register_defaults()

__all__ = [
    "RatingSystemDescriptor",
    "get",
    "get_all",
    "register",
]
