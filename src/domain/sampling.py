"""Piecewise-uniform sampling for tiered probability mixtures."""

from __future__ import annotations

from dataclasses import dataclass
from math import isclose
from random import Random


@dataclass(frozen=True)
class SamplingTier:
    """One (probability mass, value range) component of a mixture."""

    probability: float
    low: float
    high: float


class PiecewiseUniformSampler:
    """Draw a tier by probability mass, then a uniform value inside its range."""

    def __init__(self, tiers: tuple[SamplingTier, ...], *, decimals: int | None = 2) -> None:
        if not tiers:
            raise ValueError("at least one sampling tier is required")
        for tier in tiers:
            if tier.probability < 0.0:
                raise ValueError(f"tier probability must be >= 0, got {tier.probability}")
            if tier.low > tier.high:
                raise ValueError(f"tier range is inverted: [{tier.low}, {tier.high}]")
        total = sum(tier.probability for tier in tiers)
        if not isclose(total, 1.0, abs_tol=1e-9):
            raise ValueError(f"tier probabilities must sum to 1, got {total}")

        self.tiers = tiers
        self.decimals = decimals

    def pick_tier(self, rng: Random) -> SamplingTier:
        draw = rng.random()
        cumulative = 0.0
        for tier in self.tiers:
            cumulative += tier.probability
            if draw < cumulative:
                return tier
        # Float accumulation can leave the last boundary just under 1.0.
        return self.tiers[-1]

    def sample(self, rng: Random) -> float:
        tier = self.pick_tier(rng)
        value = rng.uniform(tier.low, tier.high)
        if self.decimals is not None:
            value = round(value, self.decimals)
        return min(max(value, tier.low), tier.high)


__all__ = ["PiecewiseUniformSampler", "SamplingTier"]
