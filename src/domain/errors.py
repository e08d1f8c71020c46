"""Exceptions raised by the simulation pipeline."""

from __future__ import annotations

from domain.protocol import PipelineStage


class PipelineStageError(ValueError):
    """An entry point was called while the engine was in the wrong stage."""

    def __init__(self, operation: str, stage: PipelineStage, allowed: tuple[PipelineStage, ...]) -> None:
        self.operation = operation
        self.stage = stage
        self.allowed = allowed
        expected = ", ".join(item.value for item in allowed)
        super().__init__(f"{operation} is not allowed in stage={stage.value} (expected one of: {expected})")


class MissingFamiliarityDataError(PipelineStageError):
    """A match was requested before practice hours and familiarity were generated."""


__all__ = ["MissingFamiliarityDataError", "PipelineStageError"]
