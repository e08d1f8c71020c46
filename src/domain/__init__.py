"""Match simulation and rating domain modules."""

from domain.common import MapName, MatchParticipant, Player, RankDelta, TeamSide
from domain.protocol import PipelineStage

__all__ = ["MapName", "MatchParticipant", "PipelineStage", "Player", "RankDelta", "TeamSide"]
