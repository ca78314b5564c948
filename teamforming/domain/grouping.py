# teamforming/domain/grouping.py

from typing import Dict
from dataclasses import dataclass, field

from teamforming.domain.models import GoalDTO, ParticipantDTO, ParticipantId

DEFAULT_ADVANCED_SCORE_THRESHOLD = 100
DEFAULT_RECOMMENDED_TEAM_SIZE = 5


@dataclass(frozen=True)
class FormationOptions:
    advanced_score_threshold: float = DEFAULT_ADVANCED_SCORE_THRESHOLD
    default_team_size: int = DEFAULT_RECOMMENDED_TEAM_SIZE


@dataclass
class GoalGroup:
    """
    Participants converging on one goal during a single formation run.
    Both mappings keep insertion order; ranking and round-robin depend on it.
    """
    goal: GoalDTO
    players: Dict[ParticipantId, ParticipantDTO] = field(default_factory=dict)
    advanced_players: Dict[ParticipantId, ParticipantDTO] = field(default_factory=dict)

    def team_size(self, options: FormationOptions) -> int:
        return self.goal.team_size or options.default_team_size


@dataclass
class TeamSize:
    regular: int
    advanced: int

    @property
    def total(self) -> int:
        return self.regular + self.advanced
