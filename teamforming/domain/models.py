# teamforming/domain/models.py
import math

from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, List, Optional, Union

ParticipantId = Union[int, str]
GoalId = Union[int, str]


def parse_score(value: Any) -> Any:
    """
    Scores may arrive as numbers, numeric strings, or not at all.
    Anything that does not parse as a finite number counts as 0.
    """
    if value is None or isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        score = float(value) if isinstance(value, float) else float(str(value).strip())
    except ValueError:
        return 0
    return score if math.isfinite(score) else 0


class ParticipantDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: ParticipantId
    score: float = Field(default=0, ge=0)

    @field_validator("score", mode="before")
    @classmethod
    def _coerce_score(cls, value):
        return parse_score(value)


class GoalDTO(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: GoalId
    team_size: Optional[int] = None


class VoteDTO(BaseModel):
    participant_id: ParticipantId
    goals: List[GoalDTO] = Field(default_factory=list)

    @field_validator("goals", mode="before")
    @classmethod
    def _coerce_goals(cls, value):
        # bare ids are accepted as goal references; blank references are dropped
        if value is None:
            return []
        goals = []
        for goal in value:
            if isinstance(goal, (int, str)):
                goal = {"id": goal}
            goal_id = goal.id if isinstance(goal, GoalDTO) else goal.get("id")
            if goal_id is None or goal_id == "":
                continue
            goals.append(goal)
        return goals


class FormedTeam(BaseModel):
    goal: GoalDTO
    member_ids: List[ParticipantId] = Field(default_factory=list)


class TeamRecord(BaseModel):
    cycle_id: Union[int, str]
    chapter_id: Union[int, str]
    goal: GoalDTO
    member_ids: List[ParticipantId] = Field(default_factory=list)
