# teamforming/domain/exceptions.py
"""
Failures of a team formation run. All of them are terminal: the run produces
no teams and the caller decides whether to retry with fresh data.
"""


class TeamFormationError(ValueError):
    pass


class EmptyParticipantPool(TeamFormationError):
    def __init__(self, message: str = "No eligible participants found"):
        super().__init__(message)


class EmptyVotePool(TeamFormationError):
    def __init__(self, message: str = "No votes submitted"):
        super().__init__(message)


class InsufficientAdvancedParticipants(TeamFormationError):
    def __init__(self, message: str = "Not enough advanced participants found to form teams"):
        super().__init__(message)


class NoVotesFromRegularParticipants(TeamFormationError):
    def __init__(self, message: str = "No votes found that were submitted by regular participants"):
        super().__init__(message)


class NoGoalGroupsFormed(TeamFormationError):
    def __init__(self, message: str = "Could not form goal groups from submitted votes"):
        super().__init__(message)


class InvalidTeamSize(TeamFormationError):
    def __init__(self, team_size):
        self.team_size = team_size
        super().__init__(f"Recommended team size must be at least 2, got {team_size}")


class DuplicateTeamAssignment(TeamFormationError):
    """Materialized teams do not cover every participant exactly once."""

    def __init__(self, duplicated=(), missing=()):
        self.duplicated = list(duplicated)
        self.missing = list(missing)
        super().__init__(
            f"Inconsistent team assignment: duplicated={self.duplicated} missing={self.missing}"
        )
