# teamforming/domain/team_formation.py
"""
Pure domain logic for forming goal-aligned teams.

Participants are split into advanced and regular tiers, regular participants
are grouped by their ranked goal votes, leftovers and advanced participants
are spread round-robin over the goal groups, and each goal group is cut into
teams around its recommended size.

Functions included:
- classify_participants
- extract_voted_goals
- form_goal_groups
- distribute_remaining_participants
- form_teams

All inputs/outputs are DTOs, lists and dicts, no I/O. Identical inputs give
identical outputs: every mapping is iterated in insertion order.
"""
import logging
from collections import deque
from typing import Deque, Dict, Iterable, List, Optional, Tuple

from teamforming.domain.exceptions import (
    DuplicateTeamAssignment,
    EmptyParticipantPool,
    EmptyVotePool,
    InsufficientAdvancedParticipants,
    NoGoalGroupsFormed,
    NoVotesFromRegularParticipants,
)
from teamforming.domain.grouping import DEFAULT_ADVANCED_SCORE_THRESHOLD, FormationOptions, GoalGroup
from teamforming.domain.models import (
    FormedTeam,
    GoalDTO,
    GoalId,
    ParticipantDTO,
    ParticipantId,
    VoteDTO,
)
from teamforming.domain.team_sizes import arrange_teams, rank_players

logger = logging.getLogger(__name__)

ParticipantMap = Dict[ParticipantId, ParticipantDTO]


# ----------------------------
# Participant Classifier
# ----------------------------

def classify_participants(
    participants: Iterable[ParticipantDTO],
    threshold: float = DEFAULT_ADVANCED_SCORE_THRESHOLD,
) -> Tuple[ParticipantMap, ParticipantMap]:
    """
    Split participants into (advanced, regular) by score threshold.
    Raises InsufficientAdvancedParticipants when nobody reaches it.
    """
    advanced: ParticipantMap = {}
    regular: ParticipantMap = {}
    for p in participants:
        if p.score >= threshold:
            advanced[p.id] = p
        else:
            regular[p.id] = p

    if not advanced:
        raise InsufficientAdvancedParticipants()
    return advanced, regular


# ----------------------------
# Goal Grouping Engine
# ----------------------------

def map_votes_by_participant(votes: Iterable[VoteDTO]) -> Dict[ParticipantId, List[GoalDTO]]:
    # a later vote from the same participant replaces the earlier one
    result: Dict[ParticipantId, List[GoalDTO]] = {}
    for vote in votes:
        result[vote.participant_id] = list(vote.goals)
    return result


def extract_voted_goals(goal_lists: Iterable[List[GoalDTO]]) -> Dict[GoalId, GoalDTO]:
    """Distinct goals in vote order; the first occurrence of an id wins."""
    goals: Dict[GoalId, GoalDTO] = {}
    for goal_list in goal_lists:
        for goal in goal_list:
            goals.setdefault(goal.id, goal)
    return goals


def rank_goal_groups(goal_groups: Iterable[GoalGroup]) -> List[GoalGroup]:
    """Most regular participants first. Ties keep insertion order."""
    return sorted(goal_groups, key=lambda g: len(g.players), reverse=True)


def form_goal_groups(
    regular: ParticipantMap,
    votes: Dict[ParticipantId, List[GoalDTO]],
    max_groups: Optional[int] = None,
) -> Tuple[Dict[GoalId, GoalGroup], ParticipantMap]:
    """
    Group regular participants by their most preferred goal, dropping the
    least popular group while there are more than max_groups, and retrying
    its members on their next preference.

    max_groups is capped at the number of distinct voted goals.
    Returns (goal_groups by goal id, regular participants left unassigned).
    """
    preferences: Dict[ParticipantId, Deque[GoalDTO]] = {
        pid: deque(goals) for pid, goals in votes.items() if pid in regular
    }
    voted_goals = extract_voted_goals(preferences.values())
    if not voted_goals:
        raise NoVotesFromRegularParticipants()

    cap = len(voted_goals) if max_groups is None else min(max_groups, len(voted_goals))

    goal_groups: Dict[GoalId, GoalGroup] = {}
    assigned: Dict[ParticipantId, GoalId] = {}

    while True:
        for pid, remaining in preferences.items():
            if pid in assigned or not remaining:
                # exhausted votes end up in the leftover pool
                continue
            goal = remaining.popleft()
            group = goal_groups.get(goal.id)
            if group is None:
                group = GoalGroup(goal=voted_goals[goal.id])
                goal_groups[goal.id] = group
            group.players[pid] = regular[pid]
            assigned[pid] = goal.id

        if len(goal_groups) <= cap:
            break

        lowest = rank_goal_groups(goal_groups.values())[-1]
        logger.debug(
            f"Dropping goal group {lowest.goal.id} with {len(lowest.players)} participants "
            f"({len(goal_groups)} groups, cap {cap})"
        )
        for pid in lowest.players:
            del assigned[pid]
        del goal_groups[lowest.goal.id]

    if not goal_groups:
        raise NoGoalGroupsFormed()

    unassigned = {pid: p for pid, p in regular.items() if pid not in assigned}
    return goal_groups, unassigned


# ----------------------------
# Fair Distribution Balancer
# ----------------------------

def distribute_round_robin(players: Iterable[ParticipantDTO], groups: List[GoalGroup], advanced: bool = False) -> None:
    for i, p in enumerate(rank_players(players)):
        group = groups[i % len(groups)]
        target = group.advanced_players if advanced else group.players
        target[p.id] = p


def distribute_remaining_participants(
    goal_groups: Dict[GoalId, GoalGroup],
    unassigned: ParticipantMap,
    advanced: ParticipantMap,
) -> None:
    """
    Hand out leftover regular participants, then all advanced participants,
    one per group in ranked group order, highest score first. Mutates the
    groups in place.
    """
    ranked_groups = rank_goal_groups(goal_groups.values())
    distribute_round_robin(unassigned.values(), ranked_groups)
    distribute_round_robin(advanced.values(), ranked_groups, advanced=True)


# ----------------------------
# Entry point
# ----------------------------

def verify_assignments(teams: List[FormedTeam], participant_ids: Iterable[ParticipantId]) -> None:
    seen = set()
    duplicated = []
    for team in teams:
        for pid in team.member_ids:
            if pid in seen:
                duplicated.append(pid)
            seen.add(pid)
    missing = [pid for pid in participant_ids if pid not in seen]
    if duplicated or missing:
        raise DuplicateTeamAssignment(duplicated=duplicated, missing=missing)


def form_teams(
    participants: List[ParticipantDTO],
    votes: List[VoteDTO],
    options: Optional[FormationOptions] = None,
) -> List[FormedTeam]:
    """
    Form goal-aligned teams for one cycle.

    Either returns teams covering every participant exactly once or raises a
    TeamFormationError; nothing partial is returned.

    DuplicateTeamAssignment is an expected outcome on ordinary inputs, not
    only an internal fault: a goal group whose team sizes call for more
    advanced participants than it holds (e.g. 1 advanced and 6 regular with
    team size 5 needs two teams) would have to reuse an advanced participant,
    and the run fails instead. Callers may retry with fresh data.

    Example:
    >>> participants = [ParticipantDTO(id="a", score=100)] + [ParticipantDTO(id=i) for i in range(4)]
    >>> votes = [VoteDTO(participant_id=i, goals=[{"id": "g1", "team_size": 5}]) for i in range(4)]
    >>> [t.member_ids for t in form_teams(participants, votes)]
    [[0, 1, 2, 3, 'a']]
    """
    options = options or FormationOptions()

    if not participants:
        raise EmptyParticipantPool()
    if not votes:
        raise EmptyVotePool()

    players: ParticipantMap = {p.id: p for p in participants}
    advanced, regular = classify_participants(players.values(), options.advanced_score_threshold)

    # every team needs an advanced participant, so there can't be more goal
    # groups than advanced participants
    goal_groups, unassigned = form_goal_groups(
        regular, map_votes_by_participant(votes), max_groups=len(advanced)
    )
    distribute_remaining_participants(goal_groups, unassigned, advanced)

    teams: List[FormedTeam] = []
    for group in goal_groups.values():
        for members in arrange_teams(group.team_size(options), group.players, group.advanced_players):
            teams.append(FormedTeam(goal=group.goal, member_ids=[p.id for p in members]))

    verify_assignments(teams, players.keys())

    logger.info(
        f"Formed {len(teams)} teams across {len(goal_groups)} goal groups "
        f"from {len(players)} participants ({len(advanced)} advanced)"
    )
    return teams
