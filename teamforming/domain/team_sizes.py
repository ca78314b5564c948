# teamforming/domain/team_sizes.py
"""
Splitting one goal group into teams.

get_team_sizes decides how many regular and advanced participants each team
gets; players_for_team_sizes and arrange_teams turn those sizes into concrete
member lists. Pure functions over plain lists, no I/O.
"""
import logging
from typing import Dict, Iterable, List, Sequence

from teamforming.domain.exceptions import InvalidTeamSize
from teamforming.domain.grouping import TeamSize
from teamforming.domain.models import ParticipantDTO, ParticipantId

logger = logging.getLogger(__name__)


def rank_players(players: Iterable[ParticipantDTO]) -> List[ParticipantDTO]:
    """Highest score first. Equal scores keep their input order."""
    return sorted(players, key=lambda p: p.score, reverse=True)


def get_team_sizes(rec_team_size: int, num_regular: int, num_advanced: int) -> List[TeamSize]:
    """
    Compute {regular, advanced} counts per team so every team is within one
    of rec_team_size and, wherever possible, holds exactly one advanced player.

    Example:
    >>> get_team_sizes(5, 10, 3)
    [TeamSize(regular=3, advanced=1), TeamSize(regular=4, advanced=1), TeamSize(regular=3, advanced=1)]
    """
    if rec_team_size is None or rec_team_size < 2:
        raise InvalidTeamSize(rec_team_size)

    perfect_regular_size = rec_team_size - 1  # leave room for exactly 1 advanced player
    num_perfect_teams = num_regular // perfect_regular_size

    team_sizes = [TeamSize(regular=perfect_regular_size, advanced=1) for _ in range(num_perfect_teams)]

    remaining_regular = num_regular % perfect_regular_size
    remaining_advanced = max(num_advanced - num_perfect_teams, 0)
    total_remaining = remaining_regular + remaining_advanced

    if not total_remaining:
        return team_sizes

    max_remaining = total_remaining if remaining_advanced else remaining_regular + 1
    min_team_size = rec_team_size - 1
    max_team_size = rec_team_size + 1
    remaining = TeamSize(regular=remaining_regular, advanced=remaining_advanced)

    if min_team_size <= max_remaining <= max_team_size:
        if not remaining.advanced:
            remaining.advanced = 1
        team_sizes.append(remaining)
    elif total_remaining <= num_perfect_teams:
        # few enough leftovers to grow some perfect teams to rec size + 1
        i = 0
        for _ in range(remaining_regular):
            team_sizes[i % num_perfect_teams].regular += 1
            i += 1
        for _ in range(remaining_advanced):
            team_sizes[i % num_perfect_teams].advanced += 1
            i += 1
    elif min_team_size - max_remaining <= num_perfect_teams:
        # take one regular spot from some perfect teams to fill one more team
        if not remaining.advanced:
            remaining.advanced = 1
        i = 0
        while remaining.total < min_team_size:
            team_sizes[i].regular -= 1
            remaining.regular += 1
            i += 1
        team_sizes.append(remaining)
    else:
        logger.warning(
            f"Degenerate team size {remaining.total} for recommended size {rec_team_size} "
            f"({num_regular} regular, {num_advanced} advanced)"
        )
        team_sizes.append(remaining)

    return team_sizes


def players_for_team_sizes(team_sizes: Sequence[int], players: Sequence[ParticipantDTO]) -> List[List[ParticipantDTO]]:
    """
    Slice consecutive runs of players for each size, wrapping around to the
    front of the list when a slice runs past the end.
    """
    players = list(players)
    if not players:
        return [[] for _ in team_sizes]

    player_index = 0
    teams = []
    for num_players in team_sizes:
        team_players = players[player_index:player_index + num_players]
        additional_needed = num_players - len(team_players)
        if additional_needed:
            team_players = team_players + players[:additional_needed]
        teams.append(team_players)
        player_index = (player_index + num_players) % len(players)
    return teams


def arrange_teams(
    rec_team_size: int,
    regular_players: Dict[ParticipantId, ParticipantDTO],
    advanced_players: Dict[ParticipantId, ParticipantDTO],
) -> List[List[ParticipantDTO]]:
    """
    Turn one goal group into member lists: regular members first, then
    advanced, each ranked by score. Duplicates within a team are merged.
    """
    ranked_regular = rank_players(regular_players.values())
    ranked_advanced = rank_players(advanced_players.values())

    team_sizes = get_team_sizes(rec_team_size, len(ranked_regular), len(ranked_advanced))
    logger.debug(f"Team sizes for recommended size {rec_team_size}: {team_sizes}")

    regular_teams = players_for_team_sizes([t.regular for t in team_sizes], ranked_regular)
    advanced_teams = players_for_team_sizes([t.advanced for t in team_sizes], ranked_advanced)

    teams = []
    for regular, advanced in zip(regular_teams, advanced_teams):
        merged: Dict[ParticipantId, ParticipantDTO] = {}
        for p in regular + advanced:
            merged.setdefault(p.id, p)
        teams.append(list(merged.values()))
    return teams
