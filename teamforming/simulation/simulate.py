# teamforming/simulation/simulate.py
"""
Simulation script: creates a chapter of fake participants with random
scores, lets the regular ones vote on random goals, and forms teams.

Uses the domain functions directly (no store, no I/O besides printing).
"""

import logging
import random
import sys
from typing import List, Optional

from faker import Faker

from teamforming.config.settings import settings
from teamforming.domain.exceptions import TeamFormationError
from teamforming.domain.models import FormedTeam, GoalDTO, ParticipantDTO, VoteDTO
from teamforming.domain.team_formation import form_teams
from teamforming.services.formation_service import options_from_settings

logger = logging.getLogger(__name__)

ADVANCED_SHARE = 0.35
MAX_GOALS_PER_VOTE = 3
TEAM_SIZES = [None, 4, 5, 6]


def generate_chapter(num_participants: int, num_goals: int, seed: Optional[int] = None):
    """Returns (participants, votes, goals) for one simulated cycle."""
    rng = random.Random(seed)
    fake = Faker()
    fake.seed_instance(seed)

    threshold = settings.ADVANCED_SCORE_THRESHOLD
    goals = [GoalDTO(id=fake.unique.slug(), team_size=rng.choice(TEAM_SIZES)) for _ in range(num_goals)]

    participants = []
    for _ in range(num_participants):
        if rng.random() < ADVANCED_SHARE:
            score = rng.randint(int(threshold), int(threshold) * 2)
        else:
            score = rng.randint(0, max(int(threshold) - 1, 0))
        participants.append(ParticipantDTO(id=fake.unique.user_name(), score=score))

    votes = []
    for p in participants:
        # some participants never vote
        if rng.random() < 0.1:
            continue
        picks = rng.sample(goals, k=min(len(goals), rng.randint(0, MAX_GOALS_PER_VOTE)))
        votes.append(VoteDTO(participant_id=p.id, goals=picks))

    return participants, votes, goals


def run_simulation(
    num_participants: int = settings.SIMULATION_PARTICIPANTS,
    num_goals: int = settings.SIMULATION_GOALS,
    seed: Optional[int] = None,
) -> List[FormedTeam]:
    participants, votes, goals = generate_chapter(num_participants, num_goals, seed)
    print(f"Simulating {len(participants)} participants, {len(votes)} votes, {len(goals)} goals")

    teams = form_teams(participants, votes, options_from_settings())

    scores = {p.id: p.score for p in participants}
    for t in teams:
        advanced = sum(1 for pid in t.member_ids if scores[pid] >= settings.ADVANCED_SCORE_THRESHOLD)
        print(f"- {t.goal.id}: {len(t.member_ids)} members ({advanced} advanced) {t.member_ids}")
    return teams


if __name__ == "__main__":
    logging.basicConfig(level=settings.LOG_LEVEL)
    seed = int(sys.argv[1]) if len(sys.argv) > 1 else None
    try:
        run_simulation(seed=seed)
    except TeamFormationError as e:
        logger.error(e)
        sys.exit(1)
