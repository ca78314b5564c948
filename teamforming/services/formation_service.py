# teamforming/services/formation_service.py
"""
Async edge of team formation: fetch participants and votes for a cycle,
run the pure formation step, hand the resulting teams to persistence.
"""
import asyncio
import logging
from typing import Any, List, Optional, Protocol, Union

from teamforming.config.settings import settings
from teamforming.domain.grouping import FormationOptions
from teamforming.domain.models import ParticipantDTO, TeamRecord, VoteDTO
from teamforming.domain.team_formation import form_teams

logger = logging.getLogger(__name__)

EntityId = Union[int, str]


class FormationStore(Protocol):
    async def fetch_eligible_participants(self, chapter_id: EntityId) -> List[ParticipantDTO]:
        ...

    async def fetch_votes(self, cycle_id: EntityId) -> List[VoteDTO]:
        ...

    async def persist_teams(self, cycle_id: EntityId, teams: List[TeamRecord]) -> List[Any]:
        ...


def options_from_settings() -> FormationOptions:
    return FormationOptions(
        advanced_score_threshold=settings.ADVANCED_SCORE_THRESHOLD,
        default_team_size=settings.DEFAULT_TEAM_SIZE,
    )


async def fetch_formation_inputs(store: FormationStore, cycle_id: EntityId, chapter_id: EntityId, timeout: Optional[float] = None):
    """
    Fetch participants and votes concurrently. Both must complete before
    grouping can start; a timeout cancels whichever is still pending.
    """
    timeout = settings.FETCH_TIMEOUT_SECONDS if timeout is None else timeout
    participants, votes = await asyncio.wait_for(
        asyncio.gather(
            store.fetch_eligible_participants(chapter_id),
            store.fetch_votes(cycle_id),
        ),
        timeout=timeout,
    )
    return list(participants), list(votes)


async def form_cycle_teams(
    store: FormationStore,
    cycle_id: EntityId,
    chapter_id: EntityId,
    options: Optional[FormationOptions] = None,
    timeout: Optional[float] = None,
):
    """
    Form and persist the teams of one cycle.
    Nothing is persisted when formation fails; the error propagates.
    """
    participants, votes = await fetch_formation_inputs(store, cycle_id, chapter_id, timeout)
    logger.info(f"Forming teams for cycle {cycle_id}: {len(participants)} participants, {len(votes)} votes")

    try:
        teams = form_teams(participants, votes, options or options_from_settings())
    except Exception:
        logger.exception(f"Team formation failed for cycle {cycle_id}")
        raise

    records = [
        TeamRecord(cycle_id=cycle_id, chapter_id=chapter_id, goal=t.goal, member_ids=t.member_ids)
        for t in teams
    ]
    return await store.persist_teams(cycle_id, records)
