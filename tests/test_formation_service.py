# tests/test_formation_service.py
import asyncio

import pytest

from teamforming.config.settings import settings
from teamforming.domain.exceptions import InsufficientAdvancedParticipants
from teamforming.domain.grouping import FormationOptions
from teamforming.domain.models import GoalDTO, ParticipantDTO, TeamRecord, VoteDTO
from teamforming.services.formation_service import form_cycle_teams, options_from_settings


class InMemoryStore:
    def __init__(self, participants, votes, delay=0):
        self.participants = participants
        self.votes = votes
        self.delay = delay
        self.persisted = []
        self.fetched = []
        self.votes_requested = asyncio.Event()

    async def fetch_eligible_participants(self, chapter_id):
        self.fetched.append(("participants", chapter_id))
        # only completes once the votes fetch is in flight too
        await self.votes_requested.wait()
        await asyncio.sleep(self.delay)
        return self.participants

    async def fetch_votes(self, cycle_id):
        self.fetched.append(("votes", cycle_id))
        self.votes_requested.set()
        await asyncio.sleep(self.delay)
        return self.votes

    async def persist_teams(self, cycle_id, teams):
        self.persisted.append((cycle_id, teams))
        return [{"id": i, **t.model_dump()} for i, t in enumerate(teams)]


def chapter():
    goal = GoalDTO(id="g1", team_size=5)
    participants = [ParticipantDTO(id="a1", score=120)] + [ParticipantDTO(id=f"p{i}") for i in range(4)]
    votes = [VoteDTO(participant_id=f"p{i}", goals=[goal]) for i in range(4)]
    return participants, votes


@pytest.mark.asyncio
async def test_form_and_persist_cycle_teams():
    participants, votes = chapter()
    store = InMemoryStore(participants, votes)

    result = await form_cycle_teams(store, cycle_id="c1", chapter_id="ch1", timeout=1)

    assert sorted(store.fetched) == [("participants", "ch1"), ("votes", "c1")]
    assert len(store.persisted) == 1
    cycle_id, records = store.persisted[0]
    assert cycle_id == "c1"
    assert records == [
        TeamRecord(cycle_id="c1", chapter_id="ch1", goal=GoalDTO(id="g1", team_size=5),
                   member_ids=["p0", "p1", "p2", "p3", "a1"]),
    ]
    assert result[0]["id"] == 0
    assert result[0]["member_ids"] == ["p0", "p1", "p2", "p3", "a1"]


@pytest.mark.asyncio
async def test_failed_formation_persists_nothing():
    participants, votes = chapter()
    participants = [p for p in participants if p.id != "a1"]
    store = InMemoryStore(participants, votes)

    with pytest.raises(InsufficientAdvancedParticipants):
        await form_cycle_teams(store, cycle_id="c1", chapter_id="ch1", timeout=1)

    assert store.persisted == []


@pytest.mark.asyncio
async def test_fetch_timeout():
    participants, votes = chapter()
    store = InMemoryStore(participants, votes, delay=1)

    with pytest.raises(asyncio.TimeoutError):
        await form_cycle_teams(store, cycle_id="c1", chapter_id="ch1", timeout=0.05)

    assert store.persisted == []


@pytest.mark.asyncio
async def test_explicit_options_override_settings():
    participants, votes = chapter()
    participants = [p if p.id != "a1" else ParticipantDTO(id="a1", score=60) for p in participants]
    store = InMemoryStore(participants, votes)

    await form_cycle_teams(
        store, cycle_id="c1", chapter_id="ch1",
        options=FormationOptions(advanced_score_threshold=50), timeout=1,
    )

    assert [r.member_ids for r in store.persisted[0][1]] == [["p0", "p1", "p2", "p3", "a1"]]


def test_options_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "ADVANCED_SCORE_THRESHOLD", 80)
    monkeypatch.setattr(settings, "DEFAULT_TEAM_SIZE", 3)

    assert options_from_settings() == FormationOptions(advanced_score_threshold=80, default_team_size=3)
