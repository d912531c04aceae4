import threading

import pytest

from src.database.account_repository import AccountRepository
from src.database.paper_analysis_repository import PaperAnalysisRepository
from src.database.paper_repository import PaperRepository
from src.model.identity import ActingIdentity, IdentityKind
from src.service.persistence_coordinator import PersistenceCoordinator

IDENTITY = ActingIdentity(kind=IdentityKind.ZOTERO, subject="42")


class FakeAccounts:
    def __init__(self, user_id="u1"):
        self.user_id = user_id

    def find_account_id(self, identity):
        return self.user_id


class FakePapers:
    def __init__(self, paper_id="p1"):
        self.paper_id = paper_id

    def find_paper_id(self, user_id, zotero_key):
        return self.paper_id


class FlakyAnalyses:
    """Raises for one analysis type; records the rest."""

    def __init__(self, broken_type=None):
        self.broken_type = broken_type
        self.saved = []
        self._lock = threading.Lock()

    def save_analysis(self, **kwargs):
        if kwargs["analysis_type"] == self.broken_type:
            raise RuntimeError("connection reset by peer")
        with self._lock:
            self.saved.append(kwargs)
            return f"a-{len(self.saved)}"


def _outcome(cards):
    return {card.id: f"content for {card.id}" for card in cards}


@pytest.mark.asyncio
async def test_one_failing_save_does_not_affect_siblings(cards):
    analyses = FlakyAnalyses(broken_type="methodology")
    coordinator = PersistenceCoordinator(FakeAccounts(), FakePapers(), analyses)

    report = await coordinator.persist(IDENTITY, "ZKEY1", _outcome(cards), cards)

    assert report.attempted == 3
    assert report.saved == 2
    failed = [o for o in report.outcomes if not o.success]
    assert [o.card_id for o in failed] == ["methodology"]
    assert failed[0].error_kind == "RuntimeError"
    assert {s["analysis_type"] for s in analyses.saved} == {"overview", "findings"}


@pytest.mark.asyncio
async def test_cards_without_content_are_not_saved(cards):
    analyses = FlakyAnalyses()
    coordinator = PersistenceCoordinator(FakeAccounts(), FakePapers(), analyses)
    outcome = {"overview": "text", "methodology": None, "findings": ""}

    report = await coordinator.persist(IDENTITY, "ZKEY1", outcome, cards, processing_time_ms=900)

    assert report.attempted == 1
    assert report.saved == 1
    # time is shared over the whole batch
    assert analyses.saved[0]["processing_time_ms"] == 300


@pytest.mark.asyncio
async def test_missing_identity_fails_every_card(cards):
    analyses = FlakyAnalyses()
    coordinator = PersistenceCoordinator(FakeAccounts(), FakePapers(), analyses)

    report = await coordinator.persist(None, "ZKEY1", _outcome(cards), cards)

    assert report.saved == 0
    assert {o.error_kind for o in report.outcomes} == {"IdentityNotFound"}
    assert analyses.saved == []


@pytest.mark.asyncio
async def test_unknown_user_and_unknown_paper(cards):
    report = await PersistenceCoordinator(FakeAccounts(None), FakePapers(), FlakyAnalyses()).persist(
        IDENTITY, "ZKEY1", _outcome(cards), cards
    )
    assert {o.error for o in report.outcomes} == {"User not found"}

    report = await PersistenceCoordinator(FakeAccounts(), FakePapers(None), FlakyAnalyses()).persist(
        IDENTITY, "ZKEY1", _outcome(cards), cards
    )
    assert {o.error_kind for o in report.outcomes} == {"PaperNotFound"}


@pytest.mark.asyncio
async def test_saves_every_card_to_the_database(session_factory, cards):
    accounts = AccountRepository(session_factory)
    papers = PaperRepository(session_factory)
    analyses = PaperAnalysisRepository(session_factory)
    user_id = accounts.create_account(zotero_user_id="42")
    paper_id = papers.upsert_paper(user_id, "ZKEY1", "Sparse Attention")

    coordinator = PersistenceCoordinator(accounts, papers, analyses)
    two = cards[:2]
    report = await coordinator.persist(
        IDENTITY, "ZKEY1", _outcome(two), two, processing_time_ms=1000, chunks_used=6, model_used="gpt-4o-mini"
    )

    assert report.saved == 2
    stored = analyses.list_latest(user_id, paper_id)
    assert set(stored) == {"overview", "methodology"}
    assert stored["overview"].content == "content for overview"
    assert stored["overview"].prompt_used == cards[0].prompt
    assert stored["overview"].analysis_title == "Overview"
    assert stored["methodology"].processing_time_ms == 500
    assert stored["methodology"].model_used == "gpt-4o-mini"


@pytest.mark.asyncio
async def test_empty_outcome_saves_nothing(cards):
    report = await PersistenceCoordinator(FakeAccounts(), FakePapers(), FlakyAnalyses()).persist(
        IDENTITY, "ZKEY1", {}, cards
    )
    assert report.attempted == 0
    assert report.saved == 0
