import pytest
from sqlalchemy.exc import IntegrityError

from src.database.account_repository import AccountRepository
from src.database.paper_analysis_repository import PaperAnalysisRepository
from src.database.paper_repository import PaperRepository
from src.model.identity import ActingIdentity, IdentityKind


@pytest.fixture
def repos(session_factory):
    return (
        AccountRepository(session_factory),
        PaperRepository(session_factory),
        PaperAnalysisRepository(session_factory),
    )


@pytest.fixture
def owned_paper(repos):
    accounts, papers, _ = repos
    user_id = accounts.create_account(auth_subject="auth|1", zotero_user_id="42")
    paper_id = papers.upsert_paper(user_id, "ZKEY1", "Sparse Attention", ["A. Author"])
    return user_id, paper_id


def test_identity_lookup_by_either_kind(repos, owned_paper):
    accounts, _, _ = repos
    user_id, _ = owned_paper
    assert accounts.find_account_id(ActingIdentity(kind=IdentityKind.AUTH, subject="auth|1")) == user_id
    assert accounts.find_account_id(ActingIdentity(kind=IdentityKind.ZOTERO, subject="42")) == user_id
    assert accounts.find_account_id(ActingIdentity(kind=IdentityKind.AUTH, subject="42")) is None


def test_account_needs_some_identity(repos):
    accounts, _, _ = repos
    with pytest.raises(ValueError):
        accounts.create_account(email="a@example.org")


def test_duplicate_auth_subject_rejected(repos, owned_paper):
    accounts, _, _ = repos
    with pytest.raises(IntegrityError):
        accounts.create_account(auth_subject="auth|1")


def test_get_or_create_reuses_existing_account(repos, owned_paper):
    accounts, _, _ = repos
    user_id, _ = owned_paper

    account, created = accounts.get_or_create_account(zotero_user_id="42", zotero_username="reader")
    assert not created
    assert account.id == user_id
    assert account.zotero_username == "reader"

    fresh, created = accounts.get_or_create_account(zotero_user_id="77", email="b@example.org")
    assert created
    assert fresh.id != user_id
    assert accounts.get_account(ActingIdentity(kind=IdentityKind.ZOTERO, subject="77")).email == "b@example.org"

    with pytest.raises(ValueError):
        accounts.get_or_create_account(email="c@example.org")


def test_paper_upsert_is_idempotent_per_user(repos, owned_paper):
    accounts, papers, _ = repos
    user_id, paper_id = owned_paper
    assert papers.upsert_paper(user_id, "ZKEY1", "Renamed") == paper_id
    assert papers.find_paper_id(user_id, "ZKEY1") == paper_id

    other = accounts.create_account(zotero_user_id="43")
    assert papers.find_paper_id(other, "ZKEY1") is None
    assert papers.upsert_paper(other, "ZKEY1", "Same key, other user") != paper_id


def test_saved_analysis_round_trips(repos, owned_paper):
    _, _, analyses = repos
    user_id, paper_id = owned_paper
    analysis_id = analyses.save_analysis(
        user_id=user_id,
        paper_id=paper_id,
        analysis_type="overview",
        analysis_title="Research Overview",
        content="- it is fast",
        prompt_used="What are the main objectives?",
        processing_time_ms=1200,
        chunks_used=6,
        model_used="gpt-4o-mini",
    )

    stored = analyses.get_latest(user_id, paper_id, "overview")
    assert stored.id == analysis_id
    assert stored.content == "- it is fast"
    assert stored.prompt_used == "What are the main objectives?"
    assert stored.model_used == "gpt-4o-mini"
    assert stored.processing_time_ms == 1200
    assert stored.chunks_used == 6
    assert stored.version == 1
    assert stored.is_active


def test_versions_increase_and_latest_wins(repos, owned_paper):
    _, _, analyses = repos
    user_id, paper_id = owned_paper
    for content in ("first", "second", "third"):
        analyses.save_analysis(user_id, paper_id, "findings", "Key Findings & Results", content)
    analyses.save_analysis(user_id, paper_id, "impact", "Impact & Applications", "impact")

    latest = analyses.get_latest(user_id, paper_id, "findings")
    assert latest.version == 3
    assert latest.content == "third"

    by_type = analyses.list_latest(user_id, paper_id)
    assert set(by_type) == {"findings", "impact"}
    assert by_type["findings"].content == "third"


def test_deactivate_is_soft(repos, owned_paper):
    _, _, analyses = repos
    user_id, paper_id = owned_paper
    analyses.save_analysis(user_id, paper_id, "overview", "Research Overview", "v1")
    analyses.save_analysis(user_id, paper_id, "overview", "Research Overview", "v2")

    assert analyses.deactivate(user_id, paper_id, "overview") == 2
    assert analyses.get_latest(user_id, paper_id, "overview") is None
    assert analyses.deactivate(user_id, paper_id, "overview") == 0

    # numbering continues after a soft delete
    analyses.save_analysis(user_id, paper_id, "overview", "Research Overview", "v3")
    assert analyses.get_latest(user_id, paper_id, "overview").version == 3
