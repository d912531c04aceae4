from typing import Optional, Tuple

from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import (
    get_account_repo,
    get_acting_identity,
    get_analysis_repo,
    get_paper_repo,
)
from api.schemas.analysis import (
    AllAnalysesResponse,
    AnalysisResponse,
    DeleteAnalysisResponse,
    PaperUpsertRequest,
    PaperUpsertResponse,
    SaveAnalysisRequest,
    SaveAnalysisResponse,
    SingleAnalysisResponse,
)
from src.database.account_repository import AccountRepository
from src.database.paper_analysis_repository import PaperAnalysisRepository
from src.database.paper_repository import PaperRepository
from src.model.identity import ActingIdentity

router = APIRouter(prefix="/api/papers", tags=["analysis"])


def _require_account(
    identity: Optional[ActingIdentity],
    accounts: AccountRepository,
) -> str:
    if identity is None:
        raise HTTPException(status_code=401, detail="Unauthorized")
    user_id = accounts.find_account_id(identity)
    if not user_id:
        raise HTTPException(status_code=404, detail="User not found")
    return user_id


def _require_paper(
    identity: Optional[ActingIdentity],
    paper_key: str,
    accounts: AccountRepository,
    papers: PaperRepository,
) -> Tuple[str, str]:
    user_id = _require_account(identity, accounts)
    paper_id = papers.find_paper_id(user_id, paper_key)
    if not paper_id:
        raise HTTPException(status_code=404, detail="Paper not found")
    return user_id, paper_id


# --- Paper registration ---

@router.put("/{paper_key}", response_model=PaperUpsertResponse)
def upsert_paper(
    paper_key: str,
    body: PaperUpsertRequest,
    identity: Optional[ActingIdentity] = Depends(get_acting_identity),
    accounts: AccountRepository = Depends(get_account_repo),
    papers: PaperRepository = Depends(get_paper_repo),
):
    """Register (or refresh) a paper for the acting user."""
    user_id = _require_account(identity, accounts)
    paper_id = papers.upsert_paper(
        user_id=user_id,
        zotero_key=paper_key,
        title=body.title,
        authors=body.authors,
        abstract=body.abstract,
    )
    return PaperUpsertResponse(paper_id=paper_id)


# --- Stored analyses ---

@router.get("/{paper_key}/analysis")
def get_paper_analysis(
    paper_key: str,
    analysis_type: Optional[str] = Query(default=None, alias="type"),
    identity: Optional[ActingIdentity] = Depends(get_acting_identity),
    accounts: AccountRepository = Depends(get_account_repo),
    papers: PaperRepository = Depends(get_paper_repo),
    analyses: PaperAnalysisRepository = Depends(get_analysis_repo),
):
    """Latest active analysis of one type, or of every type."""
    user_id, paper_id = _require_paper(identity, paper_key, accounts, papers)

    if analysis_type:
        stored = analyses.get_latest(user_id, paper_id, analysis_type)
        return SingleAnalysisResponse(
            analysis=AnalysisResponse.from_stored(stored) if stored else None
        )

    return AllAnalysesResponse(
        analyses={
            kind: AnalysisResponse.from_stored(stored)
            for kind, stored in analyses.list_latest(user_id, paper_id).items()
        }
    )


@router.post("/{paper_key}/analysis", response_model=SaveAnalysisResponse)
def save_paper_analysis(
    paper_key: str,
    body: SaveAnalysisRequest,
    identity: Optional[ActingIdentity] = Depends(get_acting_identity),
    accounts: AccountRepository = Depends(get_account_repo),
    papers: PaperRepository = Depends(get_paper_repo),
    analyses: PaperAnalysisRepository = Depends(get_analysis_repo),
):
    user_id, paper_id = _require_paper(identity, paper_key, accounts, papers)
    analysis_id = analyses.save_analysis(
        user_id=user_id,
        paper_id=paper_id,
        analysis_type=body.analysis_type,
        analysis_title=body.analysis_title,
        content=body.content,
        prompt_used=body.prompt_used,
        confidence_score=body.confidence_score,
        processing_time_ms=body.processing_time_ms,
        chunks_used=body.chunks_used,
        model_used=body.model_used,
    )
    return SaveAnalysisResponse(analysis_id=analysis_id)


@router.delete("/{paper_key}/analysis", response_model=DeleteAnalysisResponse)
def delete_paper_analysis(
    paper_key: str,
    analysis_type: str = Query(..., alias="type"),
    identity: Optional[ActingIdentity] = Depends(get_acting_identity),
    accounts: AccountRepository = Depends(get_account_repo),
    papers: PaperRepository = Depends(get_paper_repo),
    analyses: PaperAnalysisRepository = Depends(get_analysis_repo),
):
    """Soft delete: every version of the type is deactivated."""
    user_id, paper_id = _require_paper(identity, paper_key, accounts, papers)
    deactivated = analyses.deactivate(user_id, paper_id, analysis_type)
    return DeleteAnalysisResponse(deactivated=deactivated)
