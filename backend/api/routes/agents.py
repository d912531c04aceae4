import logging
from typing import Optional

from fastapi import APIRouter, Depends

from api.deps import get_acting_identity, get_analysis_job, get_catalog
from api.schemas.agents import (
    AnalyzeCompleteRequest,
    AnalyzeCompleteResponse,
    CardInfo,
    CardListResponse,
)
from src.exceptions import PaperCardsError, UnexpectedServerError
from src.jobs.paper_analysis_job import PaperAnalysisJob
from src.model.identity import ActingIdentity
from src.service.card_catalog import AnalysisCardCatalog

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agents", tags=["agents"])


@router.post("/analyze-complete-paper", response_model=AnalyzeCompleteResponse)
async def analyze_complete_paper(
    body: AnalyzeCompleteRequest,
    identity: Optional[ActingIdentity] = Depends(get_acting_identity),
    job: PaperAnalysisJob = Depends(get_analysis_job),
):
    """Resolve full text, run the selected cards, save each result."""
    try:
        report = await job.run(body, identity)
    except PaperCardsError:
        raise
    except Exception as e:
        logger.exception(f"💥 Complete paper analysis failed for {body.paper_id}")
        raise UnexpectedServerError(str(e), error_type=e.__class__.__name__) from e

    return AnalyzeCompleteResponse.from_report(report)


@router.get("/analyze-complete-paper", response_model=CardListResponse)
def list_analysis_cards(catalog: AnalysisCardCatalog = Depends(get_catalog)):
    """Available analysis cards."""
    return CardListResponse(
        available_cards=[CardInfo.from_card(card) for card in catalog.list_cards()]
    )
