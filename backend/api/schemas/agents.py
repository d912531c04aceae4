from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import ConfigDict
from pydantic.alias_generators import to_camel

from api.schemas.base import CamelModel
from src.model.analysis import AnalysisCard, AnalysisReport, PaperAnalysisRequest


# --- Request ---

class AnalyzeCompleteRequest(PaperAnalysisRequest):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# --- Response ---

class SaveResult(CamelModel):
    card_id: str
    success: bool
    error: Optional[str] = None
    error_kind: Optional[str] = None
    analysis_id: Optional[str] = None


class ProcessingInfoResponse(CamelModel):
    chunks_created: int
    full_text_length: int
    full_text_source: Optional[str] = None
    processing_status: str
    total_processing_time_ms: int


class AnalyzeCompleteResponse(CamelModel):
    success: bool = True
    paper_id: str
    title: str
    results: Dict[str, str]
    cards_analyzed: int
    saved_to_database: int
    save_results: List[SaveResult]
    processing_info: ProcessingInfoResponse

    @classmethod
    def from_report(cls, report: AnalysisReport) -> AnalyzeCompleteResponse:
        info = report.processing_info
        return cls(
            paper_id=report.paper_id,
            title=report.title,
            results=report.results,
            cards_analyzed=report.cards_analyzed,
            saved_to_database=report.saved_to_database,
            save_results=[SaveResult(**o.model_dump()) for o in report.save_results],
            processing_info=ProcessingInfoResponse(
                chunks_created=info.chunks_created,
                full_text_length=info.full_text_length,
                full_text_source=info.full_text_source.value if info.full_text_source else None,
                processing_status=info.processing_status.value,
                total_processing_time_ms=info.total_processing_time_ms,
            ),
        )


# --- Catalog listing ---

class CardInfo(CamelModel):
    id: str
    title: str
    prompt: str
    target_sections: List[str]
    max_chunks: int

    @classmethod
    def from_card(cls, card: AnalysisCard) -> CardInfo:
        return cls(
            id=card.id,
            title=card.title,
            prompt=card.prompt,
            target_sections=list(card.target_sections),
            max_chunks=card.max_chunks,
        )


class CardListResponse(CamelModel):
    available_cards: List[CardInfo]
