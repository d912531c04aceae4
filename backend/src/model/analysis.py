from datetime import datetime
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from src.model.fulltext import FullTextSource, ZoteroCredentials
from src.model.paper import ProcessingStatus


class AnalysisCard(BaseModel):
    """One analysis directive: a question asked of the paper plus where to look."""

    id: str
    title: str
    prompt: str
    target_sections: Tuple[str, ...] = ()
    max_chunks: int = Field(default=5, ge=1)

    model_config = {"frozen": True}


# card id -> generated content, None when the card ran but produced nothing
AnalysisOutcome = Dict[str, Optional[str]]


class AnalysisRun(BaseModel):
    outcome: AnalysisOutcome = Field(default_factory=dict)
    elapsed_ms: int = 0
    chunks_used: int = 0

    @property
    def produced(self) -> Dict[str, str]:
        return {card_id: content for card_id, content in self.outcome.items() if content}


class PersistenceOutcome(BaseModel):
    card_id: str
    success: bool
    error: Optional[str] = None
    error_kind: Optional[str] = None
    analysis_id: Optional[str] = None


class PersistenceReport(BaseModel):
    outcomes: List[PersistenceOutcome] = Field(default_factory=list)

    @property
    def saved(self) -> int:
        return sum(1 for o in self.outcomes if o.success)

    @property
    def attempted(self) -> int:
        return len(self.outcomes)


class StoredAnalysis(BaseModel):
    id: str
    user_id: str
    paper_id: str
    analysis_type: str
    analysis_title: str
    content: str
    prompt_used: Optional[str] = None
    confidence_score: Optional[float] = None
    processing_time_ms: Optional[int] = None
    chunks_used: Optional[int] = None
    model_used: Optional[str] = None
    version: int = 1
    is_active: bool = True
    generated_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PaperAnalysisRequest(BaseModel):
    paper_id: str
    title: str
    authors: List[str] = Field(default_factory=list)
    abstract: str = ""
    full_text: Optional[str] = None
    url: Optional[str] = None
    zotero: Optional[ZoteroCredentials] = None
    active_card_ids: List[str] = Field(default_factory=list)


class ProcessingInfo(BaseModel):
    chunks_created: int = 0
    full_text_length: int = 0
    full_text_source: Optional[FullTextSource] = None
    processing_status: ProcessingStatus = ProcessingStatus.PENDING
    total_processing_time_ms: int = 0


class AnalysisReport(BaseModel):
    paper_id: str
    title: str
    results: Dict[str, str] = Field(default_factory=dict)
    cards_analyzed: int = 0
    saved_to_database: int = 0
    save_results: List[PersistenceOutcome] = Field(default_factory=list)
    processing_info: ProcessingInfo = Field(default_factory=ProcessingInfo)
