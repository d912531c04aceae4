from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from api.schemas.base import CamelModel
from src.model.analysis import StoredAnalysis


class SaveAnalysisRequest(CamelModel):
    analysis_type: str
    analysis_title: str
    content: str = Field(min_length=1)
    prompt_used: Optional[str] = None
    confidence_score: Optional[float] = Field(default=None, ge=0, le=1)
    processing_time_ms: Optional[int] = None
    chunks_used: Optional[int] = None
    model_used: Optional[str] = None


class SaveAnalysisResponse(CamelModel):
    success: bool = True
    analysis_id: str


class AnalysisResponse(CamelModel):
    id: str
    analysis_type: str
    analysis_title: str
    content: str
    prompt_used: Optional[str] = None
    confidence_score: Optional[float] = None
    generated_at: Optional[datetime] = None
    version: int
    model_used: Optional[str] = None

    @classmethod
    def from_stored(cls, stored: StoredAnalysis) -> AnalysisResponse:
        return cls(
            id=stored.id,
            analysis_type=stored.analysis_type,
            analysis_title=stored.analysis_title,
            content=stored.content,
            prompt_used=stored.prompt_used,
            confidence_score=stored.confidence_score,
            generated_at=stored.generated_at,
            version=stored.version,
            model_used=stored.model_used,
        )


class SingleAnalysisResponse(CamelModel):
    analysis: Optional[AnalysisResponse] = None


class AllAnalysesResponse(CamelModel):
    analyses: Dict[str, AnalysisResponse]


class DeleteAnalysisResponse(CamelModel):
    success: bool = True
    deactivated: int = 0


# --- Paper registration ---

class PaperUpsertRequest(CamelModel):
    title: str = Field(min_length=1)
    authors: List[str] = Field(default_factory=list)
    abstract: Optional[str] = None


class PaperUpsertResponse(CamelModel):
    success: bool = True
    paper_id: str
