from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, PrivateAttr

from src.model.fulltext import FullTextSource, ResolvedText


class ProcessingStatus(str, Enum):
    PENDING = "pending"
    RESOLVED = "resolved"
    FAILED = "failed"


class SectionType(str, Enum):
    ABSTRACT = "abstract"
    INTRODUCTION = "introduction"
    METHODOLOGY = "methodology"
    RESULTS = "results"
    DISCUSSION = "discussion"
    CONCLUSION = "conclusion"
    REFERENCES = "references"
    OTHER = "other"


class PaperChunk(BaseModel):
    id: str
    content: str
    section_type: SectionType = SectionType.OTHER
    word_count: int = 0
    has_equations: bool = False
    has_tables: bool = False
    has_figures: bool = False
    embedding: Optional[List[float]] = None  # filled lazily by the embedding selector


class PaperDocument(BaseModel):
    """
    Paper 分析文档
    - 只属于一次分析请求，不跨请求共享
    - full_text 在解析完成前可变，完成后只读
    """

    id: str
    title: str
    authors: List[str] = Field(default_factory=list)
    abstract: str = ""

    full_text: Optional[str] = None
    full_text_source: Optional[FullTextSource] = None
    chunks: List[PaperChunk] = Field(default_factory=list)
    processing_status: ProcessingStatus = ProcessingStatus.PENDING

    _sealed: bool = PrivateAttr(default=False)

    model_config = {
        "str_strip_whitespace": False,
        "validate_assignment": True,
        "extra": "ignore",
    }

    def attach_full_text(self, resolved: ResolvedText, chunks: List[PaperChunk]) -> None:
        """Store the resolved text once; any later attempt is a bug."""
        if self._sealed:
            raise RuntimeError(f"Full text already resolved for paper {self.id}")

        self.full_text = resolved.text
        self.full_text_source = resolved.source
        self.chunks = chunks
        self.processing_status = ProcessingStatus.RESOLVED
        self._sealed = True

    def mark_failed(self) -> None:
        if self._sealed:
            raise RuntimeError(f"Full text already resolved for paper {self.id}")
        self.processing_status = ProcessingStatus.FAILED
        self._sealed = True

    @property
    def full_text_length(self) -> int:
        return len(self.full_text or "")
