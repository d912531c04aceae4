from __future__ import annotations

from typing import List, Optional

from api.schemas.base import CamelModel
from src.model.fulltext import ZoteroAttachment


class TextQualityInfo(CamelModel):
    word_count: int
    estimated_pages: int
    is_valid: bool


class AttachmentInfo(CamelModel):
    key: str
    title: Optional[str] = None
    filename: Optional[str] = None
    content_type: Optional[str] = None
    has_full_text: bool
    url: Optional[str] = None
    date_added: Optional[str] = None
    date_modified: Optional[str] = None
    full_text: str = ""
    text_quality: Optional[TextQualityInfo] = None
    error: Optional[str] = None

    @classmethod
    def from_attachment(cls, attachment: ZoteroAttachment) -> AttachmentInfo:
        quality = attachment.text_quality
        return cls(
            **attachment.model_dump(exclude={"text_quality"}),
            text_quality=TextQualityInfo(
                word_count=quality.word_count,
                estimated_pages=quality.estimated_pages,
                is_valid=quality.is_valid,
            ) if quality else None,
        )


class AttachmentListResponse(CamelModel):
    attachments: List[AttachmentInfo]
    total: int = 0
    message: Optional[str] = None
