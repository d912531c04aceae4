from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class FullTextSource(str, Enum):
    """Provenance tag of the text a paper was analysed with."""

    PROVIDED = "provided"
    CITATION_ATTACHMENT = "citation-attachment"
    REMOTE_PDF = "remote-pdf"
    REMOTE_HTML = "remote-html"
    ABSTRACT_FALLBACK = "abstract-fallback"


class TextQuality(BaseModel):
    is_valid: bool
    word_count: int = 0
    char_count: int = 0
    estimated_pages: int = 1


class FullTextCandidate(BaseModel):
    source: FullTextSource
    text: str
    quality: Optional[TextQuality] = None


class ResolvedText(BaseModel):
    text: str
    source: FullTextSource
    quality: Optional[TextQuality] = None


class ZoteroCredentials(BaseModel):
    token: str
    user_id: str
    library_type: str = "user"  # user | group
    library_id: Optional[str] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @property
    def library_path(self) -> str:
        """`users/<id>` or `groups/<id>` segment of the Zotero API URL."""
        return f"{self.library_type}s/{self.library_id or self.user_id}"


class FullTextRequest(BaseModel):
    paper_id: str
    abstract: str = ""
    full_text: Optional[str] = None
    url: Optional[str] = None
    zotero: Optional[ZoteroCredentials] = None


class ZoteroAttachment(BaseModel):
    key: str
    title: Optional[str] = None
    filename: Optional[str] = None
    content_type: Optional[str] = None
    url: Optional[str] = None
    date_added: Optional[str] = None
    date_modified: Optional[str] = None

    has_full_text: bool = False
    full_text: str = ""
    text_quality: Optional[TextQuality] = None
    error: Optional[str] = None
