"""
Full-text acquisition strategies.

Each source answers one question: "given this request, can you produce
candidate text?". `acquire` returns None when its preconditions are not met
(nothing to try) and raises when it tried and failed.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from src.exceptions import ExtractionQualityTooLow
from src.model.fulltext import FullTextCandidate, FullTextRequest, FullTextSource
from src.service.html_text import html_to_text
from src.service.pdf_parser_service import extract_pdf_text
from src.service.text_quality import validate_text

logger = logging.getLogger(__name__)


class TextSource(ABC):
    source: FullTextSource

    @property
    def name(self) -> str:
        return self.source.value

    @abstractmethod
    def acquire(self, request: FullTextRequest) -> Optional[FullTextCandidate]:
        ...


class ProvidedTextSource(TextSource):
    """Text handed in by the caller. Trusted as-is."""

    source = FullTextSource.PROVIDED

    def acquire(self, request: FullTextRequest) -> Optional[FullTextCandidate]:
        if not request.full_text or not request.full_text.strip():
            return None
        return FullTextCandidate(source=self.source, text=request.full_text)


class ZoteroAttachmentSource(TextSource):
    """
    First attachment (listing order) whose own extraction passed and that is
    long enough. Not the best one: the first one.
    """

    source = FullTextSource.CITATION_ATTACHMENT

    def __init__(self, client, min_chars: int | None = None):
        from src.config import Config

        self.client = client
        self.min_chars = Config.text_quality.attachment_min_chars if min_chars is None else min_chars

    def acquire(self, request: FullTextRequest) -> Optional[FullTextCandidate]:
        creds = request.zotero
        if creds is None or not creds.token or not creds.user_id:
            return None

        for attachment in self.client.iter_attachments(creds, request.paper_id):
            if attachment.has_full_text and len(attachment.full_text) > self.min_chars:
                logger.info(f"📎 Using attachment {attachment.key} ({attachment.filename})")
                return FullTextCandidate(
                    source=self.source,
                    text=attachment.full_text,
                    quality=attachment.text_quality,
                )

        logger.info(f"📎 No attachment with usable text for {request.paper_id}")
        return None


class RemoteUrlSource(TextSource):
    """
    Fetch `request.url`: PDFs go through the PDF extractor, anything else is
    treated as a markup page.
    """

    source = FullTextSource.REMOTE_HTML

    def __init__(self, fetcher, min_chars: int | None = None):
        self.fetcher = fetcher
        self.min_chars = min_chars

    def acquire(self, request: FullTextRequest) -> Optional[FullTextCandidate]:
        url = (request.url or "").strip()
        if not url:
            return None

        if self._is_pdf(url):
            text = extract_pdf_text(self.fetcher.fetch_pdf(url))
            return self._checked(FullTextSource.REMOTE_PDF, text, url)

        text = html_to_text(self.fetcher.fetch_html(url))
        return self._checked(FullTextSource.REMOTE_HTML, text, url)

    def _is_pdf(self, url: str) -> bool:
        content_type = self.fetcher.head_content_type(url)
        if content_type:
            ct = content_type.lower()
            if "pdf" in ct:
                return True
            if "html" in ct or ct.startswith("text/"):
                return False
        return self.fetcher.is_pdf_url(url)

    def _checked(self, source: FullTextSource, text: str, url: str) -> FullTextCandidate:
        quality = validate_text(text, min_chars=self.min_chars)
        if not quality.is_valid:
            raise ExtractionQualityTooLow(
                f"Extracted text too short from {url} "
                f"({quality.char_count} chars, {quality.word_count} words)",
                word_count=quality.word_count,
                char_count=quality.char_count,
            )
        return FullTextCandidate(source=source, text=text, quality=quality)


class AbstractFallbackSource(TextSource):
    """Last resort: the abstract, if it is not trivially short."""

    source = FullTextSource.ABSTRACT_FALLBACK

    def __init__(self, min_chars: int | None = None):
        from src.config import Config

        self.min_chars = Config.text_quality.abstract_min_chars if min_chars is None else min_chars

    def acquire(self, request: FullTextRequest) -> Optional[FullTextCandidate]:
        if not request.abstract:
            return None

        quality = validate_text(request.abstract, min_chars=self.min_chars, min_words=1)
        if not quality.is_valid:
            logger.info(f"📝 Abstract too short for fallback ({quality.char_count} chars)")
            return None

        return FullTextCandidate(
            source=self.source,
            text=request.abstract.strip(),
            quality=quality,
        )
