from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlparse

import requests

from src.service.pdf_parser_service import looks_like_pdf

logger = logging.getLogger(__name__)


class NotAPdfError(ValueError):
    """The server answered with something that is not a PDF (CAPTCHA, login page...)."""


class DocumentFetcher:
    """
    Download remote papers: a content-type HEAD check, PDF bytes, or an HTML page.

    No retries; every call carries a timeout so a dead host fails instead of hanging.
    """

    def __init__(
        self,
        timeout: int | None = None,
        user_agent: str | None = None,
        session: requests.Session | None = None,
    ):
        from ..config import Config

        self.timeout = timeout or Config.fetch.timeout
        self.user_agent = user_agent or Config.fetch.user_agent
        self.session = session or requests.Session()

    @property
    def _headers(self) -> dict:
        return {"User-Agent": self.user_agent}

    @staticmethod
    def is_pdf_url(url: str) -> bool:
        return ".pdf" in urlparse(url).path.lower()

    def head_content_type(self, url: str) -> Optional[str]:
        """
        HEAD the URL and return its Content-Type, or None when the answer is inconclusive.
        """
        try:
            r = self.session.head(
                url,
                headers=self._headers,
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.RequestException as e:
            logger.info(f"🔍 Content-type HEAD failed for {url}: {e}")
            return None

        if r.status_code >= 400:
            logger.info(f"🔍 Content-type HEAD for {url} returned HTTP {r.status_code}")
            return None

        return r.headers.get("Content-Type") or None

    def fetch_pdf(self, url: str) -> bytes:
        r = self.session.get(
            url,
            headers={**self._headers, "Accept": "application/pdf"},
            timeout=self.timeout,
        )
        r.raise_for_status()

        content = r.content or b""
        if not content:
            raise NotAPdfError(f"Empty PDF response: {url}")
        if not looks_like_pdf(content, r.headers.get("Content-Type", "")):
            raise NotAPdfError(f"Not a PDF (maybe CAPTCHA): {url}")

        logger.info(f"📄 PDF downloaded: {len(content) / 1024:.1f}KB from {url}")
        return content

    def fetch_html(self, url: str) -> str:
        r = self.session.get(url, headers=self._headers, timeout=self.timeout)
        r.raise_for_status()
        # requests falls back to ISO-8859-1 for text/* without a charset
        if "charset" not in r.headers.get("Content-Type", "").lower():
            r.encoding = r.apparent_encoding
        return r.text
