from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List

import requests

from ..model.fulltext import ZoteroAttachment, ZoteroCredentials
from ..service.pdf_parser_service import extract_pdf_text, looks_like_pdf
from ..service.text_quality import validate_text

logger = logging.getLogger(__name__)


def is_pdf_content_type(content_type: str | None) -> bool:
    return bool(content_type) and "pdf" in content_type.lower()


def is_text_attachment(child: Dict[str, Any]) -> bool:
    data = child.get("data") or {}
    content_type = data.get("contentType") or ""
    return data.get("itemType") == "attachment" and (
        is_pdf_content_type(content_type) or "text/" in content_type
    )


class ZoteroClient:
    """
    Zotero Web API v3: list an item's attachments and pull their text.
    """

    def __init__(
        self,
        api_base_url: str | None = None,
        timeout: int | None = None,
        session: requests.Session | None = None,
    ):
        from ..config import Config

        self.api_base_url = (api_base_url or Config.zotero.api_base_url).rstrip("/")
        self.timeout = timeout or Config.zotero.timeout
        self.session = session or requests.Session()

    def _headers(self, creds: ZoteroCredentials) -> dict:
        return {
            "Authorization": f"Bearer {creds.token}",
            "Zotero-API-Version": "3",
            "User-Agent": "PaperCards/1.0",
        }

    def _item_url(self, creds: ZoteroCredentials, item_key: str) -> str:
        return f"{self.api_base_url}/{creds.library_path}/items/{item_key}"

    def list_children(self, creds: ZoteroCredentials, item_key: str) -> List[Dict[str, Any]]:
        url = f"{self._item_url(creds, item_key)}/children"
        logger.info(f"📎 Fetching attachments for {item_key} from: {url}")

        r = self.session.get(url, headers=self._headers(creds), timeout=self.timeout)
        r.raise_for_status()
        return r.json() or []

    def iter_attachments(self, creds: ZoteroCredentials, item_key: str) -> Iterator[ZoteroAttachment]:
        """
        Text-bearing attachments of an item in listing order, each with its
        extracted text and quality verdict. One broken attachment never hides the others.

        Files are downloaded only as the caller advances, so stopping early
        skips the remaining downloads.
        """
        for child in self.list_children(creds, item_key):
            if is_text_attachment(child):
                yield self._load_attachment(creds, child)

    def list_attachments(self, creds: ZoteroCredentials, item_key: str) -> List[ZoteroAttachment]:
        return list(self.iter_attachments(creds, item_key))

    def _load_attachment(self, creds: ZoteroCredentials, child: Dict[str, Any]) -> ZoteroAttachment:
        data = child.get("data") or {}
        attachment = ZoteroAttachment(
            key=child.get("key") or data.get("key") or "",
            title=data.get("title"),
            filename=data.get("filename"),
            content_type=data.get("contentType"),
            url=data.get("url"),
            date_added=data.get("dateAdded"),
            date_modified=data.get("dateModified"),
        )

        file_url = f"{self._item_url(creds, attachment.key)}/file"
        try:
            r = self.session.get(file_url, headers=self._headers(creds), timeout=self.timeout)
            r.raise_for_status()

            if is_pdf_content_type(attachment.content_type):
                if not looks_like_pdf(r.content or b"", r.headers.get("Content-Type")):
                    raise ValueError("attachment file is not a PDF")
                text = extract_pdf_text(r.content)
            else:
                text = r.text
        except Exception as e:
            logger.warning(f"❌ Attachment {attachment.key} unreadable: {e}")
            attachment.error = str(e) or e.__class__.__name__
            return attachment

        quality = validate_text(text)
        attachment.text_quality = quality
        attachment.has_full_text = quality.is_valid
        attachment.full_text = text if quality.is_valid else ""
        logger.info(
            f"✅ Attachment {attachment.key}: {quality.word_count} words, "
            f"{quality.estimated_pages} pages, valid={quality.is_valid}"
        )
        return attachment
