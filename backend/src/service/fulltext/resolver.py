from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from src.exceptions import ExtractionQualityTooLow, NoUsableText
from src.model.fulltext import FullTextRequest, ResolvedText
from src.service.fulltext.sources import (
    AbstractFallbackSource,
    ProvidedTextSource,
    RemoteUrlSource,
    TextSource,
    ZoteroAttachmentSource,
)

logger = logging.getLogger(__name__)


class FullTextResolver:
    """
    Walk the sources in order; the first candidate wins.

    A failing source is logged and skipped. Only when every source came up
    empty does resolution fail.
    """

    def __init__(self, sources: Iterable[TextSource]):
        self.sources: List[TextSource] = list(sources)

    def resolve(self, request: FullTextRequest) -> ResolvedText:
        for source in self.sources:
            try:
                candidate = source.acquire(request)
            except ExtractionQualityTooLow as e:
                logger.warning(f"⚠ {source.name}: {e.message}")
                continue
            except Exception as e:
                logger.warning(f"⚠ {source.name} failed for {request.paper_id}: {e!r}")
                continue

            if candidate is None:
                logger.debug(f"⏭ {source.name}: nothing to try")
                continue

            logger.info(
                f"📄 Full text for {request.paper_id} from {candidate.source.value} "
                f"({len(candidate.text)} chars)"
            )
            return ResolvedText(
                text=candidate.text,
                source=candidate.source,
                quality=candidate.quality,
            )

        raise NoUsableText(f"No full text available for analysis of {request.paper_id}")


def build_default_resolver(zotero_client=None, fetcher=None) -> FullTextResolver:
    """provided → Zotero attachment → remote URL → abstract."""
    from src.crawler.zotero_client import ZoteroClient
    from src.service.document_fetch_service import DocumentFetcher

    return FullTextResolver(
        [
            ProvidedTextSource(),
            ZoteroAttachmentSource(zotero_client or ZoteroClient()),
            RemoteUrlSource(fetcher or DocumentFetcher()),
            AbstractFallbackSource(),
        ]
    )
