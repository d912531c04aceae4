from __future__ import annotations

import logging
import time
from typing import Callable, Optional, Sequence

from src.model.analysis import AnalysisCard, AnalysisOutcome, AnalysisRun
from src.model.paper import PaperDocument
from src.service.chunking import ChunkSelector, render_context

logger = logging.getLogger(__name__)

CompleteFn = Callable[[str], Optional[str]]


def build_analysis_prompt(card: AnalysisCard, context: str) -> str:
    return f"""
Analyze this research paper content and provide a brief, focused response.

{context}

Question: {card.prompt}

Instructions:
- Keep response under 150 words
- Focus only on key insights, don't repeat title/authors
- Be direct and specific
- Use bullet points if helpful
- Skip generic statements

Response:
""".strip()


class AnalysisOrchestrator:
    """
    Run every selected card against one resolved document.

    Cards are independent: an exception or an empty reply only leaves that
    card's entry empty. Nothing is retried here.
    """

    def __init__(
        self,
        complete: CompleteFn,
        chunk_selector: Optional[ChunkSelector] = None,
        max_context_chars: Optional[int] = None,
    ):
        if max_context_chars is None:
            from src.config import Config
            max_context_chars = Config.analysis.max_context_chars

        self.complete = complete
        self.chunk_selector = chunk_selector or ChunkSelector()
        self.max_context_chars = max_context_chars

    def context_for(self, document: PaperDocument, card: AnalysisCard) -> str:
        text = document.full_text or ""
        if len(text) <= self.max_context_chars or not document.chunks:
            return f"Research Paper Content:\n\n{text}"
        return render_context(self.chunk_selector.select(document.chunks, card))

    def run(self, document: PaperDocument, cards: Sequence[AnalysisCard]) -> AnalysisRun:
        logger.info(f"🔬 Starting analysis for: {document.title} ({len(cards)} cards)")
        started = time.perf_counter()

        outcome: AnalysisOutcome = {}
        for card in cards:
            outcome[card.id] = self._run_card(document, card)

        elapsed_ms = int((time.perf_counter() - started) * 1000)
        produced = sum(1 for v in outcome.values() if v)
        logger.info(f"📊 Analysis finished: {produced}/{len(cards)} cards produced content in {elapsed_ms}ms")

        return AnalysisRun(
            outcome=outcome,
            elapsed_ms=elapsed_ms,
            chunks_used=len(document.chunks),
        )

    def _run_card(self, document: PaperDocument, card: AnalysisCard) -> Optional[str]:
        logger.info(f"📊 Analyzing: {card.title}")
        try:
            prompt = build_analysis_prompt(card, self.context_for(document, card))
            content = self.complete(prompt)
        except Exception as e:
            logger.error(f"❌ Card {card.id} failed: {e}")
            return None

        if not content or not content.strip():
            logger.warning(f"⚠ Card {card.id} produced no content")
            return None
        return content.strip()
