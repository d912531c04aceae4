from __future__ import annotations

import asyncio
import logging
from typing import Optional, Sequence

from src.exceptions import IdentityNotFound, PaperNotFound, PaperCardsError
from src.model.analysis import (
    AnalysisCard,
    AnalysisOutcome,
    PersistenceOutcome,
    PersistenceReport,
)
from src.model.identity import ActingIdentity
from src.service.card_catalog import analysis_title_for

logger = logging.getLogger(__name__)


class PersistenceCoordinator:
    """
    Save one `paper_analysis` row per card that produced content.

    Every card gets its own task; a task never raises, it reports its own
    failure, so one bad save cannot cancel or hide its siblings.
    """

    def __init__(self, accounts, papers, analyses):
        self.accounts = accounts
        self.papers = papers
        self.analyses = analyses

    async def persist(
        self,
        identity: Optional[ActingIdentity],
        paper_key: str,
        outcome: AnalysisOutcome,
        cards: Sequence[AnalysisCard],
        processing_time_ms: int = 0,
        chunks_used: int = 0,
        model_used: Optional[str] = None,
    ) -> PersistenceReport:
        with_content = [card for card in cards if outcome.get(card.id)]
        # time is split over every card of the batch, not only the saved ones
        time_share = processing_time_ms // len(cards) if cards else 0

        async with asyncio.TaskGroup() as tg:
            tasks = [
                tg.create_task(
                    self._persist_card(
                        identity=identity,
                        paper_key=paper_key,
                        card=card,
                        content=outcome[card.id],
                        processing_time_ms=time_share,
                        chunks_used=chunks_used,
                        model_used=model_used,
                    )
                )
                for card in with_content
            ]

        report = PersistenceReport(outcomes=[t.result() for t in tasks])
        logger.info(f"💾 Saved {report.saved}/{report.attempted} analysis results to database")
        return report

    async def _persist_card(
        self,
        identity: Optional[ActingIdentity],
        paper_key: str,
        card: AnalysisCard,
        content: str,
        processing_time_ms: int,
        chunks_used: int,
        model_used: Optional[str],
    ) -> PersistenceOutcome:
        try:
            analysis_id = await asyncio.to_thread(
                self._save,
                identity,
                paper_key,
                card,
                content,
                processing_time_ms,
                chunks_used,
                model_used,
            )
        except PaperCardsError as e:
            logger.error(f"❌ Save failed for card {card.id}: {e.kind}: {e.message}")
            return PersistenceOutcome(card_id=card.id, success=False, error=e.message, error_kind=e.kind)
        except Exception as e:
            logger.error(f"❌ Save failed for card {card.id}: {e!r}")
            return PersistenceOutcome(
                card_id=card.id,
                success=False,
                error=str(e) or e.__class__.__name__,
                error_kind=e.__class__.__name__,
            )

        return PersistenceOutcome(card_id=card.id, success=True, analysis_id=analysis_id)

    def _save(
        self,
        identity: Optional[ActingIdentity],
        paper_key: str,
        card: AnalysisCard,
        content: str,
        processing_time_ms: int,
        chunks_used: int,
        model_used: Optional[str],
    ) -> str:
        if identity is None:
            raise IdentityNotFound("Unauthorized")

        user_id = self.accounts.find_account_id(identity)
        if not user_id:
            raise IdentityNotFound("User not found")

        paper_id = self.papers.find_paper_id(user_id, paper_key)
        if not paper_id:
            raise PaperNotFound(f"Paper not found: {paper_key}")

        return self.analyses.save_analysis(
            user_id=user_id,
            paper_id=paper_id,
            analysis_type=card.id,
            analysis_title=analysis_title_for(card),
            content=content,
            prompt_used=card.prompt,
            processing_time_ms=processing_time_ms,
            chunks_used=chunks_used,
            model_used=model_used,
        )
