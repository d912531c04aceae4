# src/jobs/paper_analysis_job.py

"""
Paper Analysis Job - 卡片式论文分析流水线

步骤：
1. 校验输入
2. 解析全文（provided → Zotero 附件 → URL → abstract）
3. 选择分析卡片
4. 逐卡调用 LLM
5. 每张卡独立保存到数据库，汇总成功数
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

from src.exceptions import InputValidationError, NoCardsSelected, NoUsableText
from src.model.analysis import AnalysisReport, PaperAnalysisRequest, ProcessingInfo
from src.model.fulltext import FullTextRequest
from src.model.identity import ActingIdentity
from src.model.paper import PaperDocument
from src.service.analysis_orchestrator import AnalysisOrchestrator
from src.service.card_catalog import AnalysisCardCatalog
from src.service.chunking import EmbeddingChunkSelector, PaperChunker
from src.service.fulltext import FullTextResolver
from src.service.persistence_coordinator import PersistenceCoordinator

logger = logging.getLogger(__name__)


def validate_request(request: PaperAnalysisRequest) -> None:
    errors = []
    if not request.paper_id or not request.paper_id.strip():
        errors.append("paperId is required")
    if not request.title or not request.title.strip():
        errors.append("title is required")
    if errors:
        raise InputValidationError("; ".join(errors))


class PaperAnalysisJob:

    def __init__(
        self,
        resolver: FullTextResolver,
        catalog: AnalysisCardCatalog,
        orchestrator: AnalysisOrchestrator,
        coordinator: PersistenceCoordinator,
        chunker: Optional[PaperChunker] = None,
        model_used: Optional[str] = None,
    ):
        self.resolver = resolver
        self.catalog = catalog
        self.orchestrator = orchestrator
        self.coordinator = coordinator
        self.chunker = chunker or PaperChunker.from_config()
        self.model_used = model_used

    async def run(
        self,
        request: PaperAnalysisRequest,
        identity: Optional[ActingIdentity],
    ) -> AnalysisReport:
        validate_request(request)
        logger.info(f"🚀 Starting complete analysis for paper: {request.paper_id}")

        document = PaperDocument(
            id=request.paper_id,
            title=request.title,
            authors=request.authors,
            abstract=request.abstract,
        )

        # --- Step 1: 全文 ---
        try:
            resolved = await asyncio.to_thread(
                self.resolver.resolve,
                FullTextRequest(
                    paper_id=request.paper_id,
                    abstract=request.abstract,
                    full_text=request.full_text,
                    url=request.url,
                    zotero=request.zotero,
                ),
            )
        except NoUsableText:
            document.mark_failed()
            raise

        document.attach_full_text(resolved, self.chunker.chunk(resolved.text))

        # --- Step 2: 选择卡片 ---
        cards = self.catalog.select_cards(request.active_card_ids)
        if not cards:
            raise NoCardsSelected("No analysis cards selected")

        # --- Step 3: LLM 分析 ---
        run = await asyncio.to_thread(self.orchestrator.run, document, cards)

        # --- Step 4: 保存 ---
        report = await self.coordinator.persist(
            identity=identity,
            paper_key=request.paper_id,
            outcome=run.outcome,
            cards=cards,
            processing_time_ms=run.elapsed_ms,
            chunks_used=run.chunks_used,
            model_used=self.model_used,
        )

        logger.info(
            f"✅ Analysis of {request.paper_id} done: "
            f"{len(run.produced)}/{len(cards)} cards, saved {report.saved}/{report.attempted}"
        )

        return AnalysisReport(
            paper_id=request.paper_id,
            title=request.title,
            results=run.produced,
            cards_analyzed=len(cards),
            saved_to_database=report.saved,
            save_results=report.outcomes,
            processing_info=ProcessingInfo(
                chunks_created=len(document.chunks),
                full_text_length=document.full_text_length,
                full_text_source=document.full_text_source,
                processing_status=document.processing_status,
                total_processing_time_ms=run.elapsed_ms,
            ),
        )


def build_default_job(catalog: Optional[AnalysisCardCatalog] = None) -> PaperAnalysisJob:
    from src.database.account_repository import AccountRepository
    from src.database.paper_analysis_repository import PaperAnalysisRepository
    from src.database.paper_repository import PaperRepository
    from src.service.card_catalog import get_card_catalog
    from src.service.fulltext import build_default_resolver
    from src.service.llm_service import current_model, init_litellm, llm_completion, llm_embedding

    init_litellm()
    return PaperAnalysisJob(
        resolver=build_default_resolver(),
        catalog=catalog or get_card_catalog(),
        orchestrator=AnalysisOrchestrator(
            complete=llm_completion,
            chunk_selector=EmbeddingChunkSelector(embed=llm_embedding),
        ),
        coordinator=PersistenceCoordinator(
            accounts=AccountRepository(),
            papers=PaperRepository(),
            analyses=PaperAnalysisRepository(),
        ),
        model_used=current_model(),
    )
