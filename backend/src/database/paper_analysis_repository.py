# src/database/paper_analysis_repository.py

"""
Paper Analysis Repository - 卡片分析结果存储

功能：
- 保存分析（同一 user/paper/type 自动递增 version）
- 读取最新的有效版本
- 软删除（is_active = false）
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import func, select, update

from src.database.db.session import SessionLocal
from src.database.db.models import PaperAnalysisRow
from src.model.analysis import StoredAnalysis


class PaperAnalysisRepository:

    def __init__(self, session_factory=None):
        self._session = session_factory or SessionLocal

    # =====================================================
    # Write
    # =====================================================

    def save_analysis(
        self,
        user_id: str,
        paper_id: str,
        analysis_type: str,
        analysis_title: str,
        content: str,
        prompt_used: Optional[str] = None,
        confidence_score: Optional[float] = None,
        processing_time_ms: Optional[int] = None,
        chunks_used: Optional[int] = None,
        model_used: Optional[str] = None,
    ) -> str:
        """
        Insert a new version of an analysis and return its id.
        """
        with self._session() as db:
            current = db.execute(
                select(func.coalesce(func.max(PaperAnalysisRow.version), 0)).where(
                    PaperAnalysisRow.user_id == user_id,
                    PaperAnalysisRow.paper_id == paper_id,
                    PaperAnalysisRow.analysis_type == analysis_type,
                )
            ).scalar_one()

            now = datetime.utcnow()
            row = PaperAnalysisRow(
                user_id=user_id,
                paper_id=paper_id,
                analysis_type=analysis_type,
                analysis_title=analysis_title,
                content=content,
                prompt_used=prompt_used,
                confidence_score=confidence_score,
                processing_time_ms=processing_time_ms,
                chunks_used=chunks_used,
                model_used=model_used,
                version=current + 1,
                is_active=True,
                generated_at=now,
                updated_at=now,
            )
            db.add(row)
            db.commit()
            return row.id

    def deactivate(self, user_id: str, paper_id: str, analysis_type: str) -> int:
        """Soft delete every version of one analysis type. Returns affected rows."""
        with self._session() as db:
            result = db.execute(
                update(PaperAnalysisRow)
                .where(
                    PaperAnalysisRow.user_id == user_id,
                    PaperAnalysisRow.paper_id == paper_id,
                    PaperAnalysisRow.analysis_type == analysis_type,
                    PaperAnalysisRow.is_active.is_(True),
                )
                .values(is_active=False, updated_at=datetime.utcnow())
            )
            db.commit()
            return result.rowcount or 0

    # =====================================================
    # Read
    # =====================================================

    def get_latest(
        self,
        user_id: str,
        paper_id: str,
        analysis_type: str,
    ) -> Optional[StoredAnalysis]:
        with self._session() as db:
            row = db.execute(
                select(PaperAnalysisRow)
                .where(
                    PaperAnalysisRow.user_id == user_id,
                    PaperAnalysisRow.paper_id == paper_id,
                    PaperAnalysisRow.analysis_type == analysis_type,
                    PaperAnalysisRow.is_active.is_(True),
                )
                .order_by(PaperAnalysisRow.version.desc())
                .limit(1)
            ).scalar_one_or_none()

            return self._row_to_model(row) if row else None

    def list_latest(self, user_id: str, paper_id: str) -> Dict[str, StoredAnalysis]:
        """Latest active version per analysis type."""
        with self._session() as db:
            rows = db.execute(
                select(PaperAnalysisRow)
                .where(
                    PaperAnalysisRow.user_id == user_id,
                    PaperAnalysisRow.paper_id == paper_id,
                    PaperAnalysisRow.is_active.is_(True),
                )
                .order_by(PaperAnalysisRow.analysis_type, PaperAnalysisRow.version.desc())
            ).scalars().all()

            latest: Dict[str, StoredAnalysis] = {}
            for row in rows:
                if row.analysis_type not in latest:
                    latest[row.analysis_type] = self._row_to_model(row)
            return latest

    @staticmethod
    def _row_to_model(row: PaperAnalysisRow) -> StoredAnalysis:
        return StoredAnalysis(
            id=row.id,
            user_id=row.user_id,
            paper_id=row.paper_id,
            analysis_type=row.analysis_type,
            analysis_title=row.analysis_title,
            content=row.content,
            prompt_used=row.prompt_used,
            confidence_score=float(row.confidence_score) if row.confidence_score is not None else None,
            processing_time_ms=row.processing_time_ms,
            chunks_used=row.chunks_used,
            model_used=row.model_used,
            version=row.version,
            is_active=row.is_active,
            generated_at=row.generated_at,
            updated_at=row.updated_at,
        )
