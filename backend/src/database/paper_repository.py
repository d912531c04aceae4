from __future__ import annotations

from typing import List, Optional
from datetime import datetime

from sqlalchemy import select

from src.database.db.session import SessionLocal
from src.database.db.models import PaperRow


class PaperRepository:
    """
    Papers are scoped per account and addressed by their Zotero item key.
    """

    def __init__(self, session_factory=None):
        self._session = session_factory or SessionLocal

    def find_paper_id(self, user_id: str, zotero_key: str) -> Optional[str]:
        """
        Resolve an external paper key to `papers.id` for one account.
        """
        with self._session() as db:
            return db.execute(
                select(PaperRow.id).where(
                    PaperRow.user_id == user_id,
                    PaperRow.zotero_key == zotero_key,
                )
            ).scalar_one_or_none()

    def upsert_paper(
        self,
        user_id: str,
        zotero_key: str,
        title: str,
        authors: Optional[List[str]] = None,
        abstract: Optional[str] = None,
    ) -> str:
        """
        Insert or update the paper metadata, returning its id.
        """
        with self._session() as db:
            row = db.execute(
                select(PaperRow).where(
                    PaperRow.user_id == user_id,
                    PaperRow.zotero_key == zotero_key,
                )
            ).scalar_one_or_none()

            if row is None:
                row = PaperRow(user_id=user_id, zotero_key=zotero_key)
                db.add(row)

            row.title = title
            row.authors = list(authors or [])
            row.abstract = abstract
            row.updated_at = datetime.utcnow()

            db.commit()
            return row.id
