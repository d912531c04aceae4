from functools import lru_cache
from typing import Optional

from fastapi import Header

from src.crawler.zotero_client import ZoteroClient
from src.database.account_repository import AccountRepository
from src.database.paper_analysis_repository import PaperAnalysisRepository
from src.database.paper_repository import PaperRepository
from src.jobs.paper_analysis_job import PaperAnalysisJob, build_default_job
from src.model.identity import ActingIdentity, IdentityKind
from src.service.card_catalog import AnalysisCardCatalog, get_card_catalog


def get_acting_identity(
    x_user_id: Optional[str] = Header(default=None),
    x_zotero_user_id: Optional[str] = Header(default=None),
) -> Optional[ActingIdentity]:
    """Auth subject header first, legacy Zotero user id header second."""
    if x_user_id:
        return ActingIdentity(kind=IdentityKind.AUTH, subject=x_user_id)
    if x_zotero_user_id:
        return ActingIdentity(kind=IdentityKind.ZOTERO, subject=x_zotero_user_id)
    return None


def get_catalog() -> AnalysisCardCatalog:
    return get_card_catalog()


def get_account_repo() -> AccountRepository:
    """Repositories are stateless, safe to create per-request."""
    return AccountRepository()


def get_paper_repo() -> PaperRepository:
    return PaperRepository()


def get_analysis_repo() -> PaperAnalysisRepository:
    return PaperAnalysisRepository()


def get_zotero_client() -> ZoteroClient:
    return ZoteroClient()


@lru_cache(maxsize=1)
def get_analysis_job() -> PaperAnalysisJob:
    return build_default_job()
