import logging
from typing import Optional

import requests
from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_zotero_client
from api.schemas.zotero import AttachmentInfo, AttachmentListResponse
from src.crawler.zotero_client import ZoteroClient
from src.model.fulltext import ZoteroCredentials

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/zotero", tags=["zotero"])


@router.get("/attachments/{item_key}", response_model=AttachmentListResponse)
def list_attachments(
    item_key: str,
    token: Optional[str] = Query(default=None),
    user_id: Optional[str] = Query(default=None, alias="userId"),
    library_type: str = Query(default="user", alias="libraryType"),
    library_id: Optional[str] = Query(default=None, alias="libraryId"),
    client: ZoteroClient = Depends(get_zotero_client),
):
    """Text-bearing attachments of a Zotero item, with extracted text quality."""
    if not token or not user_id:
        raise HTTPException(status_code=400, detail="Missing token or userId")

    creds = ZoteroCredentials(
        token=token,
        user_id=user_id,
        library_type=library_type,
        library_id=library_id,
    )

    try:
        attachments = client.list_attachments(creds, item_key)
    except requests.RequestException as e:
        logger.error(f"❌ Zotero API error for {item_key}: {e}")
        raise HTTPException(status_code=502, detail=f"Failed to fetch attachments: {e}")

    if not attachments:
        return AttachmentListResponse(attachments=[], message="No text-based attachments found")

    return AttachmentListResponse(
        attachments=[AttachmentInfo.from_attachment(a) for a in attachments],
        total=len(attachments),
    )
