import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_account_repo
from api.schemas.users import UserCreateRequest, UserEnvelope, UserResponse
from src.database.account_repository import AccountRepository
from src.model.identity import ActingIdentity, IdentityKind

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("", response_model=UserEnvelope)
def create_or_update_user(
    body: UserCreateRequest,
    accounts: AccountRepository = Depends(get_account_repo),
):
    """按 auth subject / Zotero user id 查找用户，不存在则创建"""
    if not body.auth_subject and not body.zotero_user_id:
        raise HTTPException(status_code=400, detail="zoteroUserId or authSubject is required")

    account, created = accounts.get_or_create_account(
        auth_subject=body.auth_subject,
        zotero_user_id=body.zotero_user_id,
        email=body.email,
        zotero_username=body.zotero_username,
        display_name=body.display_name,
    )
    if created:
        logger.info(f"👤 New user created: {account.id}")
    return UserEnvelope(user=UserResponse.from_account(account), created=created)


@router.get("", response_model=UserEnvelope)
def get_user(
    zotero_user_id: Optional[str] = Query(default=None, alias="zoteroUserId"),
    auth_subject: Optional[str] = Query(default=None, alias="authSubject"),
    accounts: AccountRepository = Depends(get_account_repo),
):
    if auth_subject:
        identity = ActingIdentity(kind=IdentityKind.AUTH, subject=auth_subject)
    elif zotero_user_id:
        identity = ActingIdentity(kind=IdentityKind.ZOTERO, subject=zotero_user_id)
    else:
        raise HTTPException(status_code=400, detail="zoteroUserId or authSubject is required")

    account = accounts.get_account(identity)
    if account is None:
        raise HTTPException(status_code=404, detail="User not found")
    return UserEnvelope(user=UserResponse.from_account(account))
