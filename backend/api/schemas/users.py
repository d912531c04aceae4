from __future__ import annotations

from datetime import datetime
from typing import Optional

from api.schemas.base import CamelModel
from src.model.identity import Account


class UserCreateRequest(CamelModel):
    zotero_user_id: Optional[str] = None
    auth_subject: Optional[str] = None
    zotero_username: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None


class UserResponse(CamelModel):
    id: str
    zotero_user_id: Optional[str] = None
    auth_subject: Optional[str] = None
    zotero_username: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    @classmethod
    def from_account(cls, account: Account) -> UserResponse:
        return cls(**account.model_dump())


class UserEnvelope(CamelModel):
    user: UserResponse
    created: bool = False
