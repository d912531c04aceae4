from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class IdentityKind(str, Enum):
    AUTH = "auth"  # subject of the auth provider's session
    ZOTERO = "zotero"  # legacy Zotero user id header


class ActingIdentity(BaseModel):
    kind: IdentityKind
    subject: str

    model_config = {"frozen": True}


class Account(BaseModel):
    id: str
    auth_subject: Optional[str] = None
    zotero_user_id: Optional[str] = None
    zotero_username: Optional[str] = None
    email: Optional[str] = None
    display_name: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None
