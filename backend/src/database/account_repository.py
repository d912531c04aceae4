from __future__ import annotations

from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy import select

from src.database.db.session import SessionLocal
from src.database.db.models import UserRow
from src.model.identity import Account, ActingIdentity, IdentityKind


class AccountRepository:
    """
    Map an acting identity (auth subject or legacy Zotero user id)
    to the durable `users.id`.
    """

    def __init__(self, session_factory=None):
        self._session = session_factory or SessionLocal

    @staticmethod
    def _identity_column(identity: ActingIdentity):
        return (
            UserRow.auth_subject
            if identity.kind == IdentityKind.AUTH
            else UserRow.zotero_user_id
        )

    def find_account_id(self, identity: ActingIdentity) -> Optional[str]:
        with self._session() as db:
            return db.execute(
                select(UserRow.id).where(self._identity_column(identity) == identity.subject)
            ).scalar_one_or_none()

    def get_account(self, identity: ActingIdentity) -> Optional[Account]:
        with self._session() as db:
            row = db.execute(
                select(UserRow).where(self._identity_column(identity) == identity.subject)
            ).scalar_one_or_none()
            return self._row_to_model(row) if row else None

    def create_account(
        self,
        auth_subject: Optional[str] = None,
        zotero_user_id: Optional[str] = None,
        email: Optional[str] = None,
        zotero_username: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> str:
        if not auth_subject and not zotero_user_id:
            raise ValueError("An account needs an auth subject or a Zotero user id")

        with self._session() as db:
            row = UserRow(
                auth_subject=auth_subject,
                zotero_user_id=zotero_user_id,
                email=email,
                zotero_username=zotero_username,
                display_name=display_name,
            )
            db.add(row)
            db.commit()
            return row.id

    def get_or_create_account(
        self,
        auth_subject: Optional[str] = None,
        zotero_user_id: Optional[str] = None,
        email: Optional[str] = None,
        zotero_username: Optional[str] = None,
        display_name: Optional[str] = None,
    ) -> Tuple[Account, bool]:
        """
        已存在则刷新 last_login 和非空的资料字段，否则新建。
        auth subject 优先于 Zotero user id 作为查找键。
        返回 (account, created)。
        """
        if auth_subject:
            identity = ActingIdentity(kind=IdentityKind.AUTH, subject=auth_subject)
        elif zotero_user_id:
            identity = ActingIdentity(kind=IdentityKind.ZOTERO, subject=zotero_user_id)
        else:
            raise ValueError("An account needs an auth subject or a Zotero user id")

        with self._session() as db:
            row = db.execute(
                select(UserRow).where(self._identity_column(identity) == identity.subject)
            ).scalar_one_or_none()
            if row is not None:
                row.last_login = datetime.utcnow()
                for field, value in (
                    ("email", email),
                    ("zotero_username", zotero_username),
                    ("display_name", display_name),
                ):
                    if value:
                        setattr(row, field, value)
                db.commit()
                return self._row_to_model(row), False

        self.create_account(
            auth_subject=auth_subject,
            zotero_user_id=zotero_user_id,
            email=email,
            zotero_username=zotero_username,
            display_name=display_name,
        )
        return self.get_account(identity), True

    @staticmethod
    def _row_to_model(row: UserRow) -> Account:
        return Account(
            id=row.id,
            auth_subject=row.auth_subject,
            zotero_user_id=row.zotero_user_id,
            zotero_username=row.zotero_username,
            email=row.email,
            display_name=row.display_name,
            created_at=row.created_at,
            last_login=row.last_login,
        )
