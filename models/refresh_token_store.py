"""
RefreshTokenStore: sole owner of RefreshToken rows.

Every mutation is one committed statement, so a revoke is visible to any
lookup that starts after it. Lookups bypass the session identity map
(populate_existing) and can take a row lock, so a redeem never decides on a
stale copy of the row.
"""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import update, delete

from models.refresh_token import RefreshToken


class RefreshTokenStore:
    def __init__(self, storage):
        self._storage = storage

    @property
    def _session(self):
        return self._storage.get_session()

    def create(self, client_id: str, token: str, expires_at: datetime) -> RefreshToken:
        rt = RefreshToken(
            token=token,
            client_id=client_id,
            revoked=False,
            expires_at=expires_at,
        )
        self._storage.new(rt)
        self._storage.save()
        return rt

    def find_by_token(self, token: str, for_update: bool = False) -> Optional[RefreshToken]:
        if not token:
            return None
        query = (
            self._session.query(RefreshToken)
            .filter(RefreshToken.token == token)
            .execution_options(populate_existing=True)
        )
        if for_update:
            # FOR UPDATE on backends that support it; ignored by SQLite
            query = query.with_for_update()
        return query.first()

    def revoke(self, token: str) -> bool:
        """Mark one token revoked. Returns False when no such token exists."""
        result = self._session.execute(
            update(RefreshToken)
            .where(RefreshToken.token == token)
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        self._storage.save()
        return result.rowcount > 0

    def revoke_by_client(self, client_id: str) -> int:
        result = self._session.execute(
            update(RefreshToken)
            .where(RefreshToken.client_id == client_id, RefreshToken.revoked.is_(False))
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        self._storage.save()
        return result.rowcount

    def delete_by_client(self, client_id: str) -> int:
        result = self._session.execute(
            delete(RefreshToken)
            .where(RefreshToken.client_id == client_id)
            .execution_options(synchronize_session=False)
        )
        self._storage.save()
        return result.rowcount

    def commit(self) -> None:
        """End the current transaction, releasing any row lock taken by find_by_token."""
        self._storage.save()
