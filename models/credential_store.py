"""
CredentialStore: principal lookups for authentication and client management.

find_active_by_email() is the only lookup authentication uses, so a deactivated
client can never obtain or use tokens, even with the right password.
"""
from __future__ import annotations

from typing import List, Optional, Tuple

from models.client import Client


class CredentialStore:
    def __init__(self, storage):
        self._storage = storage

    @property
    def _session(self):
        return self._storage.get_session()

    def find_active_by_email(self, email: str) -> Optional[Client]:
        if not email:
            return None
        return (
            self._session.query(Client)
            .filter(Client.email == email, Client.is_active.is_(True))
            .first()
        )

    def exists_by_email(self, email: str) -> bool:
        return self._session.query(Client.id).filter(Client.email == email).first() is not None

    def get(self, client_id: str) -> Optional[Client]:
        return self._storage.get(Client, client_id)

    def list(self, page: int, limit: int) -> Tuple[List[Client], int]:
        query = self._session.query(Client)
        total = query.count()
        rows = (
            query.order_by(Client.name.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return rows, total

    def save(self, client: Client) -> Client:
        """Insert or update."""
        self._storage.new(client)
        self._storage.save()
        return client

    def delete(self, client: Client) -> None:
        self._storage.delete(client)
        self._storage.save()

    def rollback(self) -> None:
        self._storage.rollback()
