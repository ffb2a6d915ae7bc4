"""
Login, registration and session lifecycle for clients.

LoginService ties CredentialStore, the password hasher and TokenService
together. Expected failures come back as Result.failure(AuthError...);
only storage faults raise.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from flask import current_app
from sqlalchemy.exc import IntegrityError

from models.client import Client, Role
from models.refresh_token import RefreshToken
from utils.results import AuthError, Result
from utils.security import hash_password, needs_rehash, verify_password
from utils.tokens import AccessToken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginOutcome:
    access_token: AccessToken
    refresh_token: RefreshToken
    principal: Client


class LoginService:
    def __init__(self, credential_store, token_service):
        self.credentials = credential_store
        self.tokens = token_service

    def login(self, email: str, password: str) -> Result[LoginOutcome]:
        client = self.credentials.find_active_by_email(email)
        if client is None:
            # Same cost and same answer as a wrong password
            hash_password(password or "")
            logger.warning("Login failed: no active account for the given email")
            return Result.failure(AuthError.INVALID_CREDENTIALS)
        if not verify_password(password, client.password_hash):
            logger.warning("Login failed for client %s: wrong password", client.id)
            return Result.failure(AuthError.INVALID_CREDENTIALS)

        if needs_rehash(client.password_hash):
            client.password_hash = hash_password(password)
            self.credentials.save(client)

        access_token = self.tokens.issue_access_token(client)
        refresh_token = self.tokens.issue_refresh_token(client)
        logger.info("Client %s logged in", client.id)
        return Result.success(LoginOutcome(access_token, refresh_token, client))

    def register(self, name: str, email: str, password: str, role: Optional[Role] = None) -> Result[Client]:
        if self.credentials.exists_by_email(email):
            logger.warning("Registration rejected: email already registered")
            return Result.failure(AuthError.DUPLICATE_CREDENTIAL)

        client = Client(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role or Role.NORMAL_USER,
            is_active=True,
        )
        try:
            self.credentials.save(client)
        except IntegrityError:
            # Lost a race with a concurrent registration of the same email
            return Result.failure(AuthError.DUPLICATE_CREDENTIAL)
        logger.info("Registered client %s with role %s", client.id, Role(client.role).value)
        return Result.success(client)

    def refresh(self, refresh_token: str) -> Result[Tuple[Client, AccessToken]]:
        result = self.tokens.redeem_refresh_token(refresh_token)
        if not result.ok:
            logger.info("Refresh rejected: %s", result.error.value)
        return result

    def logout(self, refresh_token: str) -> None:
        """Revoke one refresh token. Unknown or already revoked tokens are fine."""
        self.tokens.revoke_refresh_token(refresh_token)

    def logout_everywhere(self, principal: Client) -> int:
        return self.tokens.revoke_all_for_principal(principal.id)

    def update_profile(self, principal: Client, name: Optional[str] = None, password: Optional[str] = None) -> Client:
        """Change name and/or password. A password change ends every session."""
        if name:
            principal.name = name
        self.credentials.save(principal)
        if password:
            self.change_password(principal, password)
        return principal

    def change_password(self, principal: Client, new_password: str) -> None:
        principal.password_hash = hash_password(new_password)
        self.credentials.save(principal)
        self.tokens.revoke_all_for_principal(principal.id)

    def deactivate(self, principal: Client) -> None:
        principal.deactivate()
        self.credentials.save(principal)
        self.tokens.revoke_all_for_principal(principal.id)
        logger.info("Deactivated client %s", principal.id)

    def delete(self, principal: Client) -> None:
        client_id = principal.id
        self.tokens.delete_all_for_principal(client_id)
        self.credentials.delete(principal)
        logger.info("Deleted client %s", client_id)


def get_login_service() -> LoginService:
    return current_app.extensions["login_service"]
