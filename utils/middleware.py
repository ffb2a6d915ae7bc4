"""
Per-request authentication.

AuthenticationMiddleware reads the Authorization header once per request and
binds a SecurityContext to flask.g. It never rejects a request: absent,
malformed, invalid and stale tokens all leave the request anonymous, and the
guards in utils.decorators turn "anonymous on a protected route" into a 401.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from flask import g, request
from sqlalchemy.exc import SQLAlchemyError

from models.client import Client, Role
from utils.tokens import has_jwt_structure

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class SecurityContext:
    principal: Optional[Client] = None
    role: Optional[Role] = None

    @property
    def is_authenticated(self) -> bool:
        return self.principal is not None

    @classmethod
    def anonymous(cls) -> "SecurityContext":
        return cls()

    @classmethod
    def for_principal(cls, principal: Client) -> "SecurityContext":
        return cls(principal=principal, role=Role(principal.role))


class AuthenticationMiddleware:
    def __init__(self, token_service, credential_store):
        self._tokens = token_service
        self._credentials = credential_store

    def init_app(self, app):
        app.extensions["auth_middleware"] = self

        @app.before_request
        def bind_security_context():
            g.security_context = self.authenticate(request.headers.get("Authorization"))

    def authenticate(self, authorization: Optional[str]) -> SecurityContext:
        # No bearer credential at all: plain anonymous request
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            return SecurityContext.anonymous()

        raw = authorization[len(BEARER_PREFIX):].strip()
        if not raw or not has_jwt_structure(raw):
            logger.warning("Empty or malformed bearer token; continuing anonymously")
            return SecurityContext.anonymous()

        result = self._tokens.validate_access_token(raw)
        if not result.ok:
            logger.info("Bearer token rejected (%s); continuing anonymously", result.error.value)
            return SecurityContext.anonymous()

        subject = result.value.subject
        try:
            principal = self._credentials.find_active_by_email(subject)
        except SQLAlchemyError:
            logger.exception("Principal lookup failed; continuing anonymously")
            self._credentials.rollback()
            return SecurityContext.anonymous()

        if principal is None:
            # Token outlived its account, or the account was deactivated
            logger.info("Bearer token refers to a missing or inactive account")
            return SecurityContext.anonymous()

        logger.debug("Authenticated client %s", principal.id)
        return SecurityContext.for_principal(principal)


def current_security_context() -> SecurityContext:
    """The context bound to the current request; anonymous outside one."""
    context = g.get("security_context")
    if context is None:
        return SecurityContext.anonymous()
    return context
