"""
Token helpers:
- Access tokens: self-contained JWTs signed with JWT_SECRET (PyJWT, HS256 by default)
- Refresh tokens: opaque random strings tracked server-side in RefreshTokenStore

Validation returns a Result instead of raising, so callers branch on the
AuthError kind. Expiry is checked against the service clock, not PyJWT's,
which keeps the service testable with a fixed clock.
"""
from __future__ import annotations

import json
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Tuple

import jwt
from jwt.utils import base64url_decode, base64url_encode

from models.client import Client, Role
from models.refresh_token import RefreshToken
from utils.results import AuthError, Result

logger = logging.getLogger(__name__)

TOKEN_TYPE = "access"
# Shortest string worth handing to the JWT decoder
MIN_TOKEN_LENGTH = 10
REFRESH_TOKEN_BYTES = 32


@dataclass(frozen=True)
class AccessToken:
    token: str
    expires_at: datetime


@dataclass(frozen=True)
class AccessClaims:
    subject: str
    role: Role
    issued_at: datetime
    expires_at: datetime


def has_jwt_structure(raw: Optional[str]) -> bool:
    """Cheap shape check: non-empty, long enough, exactly two '.' separators."""
    if not raw or not isinstance(raw, str):
        return False
    if len(raw) < MIN_TOKEN_LENGTH:
        return False
    return raw.count(".") == 2


def _is_canonical_segment(segment: str) -> bool:
    # base64 decoding ignores stray characters and unused trailing bits, so an
    # altered segment can decode to the original bytes; require a byte-exact match
    try:
        return base64url_encode(base64url_decode(segment)).decode("ascii") == segment
    except ValueError:
        return False


def _is_json_object(segment: str) -> bool:
    try:
        return isinstance(json.loads(base64url_decode(segment)), dict)
    except (ValueError, RecursionError):
        # binascii, unicode and JSON decode errors are all ValueErrors;
        # deeply nested arrays or objects exhaust the decoder's recursion limit
        return False


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _from_ts(value) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)


class TokenService:
    def __init__(
        self,
        secret: str,
        refresh_store,
        credential_store,
        algorithm: str = "HS256",
        issuer: str = "vehicle-management-api",
        access_ttl: timedelta = timedelta(days=1),
        refresh_ttl: timedelta = timedelta(days=7),
        clock: Callable[[], datetime] | None = None,
    ):
        if not secret:
            raise ValueError("A signing secret is required")
        self._secret = secret
        self._refresh_store = refresh_store
        self._credential_store = credential_store
        self.algorithm = algorithm
        self.issuer = issuer
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self._clock = clock or _utcnow

    @classmethod
    def from_config(cls, config, refresh_store, credential_store, clock=None) -> "TokenService":
        return cls(
            secret=config["JWT_SECRET"],
            refresh_store=refresh_store,
            credential_store=credential_store,
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "vehicle-management-api"),
            access_ttl=config["ACCESS_TOKEN_EXPIRES"],
            refresh_ttl=config["REFRESH_TOKEN_EXPIRES"],
            clock=clock,
        )

    def now(self) -> datetime:
        return self._clock()

    # Access tokens

    def issue_access_token(self, principal: Client) -> AccessToken:
        now = self.now()
        iat = int(now.timestamp())
        exp = int((now + self.access_ttl).timestamp())
        payload = {
            "iss": self.issuer,
            "sub": principal.email,
            "role": Role(principal.role).value,
            "iat": iat,
            "exp": exp,
            "type": TOKEN_TYPE,
        }
        token = jwt.encode(payload, self._secret, algorithm=self.algorithm)
        return AccessToken(token=token, expires_at=_from_ts(exp))

    def validate_access_token(self, raw: str) -> Result[AccessClaims]:
        """
        Structural pre-check, then signature, then expiry against the service clock.
        MALFORMED_TOKEN, SIGNATURE_INVALID or EXPIRED_TOKEN on failure.
        """
        return self._decode(raw, check_expiry=True)

    def extract_subject(self, raw: str) -> Result[str]:
        """
        Subject of a correctly signed token, expired or not. Not a trust decision:
        use validate_access_token() for that.
        """
        result = self._decode(raw, check_expiry=False)
        if not result.ok:
            return Result.failure(result.error)
        return Result.success(result.value.subject)

    def _decode(self, raw: str, check_expiry: bool) -> Result[AccessClaims]:
        if not has_jwt_structure(raw):
            return Result.failure(AuthError.MALFORMED_TOKEN)

        # Header and payload must decode on their own; after this, a decode
        # failure can only come from the signature segment.
        header_segment, payload_segment, signature_segment = raw.split(".")
        if not (_is_json_object(header_segment) and _is_json_object(payload_segment)):
            return Result.failure(AuthError.MALFORMED_TOKEN)

        if not _is_canonical_segment(signature_segment):
            return Result.failure(AuthError.SIGNATURE_INVALID)

        try:
            claims = jwt.decode(
                raw,
                self._secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={
                    "verify_exp": False,
                    "verify_iat": False,
                    "verify_nbf": False,
                    "require": ["sub", "iat", "exp"],
                },
            )
        except (jwt.DecodeError, jwt.InvalidAlgorithmError):
            # InvalidSignatureError is a DecodeError
            return Result.failure(AuthError.SIGNATURE_INVALID)
        except jwt.InvalidTokenError as exc:
            logger.debug("Rejected token claims: %s", exc)
            return Result.failure(AuthError.MALFORMED_TOKEN)

        if claims.get("type") != TOKEN_TYPE:
            return Result.failure(AuthError.MALFORMED_TOKEN)
        exp, iat = claims.get("exp"), claims.get("iat")
        if not isinstance(exp, (int, float)) or not isinstance(iat, (int, float)):
            return Result.failure(AuthError.MALFORMED_TOKEN)
        try:
            role = Role(claims.get("role"))
        except ValueError:
            return Result.failure(AuthError.MALFORMED_TOKEN)

        if check_expiry and self.now().timestamp() >= exp:
            return Result.failure(AuthError.EXPIRED_TOKEN)

        return Result.success(
            AccessClaims(
                subject=claims["sub"],
                role=role,
                issued_at=_from_ts(iat),
                expires_at=_from_ts(exp),
            )
        )

    # Refresh tokens

    def issue_refresh_token(self, principal: Client) -> RefreshToken:
        token = secrets.token_urlsafe(REFRESH_TOKEN_BYTES)
        expires_at = self.now() + self.refresh_ttl
        rt = self._refresh_store.create(principal.id, token, expires_at)
        logger.debug("Issued refresh token for client %s", principal.id)
        return rt

    def redeem_refresh_token(self, raw: str) -> Result[Tuple[Client, AccessToken]]:
        """
        Mint a new access token from a live refresh token. The refresh token
        itself is not rotated and stays usable until it expires or is revoked.
        """
        if not raw:
            return Result.failure(AuthError.REFRESH_TOKEN_NOT_FOUND)

        rt = self._refresh_store.find_by_token(raw, for_update=True)
        try:
            if rt is None:
                return Result.failure(AuthError.REFRESH_TOKEN_NOT_FOUND)
            if rt.revoked:
                return Result.failure(AuthError.REFRESH_TOKEN_REVOKED)
            if rt.is_expired(self.now()):
                return Result.failure(AuthError.REFRESH_TOKEN_EXPIRED)

            client = self._credential_store.get(rt.client_id)
            if client is None:
                return Result.failure(AuthError.PRINCIPAL_NOT_FOUND)
            if not client.is_active:
                return Result.failure(AuthError.PRINCIPAL_INACTIVE)
        finally:
            self._refresh_store.commit()

        return Result.success((client, self.issue_access_token(client)))

    def revoke_refresh_token(self, raw: str) -> bool:
        if not raw:
            return False
        return self._refresh_store.revoke(raw)

    def revoke_all_for_principal(self, principal_id: str) -> int:
        count = self._refresh_store.revoke_by_client(principal_id)
        logger.info("Revoked %d refresh token(s) for client %s", count, principal_id)
        return count

    def delete_all_for_principal(self, principal_id: str) -> int:
        return self._refresh_store.delete_by_client(principal_id)
