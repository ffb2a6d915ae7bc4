"""
Explicit outcomes for the auth flows.

Token validation, refresh redemption, login and register return a Result
carrying either a value or an AuthError kind. Callers branch on the kind.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


class AuthError(str, Enum):
    MALFORMED_TOKEN = "MALFORMED_TOKEN"
    SIGNATURE_INVALID = "SIGNATURE_INVALID"
    EXPIRED_TOKEN = "EXPIRED_TOKEN"
    PRINCIPAL_NOT_FOUND = "PRINCIPAL_NOT_FOUND"
    PRINCIPAL_INACTIVE = "PRINCIPAL_INACTIVE"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    DUPLICATE_CREDENTIAL = "DUPLICATE_CREDENTIAL"
    REFRESH_TOKEN_NOT_FOUND = "REFRESH_TOKEN_NOT_FOUND"
    REFRESH_TOKEN_REVOKED = "REFRESH_TOKEN_REVOKED"
    REFRESH_TOKEN_EXPIRED = "REFRESH_TOKEN_EXPIRED"

    @property
    def status(self) -> int:
        if self is AuthError.DUPLICATE_CREDENTIAL:
            return 409
        return 401

    @property
    def message(self) -> str:
        return _MESSAGES[self]


_MESSAGES = {
    AuthError.MALFORMED_TOKEN: "Malformed token",
    AuthError.SIGNATURE_INVALID: "Token signature is invalid",
    AuthError.EXPIRED_TOKEN: "Token expired",
    AuthError.PRINCIPAL_NOT_FOUND: "Account not found",
    AuthError.PRINCIPAL_INACTIVE: "Account is inactive",
    AuthError.INVALID_CREDENTIALS: "Invalid credentials",
    AuthError.DUPLICATE_CREDENTIAL: "Email already registered",
    AuthError.REFRESH_TOKEN_NOT_FOUND: "Invalid refresh token",
    AuthError.REFRESH_TOKEN_REVOKED: "Refresh token has been revoked",
    AuthError.REFRESH_TOKEN_EXPIRED: "Refresh token expired",
}


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[AuthError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: AuthError) -> "Result[T]":
        return cls(error=error)
