"""Access token issue/validate: round trip, expiry, tampering, structure."""
from datetime import timedelta

import jwt
import pytest

from models.client import Role
from utils import tokens
from utils.results import AuthError
from utils.tokens import TokenService, has_jwt_structure


def _flip(char: str) -> str:
    return "A" if char != "A" else "B"


def test_round_trip_returns_subject_and_role(token_service, john):
    issued = token_service.issue_access_token(john)
    result = token_service.validate_access_token(issued.token)

    assert result.ok
    assert result.value.subject == "john@test.com"
    assert result.value.role is Role.NORMAL_USER
    assert result.value.expires_at == issued.expires_at


def test_round_trip_for_admin(token_service, admin):
    result = token_service.validate_access_token(token_service.issue_access_token(admin).token)
    assert result.ok
    assert result.value.role is Role.ADMIN


def test_claims_carry_issue_and_expiry_times(token_service, john, clock):
    issued = token_service.issue_access_token(john)
    claims = jwt.decode(issued.token, options={"verify_signature": False})

    assert claims["sub"] == john.email
    assert claims["role"] == "NORMAL_USER"
    assert claims["iat"] == int(clock.now.timestamp())
    assert claims["exp"] == int((clock.now + token_service.access_ttl).timestamp())


def test_expiry_boundaries(token_service, john, clock):
    token_service.access_ttl = timedelta(hours=1)
    token = token_service.issue_access_token(john).token

    clock.advance(minutes=59)
    assert token_service.validate_access_token(token).ok

    clock.advance(minutes=2)
    result = token_service.validate_access_token(token)
    assert not result.ok
    assert result.error is AuthError.EXPIRED_TOKEN


def test_token_invalid_exactly_at_expiry(token_service, john, clock):
    token_service.access_ttl = timedelta(hours=1)
    token = token_service.issue_access_token(john).token
    clock.advance(hours=1)
    assert token_service.validate_access_token(token).error is AuthError.EXPIRED_TOKEN


def test_every_signature_byte_is_checked(token_service, john):
    token = token_service.issue_access_token(john).token
    head, payload, signature = token.split(".")

    for i in range(len(signature)):
        tampered_sig = signature[:i] + _flip(signature[i]) + signature[i + 1:]
        result = token_service.validate_access_token(f"{head}.{payload}.{tampered_sig}")
        assert result.error is AuthError.SIGNATURE_INVALID, i


def test_tampered_signature_wins_over_expiry(token_service, john, clock):
    token = token_service.issue_access_token(john).token
    head, payload, signature = token.split(".")
    clock.advance(days=30)

    result = token_service.validate_access_token(f"{head}.{payload}.{_flip(signature[0])}{signature[1:]}")
    assert result.error is AuthError.SIGNATURE_INVALID


def test_non_ascii_signature_is_signature_invalid(token_service, john):
    token = token_service.issue_access_token(john).token
    assert token_service.validate_access_token(token[:-1] + "é").error is AuthError.SIGNATURE_INVALID


def test_forged_claims_fail_signature(token_service, john):
    token = token_service.issue_access_token(john).token
    forged = jwt.encode(
        {**jwt.decode(token, options={"verify_signature": False}), "role": "ADMIN"},
        "some-other-secret-that-is-long-enough",
        algorithm="HS256",
    )
    assert token_service.validate_access_token(forged).error is AuthError.SIGNATURE_INVALID


def test_unsigned_token_is_rejected(token_service, john):
    token = token_service.issue_access_token(john).token
    claims = jwt.decode(token, options={"verify_signature": False})
    unsigned = jwt.encode(claims, None, algorithm="none")
    assert token_service.validate_access_token(unsigned).error is AuthError.SIGNATURE_INVALID


@pytest.mark.parametrize(
    "raw",
    ["", "nodots-at-all", "one.separator-only", "a.b", "....", "a.b.c.d", "ab.c.d"],
)
def test_structural_check_rejects_bad_shapes(raw):
    assert has_jwt_structure(raw) is False


def test_structural_failure_never_reaches_crypto(token_service, monkeypatch):
    def boom(*args, **kwargs):
        raise AssertionError("decoder must not run")

    monkeypatch.setattr(tokens.jwt, "decode", boom)
    monkeypatch.setattr(tokens, "base64url_decode", boom)

    for raw in ["", "garbage-token-value", "only.one-separator-here"]:
        assert token_service.validate_access_token(raw).error is AuthError.MALFORMED_TOKEN


def test_undecodable_segments_are_malformed(token_service):
    assert token_service.validate_access_token("not-base64!.still-not.sig").error is AuthError.MALFORMED_TOKEN


def test_wrong_token_type_is_malformed(token_service, clock):
    now = int(clock.now.timestamp())
    raw = jwt.encode(
        {"iss": token_service.issuer, "sub": "john@test.com", "role": "NORMAL_USER",
         "iat": now, "exp": now + 60, "type": "refresh"},
        "test-secret-key-for-testing-only-do-not-use",
        algorithm="HS256",
    )
    assert token_service.validate_access_token(raw).error is AuthError.MALFORMED_TOKEN


def test_unknown_role_is_malformed(token_service, clock):
    now = int(clock.now.timestamp())
    raw = jwt.encode(
        {"iss": token_service.issuer, "sub": "john@test.com", "role": "ROOT",
         "iat": now, "exp": now + 60, "type": "access"},
        "test-secret-key-for-testing-only-do-not-use",
        algorithm="HS256",
    )
    assert token_service.validate_access_token(raw).error is AuthError.MALFORMED_TOKEN


def test_extract_subject_ignores_expiry(token_service, john, clock):
    token = token_service.issue_access_token(john).token
    clock.advance(days=2)

    assert token_service.validate_access_token(token).error is AuthError.EXPIRED_TOKEN
    result = token_service.extract_subject(token)
    assert result.ok
    assert result.value == "john@test.com"


def test_extract_subject_still_checks_signature(token_service, john):
    token = token_service.issue_access_token(john).token
    assert token_service.extract_subject(token[:-2] + "zz").error is not None
    assert token_service.extract_subject("bad").error is AuthError.MALFORMED_TOKEN


def test_service_requires_a_secret():
    with pytest.raises(ValueError):
        TokenService(secret="", refresh_store=None, credential_store=None)


@pytest.mark.parametrize("char", ["-", "_", "=", "+", "/", "A", "B"])
def test_last_signature_character_substitutions(token_service, john, char):
    token = token_service.issue_access_token(john).token
    head, payload, signature = token.split(".")
    if signature[-1] == char:
        pytest.skip("substitution leaves the signature unchanged")

    result = token_service.validate_access_token(f"{head}.{payload}.{signature[:-1]}{char}")
    assert result.error is AuthError.SIGNATURE_INVALID


def test_appended_padding_is_rejected(token_service, john):
    token = token_service.issue_access_token(john).token
    assert token_service.validate_access_token(token + "=").error is AuthError.SIGNATURE_INVALID


def test_deeply_nested_segment_is_malformed(token_service):
    nested = tokens.base64url_encode(b"[" * 5000).decode("ascii")
    assert token_service.validate_access_token(f"{nested}.e30.c2ln").error is AuthError.MALFORMED_TOKEN
    assert token_service.validate_access_token(f"e30.{nested}.c2ln").error is AuthError.MALFORMED_TOKEN
