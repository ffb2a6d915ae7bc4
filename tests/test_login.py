"""LoginService: login, register, logout and credential changes."""
import pytest

from models import storage
from models.client import Client, Role
from models.refresh_token import RefreshToken
from utils.results import AuthError

from conftest import PASSWORD


def test_login_issues_both_tokens(login_service, token_service, john):
    result = login_service.login("john@test.com", PASSWORD)

    assert result.ok
    outcome = result.value
    assert outcome.principal.id == john.id
    assert outcome.access_token.token
    assert outcome.refresh_token.token
    assert token_service.validate_access_token(outcome.access_token.token).value.subject == "john@test.com"
    assert token_service.redeem_refresh_token(outcome.refresh_token.token).ok


def test_wrong_password_and_unknown_email_look_the_same(login_service, john):
    wrong_password = login_service.login("john@test.com", "not-the-password")
    unknown_email = login_service.login("nobody@test.com", PASSWORD)

    assert wrong_password.error is AuthError.INVALID_CREDENTIALS
    assert unknown_email.error is AuthError.INVALID_CREDENTIALS


def test_email_match_is_exact(login_service, john):
    assert login_service.login("JOHN@test.com", PASSWORD).error is AuthError.INVALID_CREDENTIALS


def test_inactive_principal_cannot_login(login_service, john):
    login_service.deactivate(john)
    assert login_service.login("john@test.com", PASSWORD).error is AuthError.INVALID_CREDENTIALS


def test_register_defaults_to_normal_user(login_service):
    result = login_service.register("Jane Tester", "jane@test.com", "password1")

    assert result.ok
    client = result.value
    assert client.role is Role.NORMAL_USER
    assert client.is_active is True
    assert client.password_hash != "password1"


def test_register_with_requested_role(login_service):
    assert login_service.register("Root", "root@test.com", "password1", Role.ADMIN).value.role is Role.ADMIN


def test_register_rejects_duplicate_email(login_service, john):
    result = login_service.register("John Again", "john@test.com", "password2")
    assert result.error is AuthError.DUPLICATE_CREDENTIAL
    assert storage.count(Client) == 1


def test_register_rejects_email_of_inactive_account(login_service, john):
    login_service.deactivate(john)
    assert login_service.register("John Again", "john@test.com", "password2").error is AuthError.DUPLICATE_CREDENTIAL


def test_password_is_write_only(john):
    with pytest.raises(AttributeError):
        john.password


def test_logout_revokes_and_is_idempotent(login_service, token_service, john):
    refresh_token = login_service.login("john@test.com", PASSWORD).value.refresh_token.token

    login_service.logout(refresh_token)
    login_service.logout(refresh_token)
    login_service.logout("never-issued")

    assert token_service.redeem_refresh_token(refresh_token).error is AuthError.REFRESH_TOKEN_REVOKED


def test_refresh_delegates_to_token_service(login_service, john):
    refresh_token = login_service.login("john@test.com", PASSWORD).value.refresh_token.token
    result = login_service.refresh(refresh_token)
    assert result.ok
    assert result.value[0].id == john.id
    assert login_service.refresh("bogus").error is AuthError.REFRESH_TOKEN_NOT_FOUND


def test_change_password_revokes_sessions(login_service, token_service, john):
    refresh_token = login_service.login("john@test.com", PASSWORD).value.refresh_token.token

    login_service.change_password(john, "brand-new-pass")

    assert token_service.redeem_refresh_token(refresh_token).error is AuthError.REFRESH_TOKEN_REVOKED
    assert login_service.login("john@test.com", PASSWORD).error is AuthError.INVALID_CREDENTIALS
    assert login_service.login("john@test.com", "brand-new-pass").ok


def test_update_profile_name_keeps_sessions(login_service, token_service, john):
    refresh_token = login_service.login("john@test.com", PASSWORD).value.refresh_token.token
    login_service.update_profile(john, name="Johnny")

    assert john.name == "Johnny"
    assert token_service.redeem_refresh_token(refresh_token).ok


def test_logout_everywhere(login_service, token_service, john):
    tokens = [login_service.login("john@test.com", PASSWORD).value.refresh_token.token for _ in range(2)]
    assert login_service.logout_everywhere(john) == 2
    for token in tokens:
        assert token_service.redeem_refresh_token(token).error is AuthError.REFRESH_TOKEN_REVOKED


def test_delete_removes_principal_and_tokens(login_service, john):
    login_service.login("john@test.com", PASSWORD)
    login_service.delete(john)

    assert storage.count(Client) == 0
    assert storage.count(RefreshToken) == 0
