from datetime import datetime, timedelta, timezone

import pytest

from models.errors import StoreError
from models.user import User
from services.auth import TokenPair
from services.errors import (
    AccountNotFound,
    DuplicateEmail,
    ErrorKind,
    IncorrectPassword,
    TokenReuseDetected,
    Unauthorized,
)

PASSWORD = "secret123"


def test_register_hashes_password(auth_service, user):
    assert user.id
    assert user.email == "alice@example.com"
    assert user.name == "Alice"
    assert user.password_hash != PASSWORD
    assert auth_service.hashing.compare(PASSWORD, user.password_hash)
    assert user.created_at is not None


def test_register_duplicate_email(auth_service, storage, user):
    with pytest.raises(DuplicateEmail) as exc:
        auth_service.register("alice@example.com", "other-pass", "Alice Again")

    assert exc.value.kind is ErrorKind.DUPLICATE_EMAIL
    assert exc.value.status == 409
    assert storage.get_session().query(User).count() == 1


def test_register_surfaces_other_store_errors(auth_service, monkeypatch):
    def broken(**kwargs):
        raise StoreError("connection lost")

    monkeypatch.setattr(auth_service.storage, "create_user", broken)
    with pytest.raises(StoreError, match="connection lost"):
        auth_service.register("bob@example.com", PASSWORD, "Bob")


def test_register_then_login_round_trip(auth_service, user):
    pair = auth_service.login("alice@example.com", PASSWORD)

    assert isinstance(pair, TokenPair)
    assert auth_service.tokens.verify_access_token(pair.access_token).user_id == user.id
    assert auth_service.tokens.verify_refresh_token(pair.refresh_token).user_id == user.id


def test_login_unknown_account(auth_service):
    with pytest.raises(AccountNotFound):
        auth_service.login("nobody@example.com", PASSWORD)


def test_login_wrong_password_creates_no_token_rows(auth_service, storage, user):
    with pytest.raises(IncorrectPassword) as exc:
        auth_service.login("alice@example.com", "wrong")

    assert exc.value.details == [{"field": "password", "message": "Incorrect password"}]
    assert storage.count_refresh_tokens() == 0


def test_issue_token_pair_persists_refresh_token_with_claim_expiry(auth_service, storage, user):
    pair = auth_service.issue_token_pair(user.id)

    record = storage.find_refresh_token(pair.refresh_token)
    payload = auth_service.tokens.verify_refresh_token(pair.refresh_token)
    assert record is not None
    assert record.user_id == user.id
    assert record.expires_at.replace(tzinfo=timezone.utc) == payload.expires_at
    # access tokens are never stored
    assert storage.find_refresh_token(pair.access_token) is None


def test_refresh_rotates_token(auth_service, storage, user, tokens):
    new_pair = auth_service.refresh(tokens.refresh_token)

    assert new_pair.refresh_token != tokens.refresh_token
    assert storage.find_refresh_token(tokens.refresh_token) is None
    assert storage.find_refresh_token(new_pair.refresh_token) is not None
    assert auth_service.tokens.verify_access_token(new_pair.access_token).user_id == user.id


def test_refresh_twice_with_same_token_is_reuse(auth_service, tokens):
    auth_service.refresh(tokens.refresh_token)

    with pytest.raises(TokenReuseDetected) as exc:
        auth_service.refresh(tokens.refresh_token)

    assert isinstance(exc.value, Unauthorized)
    assert exc.value.status == 401


def test_refresh_rejects_invalid_token_before_touching_store(auth_service, monkeypatch, tokens):
    calls = []
    monkeypatch.setattr(auth_service.storage, "consume_refresh_token", lambda token: calls.append(token))

    with pytest.raises(Unauthorized) as exc:
        auth_service.refresh(tokens.access_token)

    assert not isinstance(exc.value, TokenReuseDetected)
    assert calls == []


def test_refresh_store_failure_is_unauthorized(auth_service, monkeypatch, tokens):
    def broken(token):
        raise StoreError("disk I/O error")

    monkeypatch.setattr(auth_service.storage, "consume_refresh_token", broken)
    with pytest.raises(Unauthorized) as exc:
        auth_service.refresh(tokens.refresh_token)

    assert exc.value.message == "Unauthorized"


def test_logout_revokes_refresh_token(auth_service, storage, tokens):
    auth_service.logout(tokens.refresh_token)

    assert storage.find_refresh_token(tokens.refresh_token) is None
    with pytest.raises(TokenReuseDetected):
        auth_service.refresh(tokens.refresh_token)


def test_logout_twice_is_unauthorized(auth_service, tokens):
    auth_service.logout(tokens.refresh_token)
    with pytest.raises(TokenReuseDetected):
        auth_service.logout(tokens.refresh_token)


def test_issue_token_pair_purges_expired_rows(auth_service, storage, user, tokens):
    past = datetime.now(timezone.utc) - timedelta(minutes=5)
    storage.create_refresh_token(token="stale-token", user_id=user.id, expires_at=past)

    pair = auth_service.issue_token_pair(user.id)

    assert storage.find_refresh_token("stale-token") is None
    assert storage.find_refresh_token(tokens.refresh_token) is not None
    assert storage.find_refresh_token(pair.refresh_token) is not None


def test_purge_only_touches_the_given_user(auth_service, storage, user):
    other = auth_service.register("bob@example.com", PASSWORD, "Bob")
    past = datetime.now(timezone.utc) - timedelta(minutes=5)
    storage.create_refresh_token(token="alice-stale", user_id=user.id, expires_at=past)
    storage.create_refresh_token(token="bob-stale", user_id=other.id, expires_at=past)

    assert storage.purge_expired_refresh_tokens(user_id=user.id) == 1
    assert storage.find_refresh_token("bob-stale") is not None
    assert storage.purge_expired_refresh_tokens() == 1
    assert storage.count_refresh_tokens() == 0


def test_issue_token_pair_survives_purge_failure(auth_service, storage, user, monkeypatch):
    def broken(**kwargs):
        raise StoreError("db gone")

    monkeypatch.setattr(storage, "purge_expired_refresh_tokens", broken)

    pair = auth_service.issue_token_pair(user.id)

    assert storage.find_refresh_token(pair.refresh_token) is not None


def test_reuse_keeps_internal_kind_but_public_message_is_generic(auth_service, tokens):
    auth_service.refresh(tokens.refresh_token)

    with pytest.raises(TokenReuseDetected) as exc:
        auth_service.refresh(tokens.refresh_token)

    assert exc.value.kind is ErrorKind.TOKEN_REUSE_DETECTED
    assert exc.value.public_kind is ErrorKind.UNAUTHORIZED
    assert exc.value.public_message == Unauthorized.default_message
