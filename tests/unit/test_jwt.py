"""Unit tests for access tokens."""

import uuid
from datetime import timedelta

from otsnews.kernel.identity.jwt import JWTManager


def _manager(secret: str = "unit-test-secret-key-long-enough-for-hs256") -> JWTManager:
    return JWTManager(secret_key=secret, algorithm="HS256", access_token_expire_minutes=30)


def test_token_round_trip_carries_user_and_role():
    user_id = uuid.uuid4()
    token = _manager().create_access_token(user_id=user_id, role="editor")
    
    payload = _manager().verify_access_token(token.access_token)
    
    assert payload is not None
    assert payload.sub == str(user_id)
    assert payload.role == "editor"
    assert token.token_type == "bearer"
    assert token.expires_in == 30 * 60


def test_expired_token_is_rejected():
    token = _manager().create_access_token(
        user_id=uuid.uuid4(),
        role="user",
        expires_delta=timedelta(seconds=-1),
    )
    
    assert _manager().verify_access_token(token.access_token) is None


def test_token_signed_with_other_secret_is_rejected():
    token = _manager("another-secret-key-that-is-also-long-enough").create_access_token(
        user_id=uuid.uuid4(), role="admin"
    )
    
    assert _manager().verify_access_token(token.access_token) is None


def test_garbage_is_rejected():
    assert _manager().verify_access_token("not.a.token") is None
