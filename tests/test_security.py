from datetime import timedelta, timezone

import pytest

from app.models.user import UserRole
from app.utils.client_info import parse_user_agent
from app.utils.security import (
    BCRYPT_MAX_BYTES,
    ExpiredTokenError,
    InvalidTokenError,
    create_identity_token,
    generate_session_token,
    hash_password,
    verify_identity_token,
    verify_password,
)


def test_password_hash_round_trip():
    hashed = hash_password("Password123")

    assert hashed != "Password123"
    assert verify_password("Password123", hashed)
    assert not verify_password("Password124", hashed)


def test_password_truncation_counts_bytes():
    # 36 two-byte characters fill the bcrypt limit exactly
    prefix = "\u00e9" * 36
    assert len(prefix.encode("utf-8")) == BCRYPT_MAX_BYTES

    hashed = hash_password(prefix + "tail")

    assert verify_password(prefix, hashed)
    assert verify_password(prefix + "other", hashed)
    assert not verify_password("\u00e9" * 35, hashed)


def test_identity_token_claims():
    token = create_identity_token(7, "a@example.com", UserRole.ADMIN)

    claims = verify_identity_token(token)

    assert claims.user_id == 7
    assert claims.email == "a@example.com"
    assert claims.role is UserRole.ADMIN
    assert claims.expires_at.tzinfo == timezone.utc


def test_identity_token_errors():
    expired = create_identity_token(7, "a@example.com", UserRole.USER, expires_delta=timedelta(seconds=-5))

    with pytest.raises(ExpiredTokenError):
        verify_identity_token(expired)
    with pytest.raises(InvalidTokenError):
        verify_identity_token("not-a-token")


def test_session_tokens_are_unique_hex():
    tokens = {generate_session_token() for _ in range(50)}

    assert len(tokens) == 50
    assert all(len(t) == 64 and int(t, 16) >= 0 for t in tokens)


@pytest.mark.parametrize("user_agent, expected", [
    (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0 Safari/537.36 Edg/120.0",
        ("desktop", "Edge", "Windows"),
    ),
    (
        "Mozilla/5.0 (iPad; CPU OS 17_0 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) "
        "Version/17.0 Mobile/15E148 Safari/604.1",
        ("tablet", "Safari", "iOS"),
    ),
    (
        "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0 Mobile Safari/537.36",
        ("mobile", "Chrome", "Android"),
    ),
    ("", ("desktop", "Unknown", "Unknown")),
])
def test_parse_user_agent(user_agent, expected):
    assert parse_user_agent(user_agent) == expected
