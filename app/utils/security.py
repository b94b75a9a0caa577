from passlib.context import CryptContext
from jose import ExpiredSignatureError, JWTError, jwt
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional
import secrets

from app import config
from app.models.user import UserRole
from app.utils.timeutils import utcnow

# Security settings
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=config.BCRYPT_ROUNDS)

IDENTITY_TOKEN_TYPE = "identity"


# Password hashing and verification
BCRYPT_MAX_BYTES = 72


def _bcrypt_secret(password: str) -> bytes:
    # Bcrypt has a 72 byte limit, truncate the encoded form
    return password.encode("utf-8")[:BCRYPT_MAX_BYTES]


def hash_password(password: str) -> str:
    """Hash a password with automatic truncation for bcrypt"""
    return pwd_context.hash(_bcrypt_secret(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash"""
    return pwd_context.verify(_bcrypt_secret(plain_password), hashed_password)


def generate_session_token() -> str:
    """Opaque 64-char hex capability stored server-side"""
    return secrets.token_hex(32)


def generate_reset_token() -> str:
    return secrets.token_hex(32)


# ============================================
# Identity token (signed stateless claims)
# ============================================

class TokenVerificationError(Exception):
    """Identity token could not be trusted"""


class InvalidTokenError(TokenVerificationError):
    pass


class ExpiredTokenError(TokenVerificationError):
    pass


@dataclass(frozen=True)
class IdentityClaims:
    user_id: int
    email: str
    role: UserRole
    expires_at: datetime


def create_identity_token(
    user_id: int,
    email: str,
    role: UserRole,
    expires_delta: Optional[timedelta] = None,
) -> str:
    expire = utcnow() + (expires_delta or timedelta(days=config.SESSION_TTL_DAYS))
    to_encode = {
        "sub": str(user_id),
        "user_id": user_id,
        "email": email,
        "role": UserRole(role).value,
        "exp": expire,
        "type": IDENTITY_TOKEN_TYPE,
    }
    return jwt.encode(to_encode, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def verify_identity_token(token: str) -> IdentityClaims:
    """
    Verify signature, expiry and shape of an identity token.

    Returns typed claims or raises InvalidTokenError / ExpiredTokenError;
    callers never see the raw payload.
    """
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except ExpiredSignatureError as e:
        raise ExpiredTokenError("Identity token has expired") from e
    except JWTError as e:
        raise InvalidTokenError("Identity token is invalid") from e

    if payload.get("type") != IDENTITY_TOKEN_TYPE:
        raise InvalidTokenError("Unexpected token type")

    try:
        return IdentityClaims(
            user_id=int(payload["user_id"]),
            email=str(payload["email"]),
            role=UserRole(payload["role"]),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc),
        )
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidTokenError("Identity token claims are malformed") from e
