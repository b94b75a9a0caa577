from pydantic import BaseModel, EmailStr, Field, field_validator, ConfigDict
from datetime import datetime
from typing import List, Optional
import re

from app.models.user import UserRole
from app.schemas.validation import SafeStringMixin


ALLOWED_TIMEZONES = [
    "Europe/Paris",
    "Europe/Brussels",
    "Indian/Mayotte",
    "Indian/Mauritius",
    "Indian/Reunion",
]


def ensure_password_strength(password: str) -> str:
    """Validate password complexity requirements."""
    if len(password) > 72:
        raise ValueError('Password cannot be longer than 72 characters')
    if not re.search(r'[A-Za-z]', password):
        raise ValueError('Password must contain a letter')
    if not re.search(r'[0-9]', password):
        raise ValueError('Password must contain digit')
    return password


# Schema for user registration
class UserRegister(BaseModel, SafeStringMixin):
    name: str = Field(..., min_length=2, max_length=255)
    username: str = Field(..., min_length=3, max_length=30, pattern=r'^[a-zA-Z0-9_.-]+$')
    email: EmailStr
    password: str = Field(..., min_length=8)
    timezone: Optional[str] = None

    @field_validator('name')
    @classmethod
    def clean_name(cls, v):
        return cls.validate_no_script(v)

    # Password validation
    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        return ensure_password_strength(v)

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v):
        if v is not None and v not in ALLOWED_TIMEZONES:
            raise ValueError('Invalid timezone')
        return v


# Schema for user login
class UserLogin(BaseModel):
    email_or_username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


# Schema for user response
class UserResponse(BaseModel):
    id: int
    name: str
    username: str
    email: str
    avatar: Optional[str] = None
    timezone: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class LoginResponse(BaseModel):
    message: str
    user: UserResponse
    token: str
    session_id: str


class SessionResponse(BaseModel):
    id: str
    ip_address: Optional[str] = None
    device: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    expires_at: datetime
    is_current: bool = False
    model_config = ConfigDict(from_attributes=True)


class CurrentSession(BaseModel):
    id: str
    expires_at: datetime
    ip_address: Optional[str] = None
    device: Optional[str] = None
    browser: Optional[str] = None
    os: Optional[str] = None
    model_config = ConfigDict(from_attributes=True)


class MeResponse(BaseModel):
    user: UserResponse
    session: CurrentSession


class SessionListResponse(BaseModel):
    sessions: List[SessionResponse]
    total: int
    active: int


class SessionsRevokedResponse(BaseModel):
    message: str
    deleted_count: int


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, v):
        return ensure_password_strength(v)


class UpdateProfileRequest(BaseModel):
    timezone: str

    @field_validator('timezone')
    @classmethod
    def validate_timezone(cls, v):
        if v not in ALLOWED_TIMEZONES:
            raise ValueError('Invalid timezone')
        return v


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=8)

    @field_validator('new_password')
    @classmethod
    def validate_new_password(cls, v):
        return ensure_password_strength(v)


class MessageResponse(BaseModel):
    message: str
