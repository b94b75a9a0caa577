from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class CleanupType(str, Enum):
    EXPIRED = "expired"
    USED = "used"
    ALL = "all"


class PasswordResetItem(BaseModel):
    """Pending reset request as shown in the admin back office"""
    id: int
    email: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    active: bool
    model_config = ConfigDict(from_attributes=True)


class PasswordResetList(BaseModel):
    data: List[PasswordResetItem]


class ActivateResetRequest(BaseModel):
    id: int = Field(..., ge=1)


class ActivatedReset(BaseModel):
    id: int
    email: str
    token: str
    expires_at: datetime
    active: bool
    model_config = ConfigDict(from_attributes=True)


class ActivateResetResponse(BaseModel):
    message: str
    reset_url: str
    data: ActivatedReset


class CleanupRequest(BaseModel):
    type: CleanupType = CleanupType.EXPIRED


class CleanupResponse(BaseModel):
    message: str
    deleted_count: int
    type: CleanupType
