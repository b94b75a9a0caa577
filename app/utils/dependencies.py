from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from app import config
from app.database import get_db
from app.models.user import User
from app.services.session_service import AuthContext, SessionService


# Dependency resolving the caller from the auth and session cookies
def get_auth_context(request: Request, db: Session = Depends(get_db)) -> AuthContext:
    return SessionService.validate(
        db,
        request.cookies.get(config.AUTH_COOKIE_NAME),
        request.cookies.get(config.SESSION_COOKIE_NAME),
    )


def get_current_user(context: AuthContext = Depends(get_auth_context)) -> User:
    return context.user


def require_admin(user: User = Depends(get_current_user)) -> User:
    if not user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator privileges required",
        )
    return user


def get_optional_user_id(request: Request, db: Session = Depends(get_db)) -> Optional[int]:
    """Caller's id when a valid session is present, None for anonymous visitors"""
    try:
        context = SessionService.validate(
            db,
            request.cookies.get(config.AUTH_COOKIE_NAME),
            request.cookies.get(config.SESSION_COOKIE_NAME),
        )
    except HTTPException:
        return None
    return context.user.id
