from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from app import config
from app.database import get_db
from app.schemas.auth import (
    UserRegister,
    UserLogin,
    UserResponse,
    LoginResponse,
    MeResponse,
    SessionListResponse,
    SessionsRevokedResponse,
    ChangePasswordRequest,
    UpdateProfileRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    MessageResponse,
)
from app.services.auth_service import AuthService
from app.services.password_reset_service import PasswordResetService
from app.services.session_service import AuthContext, SessionService
from app.utils.client_info import client_info_from_request
from app.utils.cookies import clear_auth_cookies, set_auth_cookies
from app.utils.dependencies import get_auth_context, get_current_user
from app.utils.timeutils import ensure_aware, utcnow
from app.models.user import User

# Define router
router = APIRouter(prefix="/api/auth", tags=["Authentication"])


# Register a new user
@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(user_data: UserRegister, db: Session = Depends(get_db)):
    """Register a new user"""
    user = AuthService.register_user(db, user_data)
    return user


# Login endpoint
@router.post("/login", response_model=LoginResponse)
def login(
    credentials: UserLogin,
    request: Request,
    response: Response,
    db: Session = Depends(get_db)
):
    """
    Login with email or username and password

    Sets the `auth-token` and `session-token` cookies. Rejected with 409 when
    the account already holds the maximum number of active sessions.
    """
    user, issued = AuthService.login_user(db, credentials, client_info_from_request(request))
    set_auth_cookies(response, issued.identity_token, issued.session_token)
    return {
        "message": "Login successful",
        "user": user,
        "token": issued.identity_token,
        "session_id": issued.session.id,
    }


@router.post("/logout", response_model=MessageResponse)
def logout(request: Request, response: Response, db: Session = Depends(get_db)):
    """End the current session. Succeeds even without a valid session."""
    SessionService.end_session(db, request.cookies.get(config.SESSION_COOKIE_NAME))
    clear_auth_cookies(response)
    return {"message": "Logged out"}


# Get current authenticated user
@router.get("/me", response_model=MeResponse)
def get_me(context: AuthContext = Depends(get_auth_context)):
    """Get current authenticated user and the session in use"""
    return {"user": context.user, "session": context.session}


@router.get("/sessions", response_model=SessionListResponse)
def list_sessions(
    context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    sessions = SessionService.list_sessions(db, context.user.id)
    now = utcnow()
    items = []
    for session in sessions:
        item = {
            "id": session.id,
            "ip_address": session.ip_address,
            "device": session.device,
            "browser": session.browser,
            "os": session.os,
            "created_at": session.created_at,
            "updated_at": session.updated_at,
            "expires_at": session.expires_at,
            "is_current": session.id == context.session.id,
        }
        items.append(item)
    active = sum(1 for s in sessions if ensure_aware(s.expires_at) > now)
    return {"sessions": items, "total": len(items), "active": active}


@router.delete("/sessions", response_model=SessionsRevokedResponse)
def revoke_other_sessions(
    context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    """Sign out every other device"""
    deleted = SessionService.revoke_other_sessions(db, context.user.id, context.session)
    return {"message": f"{deleted} session(s) revoked", "deleted_count": deleted}


@router.delete("/sessions/{session_id}", response_model=MessageResponse)
def revoke_session(
    session_id: str,
    context: AuthContext = Depends(get_auth_context),
    db: Session = Depends(get_db)
):
    SessionService.revoke_session(db, context.user.id, session_id, context.session)
    return {"message": "Session revoked"}


@router.post("/change-password", response_model=MessageResponse)
def change_password(
    payload: ChangePasswordRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    AuthService.change_password(db, current_user, payload)
    return {"message": "Password updated"}


@router.put("/profile", response_model=UserResponse)
def update_profile(
    payload: UpdateProfileRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return AuthService.update_profile(db, current_user, payload.timezone)


@router.post("/forgot-password", response_model=MessageResponse, status_code=status.HTTP_202_ACCEPTED)
def forgot_password(
    payload: ForgotPasswordRequest,
    db: Session = Depends(get_db)
):
    """
    Request a password reset.

    The request waits for an administrator to activate it; the answer is the
    same whether or not the email belongs to an account.
    """
    PasswordResetService.request_reset(db, payload.email)
    return {"message": "If an account exists for that email, an administrator will send you a reset link."}


@router.post("/reset-password", response_model=MessageResponse)
def reset_password(
    payload: ResetPasswordRequest,
    db: Session = Depends(get_db)
):
    """Complete password reset with an activated token."""
    PasswordResetService.reset_password(db, payload.token, payload.new_password)
    return {"message": "Password reset successful. You can now log in with your new password."}
