from sqlalchemy import or_
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
import logging

from app.models.user import User, UserRole
from app.schemas.auth import UserRegister, UserLogin, ChangePasswordRequest
from app.services.session_service import IssuedSession, SessionService
from app.utils.client_info import ClientInfo
from app.utils.security import hash_password, verify_password

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Incorrect email/username or password"


class AuthService:
    @staticmethod
    def register_user(db: Session, user_data: UserRegister) -> User:
        # Check existing email / username
        existing_user = db.query(User).filter(
            or_(User.email == user_data.email, User.username == user_data.username)
        ).first()
        if existing_user:
            if existing_user.email == user_data.email:
                raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Email already registered")
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Username already taken")

        # Create user
        new_user = User(
            name=user_data.name,
            username=user_data.username,
            email=user_data.email,
            password_hash=hash_password(user_data.password),
            timezone=user_data.timezone or "Europe/Paris",
            role=UserRole.USER,
            is_active=True,
        )
        db.add(new_user)
        db.commit()
        db.refresh(new_user)
        logger.info(f"User registered: {new_user.id} ({new_user.username})")
        return new_user

    @staticmethod
    def login_user(db: Session, credentials: UserLogin, client: ClientInfo) -> tuple:
        """Check credentials and open a session. Returns (user, IssuedSession)."""
        user = db.query(User).filter(
            or_(
                User.email == credentials.email_or_username,
                User.username == credentials.email_or_username,
            )
        ).first()

        if not user:
            logger.warning(f"Login failed: unknown account {credentials.email_or_username}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

        if not verify_password(credentials.password, str(user.password_hash)):
            logger.warning(f"Login failed: incorrect password for user {user.id}")
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

        if not user.is_active:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")

        issued: IssuedSession = SessionService.create_session(db, user, client)
        return user, issued

    @staticmethod
    def change_password(db: Session, user: User, payload: ChangePasswordRequest) -> None:
        if not verify_password(payload.current_password, str(user.password_hash)):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Current password is incorrect",
            )
        user.password_hash = hash_password(payload.new_password)
        db.commit()
        logger.info(f"Password changed for user {user.id}")

    @staticmethod
    def update_profile(db: Session, user: User, timezone: str) -> User:
        user.timezone = timezone
        db.commit()
        db.refresh(user)
        return user
