from datetime import timedelta
from fastapi import HTTPException, status
from sqlalchemy import and_, or_
from sqlalchemy.orm import Session
from typing import List, Tuple
from urllib.parse import urlencode
import logging

from app import config
from app.models.password_reset import PasswordReset
from app.models.user import User
from app.schemas.password_reset import CleanupType
from app.utils.security import generate_reset_token, hash_password
from app.utils.timeutils import ensure_aware, utcnow

logger = logging.getLogger(__name__)


def _reject(detail: str, status_code: int = status.HTTP_400_BAD_REQUEST) -> HTTPException:
    return HTTPException(status_code=status_code, detail=detail)


class PasswordResetService:
    """
    Handles password reset requests.

    Tokens are created inactive by the user, activated by an administrator
    (which starts a short expiry window) and consumed once.
    """

    @staticmethod
    def build_reset_url(raw_token: str) -> str:
        base = config.APP_URL.rstrip("/")
        return f"{base}/auth/reset-password?{urlencode({'token': raw_token})}"

    @classmethod
    def request_reset(cls, db: Session, email: str) -> None:
        """
        Record a reset request for an active account.

        Callers get the same answer whether or not the account exists or is active.
        """
        user = db.query(User).filter(User.email == email).first()

        if not user:
            logger.info("Password reset requested for unknown email")
            return
        if not user.is_active:
            logger.warning(f"Password reset requested for deactivated user {user.id}")
            return

        reset = PasswordReset(
            email=user.email,
            token=generate_reset_token(),
            active=False,
            used=False,
        )
        db.add(reset)
        db.commit()
        logger.info(f"Password reset {reset.id} created for user {user.id}, awaiting admin activation")

    @staticmethod
    def list_pending(db: Session) -> List[PasswordReset]:
        return (
            db.query(PasswordReset)
            .filter(PasswordReset.used.is_(False))
            .order_by(PasswordReset.created_at.desc(), PasswordReset.id.desc())
            .all()
        )

    @classmethod
    def activate(cls, db: Session, reset_id: int) -> Tuple[PasswordReset, str]:
        """Open the expiry window and return the reset link to hand to the user."""
        reset = db.get(PasswordReset, reset_id)
        if reset is None:
            raise _reject("Password reset request not found", status.HTTP_404_NOT_FOUND)
        if reset.used:
            raise _reject("This token has already been used", status.HTTP_409_CONFLICT)

        reset.active = True
        reset.expires_at = utcnow() + timedelta(minutes=config.RESET_TOKEN_TTL_MINUTES)
        db.commit()
        db.refresh(reset)

        logger.info(f"Password reset {reset.id} activated until {reset.expires_at}")
        return reset, cls.build_reset_url(reset.token)

    @classmethod
    def reset_password(cls, db: Session, token: str, new_password: str) -> None:
        reset = db.query(PasswordReset).filter(PasswordReset.token == token).first()

        if reset is None:
            raise _reject("Invalid token")
        if reset.used:
            raise _reject("This token has already been used", status.HTTP_409_CONFLICT)
        if not reset.active or reset.expires_at is None:
            raise _reject("This token has not been activated yet")

        if utcnow() > ensure_aware(reset.expires_at):
            reset_id = reset.id
            db.delete(reset)
            db.commit()
            logger.info(f"Expired password reset {reset_id} deleted on use attempt")
            raise _reject("This token has expired")

        user = db.query(User).filter(User.email == reset.email).first()
        if not user or not user.is_active:
            raise _reject("User not found or inactive")

        # Password change, token consumption and sibling invalidation commit together
        try:
            user.password_hash = hash_password(new_password)
            reset.used = True
            db.query(PasswordReset).filter(
                PasswordReset.email == reset.email,
                PasswordReset.used.is_(False),
                PasswordReset.id != reset.id,
            ).delete(synchronize_session=False)
            db.commit()
        except Exception:
            db.rollback()
            raise

        logger.info(f"Password reset {reset.id} consumed for user {user.id}")

    @staticmethod
    def cleanup(db: Session, cleanup_type: CleanupType = CleanupType.EXPIRED) -> int:
        now = utcnow()
        expired_unused = and_(
            PasswordReset.expires_at.is_not(None),
            PasswordReset.expires_at < now,
            PasswordReset.used.is_(False),
        )
        used = PasswordReset.used.is_(True)

        if cleanup_type == CleanupType.EXPIRED:
            criterion = expired_unused
        elif cleanup_type == CleanupType.USED:
            criterion = used
        else:
            criterion = or_(expired_unused, used)

        deleted = db.query(PasswordReset).filter(criterion).delete(synchronize_session=False)
        db.commit()
        logger.info(f"Cleaned {deleted} password reset token(s) ({cleanup_type.value})")
        return deleted
