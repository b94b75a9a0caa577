from dataclasses import dataclass
from datetime import timedelta
from typing import List, Optional
import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app import config
from app.models.session import UserSession
from app.models.user import User
from app.utils.client_info import ClientInfo
from app.utils.security import (
    ExpiredTokenError,
    IdentityClaims,
    TokenVerificationError,
    create_identity_token,
    generate_session_token,
    verify_identity_token,
)
from app.utils.timeutils import ensure_aware, utcnow

logger = logging.getLogger(__name__)

NOT_AUTHENTICATED = "Not authenticated"
INVALID_SESSION = "Invalid session"
SESSION_EXPIRED = "Session expired"


@dataclass
class IssuedSession:
    """Result of a successful login: the row plus both cookie values"""
    session: UserSession
    identity_token: str
    session_token: str


@dataclass
class AuthContext:
    user: User
    session: UserSession
    claims: IdentityClaims


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


class SessionService:
    """Login sessions: creation under a per-user cap, validation, listing and revocation."""

    @staticmethod
    def count_active_sessions(db: Session, user_id: int) -> int:
        return (
            db.query(UserSession)
            .filter(
                UserSession.user_id == user_id,
                UserSession.expires_at > utcnow(),
            )
            .count()
        )

    @classmethod
    def create_session(cls, db: Session, user: User, client: ClientInfo) -> IssuedSession:
        active_sessions = cls.count_active_sessions(db, user.id)
        if active_sessions >= config.MAX_ACTIVE_SESSIONS:
            logger.warning(
                f"Login rejected for user {user.id}: session limit reached ({active_sessions} active)"
            )
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail={
                    "message": (
                        f"You already have {config.MAX_ACTIVE_SESSIONS} active sessions. "
                        "Revoke an existing session to sign in."
                    ),
                    "session_limit": True,
                },
            )

        now = utcnow()
        session_token = generate_session_token()
        session = UserSession(
            user_id=user.id,
            token=session_token,
            created_at=now,
            updated_at=now,
            expires_at=now + timedelta(days=config.SESSION_TTL_DAYS),
            ip_address=client.ip_address,
            user_agent=client.user_agent,
            device=client.device,
            browser=client.browser,
            os=client.os,
        )
        db.add(session)
        db.commit()
        db.refresh(session)

        identity_token = create_identity_token(user.id, user.email, user.role)
        logger.info(f"Session {session.id} created for user {user.id} ({client.device}/{client.browser})")
        return IssuedSession(session=session, identity_token=identity_token, session_token=session_token)

    @classmethod
    def validate(
        cls,
        db: Session,
        identity_token: Optional[str],
        session_token: Optional[str],
    ) -> AuthContext:
        """
        Resolve the caller from the two cookies.

        Raises 401 for any credential problem and 403 for a deactivated account.
        """
        if not identity_token or not session_token:
            raise _unauthenticated(NOT_AUTHENTICATED)

        try:
            claims = verify_identity_token(identity_token)
        except ExpiredTokenError:
            raise _unauthenticated(SESSION_EXPIRED)
        except TokenVerificationError:
            raise _unauthenticated(INVALID_SESSION)

        session = db.query(UserSession).filter(UserSession.token == session_token).first()
        if session is None or session.user_id != claims.user_id:
            raise _unauthenticated(INVALID_SESSION)
        if ensure_aware(session.expires_at) <= utcnow():
            raise _unauthenticated(SESSION_EXPIRED)

        user = session.user
        if not user.is_active:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")

        cls.touch(db, session)
        return AuthContext(user=user, session=session, claims=claims)

    @staticmethod
    def touch(db: Session, session: UserSession) -> None:
        """Record activity; a failed update never fails the request."""
        try:
            session.updated_at = utcnow()
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"Could not update activity for session {session.id}: {str(e)}")

    @staticmethod
    def list_sessions(db: Session, user_id: int) -> List[UserSession]:
        """All sessions of a user, most recent activity first"""
        return (
            db.query(UserSession)
            .filter(UserSession.user_id == user_id)
            .order_by(UserSession.updated_at.desc(), UserSession.created_at.desc())
            .all()
        )

    @staticmethod
    def revoke_session(db: Session, user_id: int, session_id: str, current: UserSession) -> None:
        target = (
            db.query(UserSession)
            .filter(UserSession.id == session_id, UserSession.user_id == user_id)
            .first()
        )
        if target is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Session not found",
            )
        if target.id == current.id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot revoke the current session; log out instead",
            )

        db.delete(target)
        db.commit()
        logger.info(f"User {user_id} revoked session {session_id}")

    @staticmethod
    def revoke_other_sessions(db: Session, user_id: int, current: UserSession) -> int:
        deleted = (
            db.query(UserSession)
            .filter(
                UserSession.user_id == user_id,
                UserSession.id != current.id,
            )
            .delete(synchronize_session=False)
        )
        db.commit()
        logger.info(f"User {user_id} revoked {deleted} other session(s)")
        return deleted

    @staticmethod
    def end_session(db: Session, session_token: Optional[str]) -> int:
        """Logout: drop the row behind the cookie if there is one"""
        if not session_token:
            return 0
        deleted = (
            db.query(UserSession)
            .filter(UserSession.token == session_token)
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted

    @staticmethod
    def purge_expired(db: Session) -> int:
        deleted = (
            db.query(UserSession)
            .filter(UserSession.expires_at <= utcnow())
            .delete(synchronize_session=False)
        )
        db.commit()
        return deleted
