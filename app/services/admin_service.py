from math import ceil
from typing import Optional
import logging

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload

from app.models.genre import Category, Genre
from app.models.movie import Movie
from app.models.password_reset import PasswordReset
from app.models.series import Episode, Season, Series
from app.models.session import UserSession
from app.models.user import User, UserRole
from app.models.video import Video
from app.schemas.admin import UserUpdate
from app.schemas.validation import validate_pagination
from app.utils.timeutils import utcnow

logger = logging.getLogger(__name__)


def _page_info(page: int, limit: int, total: int) -> dict:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": ceil(total / limit) if total else 0,
    }


class AdminService:
    """Administrative views over accounts, sessions and catalog volume"""

    @staticmethod
    def stats(db: Session) -> dict:
        now = utcnow()
        return {
            "total_users": db.query(User).count(),
            "active_users": db.query(User).filter(User.is_active.is_(True)).count(),
            "total_movies": db.query(Movie).count(),
            "total_series": db.query(Series).count(),
            "total_seasons": db.query(Season).count(),
            "total_episodes": db.query(Episode).count(),
            "total_videos": db.query(Video).count(),
            "total_genres": db.query(Genre).count(),
            "total_categories": db.query(Category).count(),
            "active_sessions": db.query(UserSession).filter(UserSession.expires_at > now).count(),
            "pending_password_resets": db.query(PasswordReset).filter(PasswordReset.used.is_(False)).count(),
        }

    @staticmethod
    def list_users(
        db: Session,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        role: Optional[UserRole] = None,
        is_active: Optional[bool] = None,
    ) -> dict:
        page, limit = validate_pagination(page, limit)
        query = db.query(User)

        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                User.name.ilike(pattern),
                User.username.ilike(pattern),
                User.email.ilike(pattern),
            ))
        if role is not None:
            query = query.filter(User.role == role)
        if is_active is not None:
            query = query.filter(User.is_active.is_(is_active))

        total = query.count()
        users = (
            query.order_by(User.created_at.desc(), User.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {"users": users, "pagination": _page_info(page, limit, total)}

    @staticmethod
    def update_user(db: Session, admin: User, user_id: int, changes: UserUpdate) -> User:
        user = db.get(User, user_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        if user.id == admin.id and (changes.is_active is False or changes.role == UserRole.USER):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Administrators cannot deactivate or demote themselves",
            )

        if changes.role is not None:
            user.role = changes.role
        if changes.is_active is not None:
            user.is_active = changes.is_active
            if not changes.is_active:
                # A deactivated account loses every open session
                db.query(UserSession).filter(UserSession.user_id == user.id).delete(
                    synchronize_session=False
                )

        db.commit()
        db.refresh(user)
        logger.info(f"Admin {admin.id} updated user {user.id} (role={user.role.value}, active={user.is_active})")
        return user

    @staticmethod
    def list_all_sessions(
        db: Session,
        page: int = 1,
        limit: int = 20,
        user_id: Optional[int] = None,
    ) -> dict:
        page, limit = validate_pagination(page, limit)
        query = db.query(UserSession).filter(UserSession.expires_at > utcnow())
        if user_id is not None:
            query = query.filter(UserSession.user_id == user_id)

        total = query.count()
        sessions = (
            query.options(joinedload(UserSession.user))
            .order_by(UserSession.updated_at.desc(), UserSession.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return {"sessions": sessions, "pagination": _page_info(page, limit, total)}

    @staticmethod
    def revoke_session(db: Session, admin: User, session_id: str) -> None:
        session = db.get(UserSession, session_id)
        if session is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
        owner_id = session.user_id
        db.delete(session)
        db.commit()
        logger.info(f"Admin {admin.id} revoked session {session_id} of user {owner_id}")
