from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import List, Optional

from app.models.like import Like
from app.models.watchlist import ContentType
from app.schemas.watchlist import ContentRef
from app.services.catalog_service import CatalogService


class LikeService:
    @staticmethod
    def get_likes(db: Session, user_id: int) -> List[Like]:
        return (
            db.query(Like)
            .filter(Like.user_id == user_id)
            .order_by(Like.created_at.desc(), Like.id.desc())
            .all()
        )

    @staticmethod
    def count_likes(db: Session, content_id: int, content_type: ContentType) -> int:
        return db.query(Like).filter(
            Like.content_id == content_id,
            Like.content_type == content_type,
        ).count()

    @classmethod
    def add_like(cls, db: Session, user_id: int, item: ContentRef) -> int:
        """Like a title; returns the new like count"""
        CatalogService.ensure_content_exists(db, item.content_id, item.content_type)

        existing = db.query(Like).filter(
            Like.user_id == user_id,
            Like.content_id == item.content_id,
            Like.content_type == item.content_type,
        ).first()
        if existing:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already liked")

        db.add(Like(user_id=user_id, content_id=item.content_id, content_type=item.content_type))
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Already liked")

        return cls.count_likes(db, item.content_id, item.content_type)

    @classmethod
    def remove_like(cls, db: Session, user_id: int, content_id: int, content_type: ContentType) -> int:
        """Unlike a title (no-op when not liked); returns the new like count"""
        db.query(Like).filter(
            Like.user_id == user_id,
            Like.content_id == content_id,
            Like.content_type == content_type,
        ).delete(synchronize_session=False)
        db.commit()
        return cls.count_likes(db, content_id, content_type)

    @classmethod
    def like_status(
        cls,
        db: Session,
        content_id: int,
        content_type: ContentType,
        user_id: Optional[int] = None,
    ) -> dict:
        is_liked = False
        if user_id is not None:
            is_liked = db.query(Like.id).filter(
                Like.user_id == user_id,
                Like.content_id == content_id,
                Like.content_type == content_type,
            ).first() is not None

        return {
            "is_liked": is_liked,
            "like_count": cls.count_likes(db, content_id, content_type),
            "user_id": user_id,
        }
