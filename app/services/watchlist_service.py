from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import List

from app.models.watchlist import Watchlist, ContentType
from app.schemas.watchlist import ContentRef
from app.services.catalog_service import CatalogService


class WatchlistService:
    """Service for watchlist operations"""

    @staticmethod
    def get_watchlist(db: Session, user_id: int) -> List[Watchlist]:
        """Get user's watchlist, most recently added first"""
        return (
            db.query(Watchlist)
            .filter(Watchlist.user_id == user_id)
            .order_by(Watchlist.created_at.desc(), Watchlist.id.desc())
            .all()
        )

    @staticmethod
    def add_to_watchlist(db: Session, user_id: int, item: ContentRef) -> Watchlist:
        """Add a movie or series to user's watchlist"""
        CatalogService.ensure_content_exists(db, item.content_id, item.content_type)

        existing = db.query(Watchlist).filter(
            Watchlist.user_id == user_id,
            Watchlist.content_id == item.content_id,
            Watchlist.content_type == item.content_type,
        ).first()
        if existing:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Already in watchlist"
            )

        watchlist_item = Watchlist(
            user_id=user_id,
            content_id=item.content_id,
            content_type=item.content_type,
        )
        db.add(watchlist_item)
        try:
            db.commit()
        except IntegrityError:
            # Lost a race with a concurrent add of the same title
            db.rollback()
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Already in watchlist"
            )
        db.refresh(watchlist_item)
        return watchlist_item

    @staticmethod
    def remove_from_watchlist(db: Session, user_id: int, content_id: int, content_type: ContentType) -> None:
        deleted = db.query(Watchlist).filter(
            Watchlist.user_id == user_id,
            Watchlist.content_id == content_id,
            Watchlist.content_type == content_type,
        ).delete(synchronize_session=False)

        if deleted == 0:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found in watchlist"
            )
        db.commit()

    @staticmethod
    def check_in_watchlist(db: Session, user_id: int, content_id: int, content_type: ContentType) -> bool:
        item = db.query(Watchlist.id).filter(
            Watchlist.user_id == user_id,
            Watchlist.content_id == content_id,
            Watchlist.content_type == content_type,
        ).first()
        return item is not None
