from sqlalchemy.orm import Session, joinedload
from fastapi import HTTPException, status
from typing import Optional

from app.models.history import History
from app.models.series import Episode
from app.models.video import Video
from app.models.watchlist import ContentType
from app.schemas.watchlist import HistoryRecord
from app.services.catalog_service import CatalogService
from app.utils.timeutils import utcnow


class HistoryService:
    """Viewing history: one row per title/video, bumped on each view"""

    @staticmethod
    def record(db: Session, user_id: int, entry: HistoryRecord) -> History:
        CatalogService.ensure_content_exists(db, entry.content_id, entry.content_type)
        if entry.video_id is not None and db.get(Video, entry.video_id) is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Video not found")

        query = db.query(History).filter(
            History.user_id == user_id,
            History.content_id == entry.content_id,
            History.content_type == entry.content_type,
        )
        if entry.video_id is None:
            query = query.filter(History.video_id.is_(None))
        else:
            query = query.filter(History.video_id == entry.video_id)

        history = query.first()
        if history:
            history.watched_at = utcnow()
        else:
            history = History(
                user_id=user_id,
                content_id=entry.content_id,
                content_type=entry.content_type,
                video_id=entry.video_id,
                watched_at=utcnow(),
            )
            db.add(history)

        db.commit()
        db.refresh(history)
        return history

    @staticmethod
    def _navigation_url(item: History, video: Optional[Video]) -> str:
        if item.content_type == ContentType.MOVIE:
            url = f"/watch/movie/{item.content_id}"
        elif video is not None and video.episode is not None:
            episode = video.episode
            url = f"/watch/series/{item.content_id}/{episode.season.number}/{episode.number}"
        else:
            url = f"/watch/series/{item.content_id}/1/1"
        # No trailing video segment when none was recorded
        if item.video_id is not None:
            url = f"{url}/{item.video_id}"
        return url

    @classmethod
    def get_history(cls, db: Session, user_id: int, limit: int = 20, offset: int = 0) -> dict:
        base = db.query(History).filter(History.user_id == user_id)
        total = base.count()

        items = (
            base.options(
                joinedload(History.video)
                .joinedload(Video.episode)
                .joinedload(Episode.season)
            )
            .order_by(History.watched_at.desc(), History.id.desc())
            .offset(offset)
            .limit(limit)
            .all()
        )

        data = []
        for item in items:
            video = item.video
            data.append({
                "id": item.id,
                "content_id": item.content_id,
                "content_type": item.content_type,
                "video_id": item.video_id,
                "watched_at": item.watched_at,
                "navigation_url": cls._navigation_url(item, video),
                "video": video,
            })

        return {
            "data": data,
            "pagination": {
                "total": total,
                "limit": limit,
                "offset": offset,
                "has_more": offset + limit < total,
            },
        }
