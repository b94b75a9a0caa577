from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.watchlist import ContentType
from app.utils.timeutils import utcnow


class History(Base):
    """
    Viewing history - one row per (user, title, video), bumped on every view
    """
    __tablename__ = "history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    content_id = Column(Integer, nullable=False)
    content_type = Column(Enum(ContentType, name="content_type"), nullable=False)
    video_id = Column(Integer, ForeignKey('videos.id', ondelete='SET NULL'), nullable=True)
    watched_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)

    user = relationship("User", back_populates="history")
    video = relationship("Video")

    __table_args__ = (
        UniqueConstraint(
            'user_id', 'content_id', 'content_type', 'video_id',
            name='unique_user_content_video_history',
        ),
    )

    def __repr__(self):
        return f"<History(user_id={self.user_id}, content_id={self.content_id}, video_id={self.video_id})>"
