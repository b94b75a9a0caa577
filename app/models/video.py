import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.timeutils import utcnow


class VideoType(str, enum.Enum):
    MOVIE = "MOVIE"
    EPISODE = "EPISODE"


class Video(Base):
    """Embeddable stream for either a movie or an episode"""
    __tablename__ = "videos"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    embed_url = Column(String(1000), nullable=False)
    quality = Column(String(20), nullable=True)
    language = Column(String(20), nullable=True)
    type = Column(Enum(VideoType, name="video_type"), nullable=False)
    movie_id = Column(Integer, ForeignKey("movies.id", ondelete="CASCADE"), nullable=True, index=True)
    episode_id = Column(Integer, ForeignKey("episodes.id", ondelete="CASCADE"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    movie = relationship("Movie", back_populates="videos")
    episode = relationship("Episode", back_populates="videos")

    def __repr__(self):
        return f"<Video(id={self.id}, type={self.type}, movie_id={self.movie_id}, episode_id={self.episode_id})>"
