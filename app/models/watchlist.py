import enum

from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base
from app.utils.timeutils import utcnow


class ContentType(str, enum.Enum):
    MOVIE = "MOVIE"
    SERIES = "SERIES"


class Watchlist(Base):
    """
    Watchlist model - Movies or series saved by users to watch later
    """
    __tablename__ = "watchlists"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True)
    content_id = Column(Integer, nullable=False)
    content_type = Column(Enum(ContentType, name="content_type"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    # Relationships
    user = relationship("User", back_populates="watchlist_items")

    # Ensure one entry per user per title
    __table_args__ = (
        UniqueConstraint('user_id', 'content_id', 'content_type', name='unique_user_content_watchlist'),
    )

    def __repr__(self):
        return f"<Watchlist(user_id={self.user_id}, content_id={self.content_id}, content_type={self.content_type})>"
