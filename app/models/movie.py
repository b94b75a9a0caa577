from sqlalchemy import Column, Integer, String, Float, Boolean, Date, DateTime, Text, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.genre import movie_genres


class Movie(Base):
    __tablename__ = "movies"

    id = Column(Integer, primary_key=True, index=True)
    tmdb_id = Column(Integer, unique=True, nullable=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    original_title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    year = Column(Integer, nullable=True)
    rating = Column(Float, nullable=True)
    duration = Column(Integer, nullable=True)  # minutes
    popularity = Column(Float, nullable=False, default=0.0)
    poster = Column(String(500), nullable=True)
    backdrop = Column(String(500), nullable=True)
    trailer = Column(String(500), nullable=True)
    release_date = Column(Date, nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    genres = relationship("Genre", secondary=movie_genres, order_by="Genre.name")
    category = relationship("Category")
    videos = relationship(
        "Video",
        back_populates="movie",
        cascade="all, delete-orphan",
        order_by="Video.id",
    )

    @property
    def genre_names(self):
        return [genre.name for genre in self.genres]

    @property
    def active_videos(self):
        return [video for video in self.videos if video.is_active]

    def __repr__(self):
        return f"<Movie(id={self.id}, title={self.title})>"
