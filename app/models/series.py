from sqlalchemy import (
    Column,
    Integer,
    String,
    Float,
    Boolean,
    Date,
    DateTime,
    Text,
    ForeignKey,
    UniqueConstraint,
)
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
from app.models.genre import series_genres
from app.utils.timeutils import utcnow


class Series(Base):
    __tablename__ = "series"

    id = Column(Integer, primary_key=True, index=True)
    tmdb_id = Column(Integer, unique=True, nullable=True, index=True)
    title = Column(String(255), nullable=False, index=True)
    original_title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    year = Column(Integer, nullable=True)
    rating = Column(Float, nullable=True)
    popularity = Column(Float, nullable=False, default=0.0)
    poster = Column(String(500), nullable=True)
    backdrop = Column(String(500), nullable=True)
    trailer = Column(String(500), nullable=True)
    first_air_date = Column(Date, nullable=True, index=True)
    last_air_date = Column(Date, nullable=True)
    number_of_seasons = Column(Integer, nullable=True)
    number_of_episodes = Column(Integer, nullable=True)
    status = Column(String(50), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    category_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    genres = relationship("Genre", secondary=series_genres, order_by="Genre.name")
    category = relationship("Category")
    seasons = relationship(
        "Season",
        back_populates="series",
        cascade="all, delete-orphan",
        order_by="Season.number",
    )

    @property
    def genre_names(self):
        return [genre.name for genre in self.genres]

    def __repr__(self):
        return f"<Series(id={self.id}, title={self.title})>"


class Season(Base):
    __tablename__ = "seasons"

    id = Column(Integer, primary_key=True, index=True)
    series_id = Column(Integer, ForeignKey("series.id", ondelete="CASCADE"), nullable=False, index=True)
    number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    poster = Column(String(500), nullable=True)
    air_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    series = relationship("Series", back_populates="seasons")
    episodes = relationship(
        "Episode",
        back_populates="season",
        cascade="all, delete-orphan",
        order_by="Episode.number",
    )

    __table_args__ = (
        UniqueConstraint("series_id", "number", name="unique_series_season_number"),
    )

    def __repr__(self):
        return f"<Season(series_id={self.series_id}, number={self.number})>"


class Episode(Base):
    __tablename__ = "episodes"

    id = Column(Integer, primary_key=True, index=True)
    season_id = Column(Integer, ForeignKey("seasons.id", ondelete="CASCADE"), nullable=False, index=True)
    number = Column(Integer, nullable=False)
    title = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    still_path = Column(String(500), nullable=True)
    rating = Column(Float, nullable=True)
    duration = Column(Integer, nullable=True)
    air_date = Column(Date, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    # Python-side default keeps ordering stable for rows created within the same second
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    season = relationship("Season", back_populates="episodes")
    videos = relationship(
        "Video",
        back_populates="episode",
        cascade="all, delete-orphan",
        order_by="Video.id",
    )

    __table_args__ = (
        UniqueConstraint("season_id", "number", name="unique_season_episode_number"),
    )

    def __repr__(self):
        return f"<Episode(season_id={self.season_id}, number={self.number})>"
