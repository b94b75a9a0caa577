from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from enum import Enum
from typing import List, Optional

from app.models.video import VideoType


class SortField(str, Enum):
    RELEASE_DATE = "release_date"
    RATING = "rating"
    TITLE = "title"


class SortOrder(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_count: int
    limit: int
    has_next_page: bool
    has_prev_page: bool


class GenreResponse(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)


class CategoryResponse(BaseModel):
    id: int
    name: str
    model_config = ConfigDict(from_attributes=True)


class VideoResponse(BaseModel):
    id: int
    title: str
    embed_url: str
    quality: Optional[str] = None
    language: Optional[str] = None
    type: VideoType
    created_at: datetime
    model_config = ConfigDict(from_attributes=True)


class TitleCard(BaseModel):
    """Compact representation used by carousels and similar lists"""
    id: int
    title: str
    poster: Optional[str] = None
    year: Optional[int] = None
    rating: Optional[float] = None
    model_config = ConfigDict(from_attributes=True)


class MovieSummary(BaseModel):
    id: int
    title: str
    original_title: Optional[str] = None
    description: Optional[str] = None
    year: Optional[int] = None
    rating: Optional[float] = None
    duration: Optional[int] = None
    poster: Optional[str] = None
    backdrop: Optional[str] = None
    release_date: Optional[date] = None
    is_featured: bool = False
    genres: List[str] = []
    category: Optional[CategoryResponse] = None
    videos: List[VideoResponse] = []


class MovieDetail(MovieSummary):
    trailer: Optional[str] = None
    popularity: float = 0.0


class MovieListData(BaseModel):
    movies: List[MovieSummary]
    pagination: Pagination


class SeriesSummary(BaseModel):
    id: int
    title: str
    original_title: Optional[str] = None
    description: Optional[str] = None
    year: Optional[int] = None
    rating: Optional[float] = None
    poster: Optional[str] = None
    backdrop: Optional[str] = None
    release_date: Optional[date] = None
    genres: List[str] = []
    number_of_seasons: Optional[int] = None
    number_of_episodes: Optional[int] = None


class EpisodeResponse(BaseModel):
    id: int
    number: int
    title: Optional[str] = None
    description: Optional[str] = None
    still_path: Optional[str] = None
    rating: Optional[float] = None
    duration: Optional[int] = None
    videos: List[VideoResponse] = []


class SeasonResponse(BaseModel):
    id: int
    number: int
    title: Optional[str] = None
    poster: Optional[str] = None
    episodes: List[EpisodeResponse] = []


class SeriesDetail(SeriesSummary):
    trailer: Optional[str] = None
    first_air_date: Optional[date] = None
    last_air_date: Optional[date] = None
    status: Optional[str] = None
    category: Optional[CategoryResponse] = None
    seasons: List[SeasonResponse] = []


class SeriesListData(BaseModel):
    series: List[SeriesSummary]
    pagination: Pagination


class SeriesEpisode(EpisodeResponse):
    season_id: int
    season_number: int
    series_id: int
    series_title: str
    series_poster: Optional[str] = None


class LatestEpisode(BaseModel):
    id: int
    title: Optional[str] = None
    poster: Optional[str] = None
    still_path: Optional[str] = None
    rating: Optional[float] = None
    duration: Optional[int] = None
    season_number: int
    episode_number: int
    series_title: str
    series_id: int
    video_ids: List[int] = []


class SearchResult(BaseModel):
    id: int
    title: str
    original_title: Optional[str] = None
    year: Optional[int] = None
    rating: Optional[float] = None
    poster: Optional[str] = None
    type: str = Field(..., description="movie or series")


class SearchResponse(BaseModel):
    results: List[SearchResult]


class FeaturedResponse(BaseModel):
    movies: List[MovieSummary]
    series: List[SeriesSummary]
