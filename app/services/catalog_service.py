"""
Catalog Query Service
=====================
Read-side queries over movies, series, seasons, episodes and videos.

Features:
- Filtered, sorted and paginated listings (genre, year, minimum rating, text search)
- Detail views with genres, category and active videos
- Carousels: latest, top rated, featured, latest episodes
- Genre-overlap based similar titles
- Cross-catalog quick search
"""
from datetime import date
from math import ceil
from typing import Dict, List, Optional
import logging

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from app.models.genre import Genre
from app.models.movie import Movie
from app.models.series import Series, Season, Episode
from app.models.watchlist import ContentType
from app.schemas.catalog import SortField, SortOrder
from app.schemas.validation import validate_pagination, validate_sort_field

logger = logging.getLogger(__name__)

LATEST_LIMIT = 10
TOP_LIMIT = 10
SIMILAR_LIMIT = 10
SIMILAR_CANDIDATES = 20
LATEST_EPISODES_LIMIT = 20
SEARCH_MIN_LENGTH = 2
SEARCH_PER_KIND = 10
SEARCH_LIMIT = 20


def _like_pattern(text: str) -> str:
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _year_range(year: int):
    return date(year, 1, 1), date(year + 1, 1, 1)


def _pagination(page: int, limit: int, total: int) -> Dict:
    total_pages = ceil(total / limit) if total else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total_count": total,
        "limit": limit,
        "has_next_page": page < total_pages,
        "has_prev_page": page > 1,
    }


def _video_dict(video) -> Dict:
    return {
        "id": video.id,
        "title": video.title,
        "embed_url": video.embed_url,
        "quality": video.quality,
        "language": video.language,
        "type": video.type,
        "created_at": video.created_at,
    }


def _category_dict(category) -> Optional[Dict]:
    if category is None:
        return None
    return {"id": category.id, "name": category.name}


def _title_card(item) -> Dict:
    return {
        "id": item.id,
        "title": item.title,
        "poster": item.poster,
        "year": item.year,
        "rating": item.rating,
    }


def movie_summary(movie: Movie, first_video_only: bool = True) -> Dict:
    videos = movie.active_videos
    if first_video_only:
        videos = videos[:1]
    return {
        "id": movie.id,
        "title": movie.title,
        "original_title": movie.original_title,
        "description": movie.description,
        "year": movie.year,
        "rating": movie.rating,
        "duration": movie.duration,
        "poster": movie.poster,
        "backdrop": movie.backdrop,
        "release_date": movie.release_date,
        "is_featured": bool(movie.is_featured),
        "genres": movie.genre_names,
        "category": _category_dict(movie.category),
        "videos": [_video_dict(v) for v in videos],
    }


def series_summary(series: Series) -> Dict:
    year = series.first_air_date.year if series.first_air_date else series.year
    return {
        "id": series.id,
        "title": series.title,
        "original_title": series.original_title,
        "description": series.description,
        "year": year,
        "rating": series.rating,
        "poster": series.poster,
        "backdrop": series.backdrop,
        "release_date": series.first_air_date,
        "genres": series.genre_names,
        "number_of_seasons": series.number_of_seasons,
        "number_of_episodes": series.number_of_episodes,
    }


def episode_dict(episode: Episode) -> Dict:
    return {
        "id": episode.id,
        "number": episode.number,
        "title": episode.title,
        "description": episode.description,
        "still_path": episode.still_path,
        "rating": episode.rating,
        "duration": episode.duration,
        "videos": [
            _video_dict(v)
            for v in sorted(episode.videos, key=lambda v: v.created_at, reverse=True)
            if v.is_active
        ],
    }


class CatalogService:
    """Parametrized catalog queries. Only active titles are exposed."""

    MOVIE_SORT_COLUMNS = {
        SortField.RELEASE_DATE.value: Movie.release_date,
        SortField.RATING.value: Movie.rating,
        SortField.TITLE.value: Movie.title,
    }
    SERIES_SORT_COLUMNS = {
        SortField.RELEASE_DATE.value: Series.first_air_date,
        SortField.RATING.value: Series.rating,
        SortField.TITLE.value: Series.title,
    }

    @staticmethod
    def _order(column, sort_order: str):
        return column.asc() if sort_order == SortOrder.ASC.value else column.desc()

    @staticmethod
    def _sort_column(columns: Dict, sort_by: str):
        try:
            return columns[validate_sort_field(sort_by, list(columns))]
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    # ============================================
    # Movies
    # ============================================

    @classmethod
    def list_movies(
        cls,
        db: Session,
        genre: Optional[str] = None,
        year: Optional[int] = None,
        min_rating: Optional[float] = None,
        search: Optional[str] = None,
        sort_by: str = SortField.RELEASE_DATE.value,
        sort_order: str = SortOrder.DESC.value,
        page: int = 1,
        limit: int = 25,
    ) -> Dict:
        page, limit = validate_pagination(page, limit)
        sort_column = cls._sort_column(cls.MOVIE_SORT_COLUMNS, sort_by)

        query = db.query(Movie).filter(Movie.is_active.is_(True))
        if genre:
            query = query.filter(Movie.genres.any(Genre.name == genre))
        if year:
            start, end = _year_range(year)
            query = query.filter(Movie.release_date >= start, Movie.release_date < end)
        if min_rating is not None:
            query = query.filter(Movie.rating >= min_rating)
        if search:
            pattern = _like_pattern(search)
            query = query.filter(or_(
                Movie.title.ilike(pattern, escape="\\"),
                Movie.original_title.ilike(pattern, escape="\\"),
            ))

        total = query.count()
        movies = (
            query.options(
                selectinload(Movie.genres),
                selectinload(Movie.videos),
                joinedload(Movie.category),
            )
            .order_by(cls._order(sort_column, sort_order), Movie.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "movies": [movie_summary(m) for m in movies],
            "pagination": _pagination(page, limit, total),
        }

    @staticmethod
    def _get_movie_or_404(db: Session, movie_id: int) -> Movie:
        movie = (
            db.query(Movie)
            .options(selectinload(Movie.genres), selectinload(Movie.videos), joinedload(Movie.category))
            .filter(Movie.id == movie_id, Movie.is_active.is_(True))
            .first()
        )
        if not movie:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Movie not found")
        return movie

    @classmethod
    def get_movie(cls, db: Session, movie_id: int) -> Dict:
        movie = cls._get_movie_or_404(db, movie_id)
        detail = movie_summary(movie, first_video_only=False)
        detail["trailer"] = movie.trailer
        detail["popularity"] = movie.popularity or 0.0
        return detail

    @classmethod
    def similar_movies(cls, db: Session, movie_id: int) -> List[Dict]:
        """
        Active movies sharing genres with the given one.

        Candidates are the most popular overlapping titles, re-ranked by number
        of shared genres (popularity breaks ties). Without genres, falls back
        to the most popular titles.
        """
        movie = cls._get_movie_or_404(db, movie_id)
        genre_ids = {g.id for g in movie.genres}

        base = db.query(Movie).filter(Movie.is_active.is_(True), Movie.id != movie_id)
        if not genre_ids:
            fallback = base.order_by(Movie.popularity.desc(), Movie.id.asc()).limit(SIMILAR_LIMIT).all()
            return [_title_card(m) for m in fallback]

        candidates = (
            base.filter(Movie.genres.any(Genre.id.in_(genre_ids)))
            .options(selectinload(Movie.genres))
            .order_by(Movie.popularity.desc(), Movie.id.asc())
            .limit(SIMILAR_CANDIDATES)
            .all()
        )
        # sorted() is stable, so popularity order survives among equal overlaps
        ranked = sorted(
            candidates,
            key=lambda m: len(genre_ids & {g.id for g in m.genres}),
            reverse=True,
        )
        return [_title_card(m) for m in ranked[:SIMILAR_LIMIT]]

    @staticmethod
    def latest_movies(db: Session) -> List[Dict]:
        movies = (
            db.query(Movie)
            .options(selectinload(Movie.genres), selectinload(Movie.videos), joinedload(Movie.category))
            .filter(Movie.is_active.is_(True), Movie.release_date.is_not(None))
            .order_by(Movie.release_date.desc(), Movie.id.desc())
            .limit(LATEST_LIMIT)
            .all()
        )
        return [movie_summary(m) for m in movies]

    @staticmethod
    def top_movies(db: Session) -> List[Dict]:
        movies = (
            db.query(Movie)
            .options(selectinload(Movie.genres), selectinload(Movie.videos), joinedload(Movie.category))
            .filter(Movie.is_active.is_(True), Movie.rating.is_not(None))
            .order_by(Movie.rating.desc(), Movie.id.asc())
            .limit(TOP_LIMIT)
            .all()
        )
        return [movie_summary(m) for m in movies]

    # ============================================
    # Series
    # ============================================

    @classmethod
    def list_series(
        cls,
        db: Session,
        genre: Optional[str] = None,
        year: Optional[int] = None,
        min_rating: Optional[float] = None,
        search: Optional[str] = None,
        sort_by: str = SortField.RELEASE_DATE.value,
        sort_order: str = SortOrder.DESC.value,
        page: int = 1,
        limit: int = 25,
    ) -> Dict:
        page, limit = validate_pagination(page, limit)
        sort_column = cls._sort_column(cls.SERIES_SORT_COLUMNS, sort_by)

        query = db.query(Series).filter(Series.is_active.is_(True))
        if genre:
            query = query.filter(Series.genres.any(Genre.name == genre))
        if year:
            start, end = _year_range(year)
            query = query.filter(Series.first_air_date >= start, Series.first_air_date < end)
        if min_rating is not None:
            query = query.filter(Series.rating >= min_rating)
        if search:
            pattern = _like_pattern(search)
            query = query.filter(or_(
                Series.title.ilike(pattern, escape="\\"),
                Series.original_title.ilike(pattern, escape="\\"),
            ))

        total = query.count()
        series = (
            query.options(selectinload(Series.genres))
            .order_by(cls._order(sort_column, sort_order), Series.id.asc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )

        return {
            "series": [series_summary(s) for s in series],
            "pagination": _pagination(page, limit, total),
        }

    @staticmethod
    def _get_series_or_404(db: Session, series_id: int) -> Series:
        series = (
            db.query(Series)
            .options(selectinload(Series.genres), joinedload(Series.category))
            .filter(Series.id == series_id, Series.is_active.is_(True))
            .first()
        )
        if not series:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Series not found")
        return series

    @classmethod
    def get_series(cls, db: Session, series_id: int) -> Dict:
        """Series with its active seasons, their active episodes and active videos"""
        series = cls._get_series_or_404(db, series_id)

        detail = series_summary(series)
        detail.update({
            "trailer": series.trailer,
            "first_air_date": series.first_air_date,
            "last_air_date": series.last_air_date,
            "status": series.status,
            "category": _category_dict(series.category),
            "seasons": [
                {
                    "id": season.id,
                    "number": season.number,
                    "title": season.title,
                    "poster": season.poster,
                    "episodes": [episode_dict(e) for e in season.episodes if e.is_active],
                }
                for season in series.seasons
                if season.is_active
            ],
        })
        return detail

    @classmethod
    def series_episodes(
        cls,
        db: Session,
        series_id: int,
        season_number: Optional[int] = None,
        episode_number: Optional[int] = None,
    ) -> List[Dict]:
        series = cls._get_series_or_404(db, series_id)

        query = (
            db.query(Episode)
            .join(Season, Episode.season_id == Season.id)
            .options(selectinload(Episode.videos), joinedload(Episode.season))
            .filter(
                Season.series_id == series_id,
                Season.is_active.is_(True),
                Episode.is_active.is_(True),
            )
        )
        if season_number is not None:
            query = query.filter(Season.number == season_number)
        if episode_number is not None:
            query = query.filter(Episode.number == episode_number)

        episodes = query.order_by(Season.number.asc(), Episode.number.asc()).all()

        result = []
        for episode in episodes:
            item = episode_dict(episode)
            item.update({
                "season_id": episode.season.id,
                "season_number": episode.season.number,
                "series_id": series.id,
                "series_title": series.title,
                "series_poster": series.poster,
            })
            result.append(item)
        return result

    @staticmethod
    def latest_series(db: Session) -> List[Dict]:
        series = (
            db.query(Series)
            .options(selectinload(Series.genres))
            .filter(Series.is_active.is_(True), Series.first_air_date.is_not(None))
            .order_by(Series.first_air_date.desc(), Series.id.desc())
            .limit(LATEST_LIMIT)
            .all()
        )
        return [series_summary(s) for s in series]

    @staticmethod
    def top_series(db: Session) -> List[Dict]:
        series = (
            db.query(Series)
            .options(selectinload(Series.genres))
            .filter(Series.is_active.is_(True), Series.rating.is_not(None))
            .order_by(Series.rating.desc(), Series.id.asc())
            .limit(TOP_LIMIT)
            .all()
        )
        return [series_summary(s) for s in series]

    @staticmethod
    def latest_episodes(db: Session) -> List[Dict]:
        """Most recently added episodes that have at least one video"""
        episodes = (
            db.query(Episode)
            .options(
                selectinload(Episode.videos),
                joinedload(Episode.season).joinedload(Season.series),
            )
            .filter(Episode.is_active.is_(True), Episode.videos.any())
            .order_by(Episode.created_at.desc(), Episode.id.desc())
            .limit(LATEST_EPISODES_LIMIT)
            .all()
        )
        return [
            {
                "id": e.id,
                "title": e.title,
                "poster": e.season.series.poster,
                "still_path": e.still_path,
                "rating": e.rating,
                "duration": e.duration,
                "season_number": e.season.number,
                "episode_number": e.number,
                "series_title": e.season.series.title,
                "series_id": e.season.series.id,
                "video_ids": [v.id for v in e.videos],
            }
            for e in episodes
        ]

    # ============================================
    # Genres, featured, search
    # ============================================

    @staticmethod
    def list_genres(db: Session) -> List[Genre]:
        return db.query(Genre).order_by(Genre.name.asc()).all()

    @staticmethod
    def featured(db: Session) -> Dict:
        movies = (
            db.query(Movie)
            .options(selectinload(Movie.genres), selectinload(Movie.videos), joinedload(Movie.category))
            .filter(Movie.is_active.is_(True), Movie.is_featured.is_(True))
            .order_by(Movie.popularity.desc(), Movie.id.asc())
            .limit(TOP_LIMIT)
            .all()
        )
        series = (
            db.query(Series)
            .options(selectinload(Series.genres))
            .filter(Series.is_active.is_(True), Series.is_featured.is_(True))
            .order_by(Series.popularity.desc(), Series.id.asc())
            .limit(TOP_LIMIT)
            .all()
        )
        return {
            "movies": [movie_summary(m) for m in movies],
            "series": [series_summary(s) for s in series],
        }

    @staticmethod
    def search(db: Session, query: str) -> List[Dict]:
        """
        Quick search over movies and series.

        Exact title matches come first, then newer titles.
        """
        query = (query or "").strip()
        if len(query) < SEARCH_MIN_LENGTH:
            return []

        pattern = _like_pattern(query)
        results = []
        for model, kind in ((Movie, "movie"), (Series, "series")):
            rows = (
                db.query(model)
                .filter(
                    model.is_active.is_(True),
                    or_(
                        model.title.ilike(pattern, escape="\\"),
                        model.original_title.ilike(pattern, escape="\\"),
                        model.description.ilike(pattern, escape="\\"),
                    ),
                )
                .order_by(model.popularity.desc(), model.id.asc())
                .limit(SEARCH_PER_KIND)
                .all()
            )
            for row in rows:
                results.append({
                    "id": row.id,
                    "title": row.title,
                    "original_title": row.original_title,
                    "year": row.year,
                    "rating": row.rating,
                    "poster": row.poster,
                    "type": kind,
                })

        needle = query.lower()
        results.sort(key=lambda r: (r["title"].lower() != needle, -(r["year"] or 0)))
        return results[:SEARCH_LIMIT]

    @staticmethod
    def ensure_content_exists(db: Session, content_id: int, content_type: ContentType) -> None:
        model = Movie if content_type == ContentType.MOVIE else Series
        exists = db.query(model.id).filter(model.id == content_id).first()
        if not exists:
            label = "Movie" if content_type == ContentType.MOVIE else "Series"
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{label} not found")
