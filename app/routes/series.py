from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.schemas.catalog import (
    SeriesDetail,
    SeriesEpisode,
    SeriesListData,
    SeriesSummary,
    SortField,
    SortOrder,
)
from app.services.catalog_service import CatalogService

router = APIRouter(prefix="/api/series", tags=["Series"])


@router.get("", response_model=SeriesListData)
def list_series(
    genre: Optional[str] = Query(None, max_length=100, description="Genre name"),
    year: Optional[int] = Query(None, ge=1900, le=2100, description="First air year"),
    min_rating: Optional[float] = Query(None, ge=0, le=10, description="Minimum rating"),
    search: Optional[str] = Query(None, max_length=200, description="Title search"),
    sort_by: SortField = Query(SortField.RELEASE_DATE),
    sort_order: SortOrder = Query(SortOrder.DESC),
    page: int = Query(1, ge=1),
    limit: int = Query(25, ge=1, le=100),
    db: Session = Depends(get_db)
):
    """Browse active series; `release_date` sorts on first air date"""
    return CatalogService.list_series(
        db,
        genre=genre,
        year=year,
        min_rating=min_rating,
        search=search,
        sort_by=sort_by.value,
        sort_order=sort_order.value,
        page=page,
        limit=limit,
    )


@router.get("/latest", response_model=List[SeriesSummary])
def latest_series(db: Session = Depends(get_db)):
    return CatalogService.latest_series(db)


@router.get("/top10", response_model=List[SeriesSummary])
def top_series(db: Session = Depends(get_db)):
    return CatalogService.top_series(db)


@router.get("/{series_id}", response_model=SeriesDetail)
def get_series(series_id: int, db: Session = Depends(get_db)):
    """Series with its seasons, episodes and playable videos"""
    return CatalogService.get_series(db, series_id)


@router.get("/{series_id}/episodes", response_model=List[SeriesEpisode])
def series_episodes(
    series_id: int,
    season: Optional[int] = Query(None, ge=0, description="Season number"),
    episode: Optional[int] = Query(None, ge=0, description="Episode number"),
    db: Session = Depends(get_db)
):
    return CatalogService.series_episodes(db, series_id, season, episode)
