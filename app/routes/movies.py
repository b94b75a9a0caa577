from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from app.database import get_db
from app.schemas.catalog import (
    MovieDetail,
    MovieListData,
    MovieSummary,
    SortField,
    SortOrder,
    TitleCard,
)
from app.services.catalog_service import CatalogService

router = APIRouter(prefix="/api/movies", tags=["Movies"])


# ============================================
# Listing & Discovery
# ============================================

@router.get("", response_model=MovieListData)
def list_movies(
    genre: Optional[str] = Query(None, max_length=100, description="Genre name"),
    year: Optional[int] = Query(None, ge=1888, le=2100, description="Release year"),
    min_rating: Optional[float] = Query(None, ge=0, le=10, description="Minimum rating"),
    search: Optional[str] = Query(None, max_length=200, description="Title search"),
    sort_by: SortField = Query(SortField.RELEASE_DATE),
    sort_order: SortOrder = Query(SortOrder.DESC),
    page: int = Query(1, ge=1, description="Page number"),
    limit: int = Query(25, ge=1, le=100, description="Items per page"),
    db: Session = Depends(get_db)
):
    """
    Browse active movies

    - **genre**: exact genre name (e.g. "Action")
    - **year**: release year
    - **min_rating**: minimum rating (0-10)
    - **search**: case-insensitive match on title or original title
    """
    return CatalogService.list_movies(
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


@router.get("/latest", response_model=List[MovieSummary])
def latest_movies(db: Session = Depends(get_db)):
    """Most recent releases"""
    return CatalogService.latest_movies(db)


@router.get("/top10", response_model=List[MovieSummary])
def top_movies(db: Session = Depends(get_db)):
    """Best rated movies"""
    return CatalogService.top_movies(db)


@router.get("/{movie_id}", response_model=MovieDetail)
def get_movie(movie_id: int, db: Session = Depends(get_db)):
    return CatalogService.get_movie(db, movie_id)


@router.get("/{movie_id}/similar", response_model=List[TitleCard])
def similar_movies(movie_id: int, db: Session = Depends(get_db)):
    """
    Movies sharing genres with this one

    Ranked by number of shared genres, then popularity.
    """
    return CatalogService.similar_movies(db, movie_id)
