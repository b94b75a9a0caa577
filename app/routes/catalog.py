from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import ValidationError
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.schemas.catalog import FeaturedResponse, GenreResponse, LatestEpisode, SearchResponse
from app.schemas.validation import SearchQuerySchema
from app.services.catalog_service import CatalogService, SEARCH_MIN_LENGTH

router = APIRouter(prefix="/api", tags=["Catalog"])


@router.get("/genres", response_model=List[GenreResponse])
def list_genres(db: Session = Depends(get_db)):
    return CatalogService.list_genres(db)


@router.get("/featured", response_model=FeaturedResponse)
def featured(db: Session = Depends(get_db)):
    """Featured movies and series for the home page hero"""
    return CatalogService.featured(db)


@router.get("/episodes/latest", response_model=List[LatestEpisode])
def latest_episodes(db: Session = Depends(get_db)):
    return CatalogService.latest_episodes(db)


@router.get("/search", response_model=SearchResponse)
def search(
    q: str = Query("", max_length=200, description="Search text"),
    db: Session = Depends(get_db)
):
    """
    Quick search across movies and series

    Queries shorter than 2 characters return no results.
    """
    if len(q.strip()) < SEARCH_MIN_LENGTH:
        return {"results": []}
    try:
        query = SearchQuerySchema(query=q).query
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid search query")
    return {"results": CatalogService.search(db, query)}
