from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.models.user import User
from app.models.watchlist import ContentType
from app.schemas.auth import MessageResponse
from app.schemas.watchlist import ContentRef, WatchlistCheck, WatchlistResponse
from app.services.watchlist_service import WatchlistService
from app.utils.dependencies import get_current_user

router = APIRouter(prefix="/api/watchlist", tags=["Watchlist"])


@router.get("", response_model=List[WatchlistResponse])
def get_watchlist(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get user's watchlist, most recently added first"""
    return WatchlistService.get_watchlist(db, current_user.id)


@router.post("", response_model=WatchlistResponse, status_code=status.HTTP_201_CREATED)
def add_to_watchlist(
    item: ContentRef,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Add a movie or series to user's watchlist

    - **content_id**: catalog id of the title
    - **content_type**: MOVIE or SERIES
    """
    return WatchlistService.add_to_watchlist(db, current_user.id, item)


@router.get("/check", response_model=WatchlistCheck)
def check_in_watchlist(
    content_id: int = Query(..., ge=1),
    content_type: ContentType = Query(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    in_watchlist = WatchlistService.check_in_watchlist(db, current_user.id, content_id, content_type)
    return {"content_id": content_id, "content_type": content_type, "in_watchlist": in_watchlist}


@router.delete("/{content_type}/{content_id}", response_model=MessageResponse)
def remove_from_watchlist(
    content_type: ContentType,
    content_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    WatchlistService.remove_from_watchlist(db, current_user.id, content_id, content_type)
    return {"message": "Removed from watchlist"}
