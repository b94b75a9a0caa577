from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.models.user import User
from app.schemas.watchlist import HistoryPage, HistoryRecord, HistoryResponse
from app.services.history_service import HistoryService
from app.utils.dependencies import get_current_user

router = APIRouter(prefix="/api/history", tags=["History"])


@router.post("", response_model=HistoryResponse, status_code=status.HTTP_201_CREATED)
def record_view(
    entry: HistoryRecord,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Record that the user watched a title (or one of its videos)"""
    return HistoryService.record(db, current_user.id, entry)


@router.get("", response_model=HistoryPage)
def get_history(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return HistoryService.get_history(db, current_user.id, limit, offset)
