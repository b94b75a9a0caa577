"""
Admin Routes
Back office for password-reset activation, accounts, sessions and maintenance jobs

Features:
- Pending password-reset requests: list, activate, cleanup
- Catalog and account statistics
- User management (role / activation)
- Session oversight and revocation
- Manual job triggers and job status monitoring

All endpoints require an authenticated administrator (require_admin dependency)
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.orm import Session
from datetime import datetime, timezone
from typing import Optional

from app.database import get_db
from app.models.user import User, UserRole
from app.schemas.admin import AdminSessionPage, CatalogStats, UserPage, UserUpdate
from app.schemas.auth import MessageResponse, UserResponse
from app.schemas.password_reset import (
    ActivateResetRequest,
    ActivateResetResponse,
    CleanupRequest,
    CleanupResponse,
    PasswordResetList,
)
from app.services.admin_service import AdminService
from app.services.background_jobs import BackgroundJobService
from app.services.password_reset_service import PasswordResetService
from app.utils.dependencies import require_admin

router = APIRouter(prefix="/api/admin", tags=["Admin"])


def get_background_jobs(request: Request) -> BackgroundJobService:
    return request.app.state.background_jobs


# ============================================
# Password resets
# ============================================

@router.get("/password-resets", response_model=PasswordResetList)
def list_password_resets(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Unused reset requests, newest first"""
    return {"data": PasswordResetService.list_pending(db)}


@router.post("/password-resets/activate", response_model=ActivateResetResponse)
def activate_password_reset(
    payload: ActivateResetRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Activate a reset request

    Starts the expiry window and returns the link to hand over to the user.
    """
    reset, reset_url = PasswordResetService.activate(db, payload.id)
    return {
        "message": "Password reset activated",
        "reset_url": reset_url,
        "data": reset,
    }


@router.post("/password-resets/cleanup", response_model=CleanupResponse)
def cleanup_password_resets(
    payload: CleanupRequest,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """
    Delete stale reset tokens

    - **expired**: activated, past expiry and never used (default)
    - **used**: already consumed
    - **all**: both of the above
    """
    deleted = PasswordResetService.cleanup(db, payload.type)
    return {
        "message": f"{deleted} token(s) deleted",
        "deleted_count": deleted,
        "type": payload.type,
    }


# ============================================
# Statistics & users
# ============================================

@router.get("/stats", response_model=CatalogStats)
def get_stats(
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return AdminService.stats(db)


@router.get("/users", response_model=UserPage)
def list_users(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None, max_length=100),
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return AdminService.list_users(db, page, limit, search, role, is_active)


@router.patch("/users/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    changes: UserUpdate,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Change a user's role or activation; deactivation ends all their sessions"""
    return AdminService.update_user(db, admin, user_id, changes)


# ============================================
# Sessions
# ============================================

@router.get("/sessions", response_model=AdminSessionPage)
def list_sessions(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    user_id: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    """Active sessions across all users"""
    return AdminService.list_all_sessions(db, page, limit, user_id)


@router.delete("/sessions/{session_id}", response_model=MessageResponse)
def revoke_session(
    session_id: str,
    db: Session = Depends(get_db),
    admin: User = Depends(require_admin)
):
    AdminService.revoke_session(db, admin, session_id)
    return {"message": "Session revoked"}


# ============================================
# Background jobs
# ============================================

@router.post("/jobs/trigger/{job_id}", status_code=status.HTTP_200_OK)
def trigger_job(
    job_id: str,
    jobs: BackgroundJobService = Depends(get_background_jobs),
    admin: User = Depends(require_admin)
):
    """
    Manually run a maintenance job

    Valid job_ids:
    - purge_expired_sessions
    - cleanup_password_resets
    """
    if job_id not in jobs.jobs:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid job_id. Must be one of: {', '.join(jobs.jobs)}"
        )

    result = jobs.trigger(job_id)
    return {
        "message": f"Job '{job_id}' executed",
        "job": result,
        "triggered_at": datetime.now(timezone.utc).isoformat(),
        "triggered_by": admin.email
    }


@router.get("/jobs/status", status_code=status.HTTP_200_OK)
def get_jobs_status(
    jobs: BackgroundJobService = Depends(get_background_jobs),
    admin: User = Depends(require_admin)
):
    """
    Get status of all maintenance jobs

    Returns:
    - Job IDs and names
    - Next run times (when the scheduler is running)
    - Last execution times and deleted row counts
    - Current status (idle/running/success/failed)
    """
    stats = jobs.get_job_stats()
    return {
        "scheduler_running": stats['scheduler_running'],
        "timezone": stats['timezone'],
        "jobs": stats['jobs'],
        "checked_at": datetime.now(timezone.utc).isoformat()
    }
