"""
Admin Routes for Background Jobs Management

All endpoints require authentication via get_current_user dependency
"""

from fastapi import APIRouter, Depends, HTTPException, status
from cinescope.utils.dependencies import get_current_user
from cinescope.models.user import User
from cinescope.services.background_jobs import background_jobs
from datetime import datetime, timezone

router = APIRouter(prefix="/api/admin", tags=["Admin - Background Jobs"])


@router.post("/jobs/trigger/cleanup", status_code=status.HTTP_200_OK)
def trigger_cache_cleanup(
    current_user: User = Depends(get_current_user)
):
    """
    Manually trigger the stale cache sweep

    - Removes movie/show cache entries older than CACHE_RETENTION_DAYS
    - Returns number of deleted entries

    **Requires authentication**
    """
    try:
        deleted = background_jobs.cleanup_stale_cache()
    except Exception as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to trigger cleanup: {str(e)}"
        )
    return {
        "message": "Cache cleanup completed",
        "job": "cleanup_cache",
        "deleted": deleted,
        "triggered_at": datetime.now(timezone.utc).isoformat(),
        "triggered_by": current_user.email
    }


@router.get("/jobs/status", status_code=status.HTTP_200_OK)
def get_jobs_status(
    current_user: User = Depends(get_current_user)
):
    """
    Get status of the scheduled background jobs

    **Requires authentication**
    """
    stats = background_jobs.get_job_stats()
    return {
        **stats,
        "checked_at": datetime.now(timezone.utc).isoformat()
    }
