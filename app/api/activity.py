# app/api/activity.py
import math
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from .. import activity, cleanup, schemas
from ..db import get_db
from ..models import User, UserRole
from ..security import get_current_user, require_roles
from ..utils import logger, request_meta

router = APIRouter(prefix="/activity", tags=["activity"])
admin_only = require_roles(UserRole.admin.value)


def _check_access(user: User, user_id: int):
    if user.role != UserRole.admin.value and user.id != user_id:
        raise HTTPException(status_code=403, detail="Access denied")


@router.post("/save", status_code=201)
def save_activity(
    payload: schemas.ActivityCreate,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    ip, ua = request_meta(request)
    row = activity.record_activity(db, user.id, payload.action, payload.action_category, payload.data, ip, ua)
    return {"message": "Activity recorded successfully", "activity": schemas.ActivityOut.model_validate(row)}


@router.get("/user/{user_id}")
def user_activity(
    user_id: int,
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _check_access(user, user_id)
    rows = activity.get_user_activity(db, user_id, limit, offset)
    total = activity.count_user_activity(db, user_id)
    return {
        "activities": [schemas.ActivityOut.model_validate(r) for r in rows],
        "pagination": {"limit": limit, "offset": offset, "total": total, "pages": math.ceil(total / limit)},
    }


@router.get("/stats/user/{user_id}")
def user_activity_stats(
    user_id: int,
    days_back: int = Query(30, ge=1, alias="daysBack"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    _check_access(user, user_id)
    stats = activity.get_user_activity_stats(db, user_id, days_back)
    return {"userId": user_id, "daysBack": days_back, "stats": [schemas.ActionStat(**s) for s in stats]}


@router.get("/all")
def all_activities(
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: User = Depends(admin_only),
    db: Session = Depends(get_db),
):
    rows = activity.get_all_activities(db, limit, offset)
    return {
        "activities": [schemas.ActivityOut.model_validate(r) for r in rows],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/category/{category}")
def activities_by_category(
    category: str,
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: User = Depends(admin_only),
    db: Session = Depends(get_db),
):
    rows = activity.get_activities_by_category(db, category, limit, offset)
    return {
        "category": category,
        "activities": [schemas.ActivityOut.model_validate(r) for r in rows],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/stats")
def activity_stats(
    days_back: int = Query(30, ge=1, alias="daysBack"),
    user: User = Depends(admin_only),
    db: Session = Depends(get_db),
):
    stats = activity.get_activity_stats(db, days_back)
    return {"daysBack": days_back, "stats": [schemas.CategoryStat(**s) for s in stats]}


@router.get("/cleanup/stats", response_model=schemas.CleanupStats)
def cleanup_preview(
    days_old: int = Query(cleanup.ACTIVITY_RETENTION_DAYS, ge=0),
    user: User = Depends(admin_only),
    db: Session = Depends(get_db),
):
    return cleanup.activity_cleanup_stats(db, days_old)


@router.post("/cleanup")
def run_cleanup(
    days_old: int = Query(cleanup.ACTIVITY_RETENTION_DAYS, ge=0),
    user: User = Depends(admin_only),
    db: Session = Depends(get_db),
):
    logger.info("Manual activity cleanup by user %s (older than %d days)", user.id, days_old)
    deleted = cleanup.purge_activity(db, days_old)
    return {"message": "Cleanup completed", "records_deleted": deleted, "older_than_days": days_old}
