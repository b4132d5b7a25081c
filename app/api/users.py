# app/api/users.py
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from typing import List
from .. import activity, crud, schemas
from ..activity import activity_logger
from ..db import get_db
from ..models import User
from ..security import hash_password, verify_password, get_current_user
from ..utils import request_meta

router = APIRouter(prefix="/user", tags=["user"])


@router.get("/me", response_model=schemas.UserOut)
def get_me(user: User = Depends(get_current_user)):
    return user


@router.put("/profile")
def update_profile(
    payload: schemas.ProfileUpdate,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    full_name = payload.full_name.strip()
    if not full_name:
        raise HTTPException(status_code=400, detail="Full name is required")
    user = crud.update_user(db, user, {"full_name": full_name, "phone": payload.phone})
    ip, ua = request_meta(request)
    activity_logger.log_profile_update(user.id, ["full_name", "phone"], ip, ua)
    return {"message": "Profile updated successfully", "user": schemas.UserOut.model_validate(user)}


@router.post("/change-password")
def change_password(
    payload: schemas.PasswordReset,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if payload.new_password != payload.confirm_password:
        raise HTTPException(status_code=400, detail="New passwords do not match")
    if len(payload.new_password) < 8:
        raise HTTPException(status_code=400, detail="Password must be at least 8 characters")
    if not verify_password(payload.current_password, user.password_hash):
        raise HTTPException(status_code=401, detail="Current password is incorrect")
    crud.update_user(db, user, {"password_hash": hash_password(payload.new_password)})
    ip, ua = request_meta(request)
    activity_logger.log(user.id, "password_changed", "authentication", {}, ip, ua)
    return {"message": "Password changed successfully"}


@router.get("/activity")
def my_activity(
    limit: int = Query(50, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = activity.get_user_activity(db, user.id, limit, offset)
    return {
        "activities": [schemas.ActivityOut.model_validate(r) for r in rows],
        "total": activity.count_user_activity(db, user.id),
        "limit": limit,
        "offset": offset,
    }


@router.get("/activity/stats", response_model=List[schemas.ActionStat])
def my_activity_stats(
    days_back: int = Query(30, ge=1, alias="daysBack"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return activity.get_user_activity_stats(db, user.id, days_back)
