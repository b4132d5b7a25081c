# app/api/interests.py
from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.orm import Session
from typing import Optional
from .. import crud, schemas, services
from ..activity import activity_logger
from ..db import get_db
from ..models import User
from ..security import get_optional_user, require_roles
from ..utils import request_meta

router = APIRouter(prefix="/interests", tags=["interests"])


@router.post("")
@router.post("/", include_in_schema=False)
def track_interest(
    payload: schemas.InterestCreate,
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not crud.get_property(db, payload.property_id):
        raise HTTPException(status_code=404, detail="Property not found")
    user_id = user.id if user else None
    interest_type = payload.interest_type.value
    ip, ua = request_meta(request)
    services.track_interest(db, payload.property_id, interest_type, user_id, ip, ua)
    activity_logger.log_property_interest(user_id, payload.property_id, interest_type, ip, ua)
    return {"message": "Interest tracked successfully"}


@router.get("/stats/{property_id}")
def interest_stats(
    property_id: int,
    user: User = Depends(require_roles("admin", "staff")),
    db: Session = Depends(get_db),
):
    return {"property_id": property_id, "stats": services.interest_stats(db, property_id)}
