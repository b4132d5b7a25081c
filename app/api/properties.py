# app/api/properties.py
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from typing import Optional
from .. import crud, schemas
from ..activity import activity_logger
from ..auction import reconcile_auction_statuses
from ..db import get_db
from ..models import AuctionStatus, User
from ..security import get_optional_user, require_roles
from ..utils import paginate, request_meta

router = APIRouter(prefix="/properties", tags=["properties"])

STATUSES = {s.value for s in AuctionStatus}
staff_only = require_roles("admin", "staff")


@router.get("", response_model=schemas.PropertyList)
@router.get("/", response_model=schemas.PropertyList, include_in_schema=False)
def list_properties(
    status: Optional[str] = Query(None),
    city: Optional[str] = Query(None),
    property_type: Optional[str] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    sort_by: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    # status-dependent filters must see fresh statuses
    reconcile_auction_statuses()

    if status not in (None, "") and status not in STATUSES:
        raise HTTPException(status_code=400, detail="Invalid status value")
    if sort_by and sort_by not in crud.PROPERTY_SORTS:
        raise HTTPException(status_code=400, detail="Invalid sort_by value")

    filters = {
        "status": status,
        "city": city.strip() if city else None,
        "property_type": property_type.strip() if property_type else None,
        "min_price": min_price,
        "max_price": max_price,
    }
    res = crud.list_properties(db, skip=(page - 1) * limit, limit=limit, filters=filters, sort_by=sort_by)
    return {"properties": res["items"], "pagination": paginate(page, limit, res["total"])}


@router.get("/{property_id}")
def get_property(
    property_id: int,
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    obj = crud.get_property(db, property_id)
    if not obj:
        raise HTTPException(status_code=404, detail="Property not found")
    crud.increment_counter(db, property_id, "views_count")
    db.commit()
    db.refresh(obj)
    ip, ua = request_meta(request)
    activity_logger.log_property_view(user.id if user else None, property_id, ip, ua)
    return {"property": schemas.PropertyOut.model_validate(obj)}


@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
def create_property(
    payload: schemas.PropertyCreate,
    user: User = Depends(staff_only),
    db: Session = Depends(get_db),
):
    obj = crud.create_property(db, payload.model_dump(), created_by=user.id)
    return {"message": "Property created successfully", "property": schemas.PropertyOut.model_validate(obj)}


@router.put("/{property_id}")
def update_property(
    property_id: int,
    payload: schemas.PropertyUpdate,
    user: User = Depends(staff_only),
    db: Session = Depends(get_db),
):
    updates = payload.model_dump(exclude_unset=True, exclude_none=True)
    if "auction_status" in updates:
        updates["auction_status"] = updates["auction_status"].value
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")
    obj = crud.update_property(db, property_id, updates)
    if not obj:
        raise HTTPException(status_code=404, detail="Property not found")
    return {"message": "Property updated successfully", "property": schemas.PropertyOut.model_validate(obj)}


@router.delete("/{property_id}")
def delete_property(property_id: int, user: User = Depends(staff_only), db: Session = Depends(get_db)):
    if not crud.soft_delete_property(db, property_id):
        raise HTTPException(status_code=404, detail="Property not found")
    return {"message": "Property deleted successfully"}
