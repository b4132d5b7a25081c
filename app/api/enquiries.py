# app/api/enquiries.py
from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session
from typing import Optional
from .. import crud, schemas
from ..activity import activity_logger
from ..db import get_db
from ..models import EnquiryStatus, User
from ..security import get_optional_user, require_roles
from ..utils import paginate, request_meta

router = APIRouter(prefix="/enquiries", tags=["enquiries"])
staff_only = require_roles("admin", "staff")


@router.post("", status_code=201)
@router.post("/", status_code=201, include_in_schema=False)
def create_enquiry(
    payload: schemas.EnquiryCreate,
    request: Request,
    user: Optional[User] = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    if not crud.get_property(db, payload.property_id):
        raise HTTPException(status_code=404, detail="Property not found")
    data = payload.model_dump()
    data["email"] = data["email"].lower()
    data["user_id"] = user.id if user else None
    obj = crud.create_enquiry(db, data)
    ip, ua = request_meta(request)
    activity_logger.log_property_enquiry(data["user_id"], payload.property_id, payload.enquiry_type, ip, ua)
    return {"message": "Enquiry submitted successfully", "enquiry": schemas.EnquiryOut.model_validate(obj)}


@router.get("", response_model=schemas.EnquiryList)
@router.get("/", response_model=schemas.EnquiryList, include_in_schema=False)
def list_enquiries(
    status: Optional[EnquiryStatus] = Query(None),
    property_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=1000),
    user: User = Depends(staff_only),
    db: Session = Depends(get_db),
):
    res = crud.list_enquiries(
        db, skip=(page - 1) * limit, limit=limit,
        status=status.value if status else None, property_id=property_id,
    )
    enquiries = []
    for enquiry, title, address in res["items"]:
        out = schemas.EnquiryOut.model_validate(enquiry)
        out.property_title = title
        out.property_address = address
        enquiries.append(out)
    return {"enquiries": enquiries, "pagination": paginate(page, limit, res["total"])}


@router.put("/{enquiry_id}/status")
def update_status(
    enquiry_id: int,
    payload: schemas.EnquiryStatusUpdate,
    user: User = Depends(staff_only),
    db: Session = Depends(get_db),
):
    obj = crud.update_enquiry_status(db, enquiry_id, payload.status.value)
    if not obj:
        raise HTTPException(status_code=404, detail="Enquiry not found")
    return {"message": "Enquiry status updated", "enquiry": schemas.EnquiryOut.model_validate(obj)}
