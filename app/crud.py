# app/crud.py
"""CRUD helpers for users, properties and enquiries.

Routes call these with a request-scoped ``Session``. Each mutating helper
commits its own change.
"""
from sqlalchemy import select, update, and_, func
from sqlalchemy.orm import Session
from typing import Dict, Any, Optional
from .models import User, Property, Enquiry, AuctionStatus

PROPERTY_SORTS = {
    "created_at": Property.created_at.desc(),
    "reserve_price": Property.reserve_price.asc(),
    "reserve_price_desc": Property.reserve_price.desc(),
    "auction_date": Property.auction_date.asc(),
}


# users

def get_user(db: Session, user_id: int) -> Optional[User]:
    return db.get(User, user_id)

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.scalar(select(User).where(func.lower(User.email) == email.lower()))

def create_user(db: Session, data: Dict[str, Any]) -> User:
    obj = User(**data)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

def update_user(db: Session, user: User, updates: Dict[str, Any]) -> User:
    for k, v in updates.items():
        setattr(user, k, v)
    db.commit()
    db.refresh(user)
    return user


# properties

def get_property(db: Session, property_id: int, active_only: bool = True) -> Optional[Property]:
    q = select(Property).where(Property.id == property_id)
    if active_only:
        q = q.where(Property.is_active.is_(True))
    return db.scalar(q)

def list_properties(db: Session, skip: int = 0, limit: int = 20, filters: Dict = None, sort_by: str = None):
    """Active properties matching ``filters``.

    ``filters["status"]`` follows the listing convention: ``None`` hides
    expired auctions, ``""`` applies no status filter, anything else must
    match exactly.
    """
    filters = filters or {}
    conds = [Property.is_active.is_(True)]
    status = filters.get("status")
    if status is None:
        conds.append(Property.auction_status != AuctionStatus.expired.value)
    elif status != "":
        conds.append(Property.auction_status == status)
    if filters.get("city"):
        conds.append(Property.city.ilike(f"%{filters['city']}%"))
    if filters.get("property_type"):
        conds.append(Property.property_type == filters["property_type"])
    if filters.get("min_price") is not None:
        conds.append(Property.reserve_price >= filters["min_price"])
    if filters.get("max_price") is not None:
        conds.append(Property.reserve_price <= filters["max_price"])
    where = and_(*conds)
    total = db.scalar(select(func.count(Property.id)).where(where))
    order = PROPERTY_SORTS.get(sort_by or "created_at", PROPERTY_SORTS["created_at"])
    items = list(db.scalars(
        select(Property).where(where).order_by(order, Property.id.desc()).offset(skip).limit(limit)
    ))
    return {"total": total, "items": items}

def create_property(db: Session, data: Dict[str, Any], created_by: Optional[int] = None) -> Property:
    obj = Property(**data, created_by=created_by)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj

def update_property(db: Session, property_id: int, updates: Dict[str, Any]) -> Optional[Property]:
    obj = db.get(Property, property_id)
    if not obj:
        return None
    for k, v in updates.items():
        setattr(obj, k, v)
    db.commit()
    db.refresh(obj)
    return obj

def soft_delete_property(db: Session, property_id: int) -> bool:
    obj = db.get(Property, property_id)
    if not obj:
        return False
    obj.is_active = False
    db.commit()
    return True

def increment_counter(db: Session, property_id: int, column: str):
    """Bump one of the property counters in place; caller commits."""
    col = getattr(Property, column)
    db.execute(
        update(Property)
        .where(Property.id == property_id)
        .values({column: col + 1})
        .execution_options(synchronize_session=False)
    )


# enquiries

def create_enquiry(db: Session, data: Dict[str, Any]) -> Enquiry:
    obj = Enquiry(**data)
    db.add(obj)
    increment_counter(db, data["property_id"], "enquiries_count")
    db.commit()
    db.refresh(obj)
    return obj

def list_enquiries(db: Session, skip: int = 0, limit: int = 20, status: str = None, property_id: int = None):
    conds = []
    if status:
        conds.append(Enquiry.status == status)
    if property_id is not None:
        conds.append(Enquiry.property_id == property_id)
    base = select(Enquiry, Property.title, Property.address).outerjoin(Property, Enquiry.property_id == Property.id)
    count_q = select(func.count(Enquiry.id))
    if conds:
        base = base.where(and_(*conds))
        count_q = count_q.where(and_(*conds))
    total = db.scalar(count_q)
    rows = db.execute(base.order_by(Enquiry.created_at.desc(), Enquiry.id.desc()).offset(skip).limit(limit)).all()
    return {"total": total, "items": rows}

def update_enquiry_status(db: Session, enquiry_id: int, status: str) -> Optional[Enquiry]:
    obj = db.get(Enquiry, enquiry_id)
    if not obj:
        return None
    obj.status = status
    db.commit()
    db.refresh(obj)
    return obj
