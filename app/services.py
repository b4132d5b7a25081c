# app/services.py
from . import crud
from sqlalchemy import select, func
from sqlalchemy.orm import Session
from .models import PropertyInterest, InterestType, User, UserRole
from .security import hash_password
from .utils import logger
from typing import Optional

# interest type -> property counter it bumps; saves are only logged
INTEREST_COUNTERS = {
    InterestType.view.value: "views_count",
    InterestType.share.value: "shares_count",
    InterestType.contact.value: "enquiries_count",
}

STAT_KEYS = {
    InterestType.view.value: "views",
    InterestType.share.value: "shares",
    InterestType.contact.value: "contacts",
    InterestType.save.value: "saves",
}


def track_interest(
    db: Session,
    property_id: int,
    interest_type: str,
    user_id: Optional[int] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> PropertyInterest:
    """Record an interest event and bump the matching counter in one commit."""
    row = PropertyInterest(
        property_id=property_id,
        user_id=user_id,
        interest_type=interest_type,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    db.add(row)
    column = INTEREST_COUNTERS.get(interest_type)
    if column:
        crud.increment_counter(db, property_id, column)
    db.commit()
    return row


def interest_stats(db: Session, property_id: int):
    stats = {key: 0 for key in STAT_KEYS.values()}
    rows = db.execute(
        select(PropertyInterest.interest_type, func.count(PropertyInterest.id))
        .where(PropertyInterest.property_id == property_id)
        .group_by(PropertyInterest.interest_type)
    )
    for interest_type, n in rows:
        if interest_type in STAT_KEYS:
            stats[STAT_KEYS[interest_type]] = n
    return stats


def ensure_admin_user(db: Session, email: str, password: str, full_name: str = "Admin User") -> User:
    """Create the admin account, or reactivate it and reset its password."""
    user = crud.get_user_by_email(db, email)
    if user is None:
        user = crud.create_user(db, {
            "email": email,
            "password_hash": hash_password(password),
            "full_name": full_name,
            "role": UserRole.admin.value,
            "is_active": True,
        })
        logger.info("Created admin user %s", email)
        return user
    return crud.update_user(db, user, {
        "password_hash": hash_password(password),
        "role": UserRole.admin.value,
        "is_active": True,
    })
