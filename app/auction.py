# app/auction.py
"""Auction status reconciliation.

Advances ``auction_status`` along ``upcoming -> active -> expired`` as
wall-clock time passes each property's ``auction_date``. ``sold`` and
``cancelled`` are administrative and never touched here.
"""
from datetime import datetime
from typing import Optional
from sqlalchemy import update, case, and_, or_
from sqlalchemy.orm import Session
from .db import SessionLocal
from .models import Property, AuctionStatus
from .utils import logger, utcnow


def reconcile(db: Session, now: Optional[datetime] = None) -> int:
    """Apply due status transitions in a single conditional UPDATE.

    An ``upcoming`` row whose auction instant has already passed goes
    straight to ``expired``, so a second call with the same ``now`` changes
    nothing. Returns the number of rows changed.
    """
    now = now or utcnow()
    overdue = and_(
        Property.auction_status == AuctionStatus.upcoming.value,
        Property.auction_date < now,
    )
    becomes_active = and_(
        Property.auction_status == AuctionStatus.upcoming.value,
        Property.auction_date <= now,
    )
    becomes_expired = and_(
        Property.auction_status == AuctionStatus.active.value,
        Property.auction_date < now,
    )
    stmt = (
        update(Property)
        .where(or_(becomes_active, becomes_expired))
        .values(auction_status=case(
            (overdue, AuctionStatus.expired.value),
            (becomes_active, AuctionStatus.active.value),
            (becomes_expired, AuctionStatus.expired.value),
            else_=Property.auction_status,
        ))
        .execution_options(synchronize_session=False)
    )
    result = db.execute(stmt)
    db.commit()
    return result.rowcount or 0


def reconcile_auction_statuses(now: Optional[datetime] = None) -> int:
    db = SessionLocal()
    try:
        changed = reconcile(db, now)
        if changed:
            logger.info("Auction status reconciliation updated %d properties", changed)
        return changed
    except Exception as e:
        db.rollback()
        logger.warning("Auction status reconciliation skipped: %s", e)
        return 0
    finally:
        db.close()
