# app/models.py
"""SQLAlchemy ORM models for persisted entities.

Defines users, auction properties, enquiries and the two append-only
event tables (``property_interests`` and ``user_activity``).
"""
import enum
from sqlalchemy import (
    Column, Integer, Text, String, Numeric, Float, Boolean, TIMESTAMP, ForeignKey, JSON, func, Index,
)
from sqlalchemy.dialects.postgresql import JSONB
from .db import Base
from .utils import utcnow


class AuctionStatus(str, enum.Enum):
    upcoming = "upcoming"
    active = "active"
    expired = "expired"
    sold = "sold"
    cancelled = "cancelled"


class InterestType(str, enum.Enum):
    view = "view"
    share = "share"
    contact = "contact"
    save = "save"


class EnquiryStatus(str, enum.Enum):
    new = "new"
    contacted = "contacted"
    resolved = "resolved"
    closed = "closed"


class UserRole(str, enum.Enum):
    admin = "admin"
    staff = "staff"
    user = "user"


# JSONB on PostgreSQL, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=False)
    full_name = Column(Text, nullable=False)
    phone = Column(String(50))
    role = Column(String(20), nullable=False, default=UserRole.user.value)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)


class Property(Base):
    __tablename__ = "properties"
    id = Column(Integer, primary_key=True, index=True)
    title = Column(Text, nullable=False)
    description = Column(Text)
    property_type = Column(String(100))
    address = Column(Text, nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(100))
    zip_code = Column(String(20))
    country = Column(String(100), default="India")
    latitude = Column(Float)
    longitude = Column(Float)
    area_sqft = Column(Float)
    bedrooms = Column(Integer)
    bathrooms = Column(Integer)
    floors = Column(Integer)
    reserve_price = Column(Numeric(15, 2), nullable=False)
    auction_date = Column(TIMESTAMP(timezone=True), nullable=False)
    auction_status = Column(String(20), nullable=False, default=AuctionStatus.upcoming.value)
    is_featured = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    views_count = Column(Integer, nullable=False, default=0)
    shares_count = Column(Integer, nullable=False, default=0)
    enquiries_count = Column(Integer, nullable=False, default=0)
    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now())
    updated_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow)


class Enquiry(Base):
    __tablename__ = "enquiries"
    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    name = Column(Text, nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=False)
    message = Column(Text)
    enquiry_type = Column(String(50), nullable=False, default="general")
    status = Column(String(20), nullable=False, default=EnquiryStatus.new.value)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now())


class PropertyInterest(Base):
    __tablename__ = "property_interests"
    id = Column(Integer, primary_key=True, index=True)
    property_id = Column(Integer, ForeignKey("properties.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    interest_type = Column(String(20), nullable=False)
    ip_address = Column(String(64))
    user_agent = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), default=utcnow, server_default=func.now())


class UserActivity(Base):
    __tablename__ = "user_activity"
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    action = Column(String(100), nullable=False)
    action_category = Column(String(50))
    data = Column(JSONType)
    ip_address = Column(String(64))
    user_agent = Column(Text)
    created_at = Column(TIMESTAMP(timezone=True), nullable=False, default=utcnow, server_default=func.now())

Index("idx_properties_status_date", Property.auction_status, Property.auction_date)
Index("idx_property_interests_property", PropertyInterest.property_id)
Index("idx_user_activity_user_created", UserActivity.user_id, UserActivity.created_at)
Index("idx_user_activity_created", UserActivity.created_at)
