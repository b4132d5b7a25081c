# app/schemas.py
from pydantic import BaseModel, Field, EmailStr, field_validator
from typing import Optional, List, Any, Dict
from datetime import datetime, timezone
from .models import AuctionStatus, InterestType, EnquiryStatus


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


# auth / users

class UserRegister(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: str = Field(..., min_length=1)
    phone: Optional[str] = None

class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

class UserOut(BaseModel):
    id: int
    email: str
    full_name: str
    phone: Optional[str] = None
    role: str
    is_active: bool
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True

class TokenOut(BaseModel):
    message: str
    token: str
    user: UserOut

class ProfileUpdate(BaseModel):
    full_name: str = Field(..., min_length=1)
    phone: Optional[str] = None

class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(..., min_length=6)

class PasswordReset(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str


# properties

def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    # naive auction dates are taken to be UTC
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)

class PropertyBase(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    property_type: Optional[str] = None
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = "India"
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    area_sqft: Optional[float] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    floors: Optional[int] = None
    reserve_price: float = Field(..., ge=0)
    auction_date: datetime

    @field_validator("auction_date")
    @classmethod
    def auction_date_utc(cls, value):
        return _as_utc(value)

class PropertyCreate(PropertyBase):
    is_featured: bool = False

class PropertyUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    property_type: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    country: Optional[str] = None
    reserve_price: Optional[float] = Field(None, ge=0)
    auction_date: Optional[datetime] = None
    auction_status: Optional[AuctionStatus] = None
    is_featured: Optional[bool] = None
    is_active: Optional[bool] = None

    @field_validator("auction_date")
    @classmethod
    def auction_date_utc(cls, value):
        return _as_utc(value)

class PropertyOut(PropertyBase):
    id: int
    auction_status: str
    is_featured: bool
    is_active: bool
    views_count: int
    shares_count: int
    enquiries_count: int
    created_by: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    class Config:
        from_attributes = True

class PropertyList(BaseModel):
    properties: List[PropertyOut]
    pagination: Pagination


# enquiries

class EnquiryCreate(BaseModel):
    property_id: int
    name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    message: Optional[str] = None
    enquiry_type: str = "general"

class EnquiryOut(BaseModel):
    id: int
    property_id: int
    user_id: Optional[int] = None
    name: str
    email: str
    phone: str
    message: Optional[str] = None
    enquiry_type: str
    status: str
    created_at: Optional[datetime] = None
    property_title: Optional[str] = None
    property_address: Optional[str] = None
    class Config:
        from_attributes = True

class EnquiryList(BaseModel):
    enquiries: List[EnquiryOut]
    pagination: Pagination

class EnquiryStatusUpdate(BaseModel):
    status: EnquiryStatus


# interests

class InterestCreate(BaseModel):
    property_id: int
    interest_type: InterestType


# activity

class ActivityCreate(BaseModel):
    action: str = Field(..., min_length=1, max_length=100)
    action_category: Optional[str] = Field(None, max_length=50)
    data: Optional[Dict[str, Any]] = None
    class Config:
        str_strip_whitespace = True

class ActivityOut(BaseModel):
    id: int
    user_id: Optional[int] = None
    action: str
    action_category: Optional[str] = None
    data: Optional[Any] = None
    created_at: Optional[datetime] = None
    class Config:
        from_attributes = True

class ActionStat(BaseModel):
    action: str
    count: int
    last_activity: Optional[datetime] = None

class CategoryStat(BaseModel):
    action_category: Optional[str] = None
    count: int
    unique_users: int

class CleanupStats(BaseModel):
    total_records: int
    affected_users: int
    oldest_record: Optional[datetime] = None
    newest_record: Optional[datetime] = None
