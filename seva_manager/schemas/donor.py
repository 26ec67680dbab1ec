import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from seva_manager.models.enums import PaymentMode, PaymentStatus


class DonorBase(BaseModel):
    donor_name: str = Field(..., min_length=1, max_length=200)
    contact_phone: Optional[str] = Field(None, max_length=32)
    contact_email: Optional[EmailStr] = None
    payment_mode: Optional[PaymentMode] = None
    total_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")
    payment_date: Optional[date] = None
    is_active: bool = True

    @field_validator("contact_email", "contact_phone", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class DonorCreate(DonorBase):
    pass


class DonorUpdate(DonorBase):
    """Full-record replacement used by the enrollment form."""
    pass


class Donor(BaseModel):
    id: uuid.UUID
    enrollment_number: str
    seva_id: uuid.UUID
    added_by: uuid.UUID
    donor_name: str
    contact_phone: Optional[str] = None
    contact_email: Optional[str] = None
    payment_mode: Optional[PaymentMode] = None
    total_amount: Decimal
    paid_amount: Decimal
    payment_date: Optional[date] = None
    payment_status: PaymentStatus
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class DonorWithOwner(Donor):
    added_by_name: Optional[str] = None
    added_by_email: Optional[str] = None
