import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from seva_manager.models.enums import PaymentMode
from .donor import Donor


class PaymentCreate(BaseModel):
    # Positivity is checked by the payment service so it surfaces as a validation_error
    amount: Decimal
    payment_mode: PaymentMode
    payment_date: date
    notes: Optional[str] = Field(None, max_length=1000)


class PaymentHistory(BaseModel):
    id: uuid.UUID
    donor_id: uuid.UUID
    amount: Decimal
    payment_mode: Optional[PaymentMode] = None
    payment_date: date
    notes: Optional[str] = None
    created_by: uuid.UUID
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class PaymentReceipt(BaseModel):
    payment: PaymentHistory
    donor: Donor


class PaymentHistoryList(BaseModel):
    donor: Donor
    remaining_amount: Decimal
    payments: List[PaymentHistory]
