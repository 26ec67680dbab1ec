import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, condecimal

PositiveAmount = condecimal(gt=0, max_digits=12, decimal_places=2)


class SevaBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    total_slots: int = Field(..., gt=0)
    amount_options: List[PositiveAmount] = Field(default_factory=list)
    is_active: bool = True


class SevaCreate(SevaBase):
    pass


class SevaUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    total_slots: Optional[int] = Field(None, gt=0)
    amount_options: Optional[List[PositiveAmount]] = None
    is_active: Optional[bool] = None


class Seva(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    total_slots: int
    booked_slots: int
    remaining_slots: int
    amount_options: List[Decimal] = Field(default_factory=list)
    is_active: bool
    created_by: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SevaWithStats(Seva):
    """A seva annotated with the caller's own enrollment counts."""
    user_booked_count: int = 0
    user_blocked_count: int = 0
