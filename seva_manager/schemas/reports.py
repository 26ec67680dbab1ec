import uuid
from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from seva_manager.models.enums import PaymentMode, PaymentStatus
from .profile import Profile


class DonorLedgerRow(BaseModel):
    """Snapshot of the donor columns the reports read."""
    seva_name: Optional[str] = None
    added_by: Optional[uuid.UUID] = None
    payment_mode: Optional[PaymentMode] = None
    payment_status: PaymentStatus
    total_amount: Decimal = Decimal("0")
    paid_amount: Decimal = Decimal("0")

    model_config = ConfigDict(from_attributes=True)


class PaymentLedgerRow(BaseModel):
    amount: Decimal
    payment_date: date

    model_config = ConfigDict(from_attributes=True)


class SevaRevenue(BaseModel):
    seva_name: str
    amount: Decimal
    count: int


class PaymentModeRevenue(BaseModel):
    mode: str
    amount: Decimal
    count: int


class StatusSummary(BaseModel):
    status: PaymentStatus
    amount: Decimal
    count: int


class DailyRevenue(BaseModel):
    date: date
    amount: Decimal


class RevenueReport(BaseModel):
    total_revenue: Decimal
    total_donors: int
    by_seva: List[SevaRevenue]
    by_payment_mode: List[PaymentModeRevenue]
    by_status: List[StatusSummary]
    by_date: List[DailyRevenue]


class DashboardStats(BaseModel):
    total_sevas: int
    total_users: int
    total_donors: int
    booked_donors: int
    total_revenue: Decimal


class UserActivity(BaseModel):
    profile: Profile
    total_donors: int
    total_amount: Decimal
