"""
Admin reporting.

The ``summarize_*`` functions are pure: they take row snapshots and build the
report models, so they can be exercised without a database. The ``get_*``
coroutines only gather the snapshots.
"""
import logging
import uuid
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, Iterable, List

from sqlalchemy.ext.asyncio import AsyncSession

from seva_manager import crud, models, schemas
from seva_manager.models.enums import PaymentStatus, ProfileRole
from seva_manager.services.slot_service import is_slot_consuming

logger = logging.getLogger(__name__)

UNKNOWN_SEVA = "Unknown"
UNSPECIFIED_MODE = "Not Specified"


def _revenue(row: schemas.DonorLedgerRow) -> Decimal:
    # Pending donors hold no money yet
    if not is_slot_consuming(row.payment_status):
        return Decimal("0")
    return Decimal(row.paid_amount or 0)


def summarize_revenue(
    donors: Iterable[schemas.DonorLedgerRow], payments: Iterable[schemas.PaymentLedgerRow]
) -> schemas.RevenueReport:
    by_seva: Dict[str, List] = OrderedDict()
    by_mode: Dict[str, List] = OrderedDict()
    by_status: Dict[PaymentStatus, List] = OrderedDict((status, [Decimal("0"), 0]) for status in PaymentStatus)
    total_revenue = Decimal("0")
    total_donors = 0

    for row in donors:
        total_donors += 1
        status = PaymentStatus(row.payment_status)
        by_status[status][0] += Decimal(row.paid_amount or 0)
        by_status[status][1] += 1

        if not is_slot_consuming(status):
            continue
        revenue = _revenue(row)
        total_revenue += revenue

        seva_bucket = by_seva.setdefault(row.seva_name or UNKNOWN_SEVA, [Decimal("0"), 0])
        seva_bucket[0] += revenue
        seva_bucket[1] += 1

        mode = row.payment_mode.value if row.payment_mode else UNSPECIFIED_MODE
        mode_bucket = by_mode.setdefault(mode, [Decimal("0"), 0])
        mode_bucket[0] += revenue
        mode_bucket[1] += 1

    by_date: Dict = {}
    for payment in payments:
        by_date[payment.payment_date] = by_date.get(payment.payment_date, Decimal("0")) + Decimal(payment.amount)

    return schemas.RevenueReport(
        total_revenue=total_revenue,
        total_donors=total_donors,
        by_seva=sorted(
            (schemas.SevaRevenue(seva_name=name, amount=amount, count=count) for name, (amount, count) in by_seva.items()),
            key=lambda r: r.amount,
            reverse=True,
        ),
        by_payment_mode=[
            schemas.PaymentModeRevenue(mode=mode, amount=amount, count=count)
            for mode, (amount, count) in by_mode.items()
        ],
        by_status=[
            schemas.StatusSummary(status=status, amount=amount, count=count)
            for status, (amount, count) in by_status.items()
        ],
        by_date=[schemas.DailyRevenue(date=day, amount=by_date[day]) for day in sorted(by_date)],
    )


def summarize_users(
    profiles: Iterable[models.Profile], donors: Iterable[schemas.DonorLedgerRow]
) -> List[schemas.UserActivity]:
    """Per user: how many donors they enrolled and how much those donors have paid."""
    totals: Dict[uuid.UUID, List] = {}
    for row in donors:
        if row.added_by is None:
            continue
        bucket = totals.setdefault(row.added_by, [0, Decimal("0")])
        bucket[0] += 1
        bucket[1] += Decimal(row.paid_amount or 0)

    activity = []
    for profile in profiles:
        count, amount = totals.get(profile.id, (0, Decimal("0")))
        activity.append(
            schemas.UserActivity(
                profile=schemas.Profile.model_validate(profile),
                total_donors=count,
                total_amount=amount,
            )
        )
    return activity


def dashboard_stats(
    *, total_sevas: int, total_users: int, donors: Iterable[schemas.DonorLedgerRow]
) -> schemas.DashboardStats:
    rows = list(donors)
    return schemas.DashboardStats(
        total_sevas=total_sevas,
        total_users=total_users,
        total_donors=len(rows),
        booked_donors=sum(1 for row in rows if is_slot_consuming(row.payment_status)),
        total_revenue=sum((_revenue(row) for row in rows), Decimal("0")),
    )


async def _donor_rows(db: AsyncSession) -> List[schemas.DonorLedgerRow]:
    return [schemas.DonorLedgerRow(**dict(row)) for row in await crud.crud_donor.donor.ledger_rows(db)]


async def get_revenue_report(db: AsyncSession) -> schemas.RevenueReport:
    donors = await _donor_rows(db)
    payments = [
        schemas.PaymentLedgerRow(**dict(row)) for row in await crud.crud_payment.payment_history.ledger_rows(db)
    ]
    report = summarize_revenue(donors, payments)
    logger.debug(f"Revenue report over {report.total_donors} donors and {len(payments)} payments")
    return report


async def get_dashboard_stats(db: AsyncSession) -> schemas.DashboardStats:
    return dashboard_stats(
        total_sevas=await crud.crud_seva.seva.count(db),
        total_users=await crud.crud_profile.profile.count_by_role(db, role=ProfileRole.USER),
        donors=await _donor_rows(db),
    )


async def get_user_activity(db: AsyncSession) -> List[schemas.UserActivity]:
    profiles = await crud.crud_profile.profile.get_by_role(db, role=ProfileRole.USER)
    return summarize_users(profiles, await _donor_rows(db))
