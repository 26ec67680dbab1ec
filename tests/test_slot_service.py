import uuid

import pytest

from seva_manager.core.exceptions import ConflictError, NotFoundError
from seva_manager.models.enums import PaymentStatus
from seva_manager.services import slot_service


async def test_sync_writes_derived_count(db, user, make_seva, make_donor):
    seva = await make_seva(total_slots=5)
    await make_donor(seva, user, "100", "100", PaymentStatus.PAID)
    await make_donor(seva, user, "100", "40", PaymentStatus.PARTIAL)
    await make_donor(seva, user, "100", "0", PaymentStatus.PENDING)

    seva = await slot_service.lock_seva(db, seva_id=seva.id)
    assert await slot_service.sync_booked_slots(db, seva) is True
    await db.commit()
    assert seva.booked_slots == 2

    # Nothing changed since the last sync
    assert await slot_service.sync_booked_slots(db, seva) is False


async def test_sync_rejects_overbooking(db, user, make_seva, make_donor):
    seva = await make_seva(total_slots=1)
    await make_donor(seva, user, "100", "100", PaymentStatus.PAID)
    await make_donor(seva, user, "100", "100", PaymentStatus.PAID)

    with pytest.raises(ConflictError):
        await slot_service.sync_booked_slots(db, seva)

    await db.refresh(seva)
    assert seva.booked_slots == 0


async def test_lock_unknown_seva(db):
    with pytest.raises(NotFoundError):
        await slot_service.lock_seva(db, seva_id=uuid.uuid4())


async def test_sync_counts_with_recompute_booked_slots(db, user, make_seva, make_donor, monkeypatch):
    seva = await make_seva(total_slots=5)
    await make_donor(seva, user, "100", "100", PaymentStatus.PAID)
    await make_donor(seva, user, "100", "0", PaymentStatus.PENDING)

    seen = []
    counted = slot_service.recompute_booked_slots

    def spy(rows):
        rows = list(rows)
        seen.append(sorted(row.payment_status.value for row in rows))
        return counted(rows)

    monkeypatch.setattr(slot_service, "recompute_booked_slots", spy)
    seva = await slot_service.lock_seva(db, seva_id=seva.id)
    assert await slot_service.sync_booked_slots(db, seva) is True
    assert seen == [["paid", "pending"]]
    assert seva.booked_slots == 1
