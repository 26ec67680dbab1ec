import re
import uuid

import pytest
from sqlalchemy import func, select

from seva_manager import models
from seva_manager.core.capabilities import Capability
from seva_manager.core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from seva_manager.models.enums import ProfileRole
from seva_manager.services import profile_service


async def _count(db, model):
    return await db.scalar(select(func.count(model.id)))


async def test_ensure_profile_is_idempotent(db):
    user_id = uuid.uuid4()
    first, created = await profile_service.ensure_profile(db, user_id=user_id, email="asha@example.org")
    assert created is True
    assert first.role == ProfileRole.USER
    assert first.full_name == "asha"
    assert re.fullmatch(r"[A-Z0-9]{8}", first.referral_code)

    second, created = await profile_service.ensure_profile(
        db, user_id=user_id, email="changed@example.org", full_name="Someone Else"
    )
    assert created is False
    assert second.id == first.id
    assert second.role == first.role
    assert second.email == "asha@example.org"
    assert await _count(db, models.Profile) == 1


async def test_referral_code_links_new_profile_once(db, make_profile, emitted):
    referrer = await make_profile(referral_code="REFER123")

    profile, created = await profile_service.ensure_profile(
        db, user_id=uuid.uuid4(), email="new@example.org", full_name="New Person", referral_code=" refer123 "
    )
    assert created
    assert profile.referred_by == referrer.id
    edges = (await db.execute(select(models.Referral))).scalars().all()
    assert [(e.referrer_id, e.referred_user_id) for e in edges] == [(referrer.id, profile.id)]
    assert emitted[-1][1]["table"] == "profiles"

    # Calling again does not create a second edge
    await profile_service.ensure_profile(db, user_id=profile.id, email="new@example.org", referral_code="REFER123")
    assert await _count(db, models.Referral) == 1


async def test_unknown_referral_code_is_ignored(db):
    profile, created = await profile_service.ensure_profile(
        db, user_id=uuid.uuid4(), email="solo@example.org", referral_code="NOPE0000"
    )
    assert created
    assert profile.referred_by is None
    assert await _count(db, models.Referral) == 0


async def test_new_profiles_cannot_be_admins(db):
    with pytest.raises(AuthorizationError):
        await profile_service.ensure_profile(db, user_id=uuid.uuid4(), email="sneaky@example.org", role=ProfileRole.ADMIN)
    assert await _count(db, models.Profile) == 0


async def test_duplicate_email_for_another_user_conflicts(db, make_profile):
    await make_profile(email="taken@example.org")
    with pytest.raises(ConflictError):
        await profile_service.ensure_profile(db, user_id=uuid.uuid4(), email="taken@example.org")


async def test_set_admin_role(db, admin, make_profile):
    target = await make_profile(email="volunteer@example.org")

    promoted = await profile_service.set_admin_role(db, email=" Volunteer@Example.org ", current_profile=admin)
    assert promoted.id == target.id
    assert promoted.role == ProfileRole.ADMIN

    again = await profile_service.set_admin_role(db, email="volunteer@example.org", current_profile=admin)
    assert again.role == ProfileRole.ADMIN


async def test_set_admin_role_errors(db, admin):
    with pytest.raises(ValidationError):
        await profile_service.set_admin_role(db, email=None, current_profile=admin)
    with pytest.raises(ValidationError):
        await profile_service.set_admin_role(db, email="  ", current_profile=admin)
    with pytest.raises(NotFoundError):
        await profile_service.set_admin_role(db, email="ghost@example.org", current_profile=admin)


async def test_describe_profile(admin):
    described = profile_service.describe_profile(admin)
    assert described.landing_page == "/admin/dashboard"
    assert Capability.MANAGE_ROLES in described.capabilities
    assert Capability.MANAGE_OWN_DONORS not in described.capabilities


async def test_list_referrals(db, make_profile):
    referrer = await make_profile(referral_code="SHARE001")
    for n in range(2):
        await profile_service.ensure_profile(
            db, user_id=uuid.uuid4(), email=f"friend{n}@example.org", referral_code="SHARE001"
        )

    referrals = await profile_service.list_referrals(db, current_profile=referrer)
    assert referrals.total == 2
    assert referrals.referral_code == "SHARE001"
    assert referrals.referral_link.endswith("/register?ref=SHARE001")
    assert {p.email for p in referrals.referrals} == {"friend0@example.org", "friend1@example.org"}


async def test_referral_code_collision_is_a_neutral_conflict(db, make_profile, monkeypatch):
    await make_profile(referral_code="CLASH001")

    async def colliding_code(db):
        return "CLASH001"

    monkeypatch.setattr(profile_service, "_new_referral_code", colliding_code)
    with pytest.raises(ConflictError) as excinfo:
        await profile_service.ensure_profile(db, user_id=uuid.uuid4(), email="fresh@example.org")

    assert "email" not in excinfo.value.message
    assert await _count(db, models.Profile) == 1
