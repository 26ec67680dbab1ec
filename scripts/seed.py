import asyncio
import logging
import os
import random
import sys
import uuid
from decimal import Decimal

from faker import Faker

# Make sure paths are correct for script execution
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv  # noqa: E402
load_dotenv()

from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

from seva_manager import models, schemas, services  # noqa: E402
from seva_manager.db.session import AsyncSessionLocal  # noqa: E402
from seva_manager.models.enums import PaymentMode, ProfileRole  # noqa: E402

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

faker = Faker()

SEVAS = [
    ("Abhishekam", "Morning abhishekam for the presiding deity.", 20, [501, 1001]),
    ("Annadanam", "Sponsor a meal for devotees.", 50, [251, 1116, 2500]),
    ("Deepotsavam", "Evening lamp festival.", 10, [1001]),
]


async def clear_all_data(db: AsyncSession):
    """Clears every table, children first."""
    logger.info("--- Clearing All Existing Data ---")
    for model in (models.PaymentHistory, models.Referral, models.Donor, models.Seva, models.Profile):
        await db.execute(model.__table__.delete())
    await db.commit()


async def seed_data():
    async with AsyncSessionLocal() as db:
        await clear_all_data(db)

        admin = models.Profile(
            id=uuid.uuid4(), full_name="Temple Admin", email="admin@example.org",
            role=ProfileRole.ADMIN, referral_code="ADMIN001",
        )
        db.add(admin)
        await db.commit()

        users = []
        for _ in range(4):
            referrer = random.choice(users) if users else None
            profile, _created = await services.profile_service.ensure_profile(
                db,
                user_id=uuid.uuid4(),
                email=faker.unique.email(),
                full_name=faker.name(),
                referral_code=referrer.referral_code if referrer else None,
            )
            users.append(profile)

        sevas = []
        for name, description, slots, options in SEVAS:
            seva = await services.seva_service.create_seva(
                db,
                seva_in=schemas.SevaCreate(
                    name=name, description=description, total_slots=slots,
                    amount_options=[Decimal(o) for o in options],
                ),
                current_profile=admin,
            )
            sevas.append(seva)

        for seva, (_, _, _, options) in zip(sevas, SEVAS):
            for _ in range(3):
                owner = random.choice(users)
                total = Decimal(random.choice(options))
                donor = await services.donor_service.create_or_update_donor(
                    db,
                    donor_in=schemas.DonorCreate(
                        donor_name=faker.name(),
                        contact_phone=faker.msisdn()[:10],
                        total_amount=total,
                    ),
                    current_profile=owner,
                    seva_id=seva.id,
                )
                paid = random.choice([Decimal("0"), (total / 2).quantize(Decimal("1")), total])
                if paid > 0:
                    await services.payment_service.record_payment(
                        db,
                        donor_id=donor.id,
                        payment_in=schemas.PaymentCreate(
                            amount=paid,
                            payment_mode=random.choice(list(PaymentMode)),
                            payment_date=faker.date_this_month(),
                        ),
                        current_profile=owner,
                    )

    logger.info("--- Seeding Completed ---")
    logger.info("Admin: admin@example.org (issue a token with sub set to its profile id)")
    for profile in users:
        logger.info(f"User: {profile.email} id={profile.id} referral_code={profile.referral_code}")


async def main():
    logger.info("Starting database seed process...")
    await seed_data()
    logger.info("Database seed process finished.")


if __name__ == "__main__":
    # Run `alembic upgrade head` first.
    asyncio.run(main())
