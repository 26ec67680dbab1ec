"""
Grants the admin role to an existing profile.

The HTTP endpoint for this requires an admin caller, so the very first admin
has to be promoted from the command line:

    python scripts/promote_admin.py someone@example.org
"""
import argparse
import asyncio
import logging
import os
import sys

# Adjust path for script execution
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv  # noqa: E402
load_dotenv()

from seva_manager import crud  # noqa: E402
from seva_manager.db.session import AsyncSessionLocal  # noqa: E402
from seva_manager.models.enums import ProfileRole  # noqa: E402

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


async def promote(email: str) -> bool:
    async with AsyncSessionLocal() as db:
        profile = await crud.crud_profile.profile.get_by_email(db, email=email)
        if not profile:
            logger.error(f"No profile found for {email}. The user has to sign in once first.")
            return False
        if profile.role == ProfileRole.ADMIN:
            logger.info(f"{profile.email} is already an admin.")
            return True
        await crud.crud_profile.profile.update(db, db_obj=profile, obj_in={"role": ProfileRole.ADMIN})
        await crud.commit(db, action="promote the profile")
        logger.info(f"{profile.email} ({profile.id}) is now an admin.")
        return True


def main():
    parser = argparse.ArgumentParser(description="Grant the admin role to an existing profile.")
    parser.add_argument("email", help="Email address of the profile to promote")
    args = parser.parse_args()
    ok = asyncio.run(promote(args.email))
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
