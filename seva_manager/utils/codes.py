import secrets
import string
from datetime import date
from typing import Optional

CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_referral_code(length: int = 8) -> str:
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


def generate_enrollment_number(today: Optional[date] = None) -> str:
    """Human readable donor token, e.g. ``ENR-20261019-7KQ2ZD``."""
    today = today or date.today()
    suffix = "".join(secrets.choice(CODE_ALPHABET) for _ in range(6))
    return f"ENR-{today:%Y%m%d}-{suffix}"


def referral_link(frontend_url: str, referral_code: str) -> str:
    return f"{frontend_url.rstrip('/')}/register?ref={referral_code}"
