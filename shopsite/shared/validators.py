"""Shared validation utilities"""

import re
from typing import Optional

# Loose "something@something.tld" shape checked before emailing a customer
DELIVERABLE_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_deliverable_email(email: Optional[str]) -> bool:
    """Whether an address is worth handing to the mail provider"""
    if not email:
        return False
    return bool(DELIVERABLE_EMAIL_PATTERN.match(email.strip()))


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a free-form phone number.

    Keeps a leading "+" and the digits; accepts 7 to 15 digits (E.164 upper bound).

    Raises:
        ValueError: If the number has too few or too many digits
    """
    if not phone:
        return None

    phone = phone.strip()
    digit_count = sum(ch.isdigit() for ch in phone)
    if digit_count < 7 or digit_count > 15:
        raise ValueError("Phone number must contain between 7 and 15 digits")

    digits = "".join(ch for ch in phone if ch.isdigit())
    return f"+{digits}" if phone.startswith("+") else digits
