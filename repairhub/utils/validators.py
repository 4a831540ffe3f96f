import re

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat

DEFAULT_REGION = "AE"

LICENSE_PLATE_RE = re.compile(r"^[A-Z0-9-]{2,11}$")
LOCAL_PHONE_RE   = re.compile(r"^[0-9]{10}$")


def normalize_phone_number(value: str) -> str:
    """
    Validate a phone number and return it in E.164 (`+<country><number>`).
    Numbers without an international prefix are read as UAE numbers.
    Raises ValueError when the number cannot exist.
    """
    if value is None or not str(value).strip():
        raise ValueError("Phone number is required")
    raw = str(value).strip()
    if raw.startswith("00"):
        raw = "+" + raw[2:]

    try:
        parsed = phonenumbers.parse(raw, DEFAULT_REGION)
    except NumberParseException:
        raise ValueError("Phone must be a valid international number.")
    if not phonenumbers.is_valid_number(parsed):
        raise ValueError("Phone must be a valid international number.")
    return phonenumbers.format_number(parsed, PhoneNumberFormat.E164)


def validate_license_plate(value: str) -> str:
    plate = value.strip().upper()
    if not LICENSE_PLATE_RE.match(plate):
        raise ValueError("License plate must be 2-11 characters (A-Z, 0-9, hyphens)")
    return plate


def validate_local_phone(value: str) -> str:
    if not LOCAL_PHONE_RE.match(value):
        raise ValueError(f"{value} is not a valid phone number!")
    return value


def not_blank(value: str, label: str = "Field") -> str:
    if not value or not value.strip():
        raise ValueError(f"{label} cannot be empty")
    return value.strip()
