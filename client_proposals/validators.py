import re
import uuid

from django.core.exceptions import ValidationError

UUID_RE = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)

NIF_WEIGHTS = (9, 8, 7, 6, 5, 4, 3, 2)


def digits_only(value) -> str:
    if value is None:
        return ""
    return "".join(ch for ch in str(value) if ch.isdigit())


def is_valid_nif(value) -> bool:
    """
    Portuguese taxpayer number check: 9 digits, last one a mod-11 check digit.
    """
    digits = digits_only(value)
    if len(digits) != 9:
        return False
    total = sum(int(d) * w for d, w in zip(digits[:8], NIF_WEIGHTS))
    remainder = total % 11
    check = 0 if remainder < 2 else 11 - remainder
    return check == int(digits[8])


def validate_nif(value):
    if not value:
        return
    if not is_valid_nif(value):
        raise ValidationError("Invalid NIF.", code="invalid_nif")


def is_valid_uuid(value) -> bool:
    if isinstance(value, uuid.UUID):
        return True
    return bool(value) and bool(UUID_RE.match(str(value)))


def sanitize_phone(value, max_digits=15) -> str:
    """Keep digits and a single leading '+'; an international '00' prefix becomes '+'."""
    if not value:
        return ""
    value = str(value).strip()
    if value.startswith("00"):
        value = "+" + value[2:]
    prefix = "+" if value.startswith("+") else ""
    return prefix + digits_only(value)[:max_digits]
