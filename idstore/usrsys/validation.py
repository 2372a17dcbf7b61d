"""Field rules for user input.

`validate` checks a full registration body. Every rule is checked, the result lists all the violations.

Updates are checked per field instead, by `accept_non_blank` and `accept_password`: a field which does not pass is just not applied.
"""
import re
from typing import Any, List, Mapping, Optional

EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
PHONE_PATTERN = re.compile(r"[+0-9]+")

PASSWORD_MIN_LENGTH = 6
PHONE_MIN_LENGTH = 7


def _is_non_blank(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate(fields: Mapping[str, Any]) -> List[str]:
    """Check the fields of a registration. Return the error messages, an empty list means valid."""
    errors: List[str] = []

    if not _is_non_blank(fields.get("firstName")):
        errors.append("firstName must not be empty")

    if not _is_non_blank(fields.get("lastName")):
        errors.append("lastName must not be empty")

    email = fields.get("email")
    if not isinstance(email, str) or not email:
        errors.append("email is empty or not a string")
    elif not EMAIL_PATTERN.fullmatch(email):
        errors.append("email is malformed")

    password = fields.get("password")
    if not isinstance(password, str) or len(password) < PASSWORD_MIN_LENGTH:
        errors.append(
            "password must be at least {} characters".format(PASSWORD_MIN_LENGTH)
        )

    phone = fields.get("phone")
    if not isinstance(phone, str) or len(phone) < PHONE_MIN_LENGTH:
        errors.append("phone is missing or too short")
    elif not PHONE_PATTERN.fullmatch(phone):
        errors.append("phone must only contain digits and '+'")

    if not _is_non_blank(fields.get("address")):
        errors.append("address must not be empty")

    return errors


def accept_non_blank(value: Any) -> Optional[str]:
    """Return `value` if it is a string with something other than whitespace, otherwise `None`."""
    if _is_non_blank(value):
        return value
    return None


def accept_password(value: Any) -> Optional[str]:
    """Return `value` if it is a string long enough to be a password, otherwise `None`."""
    if isinstance(value, str) and len(value) >= PASSWORD_MIN_LENGTH:
        return value
    return None
