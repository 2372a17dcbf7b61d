"""This module contains definitions about users and the input shape of each user operation.
"""
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, Optional

from ..errors import ValidationError
from .validation import (
    accept_non_blank,
    accept_password,
    validate,
)


@dataclass
class UserProfile(object):
    """The non-sensitive part of `UserRecord`, which is safe to show.

    Attributes:
        email: `str`. Unique identity of the user, kept as submitted.
        first_name: `str`.
        last_name: `str`.
        phone: `str`. Digits and `+`.
        address: `str`.
    """

    email: str
    first_name: str
    last_name: str
    phone: str
    address: str

    def to_json(self) -> Dict[str, Any]:
        return {
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "address": self.address,
        }


@dataclass
class UserRecord(object):
    """Infomation about user, as it is stored.

    Attributes:
        email: `str`. The key of the record. It can't be changed after creation.
        first_name: `str`.
        last_name: `str`.
        phone: `str`.
        address: `str`.
        password_hash: `str`. Hashed password. See `idstore.utils.asec.PasswordHasher`.

    ..danger:: Don't send `UserRecord` to the outside, use `UserRecord.profile` instead.
    """

    email: str
    first_name: str
    last_name: str
    phone: str
    address: str
    password_hash: str

    def profile(self) -> UserProfile:
        return UserProfile(
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            phone=self.phone,
            address=self.address,
        )

    def __repr__(self) -> str:
        return "UserRecord(email={!r})".format(self.email)


def check_fields(body: Any, allowed: Iterable[str]) -> Dict[str, Any]:
    """Check `body` is a JSON object and only has fields in `allowed`.
    Raise `ValidationError` otherwise.
    """
    if not isinstance(body, dict):
        raise ValidationError(["request body must be a JSON object"])
    allowed = set(allowed)
    unknown = [k for k in body if k not in allowed]
    if unknown:
        raise ValidationError(["unknown field: {}".format(k) for k in unknown])
    return body


@dataclass
class RegistrationForm(object):
    """Fields for registering a new user. All of them are required."""

    first_name: str
    last_name: str
    email: str
    password: str
    phone: str
    address: str

    FIELDS = ("firstName", "lastName", "email", "password", "phone", "address")

    @classmethod
    def from_json(cls, body: Any) -> "RegistrationForm":
        """Build the form from a decoded JSON body.
        Raise `ValidationError` with all the violated rules.
        """
        body = check_fields(body, cls.FIELDS)
        errors = validate(body)
        if errors:
            raise ValidationError(errors)
        return cls(
            first_name=body["firstName"],
            last_name=body["lastName"],
            email=body["email"],
            password=body["password"],
            phone=body["phone"],
            address=body["address"],
        )


@dataclass
class LoginForm(object):
    email: Optional[str] = None
    password: Optional[str] = None

    FIELDS = ("email", "password")

    @classmethod
    def from_json(cls, body: Any) -> "LoginForm":
        body = check_fields(body, cls.FIELDS)
        email = body.get("email")
        password = body.get("password")
        return cls(
            email=email if isinstance(email, str) and email else None,
            password=password if isinstance(password, str) and password else None,
        )


@dataclass
class UserUpdate(object):
    """A partial update. `None` means the field is left untouched.

    ..note:: `email` is not here, it can't be changed.
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    password: Optional[str] = None

    FIELDS = ("firstName", "lastName", "phone", "address", "password")

    @classmethod
    def from_json(cls, body: Any) -> "UserUpdate":
        """Pick the fields which will be applied.

        Unusable values (wrong type, empty after trimming, a too short password) are dropped, not rejected.
        Unknown fields are rejected by `ValidationError`.
        """
        body = check_fields(body, cls.FIELDS)
        return cls(
            first_name=accept_non_blank(body.get("firstName")),
            last_name=accept_non_blank(body.get("lastName")),
            phone=accept_non_blank(body.get("phone")),
            address=accept_non_blank(body.get("address")),
            password=accept_password(body.get("password")),
        )

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))
