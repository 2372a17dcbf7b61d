# Copyright (C) 2026 The Idstore Contributors
#
# This file is part of Idstore.
#
# Idstore is free software: you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation, either version 3 of the License, or
# (at your option) any later version.
#
# Idstore is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
# GNU General Public License for more details.
#
# You should have received a copy of the GNU General Public License
# along with Idstore.  If not, see <http://www.gnu.org/licenses/>.
"""`AuthRequest`, `AuthAnswer` and `AuthProvider`: The authentication tools for the user system.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from ..errors import AuthenticationError, NotFoundError, ValidationError
from .storage import UserRecordStorage


@dataclass
class AuthRequest(object):
    """The request for authentication.

    Attributes:
        email: `Optional[str]`.
        password: `Optional[str]`. In plaintext.

    Typical usage:
    ````python
    AuthRequest(
        email = "...",
        password = "...",
    )
    ````
    """

    email: Optional[str] = None
    password: Optional[str] = None

    def __repr__(self) -> str:
        return "AuthRequest(email={!r})".format(self.email)


@dataclass
class AuthAnswer(object):
    """The answer for authentication.

    Attributes:
        handled: `bool`. If the request can be handled, `False` when email or password is missing.
        success: `bool`. The result of the authentication.
        user_found: `bool`. If there is a user with the email.
    """

    handled: bool
    success: bool
    user_found: bool


class AuthProvider(object):
    """Provide authentication by email and password."""

    __logger = logging.getLogger("idstore.usrsys.auth.AuthProvider")

    def __init__(self, user_record_storage: UserRecordStorage) -> None:
        self.user_record_storage = user_record_storage
        super().__init__()

    async def auth(self, request: AuthRequest) -> AuthAnswer:
        """Process an authentication request."""
        if not (
            isinstance(request.email, str)
            and request.email
            and isinstance(request.password, str)
            and request.password
        ):
            return AuthAnswer(handled=False, success=False, user_found=False)
        checking = await self.user_record_storage.check_user_password(
            request.email, request.password
        )
        if checking is None:
            self.__logger.info("login for unknown email %r", request.email)
            return AuthAnswer(handled=True, success=False, user_found=False)
        if checking:
            self.__logger.info("login success for %r", request.email)
        else:
            self.__logger.info("login with invalid password for %r", request.email)
        return AuthAnswer(handled=True, success=checking, user_found=True)

    async def authenticate(self, request: AuthRequest) -> None:
        """Like `auth`, but raise on failure.

        - `ValidationError` if email or password is missing.
        - `NotFoundError` if there is no user with the email.
        - `AuthenticationError` if the password does not match.
        """
        answer = await self.auth(request)
        if not answer.handled:
            raise ValidationError(["email and password are required"])
        if not answer.user_found:
            raise NotFoundError("Email not found")
        if not answer.success:
            raise AuthenticationError("Invalid Password")
