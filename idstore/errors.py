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
"""Exceptions raised by the user system and the storage layer.

All of them inherit from `IdstoreError`. The first four are expected outcomes and carry a message which is safe to show to the client;
`InternalError` wraps persistence or hashing failures and its message should only go to the log.
"""
from typing import Iterable, List


class IdstoreError(Exception):
    """Base exception for all errors of Idstore."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(IdstoreError):
    """Submitted fields do not satisfy the input rules.

    Attributes:
        messages: `List[str]`. Every violated rule, in checking order.
    """

    def __init__(self, messages: Iterable[str]) -> None:
        self.messages: List[str] = list(messages)
        super().__init__("; ".join(self.messages))


class ConflictError(IdstoreError):
    """The record already exists, or concurrent writers kept changing it."""

    pass


class NotFoundError(IdstoreError):
    """No record for the given email."""

    pass


class AuthenticationError(IdstoreError):
    """The password does not match the stored credential."""

    pass


class InternalError(IdstoreError):
    """Persistence or hashing failure."""

    pass
