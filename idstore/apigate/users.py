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
"""Handlers for registering, logging in and managing users.

- `POST /register`: `RegisterHandler`
- `POST /login`: `LoginHandler`
- `GET /users`: `UsersHandler`
- `PUT /users/<email>`, `DELETE /users/<email>`: `UserHandler`
"""
from ..errors import (
    AuthenticationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ..usrsys.auth import AuthRequest
from ..usrsys.usr import LoginForm, RegistrationForm, UserUpdate
from .base import BaseRequestHandler


class RegisterHandler(BaseRequestHandler):
    """Register a new user. All of firstName, lastName, email, password, phone and address are required."""

    async def post(self) -> None:
        try:
            form = RegistrationForm.from_json(self.json_body())
        except ValidationError as e:
            self.write_failure(400, "Validation error", e.messages)
            return
        try:
            await self.storage_hub.user_records.create_new_user(form)
        except ConflictError as e:
            self.write_failure(400, e.message)
            return
        self.write_message("Registration Success")


class LoginHandler(BaseRequestHandler):
    """Check email and password."""

    async def post(self) -> None:
        try:
            form = LoginForm.from_json(self.json_body())
        except ValidationError as e:
            self.write_failure(400, "Validation error", e.messages)
            return
        try:
            await self.auth_provider.authenticate(
                AuthRequest(email=form.email, password=form.password)
            )
        except ValidationError:
            self.write_failure(400, "Email or password is missing")
            return
        except NotFoundError as e:
            self.write_failure(404, e.message)
            return
        except AuthenticationError as e:
            self.write_failure(401, e.message)
            return
        self.write_message("Login Success")


class UsersHandler(BaseRequestHandler):
    """List all users. Password hashes are never included."""

    async def get(self) -> None:
        profiles = [
            profile.to_json()
            async for profile in self.storage_hub.user_records.list_all()
        ]
        self.write_json(profiles)


class UserHandler(BaseRequestHandler):
    """Update or delete the user of the email in path."""

    async def put(self, email: str) -> None:
        try:
            update = UserUpdate.from_json(self.json_body())
        except ValidationError as e:
            self.write_failure(400, "Validation error", e.messages)
            return
        try:
            await self.storage_hub.user_records.update(email, update)
        except NotFoundError as e:
            self.write_failure(404, e.message)
            return
        except ConflictError as e:
            self.write_failure(409, e.message)
            return
        self.write_message("User updated successfully")

    async def delete(self, email: str) -> None:
        try:
            await self.storage_hub.user_records.remove(email)
        except NotFoundError as e:
            self.write_failure(404, e.message)
            return
        self.write_message("User deleted successfully")
