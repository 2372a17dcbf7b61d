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
import pytest
import pytest_asyncio
from unqlite import UnQLite

from idstore import Idstore
from idstore.usrsys.storage import UserRecordStorage
from idstore.usrsys.usr import RegistrationForm
from idstore.utils.asec import HASHING_COST_MIN, PasswordHasher
from idstore.utils.storage import UnQLiteStorage


def registration_form(email: str = "a@b.com", password: str = "secret1"):
    return RegistrationForm(
        first_name="A",
        last_name="B",
        email=email,
        password=password,
        phone="+998900000000",
        address="X",
    )


@pytest.fixture
def hasher():
    return PasswordHasher(HASHING_COST_MIN)


@pytest_asyncio.fixture
async def kv_storage():
    database = UnQLite(":mem:")
    storage = UnQLiteStorage(database)
    try:
        yield storage
    finally:
        await storage.close()
        database.close()


@pytest.fixture
def user_records(kv_storage, hasher):
    return UserRecordStorage(kv_storage, hasher)


@pytest_asyncio.fixture
async def idstore():
    instance = Idstore(
        database_path=":mem:",
        password_hashing_cost=HASHING_COST_MIN,
        debug=True,
    )
    try:
        await instance.start()
        yield instance
    finally:
        await instance.stop()


@pytest.fixture
def make_form():
    """Return a factory of valid `RegistrationForm`s."""
    return registration_form
