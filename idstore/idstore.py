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

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Tuple

import httpx
from unqlite import UnQLite

from .apigate import HTTPAPIGateway
from .storagehub import StorageHub
from .usrsys.auth import AuthProvider
from .utils.asec import HASHING_COST_INTERACTIVE, HashingCost, PasswordHasher


class Idstore(object):
    """The entry of Idstore. This class stores configuration and tools to keep other components running.

    Idstore splits its feature units as reusable components:

    - User System (`idstore.usrsys`)
    - Storage layer (`idstore.utils.storage`, `idstore.storagehub`)
    - HTTP API Gateway (`idstore.apigate`)

    The database is opened here and closed by `Idstore.stop`, it lives as long as this object.

    Typical usage:
    ````python
    async with Idstore(database_path="users.db", http_api_gate_binds=[(None, 8080)]) as idstore:
        ...
    ````
    """

    __logger = logging.getLogger("idstore.idstore.Idstore")

    def __init__(
        self,
        *,
        database_path: str,
        http_api_gate_binds: Optional[List[Tuple[Optional[str], int]]] = None,
        password_hashing_cost: HashingCost = HASHING_COST_INTERACTIVE,
        cors_origin: str = "*",
        debug: bool = False,
    ) -> None:
        self.debug = debug
        self.database_path = database_path
        self.database = UnQLite(database_path)
        self.hashing_executor = ThreadPoolExecutor(
            thread_name_prefix="idstore.idstore.hashing_executor"
        )
        self.password_hasher = PasswordHasher(
            password_hashing_cost, self.hashing_executor
        )
        self.storage_hub = StorageHub(self.database, self.password_hasher)
        self.auth_provider = AuthProvider(self.storage_hub.user_records)
        self.http_api_gate = HTTPAPIGateway(
            self.storage_hub,
            self.auth_provider,
            http_binds=http_api_gate_binds if http_api_gate_binds else [],
            cors_origin=cors_origin,
            debug=debug,
        )
        super().__init__()

    async def start(self) -> None:
        await self.http_api_gate.start()
        self.__logger.info("started with database %r", self.database_path)

    async def stop(self) -> None:
        """Stop the HTTP API gateway, wait for pending writes, then close the database."""
        await self.http_api_gate.stop()
        await self.storage_hub.close()
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self.hashing_executor.shutdown, True)
        await loop.run_in_executor(None, self.database.close)
        self.__logger.info("stopped")

    async def __aenter__(self) -> "Idstore":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.stop()

    def http_api_gate_client(self) -> httpx.AsyncClient:
        return self.http_api_gate.http_client()
