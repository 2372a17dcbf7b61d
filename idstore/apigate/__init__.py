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
"""API Gates for Idstore.

These gates could help applications accessing features of Idstore.
"""
import logging
from typing import List, Optional, Tuple

from httpx import AsyncClient
from tornado.httpserver import HTTPServer
from tornado.netutil import bind_sockets
from tornado.web import Application

from ..storagehub import StorageHub
from ..usrsys.auth import AuthProvider
from .docs import DocumentationHandler
from .users import LoginHandler, RegisterHandler, UserHandler, UsersHandler


class HTTPAPIGateway(object):
    """The HTTP API Gateway for Idstore.

    Current handlers:

    - `/`: `docs.DocumentationHandler`
    - `/register`: `users.RegisterHandler`
    - `/login`: `users.LoginHandler`
    - `/users`: `users.UsersHandler`
    - `/users/<email>`: `users.UserHandler`

    Related:

    - [Tornado documentation](https://www.tornadoweb.org)
    """

    __logger = logging.getLogger("idstore.apigate.HTTPAPIGateway")

    def __init__(
        self,
        storage_hub: StorageHub,
        auth_provider: AuthProvider,
        http_binds: List[Tuple[Optional[str], int]],
        cors_origin: str = "*",
        debug: bool = False,
    ) -> None:
        self._application = Application(
            [
                (r"/", DocumentationHandler),
                (r"/register", RegisterHandler),
                (r"/login", LoginHandler),
                (r"/users", UsersHandler),
                (r"/users/([^/]+)", UserHandler),
            ],
            storage_hub=storage_hub,
            auth_provider=auth_provider,
            cors_origin=cors_origin,
            debug=debug,
            autoreload=False,
        )
        self._http_server: Optional[HTTPServer] = None
        self._http_binds = http_binds
        super().__init__()

    @property
    def http_binds(self) -> List[Tuple[Optional[str], int]]:
        """The tcp binds for HTTP server.
        Each element in the list is a tuple of (binding address/hostname/None, port).

        For example:

        - `("127.0.0.1", 1989)` binds the port 1989 on address 127.0.0.1.
        - `("::0", 525)` binds the port 525 on address ::0.
        - `("mycomputer.local", 604)` binds the port 604 on hostname mycomputer.local.
        - `(None, 8080)` binds port 8080 on all network interfaces.

        Related:

        - `HTTPAPIGateway.start` the method will automatically binds a random port on 127.0.0.1 if this list is empty.
        """
        return self._http_binds

    @property
    def application(self) -> Application:
        """Application instance for HTTP server."""
        return self._application

    async def start(self) -> None:
        """Listen to the address-port pairs given in `HTTPAPIGateway.http_binds`.

        This method will bind a random port on 127.0.0.1 and put it into `HTTPAPIGateway.http_binds` list if the list is empty.
        """
        self._http_server = HTTPServer(self.application)
        if self.http_binds:
            for addr, port in self.http_binds:
                self._http_server.listen(port, addr if addr else "")
        else:
            sockets = bind_sockets(0, "127.0.0.1")
            free_port = sockets[0].getsockname()[1]
            self._http_server.add_sockets(sockets)
            self.http_binds.append(("127.0.0.1", free_port))
        self.__logger.info("listening on %s", self.http_binds)

    async def stop(self) -> None:
        """Prevent new incoming request and wait for all existing connections closed."""
        if not self._http_server:
            return
        self._http_server.stop()
        await self._http_server.close_all_connections()
        self._http_server = None
        self.__logger.info("stopped")

    def http_client(self) -> AsyncClient:
        """Return a http client from httpx which uses the first bind from `HTTPAPIGateway.http_binds` as base url.

        Related:

        - [httpx documentation](https://www.python-httpx.org/)
        """
        assert self._http_server
        address, port = self.http_binds[0]
        if not address:
            address = "localhost"
        base_url = "http://{}:{}".format(address, port)
        return AsyncClient(base_url=base_url)
