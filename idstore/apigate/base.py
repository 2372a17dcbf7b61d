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
"""`BaseRequestHandler`: the tools used in tornado handlers.
"""
from typing import Any, List, Optional

from tornado.escape import json_decode, json_encode
from tornado.web import RequestHandler

from ..errors import ValidationError
from ..storagehub import StorageHub
from ..usrsys.auth import AuthProvider

CORS_ALLOW_METHODS = "GET, POST, PUT, DELETE, OPTIONS"
CORS_ALLOW_HEADERS = "Content-Type"


class BaseRequestHandler(RequestHandler):
    """The tools used while handling requests.

    Every response carries the cross-origin headers, `OPTIONS` is answered with 204 on every route.
    Uncaught exceptions are logged by tornado and answered with a generic 500 body, nothing about the exception is sent.

    Typical usage:
    Use it instead of `tornado.web.RequestHandler`.
    ````python
    class FooRequestHandler(BaseRequestHandler):
        ...
    ````
    """

    def initialize(self) -> None:
        settings = self.application.settings
        self._storage_hub: StorageHub = settings["storage_hub"]
        self._auth_provider: AuthProvider = settings["auth_provider"]

    @property
    def storage_hub(self) -> StorageHub:
        """Storage hub of the instance."""
        return self._storage_hub

    @property
    def auth_provider(self) -> AuthProvider:
        return self._auth_provider

    def set_default_headers(self) -> None:
        self.set_header(
            "Access-Control-Allow-Origin", self.application.settings["cors_origin"]
        )
        self.set_header("Access-Control-Allow-Methods", CORS_ALLOW_METHODS)
        self.set_header("Access-Control-Allow-Headers", CORS_ALLOW_HEADERS)

    def options(self, *args: Any) -> None:
        self.set_status(204)

    def json_body(self) -> Any:
        """Decode the request body as JSON. Raise `ValidationError` if it's not JSON."""
        try:
            return json_decode(self.request.body)
        except (ValueError, UnicodeDecodeError):
            raise ValidationError(["request body must be valid JSON"])

    def write_json(self, data: Any, status: int = 200) -> None:
        self.set_status(status)
        self.set_header("Content-Type", "application/json; charset=UTF-8")
        self.finish(json_encode(data))

    def write_message(self, message: str) -> None:
        self.write_json({"message": message})

    def write_failure(
        self, status: int, error: str, details: Optional[List[str]] = None
    ) -> None:
        body: dict = {"error": error}
        if details is not None:
            body["details"] = details
        self.write_json(body, status)

    def write_error(self, status_code: int, **kwargs: Any) -> None:
        if status_code >= 500:
            error = "Internal Server Error"
        else:
            error = self._reason
        self.set_header("Content-Type", "application/json; charset=UTF-8")
        self.finish(json_encode({"error": error}))
