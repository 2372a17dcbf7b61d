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

from idstore import Idstore


class TestDocumentationHandler:
    @pytest.mark.asyncio
    async def test_documentation_page(self, idstore: Idstore):
        async with idstore.http_api_gate_client() as http_cli:
            response = await http_cli.get("/")
            assert response.status_code == 200
            assert response.headers["content-type"].startswith("text/html")
            assert "POST /register" in response.text


class TestCrossOrigin:
    @pytest.mark.asyncio
    async def test_headers_on_responses(self, idstore: Idstore):
        async with idstore.http_api_gate_client() as http_cli:
            response = await http_cli.get("/users")
            assert response.headers["access-control-allow-origin"] == "*"
            assert "PUT" in response.headers["access-control-allow-methods"]

    @pytest.mark.asyncio
    async def test_preflight(self, idstore: Idstore):
        async with idstore.http_api_gate_client() as http_cli:
            response = await http_cli.options("/users/a%40b.com")
            assert response.status_code == 204
            assert response.headers["access-control-allow-origin"] == "*"
            assert "DELETE" in response.headers["access-control-allow-methods"]
