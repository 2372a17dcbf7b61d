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
"""`DocumentationHandler`: the page describing the HTTP API.
"""
from .base import BaseRequestHandler

DOCUMENTATION_HTML = """<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8" />
  <title>Idstore API Documentation</title>
</head>
<body>
  <h1>Idstore API</h1>
  <p>Request and response bodies are JSON.</p>
  <ul>
    <li>
      <strong>POST /register</strong>
      <ul>
        <li>Body:
          <pre>{
  "firstName": "Alyx",
  "lastName": "Vance",
  "email": "alyx@example.com",
  "password": "123456",
  "phone": "+998946110066",
  "address": "City 17"
}</pre></li>
        <li>Registers a new user.</li>
        <li>Validation: firstName, lastName and address must not be empty, email must look like an email,
          password must have at least 6 characters, phone must have at least 7 characters of digits and "+".</li>
      </ul>
    </li>
    <li>
      <strong>POST /login</strong>
      <ul>
        <li>Body:
          <pre>{
  "email": "alyx@example.com",
  "password": "123456"
}</pre></li>
        <li>Checks the password of an existing user.</li>
      </ul>
    </li>
    <li>
      <strong>GET /users</strong>
      <ul>
        <li>Lists all users, without passwords.</li>
      </ul>
    </li>
    <li>
      <strong>PUT /users/:email</strong>
      <ul>
        <li>Body, every field is optional:
          <pre>{
  "firstName": "NewFirstName",
  "lastName": "NewLastName",
  "password": "NewPassword",
  "phone": "+99899...",
  "address": "NewAddress"
}</pre></li>
        <li>Updates the user of :email. Only the given fields are changed.</li>
      </ul>
    </li>
    <li>
      <strong>DELETE /users/:email</strong>
      <ul>
        <li>Deletes the user of :email.</li>
      </ul>
    </li>
  </ul>
</body>
</html>"""


class DocumentationHandler(BaseRequestHandler):
    """Return the documentation page on "GET"."""

    def get(self) -> None:
        self.set_header("Content-Type", "text/html; charset=UTF-8")
        self.finish(DOCUMENTATION_HTML)
