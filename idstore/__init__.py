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
"""Idstore: a store of user identities.

It registers users, checks their passwords, lists their profiles and applies partial updates or deletion, all keyed by email.

Related:

- `idstore.idstore.Idstore` The entry object.
"""
from .storagehub import StorageHub
from .idstore import Idstore

__all__ = ["Idstore", "StorageHub"]
