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

"""The user system for Idstore.

User system process all the things about users:

- Records and profiles (`usr`)
- Field rules (`validation`)
- Storing, updating and removing users (`storage`)
- Authentication (`auth`)

## Record and Profile: The differences
Idstore defines two structures for user infomation: `usr.UserRecord` and `usr.UserProfile`.
`usr.UserRecord` is what is stored, including the password hash.
`usr.UserProfile` is the same without the password hash, it is the only one which should leave Idstore.
"""
