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
"""Run Idstore as a service: `python -m idstore --database users.db --port 8080`.
"""
import argparse
import asyncio
import logging
import signal
from typing import List, Optional

from .idstore import Idstore
from .utils.asec import HASHING_COSTS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="idstore", description="A store of user identities over HTTP."
    )
    parser.add_argument(
        "--database", default="idstore.db", help='database file, ":mem:" for memory'
    )
    parser.add_argument("--host", default=None, help="bind address, all by default")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument(
        "--cost",
        choices=sorted(HASHING_COSTS),
        default="interactive",
        help="password hashing cost",
    )
    parser.add_argument("--cors-origin", default="*")
    parser.add_argument("--debug", action="store_true")
    parser.add_argument("--log-level", default="INFO")
    return parser


async def serve(idstore: Idstore) -> None:
    stopping = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stopping.set)
    async with idstore:
        await stopping.wait()


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    idstore = Idstore(
        database_path=args.database,
        http_api_gate_binds=[(args.host, args.port)],
        password_hashing_cost=HASHING_COSTS[args.cost],
        cors_origin=args.cors_origin,
        debug=args.debug,
    )
    asyncio.run(serve(idstore))


if __name__ == "__main__":
    main()
