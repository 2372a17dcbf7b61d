"""Security tools, including password hashing.

Passwords are hashed by argon2id. The digest is the modular crypt string given by libsodium, for example:
`$argon2id$v=19$m=65536,t=2,p=1$<salt>$<hash>`. It describes the algorithm, the cost and the salt, so a digest can be verified
even after the configured cost has changed.

Related:

- [nacl.pwhash - PyNaCL documentation](https://pynacl.readthedocs.io/en/latest/api/pwhash/)
- [Password hashing - libsodium documentation](https://doc.libsodium.org/password_hashing)
"""
from asyncio import get_running_loop
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Optional

from nacl.exceptions import CryptoError
from nacl.pwhash import argon2id

from ..errors import InternalError


@dataclass(frozen=True)
class HashingCost(object):
    """The work factor of argon2id.

    Attributes:
        opslimit: `int`. Number of passes.
        memlimit: `int`. Memory in bytes.
    """

    opslimit: int
    memlimit: int


HASHING_COST_MIN = HashingCost(argon2id.OPSLIMIT_MIN, argon2id.MEMLIMIT_MIN)
"""The cheapest cost libsodium accepts. Only for tests."""

HASHING_COST_INTERACTIVE = HashingCost(
    argon2id.OPSLIMIT_INTERACTIVE, argon2id.MEMLIMIT_INTERACTIVE
)
HASHING_COST_MODERATE = HashingCost(
    argon2id.OPSLIMIT_MODERATE, argon2id.MEMLIMIT_MODERATE
)
HASHING_COST_SENSITIVE = HashingCost(
    argon2id.OPSLIMIT_SENSITIVE, argon2id.MEMLIMIT_SENSITIVE
)

HASHING_COSTS = {
    "min": HASHING_COST_MIN,
    "interactive": HASHING_COST_INTERACTIVE,
    "moderate": HASHING_COST_MODERATE,
    "sensitive": HASHING_COST_SENSITIVE,
}


class PasswordHasher(object):
    """Hash passwords and verify them.

    Every `hash` call uses a new random salt, so hashing the same password twice gives two different digests.
    `verify` is the only way to tell if a password matches a digest.

    ..note:: The hashing is slow on purpose. `hash` and `verify` run the synchrounous versions in `executor`,
        the default executor of the event loop is used if it is `None`.
    """

    def __init__(
        self,
        cost: HashingCost = HASHING_COST_INTERACTIVE,
        executor: Optional[Executor] = None,
    ) -> None:
        self.cost = cost
        self.executor = executor
        super().__init__()

    def hash_sync(self, password: str) -> str:
        """Hash `password`.

        ..caution:: This function is synchrounous.
            It may unexecptly block the thread.
        """
        try:
            digest = argon2id.str(
                password.encode("utf-8", "surrogatepass"),
                opslimit=self.cost.opslimit,
                memlimit=self.cost.memlimit,
            )
        except CryptoError as e:
            raise InternalError("password hashing failed") from e
        return digest.decode("ascii")

    def verify_sync(self, password: str, digest: str) -> bool:
        """Check if `digest` matchs `password`.
        Return `False` for malformed digests instead of raising.

        ..caution:: This function is synchrounous.
            It may unexecptly block the thread.
        """
        if not isinstance(password, str) or not isinstance(digest, str):
            return False
        try:
            return argon2id.verify(
                digest.encode("ascii"), password.encode("utf-8", "surrogatepass")
            )
        except (CryptoError, ValueError, TypeError):
            return False

    async def hash(self, password: str) -> str:
        """Hash `password` in another thread."""
        return await get_running_loop().run_in_executor(
            self.executor, self.hash_sync, password
        )

    async def verify(self, password: str, digest: str) -> bool:
        """Check if `digest` matchs `password`, in another thread."""
        return await get_running_loop().run_in_executor(
            self.executor, self.verify_sync, password, digest
        )
