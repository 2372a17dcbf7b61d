"""This module contains the storage of user records: `UserRecordStorage`.
"""
import dataclasses
import logging
from typing import Any, AsyncIterator, Dict, Optional

from ..errors import ConflictError, NotFoundError
from ..utils.asec import PasswordHasher
from ..utils.storage import CommonStorageAdapter, KeyValueStorage, StorageKey
from .usr import RegistrationForm, UserProfile, UserRecord, UserUpdate

USERS_NAMESPACE = "users"


class UserRecordAdapter(CommonStorageAdapter[UserRecord]):
    """Convert `UserRecord` to the stored document and back. The document uses camelCase names."""

    def record2dict(self, record: UserRecord) -> Dict[str, Any]:
        return {
            "firstName": record.first_name,
            "lastName": record.last_name,
            "email": record.email,
            "phone": record.phone,
            "address": record.address,
            "passwordHash": record.password_hash,
        }

    def dict2record(self, d: Dict[str, Any]) -> UserRecord:
        return UserRecord(
            email=d["email"],
            first_name=d["firstName"],
            last_name=d["lastName"],
            phone=d["phone"],
            address=d["address"],
            password_hash=d["passwordHash"],
        )


def merge_update(
    record: UserRecord, update: UserUpdate, password_hash: Optional[str] = None
) -> UserRecord:
    """Apply `update` on `record`, return a new record.

    Fields which are `None` in `update` are kept. `password_hash` replaces the stored hash when it's given;
    the caller hashes `update.password` since hashing may suspend.
    """
    changes: Dict[str, str] = {}
    for name in ("first_name", "last_name", "phone", "address"):
        value = getattr(update, name)
        if value is not None:
            changes[name] = value
    if password_hash is not None:
        changes["password_hash"] = password_hash
    return dataclasses.replace(record, **changes)


class UserRecordStorage(object):
    """The identity store. Maps emails to `UserRecord`s on a `KeyValueStorage`, under the namespace "users".

    Per email, a record is either absent or active:

    - `create_new_user` turns absent to active, and raises `ConflictError` on an active email.
    - `update` keeps it active, `remove` turns it absent; both raise `NotFoundError` on an absent email.

    Writes are conditional (see `idstore.utils.storage`), so concurrent registrations of one email give exactly one record,
    and concurrent updates of one email don't lose each other's changes.
    """

    __logger = logging.getLogger("idstore.usrsys.storage.UserRecordStorage")

    def __init__(
        self,
        kv_storage: KeyValueStorage,
        hasher: PasswordHasher,
        *,
        max_update_attempts: int = 16,
    ) -> None:
        self.kv_storage = kv_storage
        self.hasher = hasher
        self.adapter = UserRecordAdapter()
        self.max_update_attempts = max_update_attempts
        super().__init__()

    @staticmethod
    def key_of(email: str) -> StorageKey:
        return (USERS_NAMESPACE, email)

    async def exists(self, email: str) -> bool:
        return (await self.kv_storage.get(self.key_of(email))) is not None

    async def get(self, email: str) -> Optional[UserRecord]:
        """Get the full record of `email`, including the password hash.

        ..caution:: For verifying only, use `get_profile` for anything shown to the outside.
        """
        entry = await self.kv_storage.get(self.key_of(email))
        if entry:
            return self.adapter.dict2record(entry.value)
        return None

    async def get_profile(self, email: str) -> Optional[UserProfile]:
        record = await self.get(email)
        return record.profile() if record else None

    async def create_new_user(self, form: RegistrationForm) -> UserRecord:
        """Hash the password and save a new user.
        Raise `ConflictError` if the email is already registered.
        """
        if await self.exists(form.email):
            raise ConflictError("Email already exist")
        record = UserRecord(
            email=form.email,
            first_name=form.first_name,
            last_name=form.last_name,
            phone=form.phone,
            address=form.address,
            password_hash=await self.hasher.hash(form.password),
        )
        # The check above only avoids hashing for nothing, the create below is the one which keeps the email unique.
        created = await self.kv_storage.create(
            self.key_of(form.email), self.adapter.record2dict(record)
        )
        if not created:
            raise ConflictError("Email already exist")
        self.__logger.info("user %r created", form.email)
        return record

    async def update(self, email: str, update: UserUpdate) -> UserRecord:
        """Apply a partial update on the record of `email`, return the updated record.

        The record is written back only if nobody else wrote it since it was read, otherwise the update is applied again on
        the new record. Raise `NotFoundError` if there is no record, `ConflictError` if the record kept changing for
        `max_update_attempts` times.
        An empty update writes nothing and returns the stored record.
        """
        key = self.key_of(email)
        password_hash: Optional[str] = None
        for attempt in range(self.max_update_attempts):
            entry = await self.kv_storage.get(key)
            if entry is None:
                raise NotFoundError("User not found")
            if update.is_empty():
                return self.adapter.dict2record(entry.value)
            if update.password is not None and password_hash is None:
                password_hash = await self.hasher.hash(update.password)
            merged = merge_update(
                self.adapter.dict2record(entry.value), update, password_hash
            )
            if await self.kv_storage.compare_and_set(
                key, self.adapter.record2dict(merged), entry.revision
            ):
                self.__logger.info("user %r updated", email)
                return merged
            self.__logger.warning(
                "user %r changed during update, retrying (attempt %d)",
                email,
                attempt + 1,
            )
        raise ConflictError("User is being modified concurrently")

    async def remove(self, email: str) -> None:
        """Delete the record of `email`. Raise `NotFoundError` if there is no record."""
        if not await self.kv_storage.delete(self.key_of(email)):
            raise NotFoundError("User not found")
        self.__logger.info("user %r deleted", email)

    async def list_all(self) -> AsyncIterator[UserProfile]:
        """Iterate over all users, without password hashes.
        Each call starts again from the current state of the storage.
        """
        async for entry in self.kv_storage.list((USERS_NAMESPACE,)):
            yield self.adapter.dict2record(entry.value).profile()

    async def check_user_password(self, email: str, password: str) -> Optional[bool]:
        """Check the user password.
        Return `None` if the user does not exist.

        ..note:: The `password` is the password in plaintext.
        """
        record = await self.get(email)
        if not record:
            return None
        return await self.hasher.verify(password, record.password_hash)
