"""This module contains `StorageHub`, the storage centre of Idstore.
"""
from unqlite import UnQLite

from .usrsys.storage import UserRecordStorage
from .utils.asec import PasswordHasher
from .utils.storage import KeyValueStorage, UnQLiteStorage


class StorageHub(object):
    """The storage centre for Idstore. This class keeps the storages built on one opened database.

    ..note:: Typically you use the one from `idstore.Idstore`.

    Related:

    - `idstore.utils.storage` The abstract storage layer of Idstore.
    """

    def __init__(self, database: UnQLite, hasher: PasswordHasher) -> None:
        self.database = database
        """The database instance.
        .. important:: Don't depends on this property, Idstore may support more database backend in future."""
        self.hasher = hasher
        self._kv_storage = UnQLiteStorage(database)
        self._user_records = UserRecordStorage(self._kv_storage, hasher)
        super().__init__()

    @property
    def kv_storage(self) -> KeyValueStorage:
        """The only key-value storage on `database`. All the conditional writes must go though it."""
        return self._kv_storage

    @property
    def user_records(self) -> UserRecordStorage:
        """
        Related:

        - `idstore.usrsys.usr.UserRecord` The object being stored.
        """
        return self._user_records

    async def close(self) -> None:
        """Wait for pending storage operations. The database itself is not closed here."""
        await self._kv_storage.close()
