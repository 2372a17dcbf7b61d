"""The abstract storage layer of Idstore.

The storage layer is a key-value store. A key is a tuple of strings, the first part is the namespace (say `("users", "a@b.com")`),
and a value is a `dict` which can be encoded as JSON. Each stored value carries a revision number, which is set to 1 when the key
is created and increased on every successful write.

Reading a value then writing it back is not safe when other tasks write the same key in between. So `KeyValueStorage` does not have
a plain "set" operation, it provides conditional primitives instead:

- `KeyValueStorage.create` only writes when the key is absent (create-if-absent).
- `KeyValueStorage.compare_and_set` only writes when the stored revision is still the one the caller read.
- `KeyValueStorage.delete` tells if there was something to delete.

Each primitive touches the database in a single step and commits its write before returning. A task cancelled while waiting on
one of them leaves the key either untouched or fully written, and a write which has been reported done survives a crash of the process.

This module also keeps `CommonStorageAdapter`, which converts between a typed record and the `dict` stored as value.
"""
import asyncio
import json
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import (
    Any,
    AsyncIterator,
    Awaitable,
    Dict,
    Generic,
    List,
    Optional,
    Tuple,
    TypeVar,
)

from unqlite import UnQLite, UnQLiteError

from ..errors import InternalError

T = TypeVar("T")

StorageKey = Tuple[str, ...]

KEY_SEPARATOR = "\x1f"
"""Separator between key parts in the encoded key. It is a whitespace character, validated emails cannot contain it."""


def encode_key(key: StorageKey) -> str:
    """Encode a tuple key to the string used by the database."""
    return KEY_SEPARATOR.join(key)


def decode_key(raw: str) -> StorageKey:
    """Revert `encode_key`."""
    return tuple(raw.split(KEY_SEPARATOR))


@dataclass
class Entry(object):
    """One stored value.

    Attributes:
        key: `StorageKey`. The key of the value.
        value: `Dict[str, Any]`. The stored document.
        revision: `int`. Revision of the value, use it for `KeyValueStorage.compare_and_set`.
    """

    key: StorageKey
    value: Dict[str, Any]
    revision: int


class KeyValueStorage(object):
    """A protocol type which describes the operations of the key-value storage layer."""

    def get(self, key: StorageKey) -> Awaitable[Optional[Entry]]:
        """Return the entry of `key`, or `None` if it is absent."""
        ...

    def create(self, key: StorageKey, value: Dict[str, Any]) -> Awaitable[bool]:
        """Store `value` under `key` only if the key is absent.
        Return `False` if the key already exists.
        """
        ...

    def compare_and_set(
        self, key: StorageKey, value: Dict[str, Any], revision: int
    ) -> Awaitable[bool]:
        """Replace the value of `key` only if its revision is still `revision`.
        Return `False` if the key is absent or has been changed since.
        """
        ...

    def delete(self, key: StorageKey) -> Awaitable[bool]:
        """Remove `key`. Return `False` if it is absent."""
        ...

    def list(self, prefix: StorageKey) -> AsyncIterator[Entry]:
        """Iterate over the entries whose keys start with `prefix`."""
        ...

    def close(self) -> Awaitable[None]:
        """Wait for the pending operations and release resources."""
        ...


class CommonStorageAdapter(Generic[T]):
    """Adapter for record storages.
    Implement `record2dict` and `dict2record` to transform the data between record and dict.
    """

    def record2dict(self, record: T) -> Dict[str, Any]:
        """Build a `dict` from `record`."""
        ...

    def dict2record(self, d: Dict[str, Any]) -> T:
        """Build a record from a `d`."""
        ...


class UnQLiteStorage(KeyValueStorage):
    """An implementation of `KeyValueStorage` for the key-value API of `unqlite.UnQLite`.

    .. note:: The API of `unqlite-python` is synchrounous. To prevent main thread blocking, every call is wrapped with thread pool executor.
        A `threading.Lock` serialises the calls, so the check and the write of a conditional primitive can't be interleaved by another thread.

    .. important:: Create only one instance for one database. Two instances have two locks and they can't protect each other's writes.

    Documents are stored as JSON: `{"revision": int, "value": dict}`.

    Related:

    - [unqlite-python API documentation](https://unqlite-python.readthedocs.io/en/latest/api.html)
    """

    __logger = logging.getLogger("idstore.utils.storage.UnQLiteStorage")

    def __init__(self, instance: UnQLite) -> None:
        self.instance = instance
        self.executor = ThreadPoolExecutor(
            thread_name_prefix="idstore.utils.storage.UnQLiteStorage.executor"
        )
        self._lock = threading.Lock()
        super().__init__()

    def _run(self, fn, *args) -> Awaitable[Any]:
        return asyncio.get_running_loop().run_in_executor(self.executor, fn, *args)

    def _fetch_document(self, raw_key: str) -> Optional[Dict[str, Any]]:
        if not self.instance.exists(raw_key):
            return None
        raw = self.instance.fetch(raw_key)
        try:
            doc = json.loads(raw)
            return {"revision": int(doc["revision"]), "value": dict(doc["value"])}
        except (ValueError, KeyError, TypeError) as e:
            raise InternalError(
                "undecodable document under key {!r}".format(raw_key)
            ) from e

    def _store_document(
        self, raw_key: str, value: Dict[str, Any], revision: int
    ) -> None:
        self.instance.store(
            raw_key, json.dumps({"revision": revision, "value": value})
        )
        self._commit()

    def _commit(self) -> None:
        """Commit the pending write, or roll it back if the commit fails."""
        try:
            self.instance.commit()
        except UnQLiteError:
            self.instance.rollback()
            raise

    def _locked(self, fn, *args):
        with self._lock:
            try:
                return fn(*args)
            except UnQLiteError as e:
                self.__logger.exception("database operation failed")
                raise InternalError("database operation failed") from e

    def get_sync(self, key: StorageKey) -> Optional[Entry]:
        """The synchrounous version of `get`."""
        doc = self._locked(self._fetch_document, encode_key(key))
        if doc is None:
            return None
        return Entry(key=key, value=doc["value"], revision=doc["revision"])

    def _create(self, raw_key: str, value: Dict[str, Any]) -> bool:
        if self.instance.exists(raw_key):
            return False
        self._store_document(raw_key, value, 1)
        return True

    def create_sync(self, key: StorageKey, value: Dict[str, Any]) -> bool:
        """The synchrounous version of `create`."""
        return self._locked(self._create, encode_key(key), value)

    def _compare_and_set(
        self, raw_key: str, value: Dict[str, Any], revision: int
    ) -> bool:
        doc = self._fetch_document(raw_key)
        if doc is None or doc["revision"] != revision:
            return False
        self._store_document(raw_key, value, revision + 1)
        return True

    def compare_and_set_sync(
        self, key: StorageKey, value: Dict[str, Any], revision: int
    ) -> bool:
        """The synchrounous version of `compare_and_set`."""
        return self._locked(self._compare_and_set, encode_key(key), value, revision)

    def _delete(self, raw_key: str) -> bool:
        if not self.instance.exists(raw_key):
            return False
        self.instance.delete(raw_key)
        self._commit()
        return True

    def delete_sync(self, key: StorageKey) -> bool:
        """The synchrounous version of `delete`."""
        return self._locked(self._delete, encode_key(key))

    def _keys_with_prefix(self, raw_prefix: str) -> List[str]:
        keys: List[str] = []
        for raw_key in self.instance.keys():
            if isinstance(raw_key, bytes):
                raw_key = raw_key.decode("utf-8")
            if raw_key.startswith(raw_prefix):
                keys.append(raw_key)
        return keys

    def keys_sync(self, prefix: StorageKey) -> List[StorageKey]:
        """Return the keys which start with `prefix`, in the order of the database."""
        raw_prefix = encode_key(prefix) + KEY_SEPARATOR
        return [
            decode_key(k) for k in self._locked(self._keys_with_prefix, raw_prefix)
        ]

    def get(self, key: StorageKey) -> Awaitable[Optional[Entry]]:
        return self._run(self.get_sync, key)

    def create(self, key: StorageKey, value: Dict[str, Any]) -> Awaitable[bool]:
        return self._run(self.create_sync, key, value)

    def compare_and_set(
        self, key: StorageKey, value: Dict[str, Any], revision: int
    ) -> Awaitable[bool]:
        return self._run(self.compare_and_set_sync, key, value, revision)

    def delete(self, key: StorageKey) -> Awaitable[bool]:
        return self._run(self.delete_sync, key)

    async def list(self, prefix: StorageKey) -> AsyncIterator[Entry]:
        # Keys are taken as a snapshot, values are fetched one by one when the caller asks for them.
        keys = await self._run(self.keys_sync, prefix)
        for key in keys:
            entry = await self.get(key)
            if entry:
                yield entry

    async def close(self) -> None:
        await asyncio.get_running_loop().run_in_executor(
            None, self.executor.shutdown, True
        )
