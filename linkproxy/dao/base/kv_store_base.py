"""Abstract key-value store consumed by the link record DAO.

The store only has to offer four primitives: point reads, point writes,
deletes and a cursor-paginated key listing. Full scans (admin listing,
expiry sweep) loop over `list()` until the returned cursor is None.

Example:
    >>> page = store.list(cursor=None, limit=1000)
    >>> while True:
    ...     for key in page.keys:
    ...         print(key, store.get(key))
    ...     if page.cursor is None:
    ...         break
    ...     page = store.list(cursor=page.cursor, limit=1000)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class KeyPage:
    """One page of a key listing.

    Attributes:
        keys (list[str]):
            Keys of this page (without any store-internal prefix).
        cursor (Optional[str]):
            Cursor of the next page. None once the listing is exhausted.
    """

    keys: list[str] = field(default_factory=list)
    cursor: Optional[str] = None


class KeyValueStore(ABC):
    """Interface of the durable key-value store holding link records.

    Methods:
        get(key: str) -> str | None:
            Return the stored value, or None if the key does not exist.
        put(key: str, value: str) -> None:
            Store a value, overwriting any previous one.
        delete(key: str) -> None:
            Remove a key. Deleting a missing key is not an error.
        list(cursor: str | None, limit: int) -> KeyPage:
            Return up to roughly `limit` keys and the cursor of the next page.

    All methods raise DataStoreError on connectivity issues.
    """

    @abstractmethod
    def get(self, key: str) -> str | None:
        pass

    @abstractmethod
    def put(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass

    @abstractmethod
    def list(self, cursor: str | None = None, limit: int = 1000) -> KeyPage:
        pass
