"""Typed access to link records held in a KeyValueStore

The store only deals in strings; this DAO owns the JSON encoding of
LinkRecordModel and the cursor loop needed for full scans.

Example:
    >>> from linkproxy.dao import LinkRecordDAO
    >>> from linkproxy.dao.redis import RedisKeyValueStore
    >>> dao = LinkRecordDAO(RedisKeyValueStore(prefix='linkproxy:dev'))
    >>> dao.save(record)
    >>> dao.get('k3x9qa').target
    'https://example.org/a.bin'
    >>> [code for code, _ in dao.scan()]
    ['k3x9qa']
"""

import logging
from collections.abc import Iterator

from beartype import beartype

from linkproxy.dao.base import KeyValueStore
from linkproxy.dao.exceptions import LinkRecordNotFoundError
from linkproxy.models import LinkRecordModel
from linkproxy.utils.constants import KV_LIST_LIMIT


logger = logging.getLogger(__name__)


class LinkRecordDAO:
    """Load, persist and enumerate LinkRecordModel instances.

    Methods:
        get(shortcode) -> LinkRecordModel:
            Raises LinkRecordNotFoundError when nothing is stored under the code.
        find(shortcode) -> LinkRecordModel | None:
            Same as get(), returning None instead of raising.
        save(record) -> None:
            Write the record under its short code (insert or overwrite).
        delete(shortcode) -> None:
            Remove a record. Missing codes are ignored.
        scan(limit) -> Iterator[tuple[str, LinkRecordModel]]:
            Walk every stored record, following store cursors until exhausted.
        fingerprint(shortcode) -> str | None:
            Content fingerprint of the stored record, used for collision checks.

    All methods raise DataStoreError when the underlying store is unreachable.
    """

    def __init__(self, store: KeyValueStore):
        self.store = store

    @beartype
    def get(self, shortcode: str) -> LinkRecordModel:
        record = self.find(shortcode)
        if record is None:
            raise LinkRecordNotFoundError(f"Link record with code '{shortcode}' not found.")
        return record

    @beartype
    def find(self, shortcode: str) -> LinkRecordModel | None:
        raw = self.store.get(shortcode)
        if raw is None:
            return None
        return LinkRecordModel.from_json(shortcode, raw)

    @beartype
    def save(self, record: LinkRecordModel) -> None:
        self.store.put(record.shortcode, record.to_json())

    @beartype
    def delete(self, shortcode: str) -> None:
        self.store.delete(shortcode)

    @beartype
    def fingerprint(self, shortcode: str) -> str | None:
        """Return the content fingerprint stored under a code, None if the code is free

        An undecodable value still occupies the code, so it yields a fingerprint
        that never matches a freshly built record.
        """
        raw = self.store.get(shortcode)
        if raw is None:
            return None
        try:
            return LinkRecordModel.from_json(shortcode, raw).fingerprint()
        except (ValueError, KeyError, TypeError):
            return f'undecodable:{raw}'

    def scan(self, limit: int = KV_LIST_LIMIT) -> Iterator[tuple[str, LinkRecordModel]]:
        """Iterate over every stored record

        Keys reported twice by the store are yielded once. Keys deleted between
        the listing and the read, and values that fail to decode, are skipped.

        Args:
            limit (int):
                Page size requested from the store on each listing call.

        Yields:
            tuple[str, LinkRecordModel]: short code and decoded record.

        Example:
            >>> for shortcode, record in dao.scan():
            ...     print(shortcode, record.visits)
        """
        seen = set()
        cursor = None

        while True:
            page = self.store.list(cursor=cursor, limit=limit)

            for shortcode in page.keys:
                if shortcode in seen:
                    continue
                seen.add(shortcode)

                raw = self.store.get(shortcode)
                if raw is None:
                    continue
                try:
                    record = LinkRecordModel.from_json(shortcode, raw)
                except (ValueError, KeyError, TypeError):
                    logger.warning('Skipping undecodable link record.', extra={'shortcode': shortcode})
                    continue

                yield shortcode, record

            if page.cursor is None:
                break
            cursor = page.cursor
