"""Redis implementation of the key-value store holding link records

Every store key `<key>` lives at `<prefix>:links:<key>` in Redis. Listing is
done with SCAN, so it never blocks the server on large keyspaces; the opaque
cursor handed back to callers is Redis' own SCAN cursor.

Example:
    >>> store = RedisKeyValueStore(redis_host='localhost', prefix='linkproxy:dev')
    >>> store.put('k3x9qa', '{"url": "https://example.org/a.bin"}')
    >>> store.get('k3x9qa')
    '{"url": "https://example.org/a.bin"}'
    >>> store.list(limit=1000)
    KeyPage(keys=['k3x9qa'], cursor=None)
"""

from beartype import beartype

from linkproxy.dao.base import KeyValueStore, KeyPage
from linkproxy.dao.redis.mixins import RedisClientMixin
from linkproxy.dao.redis.helpers import handle_redis_connection_error
from linkproxy.utils.constants import KV_LIST_LIMIT


class RedisKeyValueStore(RedisClientMixin, KeyValueStore):
    """KeyValueStore backed by plain Redis strings.

    Attributes (see RedisClientMixin):
        redis (redis.Redis):
            Redis client used to communicate with the datastore.
        keys (RedisKeySchema):
            Key schema helper for generating namespaced Redis keys.
    """

    @handle_redis_connection_error
    @beartype
    def get(self, key: str) -> str | None:
        value = self.redis.get(self.keys.store_key(key))
        if isinstance(value, bytes):
            value = value.decode('utf-8')
        return value

    @handle_redis_connection_error
    @beartype
    def put(self, key: str, value: str) -> None:
        self.redis.set(self.keys.store_key(key), value)

    @handle_redis_connection_error
    @beartype
    def delete(self, key: str) -> None:
        self.redis.delete(self.keys.store_key(key))

    @handle_redis_connection_error
    @beartype
    def list(self, cursor: str | None = None, limit: int = KV_LIST_LIMIT) -> KeyPage:
        """Return one SCAN page of store keys

        Args:
            cursor (str | None):
                Cursor returned by the previous call, None to start a new scan.
            limit (int):
                SCAN COUNT hint. Redis may return slightly more or fewer keys.

        Returns:
            KeyPage: keys with the namespace stripped, and the next cursor
                     (None once Redis reports cursor 0).

        Raises:
            DataStoreError: If Redis is unreachable.

        Example:
            >>> page = store.list()
            >>> while page.cursor is not None:
            ...     page = store.list(cursor=page.cursor)
        """
        # NOTE: SCAN may return the same key more than once across pages
        #       when the keyspace is rehashed mid-scan. Callers doing a full
        #       sweep (admin listing, expiry sweep) must tolerate duplicates.
        next_cursor, raw_keys = self.redis.scan(
            cursor=int(cursor or 0),
            match=self.keys.store_pattern(),
            count=limit,
        )

        keys = []
        for raw_key in raw_keys:
            if isinstance(raw_key, bytes):
                raw_key = raw_key.decode('utf-8')
            keys.append(self.keys.strip(raw_key))

        return KeyPage(keys=keys, cursor=None if int(next_cursor) == 0 else str(next_cursor))
