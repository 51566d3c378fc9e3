"""Redis mixin providing client setup and a startup connectivity check.

Classes:
    - RedisClientMixin: Inject the Redis client, key schema and PING healthcheck into Redis-backed stores.

Example:
    >>> class RedisKeyValueStore(RedisClientMixin, KeyValueStore):
    ...     pass
    ...
    >>> store = RedisKeyValueStore(redis_host='localhost', prefix='linkproxy:dev')
"""

from typing import Any, Optional

import redis

from linkproxy.dao.redis.redis_key_schema import RedisKeySchema
from linkproxy.dao.exceptions import DataStoreError


class RedisClientMixin:
    """Shared Redis client wiring for Redis-backed stores.

    Attributes:
        redis (redis.Redis):
            Active Redis client instance used by subclasses.
        keys (RedisKeySchema):
            Helper generating namespaced Redis key names.
    """

    def __init__(
        self,
        redis_host: Optional[str] = 'localhost',
        redis_port: Optional[int] = 6379,
        redis_db: Optional[int] = 0,
        redis_decode_responses: Optional[bool] = True,
        redis_username: Optional[str] = None,
        redis_password: Optional[str] = None,
        redis_client: Optional[redis.Redis] = None,
        prefix: Optional[str] = None,
    ):
        """Connect to Redis (or adopt an existing client) and PING it

        Args:
            redis_host (Optional[str]): Hostname of the Redis server. Defaults to 'localhost'.
            redis_port (Optional[int]): Redis server port. Defaults to 6379.
            redis_db (Optional[int]): Redis database index. Defaults to 0.
            redis_decode_responses (Optional[bool]): Decode responses to str. Defaults to True.
            redis_username (Optional[str]): Username for Redis ACL authentication.
            redis_password (Optional[str]): Password for Redis authentication.
            redis_client (Optional[redis.Redis]): Pre-initialized client. If None, a new one is created.
            prefix (Optional[str]): Namespace prefix for all keys, e.g. 'linkproxy:prod'.

        Raises:
            DataStoreError: If Redis does not answer the PING.
        """
        if redis_client is None:
            redis_client = redis.Redis(
                host=redis_host,
                port=int(redis_port),
                db=int(redis_db),
                decode_responses=redis_decode_responses,
                username=redis_username,
                password=redis_password,
            )

        self.redis = redis_client
        self.keys = RedisKeySchema(prefix=prefix)

        self._healthcheck()

    @classmethod
    def from_config(cls, redis_config: dict[str, Any], **kwargs) -> 'RedisClientMixin':
        """Build a store from the "redis" section of a Lambda's AppConfig

        Example:
            >>> RedisKeyValueStore.from_config({'host': 'localhost', 'port': 6379, 'db': 0}, prefix='linkproxy:dev')
        """
        return cls(**{f'redis_{k}': v for k, v in redis_config.items()}, **kwargs)

    def _healthcheck(self, raise_error: bool = True) -> bool:
        """PING Redis, raising DataStoreError (or returning False) when unreachable."""
        try:
            self.redis.ping()
        except (redis.exceptions.ConnectionError, redis.exceptions.TimeoutError) as e:
            if not raise_error:
                return False
            info = self.redis.connection_pool.connection_kwargs
            raise DataStoreError(
                f"Can't connect to Redis at {info.get('host')}:{info.get('port')}/{info.get('db')}. "
                'Check the provided configuration parameters.'
            ) from e
        return True
