from linkproxy.dao.redis.redis_key_schema import RedisKeySchema
from linkproxy.dao.redis.redis_kv_store import RedisKeyValueStore
from linkproxy.dao.redis.mixins import RedisClientMixin


__all__ = [
    'RedisKeySchema',
    'RedisKeyValueStore',
    'RedisClientMixin',
]
