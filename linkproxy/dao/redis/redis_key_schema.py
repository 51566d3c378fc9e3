import functools
from collections.abc import Callable


__all__ = ['RedisKeySchema']  # hide internal decorator prefix_key from imports


def prefix_key(func: Callable) -> Callable:
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs) -> str:
        key = func(self, *args, **kwargs)
        return f'{self.prefix}:{key}' if self.prefix is not None else key

    return wrapper


class RedisKeySchema:
    """Provide standardized Redis keys for storing link records.

    An optional prefix can be provided to namespace all generated keys.
    It is highly encouraged to set a custom prefix for each app and environment,
    e.g. "linkproxy:prod" or "linkproxy:dev".

    Example:
        >>> keys = RedisKeySchema(prefix='linkproxy:dev')
        >>> keys.store_key('k3x9qa')
        'linkproxy:dev:links:k3x9qa'
        >>> keys.strip('linkproxy:dev:links:k3x9qa')
        'k3x9qa'
    """

    NAMESPACE = 'links'

    def __init__(self, prefix: str | None = None):
        if prefix is not None and not isinstance(prefix, str):
            raise TypeError(f'Prefix must be of type string (given type: {type(prefix)}).')

        self.prefix = prefix

    @prefix_key
    def store_key(self, key: str) -> str:
        return f'{self.NAMESPACE}:{key}'

    @prefix_key
    def store_pattern(self) -> str:
        return f'{self.NAMESPACE}:*'

    def strip(self, redis_key: str) -> str:
        """Turn a namespaced Redis key back into the store-level key."""
        head = self.store_key('')
        return redis_key[len(head):] if redis_key.startswith(head) else redis_key
