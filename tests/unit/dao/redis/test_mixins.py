"""Unit tests for Redis-based mixins.

Test coverage includes:
    1. Initialization and configuration
       - Ensures correct initialization with or without a Redis client.
       - Ensures from_config() maps an AppConfig "redis" section to client parameters.
       - Confirms unreachable Redis raises DataStoreError.
    2. Healthcheck behavior
       - Healthcheck pings Redis.
       - Timeouts are treated like connection errors.
       - raise_error=False reports failure instead of raising.
"""

from unittest.mock import MagicMock, patch

import pytest
import redis

from linkproxy.dao.exceptions import DataStoreError
from linkproxy.dao.redis.mixins import RedisClientMixin
from linkproxy.dao.redis.redis_key_schema import RedisKeySchema


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def redis_client():
    _redis_client = MagicMock(
        spec=redis.Redis, connection_pool=MagicMock(spec=redis.ConnectionPool, connection_kwargs={'host': 'redis', 'port': 6379, 'db': 0})
    )
    _redis_client.ping.return_value = True
    return _redis_client


# -------------------------------
# 1. Initialization and configuration
# -------------------------------


def test_initialize_without_redis_client():
    """Ensure the mixin creates a Redis client when none is provided."""
    redis_config = {
        'redis_host': 'redis',
        'redis_port': '6379',
        'redis_db': 0,
        'redis_decode_responses': True,
        'redis_username': 'default',
        'redis_password': 'password',
    }

    with patch('linkproxy.dao.redis.mixins.redis.Redis', autospec=True) as redis_mock:
        mixin = RedisClientMixin(**redis_config, prefix='linkproxy:test')

        redis_mock.assert_called_once_with(host='redis', port=6379, db=0, decode_responses=True, username='default', password='password')
        assert mixin.redis is redis_mock.return_value
        assert isinstance(mixin.keys, RedisKeySchema)
        assert mixin.keys.prefix == 'linkproxy:test'


def test_initialize_with_redis_client(redis_client):
    mixin = RedisClientMixin(redis_client=redis_client)
    assert mixin.redis is redis_client
    assert mixin.keys.prefix is None


def test_from_config():
    with patch('linkproxy.dao.redis.mixins.redis.Redis', autospec=True) as redis_mock:
        mixin = RedisClientMixin.from_config({'host': 'redis.test', 'port': 6380, 'db': 2, 'password': 'secret'}, prefix='linkproxy:test')

        redis_mock.assert_called_once_with(host='redis.test', port=6380, db=2, decode_responses=True, username=None, password='secret')
        assert mixin.keys.prefix == 'linkproxy:test'


def test_initialize_with_unreachable_redis():
    """Ensure an unreachable Redis raises DataStoreError."""
    exception_message = "Can't connect to Redis at 203.0.113.1:18000/5. Check the provided configuration parameters."

    with patch('linkproxy.dao.redis.mixins.redis.Redis', autospec=True) as redis_mock:
        redis_mock_instance = redis_mock.return_value
        redis_mock_instance.ping.side_effect = redis.exceptions.ConnectionError('Connection error')
        redis_mock_instance.connection_pool = MagicMock()
        redis_mock_instance.connection_pool.connection_kwargs = {'host': '203.0.113.1', 'port': 18000, 'db': 5}

        with pytest.raises(DataStoreError, match=exception_message):
            RedisClientMixin(redis_host='203.0.113.1', redis_port=18000, redis_db=5)


# -------------------------------
# 2. Healthcheck behavior
# -------------------------------


def test_healthcheck_passes(redis_client):
    mixin = RedisClientMixin(redis_client=redis_client)
    redis_client.ping.assert_called_once()  # initialization performs a healthcheck

    assert mixin._healthcheck() is True
    assert redis_client.ping.call_count == 2


@pytest.mark.parametrize('error', [redis.exceptions.ConnectionError('refused'), redis.exceptions.TimeoutError('timed out')])
def test_healthcheck_fails(redis_client, error):
    redis_client.ping.side_effect = error

    with pytest.raises(DataStoreError, match="Can't connect to Redis at redis:6379/0"):
        RedisClientMixin(redis_client=redis_client)


def test_healthcheck_without_raising(redis_client):
    mixin = RedisClientMixin(redis_client=redis_client)
    redis_client.ping.side_effect = redis.exceptions.ConnectionError('refused')

    assert mixin._healthcheck(raise_error=False) is False
