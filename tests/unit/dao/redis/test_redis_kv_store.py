"""Unit tests for the RedisKeyValueStore

Test coverage includes:

1. Point operations
   - get() reads the namespaced key and returns None for missing keys.
   - put() writes and delete() removes the namespaced key.
   - Invalid argument types raise TypeError or BeartypeCallHintParamViolation.

2. Cursor listing
   - list() issues SCAN with the namespace pattern and COUNT hint.
   - Returned keys are stripped of the namespace.
   - A SCAN cursor of 0 ends the listing (cursor None).

3. Connectivity errors
   - Redis connection errors raise DataStoreError.
"""

from unittest.mock import MagicMock

import pytest
import redis
from beartype.roar import BeartypeCallHintParamViolation

from linkproxy.dao.base import KeyPage
from linkproxy.dao.exceptions import DataStoreError
from linkproxy.dao.redis import RedisKeyValueStore


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


@pytest.fixture
def store(redis_client):
    return RedisKeyValueStore(redis_client=redis_client, prefix='linkproxy:test')


# -------------------------------
# 1. Point operations
# -------------------------------


def test_get(store, redis_client):
    redis_client.get.return_value = '{"url": "https://example.org/a.bin"}'

    assert store.get('k3x9qa') == '{"url": "https://example.org/a.bin"}'
    redis_client.get.assert_called_once_with('linkproxy:test:links:k3x9qa')


def test_get_decodes_bytes(store, redis_client):
    redis_client.get.return_value = b'https://example.org/a.bin'
    assert store.get('k3x9qa') == 'https://example.org/a.bin'


def test_get_missing_key(store, redis_client):
    redis_client.get.return_value = None
    assert store.get('k3x9qa') is None


def test_put(store, redis_client):
    store.put('k3x9qa', '{"url": "https://example.org/a.bin"}')
    redis_client.set.assert_called_once_with('linkproxy:test:links:k3x9qa', '{"url": "https://example.org/a.bin"}')


def test_delete(store, redis_client):
    store.delete('k3x9qa')
    redis_client.delete.assert_called_once_with('linkproxy:test:links:k3x9qa')


@pytest.mark.parametrize('call', [
    lambda store: store.get(123),
    lambda store: store.put('k3x9qa', {'url': 'https://example.org/a.bin'}),
    lambda store: store.delete(None),
])
def test_invalid_argument_types(store, call):
    with pytest.raises((TypeError, BeartypeCallHintParamViolation)):
        call(store)


# -------------------------------
# 2. Cursor listing
# -------------------------------


def test_list_first_page(store, redis_client):
    redis_client.scan.return_value = (17, ['linkproxy:test:links:k3x9qa', 'linkproxy:test:links:k3x9q'])

    page = store.list(limit=1000)

    assert page == KeyPage(keys=['k3x9qa', 'k3x9q'], cursor='17')
    redis_client.scan.assert_called_once_with(cursor=0, match='linkproxy:test:links:*', count=1000)


def test_list_last_page(store, redis_client):
    redis_client.scan.return_value = (0, [b'linkproxy:test:links:zzzzzz'])

    page = store.list(cursor='17', limit=50)

    assert page == KeyPage(keys=['zzzzzz'], cursor=None)
    redis_client.scan.assert_called_once_with(cursor=17, match='linkproxy:test:links:*', count=50)


def test_list_empty(store, redis_client):
    redis_client.scan.return_value = (0, [])
    assert store.list() == KeyPage(keys=[], cursor=None)


# -------------------------------
# 3. Connectivity errors
# -------------------------------


@pytest.mark.parametrize('method, call', [
    ('get', lambda store: store.get('k3x9qa')),
    ('set', lambda store: store.put('k3x9qa', 'https://example.org/a.bin')),
    ('delete', lambda store: store.delete('k3x9qa')),
    ('scan', lambda store: store.list()),
])
def test_connection_error(store, redis_client, method, call):
    getattr(redis_client, method).side_effect = redis.exceptions.ConnectionError('Connection refused')

    with pytest.raises(DataStoreError):
        call(store)
