"""Shared fixtures for the linkproxy unit tests

Fixtures:
    - `memory_store`: in-memory KeyValueStore with small, cursor-paginated listings.
    - `link_dao`: LinkRecordDAO over `memory_store`.
"""

import pytest

from linkproxy.dao import LinkRecordDAO
from linkproxy.dao.base import KeyValueStore, KeyPage


class InMemoryKeyValueStore(KeyValueStore):
    """Dictionary-backed KeyValueStore paginating listings by insertion order."""

    def __init__(self, page_size: int = 2):
        self.data = {}
        self.page_size = page_size
        self.list_calls = []

    def get(self, key):
        return self.data.get(key)

    def put(self, key, value):
        self.data[key] = value

    def delete(self, key):
        self.data.pop(key, None)

    def list(self, cursor=None, limit=1000):
        self.list_calls.append((cursor, limit))
        keys = sorted(self.data)
        start = int(cursor or 0)
        end = start + min(limit, self.page_size)
        return KeyPage(keys=keys[start:end], cursor=str(end) if end < len(keys) else None)


@pytest.fixture
def memory_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def link_dao(memory_store):
    return LinkRecordDAO(memory_store)
