"""Unit tests for the LinkRecordDAO

Test coverage includes:

1. Point operations
   - save() stores the record's JSON under its short code.
   - get() decodes stored records and raises LinkRecordNotFoundError for unknown codes.
   - find() returns None for unknown codes.
   - delete() removes records and ignores unknown codes.

2. Fingerprint lookup
   - Returns None for free codes and the stored content fingerprint otherwise.
   - Undecodable values still occupy their code.

3. Full scans
   - scan() follows store cursors until exhausted.
   - Duplicate keys are yielded once; vanished and undecodable records are skipped.

4. Errors
   - Store connectivity errors propagate as DataStoreError.
"""

import json
from unittest.mock import MagicMock

import pytest

from linkproxy.dao import LinkRecordDAO
from linkproxy.dao.base import KeyValueStore, KeyPage
from linkproxy.dao.exceptions import DataStoreError, LinkRecordNotFoundError
from linkproxy.exceptions import NotFoundError
from linkproxy.models import LinkRecordModel, LinkKind, SourceType


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def record():
    return LinkRecordModel(
        shortcode='k3x9qa',
        target='https://example.org/a.bin',
        created_at=1735689600000,
        max_visits=1,
    )


def make_record(shortcode, created_at=0, **kwargs):
    return LinkRecordModel(shortcode=shortcode, target=f'https://example.org/{shortcode}.bin', created_at=created_at, **kwargs)


# -------------------------------
# 1. Point operations
# -------------------------------


def test_save(link_dao, memory_store, record):
    link_dao.save(record)
    assert json.loads(memory_store.data['k3x9qa']) == record.to_dict()


def test_get(link_dao, record):
    link_dao.save(record)
    assert link_dao.get('k3x9qa') == record


def test_get_legacy_value(link_dao, memory_store):
    memory_store.put('k3x9q', '/docs')

    found = link_dao.get('k3x9q')

    assert found.kind == LinkKind.FOLDER
    assert found.source_type == SourceType.ALIST
    assert found.target == '/docs'


def test_get_unknown_code(link_dao):
    with pytest.raises(LinkRecordNotFoundError, match="Link record with code 'nope00' not found.") as exc_info:
        link_dao.get('nope00')

    assert isinstance(exc_info.value, NotFoundError)
    assert exc_info.value.status_code == 404


def test_find(link_dao, record):
    assert link_dao.find('k3x9qa') is None
    link_dao.save(record)
    assert link_dao.find('k3x9qa') == record


def test_delete(link_dao, memory_store, record):
    link_dao.save(record)
    link_dao.delete('k3x9qa')
    link_dao.delete('k3x9qa')

    assert 'k3x9qa' not in memory_store.data


# -------------------------------
# 2. Fingerprint lookup
# -------------------------------


def test_fingerprint(link_dao, record):
    assert link_dao.fingerprint('k3x9qa') is None

    link_dao.save(record)

    assert link_dao.fingerprint('k3x9qa') == record.fingerprint()


def test_fingerprint_of_undecodable_value(link_dao, memory_store):
    memory_store.put('k3x9qa', json.dumps({'url': '/docs', 'type': 'symlink'}))

    fingerprint = link_dao.fingerprint('k3x9qa')

    assert fingerprint is not None
    assert fingerprint != make_record('k3x9qa').fingerprint()


# -------------------------------
# 3. Full scans
# -------------------------------


def test_scan_follows_cursors(link_dao, memory_store):
    for index, shortcode in enumerate(['aaaaaa', 'bbbbbb', 'cccccc', 'ddddd']):
        link_dao.save(make_record(shortcode, created_at=index))

    scanned = dict(link_dao.scan())

    assert sorted(scanned) == ['aaaaaa', 'bbbbbb', 'cccccc', 'ddddd']
    assert scanned['cccccc'].created_at == 2
    assert [cursor for cursor, _ in memory_store.list_calls] == [None, '2']


def test_scan_skips_duplicates_vanished_and_undecodable_records(record):
    store = MagicMock(spec=KeyValueStore)
    store.list.side_effect = [
        KeyPage(keys=['k3x9qa', 'gone00'], cursor='5'),
        KeyPage(keys=['k3x9qa', 'broken'], cursor=None),
    ]
    values = {'k3x9qa': record.to_json(), 'broken': json.dumps({'url': '/x', 'type': 'symlink'})}
    store.get.side_effect = values.get

    scanned = list(LinkRecordDAO(store).scan(limit=10))

    assert scanned == [('k3x9qa', record)]
    assert [c.kwargs for c in store.list.call_args_list] == [{'cursor': None, 'limit': 10}, {'cursor': '5', 'limit': 10}]


def test_scan_empty_store(link_dao):
    assert list(link_dao.scan()) == []


# -------------------------------
# 4. Errors
# -------------------------------


def test_store_errors_propagate():
    store = MagicMock(spec=KeyValueStore)
    store.get.side_effect = DataStoreError("Can't connect to Redis at localhost:6379/0.")

    with pytest.raises(DataStoreError):
        LinkRecordDAO(store).get('k3x9qa')
