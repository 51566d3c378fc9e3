"""Unit tests for LinkAdmin

Test coverage includes:

1. Creating links
   - File and folder kinds are inferred from the target and get 6 / 5 character codes.
   - Records are persisted with zero visits and the creation time.
   - Identical links created at the same instant share a code; collisions retry.
   - Blank targets, out-of-range quotas and bad backend parameters are rejected.

2. Updating links
   - Only expiry, quota and access code can change; None clears a value.
   - Unknown codes raise LinkRecordNotFoundError.

3. Deleting, listing and sweeping
   - list_links() returns newest first.
   - clear_expired() removes expired and exhausted links and reports the count.
"""

import json
from dataclasses import replace

import pytest
from beartype.roar import BeartypeCallHintParamViolation

from linkproxy.dao.exceptions import LinkRecordNotFoundError
from linkproxy.exceptions import InvalidConfigurationError, InvalidRequestError
from linkproxy.models import LinkRecordModel, LinkKind, SourceType
from linkproxy.services import LinkAdmin


NOW = 1735689600000


# -------------------------------
# Fixtures
# -------------------------------


@pytest.fixture
def admin(link_dao):
    return LinkAdmin(link_dao, clock=lambda: NOW)


# -------------------------------
# 1. Creating links
# -------------------------------


def test_create_file_link(admin, link_dao):
    record = admin.create('  https://example.org/a.bin ', max_visits=1)

    assert record.shortcode == '15qmil'
    assert len(record.shortcode) == 6
    assert record.kind == LinkKind.FILE
    assert record.source_type == SourceType.NONE
    assert record.target == 'https://example.org/a.bin'
    assert (record.created_at, record.visits, record.max_visits) == (NOW, 0, 1)
    assert link_dao.get('15qmil') == record


def test_create_folder_link(admin):
    record = admin.create('/docs', access_code='s3cret')

    assert record.shortcode == '4w3rp'
    assert record.kind == LinkKind.FOLDER
    assert record.source_type == SourceType.ALIST
    assert record.access_code == 's3cret'


def test_create_repository_link(admin):
    record = admin.create('/', kind='folder', source_type='release_assets', source_config={'owner': 'octo', 'repo': 'hello', 'latest': True, 'flattenReleaseFolder': True})

    assert len(record.shortcode) == 5
    assert record.source_type == SourceType.RELEASE_ASSETS
    assert record.source_config['flattenReleaseFolder'] is True


def test_create_blank_access_code(admin):
    assert admin.create('https://example.org/a.bin', access_code='').access_code is None


def test_create_identical_link_is_idempotent(admin, link_dao):
    first = admin.create('https://example.org/a.bin')
    second = admin.create('https://example.org/a.bin', max_visits=2)

    assert first.shortcode == second.shortcode == '15qmil'
    assert link_dao.get('15qmil').max_visits == 2


def test_create_collision_retries(admin, link_dao, memory_store):
    memory_store.put('15qmil', json.dumps({'url': 'https://example.org/other.bin', 'type': 'file'}))

    record = admin.create('https://example.org/a.bin')

    assert record.shortcode == 'xzgmoz'
    assert link_dao.get('15qmil').target == 'https://example.org/other.bin'


@pytest.mark.parametrize('target', ['', '   '])
def test_create_requires_target(admin, target):
    with pytest.raises(InvalidRequestError, match='URL is required'):
        admin.create(target)


@pytest.mark.parametrize('max_visits', [0, 10000, True, -1])
def test_create_max_visits_out_of_range(admin, max_visits):
    with pytest.raises(InvalidRequestError, match='Max visits must be between 1 and 9999'):
        admin.create('https://example.org/a.bin', max_visits=max_visits)


@pytest.mark.parametrize('kwargs', [
    {'kind': 'symlink'},
    {'source_type': 'ftp'},
    {'source_type': 'repo_contents', 'source_config': {'owner': 'octo'}},
    {'source_type': 'release_assets', 'source_config': {'owner': 'octo', 'repo': 'hello', 'count': 3, 'flattenReleaseFolder': True}},
    {'source_type': 'release_assets', 'source_config': {'owner': 'octo', 'repo': 'hello', 'count': 'many'}},
])
def test_create_invalid_configuration(admin, link_dao, kwargs):
    with pytest.raises(InvalidConfigurationError):
        admin.create('/', **kwargs)
    assert list(link_dao.scan()) == []


def test_create_invalid_argument_types(admin):
    with pytest.raises(BeartypeCallHintParamViolation):
        admin.create('https://example.org/a.bin', max_visits='10')


# -------------------------------
# 2. Updating links
# -------------------------------


def test_update(admin, link_dao):
    admin.create('https://example.org/a.bin', max_visits=1, access_code='s3cret')

    record = admin.update('15qmil', max_visits=5, expire_at=NOW + 1000)

    assert (record.max_visits, record.expire_at, record.access_code) == (5, NOW + 1000, 's3cret')
    assert link_dao.get('15qmil') == record


def test_update_clears_values(admin):
    admin.create('https://example.org/a.bin', max_visits=1, access_code='s3cret', expire_at=NOW)

    record = admin.update('15qmil', max_visits=None, access_code='', expire_at=None)

    assert (record.max_visits, record.access_code, record.expire_at) == (None, None, None)


def test_update_keeps_counters(admin, link_dao):
    created = admin.create('https://example.org/a.bin', max_visits=5)
    link_dao.save(replace(created, visits=4))

    assert admin.update('15qmil', max_visits=9).visits == 4


@pytest.mark.parametrize('changes, message', [
    ({'target': 'https://evil.example.org'}, 'Fields cannot be updated: target'),
    ({'max_visits': 0}, 'Max visits must be between 1 and 9999'),
    ({'expire_at': 'tomorrow'}, 'Expiry must be a timestamp in milliseconds'),
])
def test_update_invalid(admin, changes, message):
    admin.create('https://example.org/a.bin')

    with pytest.raises(InvalidRequestError, match=message):
        admin.update('15qmil', **changes)


def test_update_unknown_code(admin):
    with pytest.raises(LinkRecordNotFoundError):
        admin.update('nope00', max_visits=1)


# -------------------------------
# 3. Deleting, listing and sweeping
# -------------------------------


def test_delete(admin, link_dao):
    admin.create('https://example.org/a.bin')
    admin.delete('15qmil')

    assert link_dao.find('15qmil') is None


def test_list_links_newest_first(link_dao):
    for shortcode, created_at in [('aaaaaa', 3), ('bbbbbb', 1), ('cccccc', 2)]:
        link_dao.save(LinkRecordModel(shortcode=shortcode, target='https://example.org/a.bin', created_at=created_at))

    assert [shortcode for shortcode, _ in LinkAdmin(link_dao).list_links()] == ['aaaaaa', 'cccccc', 'bbbbbb']


def test_clear_expired(admin, link_dao):
    # fmt: off
    records = [
        LinkRecordModel(shortcode='expird', target='https://example.org/a.bin', expire_at=NOW - 1),
        LinkRecordModel(shortcode='usedup', target='https://example.org/a.bin', max_visits=2, visits=2),
        LinkRecordModel(shortcode='boundr', target='https://example.org/a.bin', expire_at=NOW),
        LinkRecordModel(shortcode='active', target='https://example.org/a.bin', max_visits=2, visits=1),
        LinkRecordModel(shortcode='forevr', target='https://example.org/a.bin'),
    ]
    # fmt: on
    for record in records:
        link_dao.save(record)

    assert admin.clear_expired() == 2
    assert sorted(shortcode for shortcode, _ in link_dao.scan()) == ['active', 'boundr', 'forevr']
    assert admin.clear_expired() == 0


def test_clear_expired_at_given_time(admin, link_dao):
    link_dao.save(LinkRecordModel(shortcode='boundr', target='https://example.org/a.bin', expire_at=NOW))
    assert admin.clear_expired(now=NOW + 1) == 1
