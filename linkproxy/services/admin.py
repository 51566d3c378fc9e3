"""Administrative operations on link records

Classes:
    LinkAdmin:
        Create, edit, delete, enumerate and sweep link records.

Example:
    >>> admin = LinkAdmin(dao)
    >>> record = admin.create('https://example.org/a.bin', max_visits=1)
    >>> record.shortcode, record.kind
    ('15qmil', <LinkKind.FILE: 'file'>)
    >>> admin.update(record.shortcode, access_code='s3cret').access_code
    's3cret'
    >>> admin.clear_expired()
    0
"""

import logging
import urllib.parse
from dataclasses import replace
from typing import Any, Optional
from collections.abc import Callable

from beartype import beartype

from linkproxy.backends.release_assets import flatten_requested, releases_in_scope
from linkproxy.dao import LinkRecordDAO
from linkproxy.exceptions import InvalidConfigurationError, InvalidRequestError
from linkproxy.models import LinkKind, LinkRecordModel, SourceType
from linkproxy.models.link_record_model import default_source_type
from linkproxy.utils.constants import MAX_VISITS_LIMIT
from linkproxy.utils.helpers import now_ms
from linkproxy.utils.shortener import mint_shortcode


logger = logging.getLogger(__name__)

# Fields an update may touch; anything else is rejected
UPDATABLE_FIELDS = frozenset({'expire_at', 'max_visits', 'access_code'})

# Source types whose records must name a repository
REPOSITORY_SOURCES = frozenset({SourceType.REPO_CONTENTS, SourceType.RELEASE_ASSETS})


def is_absolute_url(target: str) -> bool:
    components = urllib.parse.urlsplit(target)
    return components.scheme in {'http', 'https'} and bool(components.netloc)


def validate_max_visits(max_visits: Optional[int]) -> None:
    if max_visits is None:
        return
    if isinstance(max_visits, bool) or not isinstance(max_visits, int) or not 1 <= max_visits <= MAX_VISITS_LIMIT:
        raise InvalidRequestError(f'Max visits must be between 1 and {MAX_VISITS_LIMIT}')


def validate_source_config(source_type: SourceType, source_config: dict[str, Any]) -> None:
    """Reject backend parameters that could never resolve

    Raises:
        InvalidConfigurationError: If owner/repo is missing for a repository
            source, the release count is invalid, or flattenReleaseFolder is set
            with several releases in scope.
    """
    if source_type not in REPOSITORY_SOURCES:
        return

    missing = [name for name in ('owner', 'repo') if not str(source_config.get(name) or '').strip()]
    if missing:
        raise InvalidConfigurationError(f"{source_type} source requires {' and '.join(missing)}.")

    if source_type == SourceType.RELEASE_ASSETS and releases_in_scope(source_config) != 1 and flatten_requested(source_config):
        raise InvalidConfigurationError('flattenReleaseFolder requires exactly one release in scope (tag, latest or count 1).')


class LinkAdmin:
    """Administrative operations on link records

    Args:
        dao (LinkRecordDAO):
            Link record store.
        clock (Callable[[], int]):
            Current time in milliseconds since the epoch. Defaults to now_ms.
    """

    def __init__(self, dao: LinkRecordDAO, clock: Callable[[], int] = now_ms):
        self.dao = dao
        self.clock = clock

    @beartype
    def create(
        self,
        target: str,
        *,
        expire_at: Optional[int] = None,
        max_visits: Optional[int] = None,
        access_code: Optional[str] = None,
        source_type: Optional[str] = None,
        source_config: Optional[dict[str, Any]] = None,
        kind: Optional[str] = None,
    ) -> LinkRecordModel:
        """Create and persist a new link record

        Args:
            target (str):
                External URL (file links) or backend path (folder links).
            expire_at (Optional[int]):
                Absolute expiry in milliseconds since the epoch.
            max_visits (Optional[int]):
                Visit quota between 1 and 9999.
            access_code (Optional[str]):
                Secret gating access. Blank values mean no code.
            source_type (Optional[str]):
                Backend tag. Inferred from the kind when omitted.
            source_config (Optional[dict[str, Any]]):
                Backend parameters (owner, repo, ref, tag, count, latest, flattenReleaseFolder).
            kind (Optional[str]):
                'file' or 'folder'. Inferred when omitted: absolute http(s)
                URLs are files, anything else is a folder path.

        Returns:
            LinkRecordModel: persisted record (visits = 0).

        Raises:
            InvalidRequestError: If the target is blank or max_visits is out of range.
            InvalidConfigurationError: If the kind, source type or backend parameters are invalid.
            CodeGenerationExhaustedError: If no free short code could be minted.
        """
        target = target.strip()
        if not target:
            raise InvalidRequestError('URL is required')
        validate_max_visits(max_visits)

        try:
            link_kind = LinkKind(kind) if kind else (LinkKind.FILE if is_absolute_url(target) else LinkKind.FOLDER)
            link_source = SourceType(source_type) if source_type else default_source_type(link_kind)
        except ValueError as e:
            raise InvalidConfigurationError(str(e)) from e

        source_config = dict(source_config or {})
        validate_source_config(link_source, source_config)

        now = self.clock()
        # fmt: off
        draft = LinkRecordModel(
            shortcode='',
            target=target,
            kind=link_kind,
            source_type=link_source,
            source_config=source_config,
            created_at=now,
            expire_at=expire_at,
            max_visits=max_visits,
            visits=0,
            access_code=access_code or None,
        )
        # fmt: on

        shortcode = mint_shortcode(f'{target}{now}', link_kind, self.dao.fingerprint, draft.fingerprint())
        record = replace(draft, shortcode=shortcode)
        self.dao.save(record)

        logger.info('Created link.', extra={'shortcode': shortcode, 'kind': str(link_kind), 'source_type': str(link_source)})
        return record

    @beartype
    def update(self, shortcode: str, **changes: Any) -> LinkRecordModel:
        """Edit the expiry, visit quota or access code of a link

        Only the keys present in `changes` are modified; an explicit None
        clears the value.

        Raises:
            LinkRecordNotFoundError: If no record is stored under the code.
            InvalidRequestError: If an unknown field is given or max_visits is out of range.
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidRequestError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")
        if changes.get('expire_at') is not None and (isinstance(changes['expire_at'], bool) or not isinstance(changes['expire_at'], int)):
            raise InvalidRequestError('Expiry must be a timestamp in milliseconds')
        if 'max_visits' in changes:
            validate_max_visits(changes['max_visits'])
        if 'access_code' in changes:
            changes['access_code'] = changes['access_code'] or None

        record = replace(self.dao.get(shortcode), **changes)
        self.dao.save(record)

        logger.info('Updated link.', extra={'shortcode': shortcode, 'fields': sorted(changes)})
        return record

    @beartype
    def delete(self, shortcode: str) -> None:
        self.dao.delete(shortcode)
        logger.info('Deleted link.', extra={'shortcode': shortcode})

    def list_links(self) -> list[tuple[str, LinkRecordModel]]:
        """Every stored link, newest first."""
        return sorted(self.dao.scan(), key=lambda item: item[1].created_at, reverse=True)

    def clear_expired(self, now: Optional[int] = None) -> int:
        """Delete every expired or quota-exhausted link and return how many were deleted."""
        now = self.clock() if now is None else now

        stale = [shortcode for shortcode, record in self.dao.scan() if record.is_invalid(now)]
        for shortcode in stale:
            self.dao.delete(shortcode)

        logger.info('Cleared invalid links.', extra={'cleared_count': len(stale)})
        return len(stale)
