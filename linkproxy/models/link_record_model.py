"""Link record data model and its key-value store encoding

A link record is persisted as a JSON document under its short code:

    {
        "url": "/docs",
        "type": "folder",
        "sourceType": "alist",
        "sourceConfig": {},
        "createdAt": 1735689600000,
        "expireAt": null,
        "maxVisits": 10,
        "visits": 0,
        "accessCode": "s3cret"
    }

Older records may be stored as a bare URL string, or as JSON without the
"type" / "sourceType" fields. Those are still decoded (see LinkRecordModel.from_json).
"""

import json
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Optional

from linkproxy.utils.constants import FOLDER_CODE_LENGTH


class LinkKind(StrEnum):
    FILE = 'file'
    FOLDER = 'folder'


class SourceType(StrEnum):
    NONE = 'none'
    ALIST = 'alist'
    REPO_CONTENTS = 'repo_contents'
    RELEASE_ASSETS = 'release_assets'


def infer_kind(shortcode: str) -> LinkKind:
    """Infer a record's kind from its short code length (legacy records only)."""
    return LinkKind.FOLDER if len(shortcode) == FOLDER_CODE_LENGTH else LinkKind.FILE


def default_source_type(kind: LinkKind) -> SourceType:
    """Folders historically always pointed at AList, files at plain URLs."""
    return SourceType.ALIST if kind == LinkKind.FOLDER else SourceType.NONE


@dataclass(frozen=True)
class LinkRecordModel:
    """Represent a short link pointing at a remote file or folder.

    Attributes:
        shortcode (str):
            Key of the record in the key-value store.
        target (str):
            Backend-specific root location (external URL or backend path).
        kind (LinkKind):
            Whether the target is a single file or a browsable folder.
        source_type (SourceType):
            Backend serving the target. NONE means `target` is proxied as-is.
        source_config (dict):
            Backend-specific parameters (owner/repo/ref, tag/count/flattenReleaseFolder...).
        created_at (int):
            Creation timestamp in milliseconds since the epoch.
        expire_at (Optional[int]):
            Absolute expiry timestamp in milliseconds; None means never.
        max_visits (Optional[int]):
            Visit quota; None means unlimited.
        visits (int):
            Number of successful visits so far.
        access_code (Optional[str]):
            Secret gating access to the link.

    Example:
        >>> record = LinkRecordModel(shortcode='k3x9qa', target='https://example.org/a.bin', kind=LinkKind.FILE)
        >>> record.is_expired(now=0)
        False
        >>> record.quota_exhausted
        False
    """

    shortcode: str
    target: str
    kind: LinkKind = LinkKind.FILE
    source_type: SourceType = SourceType.NONE
    source_config: dict[str, Any] = field(default_factory=dict)
    created_at: int = 0
    expire_at: Optional[int] = None
    max_visits: Optional[int] = None
    visits: int = 0
    access_code: Optional[str] = None

    @property
    def is_folder(self) -> bool:
        return self.kind == LinkKind.FOLDER

    @property
    def quota_exhausted(self) -> bool:
        return self.max_visits is not None and self.visits >= self.max_visits

    def is_expired(self, now: int) -> bool:
        return self.expire_at is not None and now > self.expire_at

    def is_invalid(self, now: int) -> bool:
        """True when the link can no longer be visited (expired or out of visits)."""
        return self.is_expired(now) or self.quota_exhausted

    def fingerprint(self) -> str:
        """Identity of the link's content, ignoring counters and access rules.

        Two records with the same fingerprint point at the same thing, which
        lets short code generation treat a re-created link as idempotent.
        """
        # fmt: off
        return json.dumps({
            'url': self.target,
            'type': str(self.kind),
            'sourceType': str(self.source_type),
            'sourceConfig': self.source_config,
        }, sort_keys=True)
        # fmt: on

    def to_dict(self) -> dict[str, Any]:
        return {
            'url': self.target,
            'type': str(self.kind),
            'sourceType': str(self.source_type),
            'sourceConfig': dict(self.source_config),
            'createdAt': self.created_at,
            'expireAt': self.expire_at,
            'maxVisits': self.max_visits,
            'visits': self.visits,
            'accessCode': self.access_code,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_json(cls, shortcode: str, raw: str) -> 'LinkRecordModel':
        """Decode a stored value into a LinkRecordModel

        Args:
            shortcode (str):
                Key the value was stored under.
            raw (str):
                Stored value. Either a JSON document or a bare URL (legacy).

        Returns:
            LinkRecordModel: decoded record.

        Raises:
            ValueError: If the JSON document has an unknown type or source type.

        Example:
            >>> LinkRecordModel.from_json('k3x9qa', 'https://example.org/a.bin').kind
            <LinkKind.FILE: 'file'>
        """
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            data = None

        if not isinstance(data, dict):
            kind = infer_kind(shortcode)
            return cls(shortcode=shortcode, target=raw, kind=kind, source_type=default_source_type(kind))

        kind = LinkKind(data['type']) if data.get('type') else infer_kind(shortcode)
        source_type = SourceType(data['sourceType']) if data.get('sourceType') else default_source_type(kind)

        return cls(
            shortcode=shortcode,
            target=data.get('url') or '',
            kind=kind,
            source_type=source_type,
            source_config=data.get('sourceConfig') or {},
            created_at=data.get('createdAt') or 0,
            expire_at=data.get('expireAt'),
            max_visits=data.get('maxVisits'),
            visits=data.get('visits') or 0,
            access_code=data.get('accessCode') or None,
        )
