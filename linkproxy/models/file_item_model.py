from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class FileItem:
    """Represent one entry of a backend folder listing.

    FileItems only live for the duration of a single listing call and are
    never persisted.

    Attributes:
        name (str):
            Entry name (file name, directory name or release tag).
        size (int):
            Size in bytes (directories report 0 or the sum of their assets).
        is_directory (bool):
            True if the entry can be browsed into.
        modified_at (Optional[datetime]):
            Last modification time reported by the backend, if any.
        download_locator (Optional[str]):
            Opaque locator only meaningful to the backend that produced it.
        source_tag (str):
            Source type of the backend that produced the entry.
    """

    name: str
    size: int = 0
    is_directory: bool = False
    modified_at: Optional[datetime] = None
    download_locator: Optional[str] = None
    source_tag: str = ''

    def to_dict(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'size': self.size,
            'is_directory': self.is_directory,
            'modified_at': self.modified_at.isoformat() if self.modified_at else None,
            'source': self.source_tag,
        }
