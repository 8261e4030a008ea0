"""Value types returned by the object store facade."""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class ObjectSummary:
    """One entry of a bucket listing."""

    key: str
    size: int
    etag: str
    last_modified: datetime


@dataclass(frozen=True)
class ObjectMetadata:
    """Metadata of a single object, from HEAD or PUT response headers."""

    etag: str
    size: int
    server_side_encryption: bool = False
    version_id: Optional[str] = None
    last_modified: Optional[datetime] = None
