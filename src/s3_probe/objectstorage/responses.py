"""Parsing of S3 REST responses into value types."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional
from xml.etree import ElementTree as ET

from .models import ObjectMetadata, ObjectSummary
from .transport import RawResponse

EXCERPT_LIMIT = 256


@dataclass(frozen=True)
class ListPage:
    """One page of a ListObjectsV2 response."""

    summaries: list[ObjectSummary] = field(default_factory=list)
    is_truncated: bool = False
    next_continuation_token: Optional[str] = None


def _local_name(tag: str) -> str:
    # "{http://s3.amazonaws.com/doc/2006-03-01/}Key" -> "Key"
    return tag.rsplit("}", 1)[-1]


def _child_text(element: ET.Element, name: str) -> Optional[str]:
    for child in element:
        if _local_name(child.tag) == name:
            return child.text or ""
    return None


def strip_etag(value: Optional[str]) -> Optional[str]:
    """Remove the double quotes S3 puts around ETag values."""
    if value is None:
        return None
    value = value.strip()
    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
        return value[1:-1]
    return value


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO 8601 listing timestamp such as ``2009-10-12T17:50:30.000Z``."""
    parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def parse_http_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 7231 date header; unparsable values yield None."""
    if not value:
        return None
    try:
        return parsedate_to_datetime(value)
    except (TypeError, ValueError):
        return None


def excerpt(body: bytes, limit: int = EXCERPT_LIMIT) -> str:
    """Decode and truncate a response body for error messages."""
    text = body.decode("utf-8", errors="replace").strip()
    if len(text) > limit:
        return text[:limit] + "..."
    return text


def parse_error(body: bytes) -> tuple[Optional[str], Optional[str]]:
    """Extract ``Code`` and ``Message`` from an S3 XML error body."""
    if not body:
        return None, None
    try:
        root = ET.fromstring(body)
    except ET.ParseError:
        return None, None
    return _child_text(root, "Code"), _child_text(root, "Message")


def parse_list_page(body: bytes) -> ListPage:
    """Parse a ListObjectsV2 ``ListBucketResult`` document.

    Raises:
        ValueError: If the document is not a well-formed listing
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError as e:
        raise ValueError(f"Malformed listing XML: {e}")

    if _local_name(root.tag) != "ListBucketResult":
        raise ValueError(f"Unexpected listing root element: {_local_name(root.tag)}")

    summaries = []
    for element in root:
        if _local_name(element.tag) != "Contents":
            continue
        key = _child_text(element, "Key")
        if key is None:
            raise ValueError("Listing entry without a Key")
        last_modified = _child_text(element, "LastModified")
        summaries.append(
            ObjectSummary(
                key=key,
                size=int(_child_text(element, "Size") or 0),
                etag=strip_etag(_child_text(element, "ETag")) or "",
                last_modified=(
                    parse_timestamp(last_modified)
                    if last_modified
                    else datetime.fromtimestamp(0, tz=timezone.utc)
                ),
            )
        )

    is_truncated = (_child_text(root, "IsTruncated") or "false").strip().lower() == "true"
    token = _child_text(root, "NextContinuationToken") or None

    return ListPage(
        summaries=summaries,
        is_truncated=is_truncated,
        next_continuation_token=token,
    )


def metadata_from_headers(
    response: RawResponse,
    fallback_size: Optional[int] = None,
    fallback_etag: Optional[str] = None,
) -> ObjectMetadata:
    """Build object metadata from HEAD/PUT response headers.

    ``fallback_size`` takes precedence over ``Content-Length`` when given,
    since a PUT response's length describes the (empty) response body.
    """
    if fallback_size is not None:
        size = fallback_size
    else:
        try:
            size = int(response.header("Content-Length") or 0)
        except ValueError:
            size = 0

    return ObjectMetadata(
        etag=strip_etag(response.header("ETag")) or fallback_etag or "",
        size=size,
        server_side_encryption=bool(response.header("x-amz-server-side-encryption")),
        version_id=response.header("x-amz-version-id") or None,
        last_modified=parse_http_date(response.header("Last-Modified")),
    )
