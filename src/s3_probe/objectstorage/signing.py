"""SigV4 request signing for S3-compatible services.

This module turns a :class:`RequestDraft` into an immutable
:class:`SignedRequest` carrying an ``AWS4-HMAC-SHA256`` Authorization header.

Canonicalisation Rules:
    - Path: URI-encoded once with ``/`` preserved (S3 does not double-encode)
    - Query: names and values URI-encoded, sorted by name then value
    - Headers: names lower-cased, values trimmed with inner whitespace
      collapsed, sorted by name
    - Signed headers: ``host`` and every ``x-amz-*`` header

The path and query of a signed request are stored in their canonical form
and sent verbatim, so the request on the wire is the request that was
hashed. The timestamp is always passed in by the caller.
"""

import hashlib
import hmac
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, Mapping, Optional, Union

from s3_probe.core import get_logger
from s3_probe.core.exceptions import SigningError

from .credentials import Credentials

logger = get_logger(__name__)

ALGORITHM = "AWS4-HMAC-SHA256"
EMPTY_PAYLOAD_SHA256 = hashlib.sha256(b"").hexdigest()

_UNRESERVED = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_.~"
)
_SIGNER_HEADERS = frozenset(
    {"host", "x-amz-date", "x-amz-content-sha256", "x-amz-security-token", "authorization"}
)

HeaderInput = Union[Mapping[str, str], Iterable[tuple[str, str]]]


@dataclass(frozen=True)
class RequestDraft:
    """An unsigned request as the facade wants to send it.

    ``path`` is the raw, unencoded resource path, e.g. ``/bucket/my key``.
    """

    method: str
    host: str
    path: str = "/"
    query: Mapping[str, str] = field(default_factory=dict)
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = field(default=b"", repr=False)


@dataclass(frozen=True)
class SignedRequest:
    """A signed request, ready for transport and not modifiable."""

    method: str
    host: str
    path: str
    query: str
    headers: tuple[tuple[str, str], ...]
    payload_hash: str
    body: bytes = field(default=b"", repr=False)

    @property
    def target(self) -> str:
        """Request target (encoded path plus query) for the request line."""
        return f"{self.path}?{self.query}" if self.query else self.path

    def header(self, name: str) -> Optional[str]:
        """Look up a header by case-insensitive name."""
        wanted = name.lower()
        for key, value in self.headers:
            if key == wanted:
                return value
        return None

    def header_dict(self) -> dict[str, str]:
        """Return a copy of the headers; changing it does not affect the request."""
        return dict(self.headers)


def uri_encode(value: str, encode_slash: bool = True) -> str:
    """Percent-encode everything outside the RFC 3986 unreserved set.

    Non-ASCII characters are encoded as their UTF-8 bytes with uppercase hex.
    """
    result = []
    for ch in value:
        if ch in _UNRESERVED or (ch == "/" and not encode_slash):
            result.append(ch)
        else:
            result.extend(f"%{byte:02X}" for byte in ch.encode("utf-8"))
    return "".join(result)


def canonical_uri(path: str) -> str:
    """Build the canonical (and on-the-wire) path."""
    if not path:
        return "/"
    if not path.startswith("/"):
        path = "/" + path
    return uri_encode(path, encode_slash=False)


def canonical_query_string(query: Mapping[str, str]) -> str:
    """Build the canonical (and on-the-wire) query string."""
    encoded = sorted(
        (uri_encode(str(name)), uri_encode(str(value)))
        for name, value in query.items()
    )
    return "&".join(f"{name}={value}" for name, value in encoded)


def canonicalize_headers(headers: HeaderInput) -> tuple[tuple[str, str], ...]:
    """Canonicalise a header set.

    Lower-cases names, trims values and collapses inner whitespace, then
    sorts by name. Applying it to its own output returns the same tuple.

    Raises:
        SigningError: If names collide after lower-casing, or a name or
            value cannot be sent as an HTTP header
    """
    items = headers.items() if isinstance(headers, Mapping) else headers

    canonical: dict[str, str] = {}
    for name, value in items:
        lowered = name.strip().lower()
        if not lowered or any(ch in lowered for ch in " \t:\r\n"):
            raise SigningError(f"Invalid header name: {name!r}")
        if lowered in canonical:
            raise SigningError(f"Duplicate header: {lowered}")
        if not isinstance(value, str):
            raise SigningError(f"Header value for '{lowered}' must be a string")
        if "\r" in value or "\n" in value:
            raise SigningError(f"Header value for '{lowered}' contains a line break")
        try:
            value.encode("latin-1")
        except UnicodeEncodeError as e:
            raise SigningError(f"Header value for '{lowered}' is not encodable: {e}")
        canonical[lowered] = " ".join(value.split())

    return tuple(sorted(canonical.items()))


def build_canonical_request(
    method: str,
    path: str,
    query: str,
    headers: tuple[tuple[str, str], ...],
    signed_headers: str,
    payload_hash: str,
) -> str:
    """Assemble the canonical request from already canonical parts."""
    signed = set(signed_headers.split(";"))
    canonical_headers = "".join(
        f"{name}:{value}\n" for name, value in headers if name in signed
    )
    return "\n".join(
        [method, path, query, canonical_headers, signed_headers, payload_hash]
    )


def _hmac_sha256(key: bytes, msg: str) -> bytes:
    return hmac.new(key, msg.encode("utf-8"), hashlib.sha256).digest()


def derive_signing_key(
    secret_access_key: str, datestamp: str, region: str, service: str
) -> bytes:
    """Derive the date, region and service scoped signing key."""
    k_date = _hmac_sha256(("AWS4" + secret_access_key).encode("utf-8"), datestamp)
    k_region = _hmac_sha256(k_date, region)
    k_service = _hmac_sha256(k_region, service)
    return _hmac_sha256(k_service, "aws4_request")


class RequestSigner:
    """Signs request drafts with SigV4."""

    def __init__(self, service: str = "s3"):
        self.service = service

    def sign(
        self,
        draft: RequestDraft,
        credentials: Credentials,
        region: str,
        timestamp: datetime,
    ) -> SignedRequest:
        """Sign a request draft.

        Args:
            draft: Request to sign
            credentials: Credentials to bind the request to
            region: Signing region
            timestamp: Timezone-aware signing time

        Returns:
            Signed request with the Authorization header attached

        Raises:
            SigningError: If the draft, region or timestamp is malformed
        """
        if timestamp.tzinfo is None or timestamp.utcoffset() is None:
            raise SigningError("Signing timestamp must be timezone-aware")
        if not region or not region.strip():
            raise SigningError("Signing region must not be empty")
        if not draft.host:
            raise SigningError("Request host must not be empty")
        if not isinstance(draft.body, (bytes, bytearray)):
            raise SigningError("Request body must be bytes")

        for name in draft.headers:
            if name.strip().lower() in _SIGNER_HEADERS:
                raise SigningError(f"Header '{name}' is set by the signer")

        method = draft.method.upper()
        when = timestamp.astimezone(timezone.utc)
        amz_date = when.strftime("%Y%m%dT%H%M%SZ")
        datestamp = when.strftime("%Y%m%d")
        body = bytes(draft.body)
        payload_hash = hashlib.sha256(body).hexdigest()

        raw_headers = list(draft.headers.items())
        raw_headers.extend(
            [
                ("host", draft.host),
                ("x-amz-date", amz_date),
                ("x-amz-content-sha256", payload_hash),
            ]
        )
        if credentials.session_token:
            raw_headers.append(("x-amz-security-token", credentials.session_token))

        headers = canonicalize_headers(raw_headers)
        signed_headers = ";".join(
            name for name, _ in headers if name == "host" or name.startswith("x-amz-")
        )

        path = canonical_uri(draft.path)
        query = canonical_query_string(draft.query)
        canonical_request = build_canonical_request(
            method, path, query, headers, signed_headers, payload_hash
        )

        scope = f"{datestamp}/{region}/{self.service}/aws4_request"
        string_to_sign = "\n".join(
            [
                ALGORITHM,
                amz_date,
                scope,
                hashlib.sha256(canonical_request.encode("utf-8")).hexdigest(),
            ]
        )
        signing_key = derive_signing_key(
            credentials.secret_access_key, datestamp, region, self.service
        )
        signature = hmac.new(
            signing_key, string_to_sign.encode("utf-8"), hashlib.sha256
        ).hexdigest()

        authorization = (
            f"{ALGORITHM} Credential={credentials.access_key_id}/{scope}, "
            f"SignedHeaders={signed_headers}, Signature={signature}"
        )

        logger.debug(
            "Request signed",
            method=method,
            path=path,
            signed_headers=signed_headers,
        )
        return SignedRequest(
            method=method,
            host=draft.host,
            path=path,
            query=query,
            headers=headers + (("authorization", authorization),),
            payload_hash=payload_hash,
            body=body,
        )
