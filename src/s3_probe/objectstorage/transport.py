"""HTTP transport for signed object storage requests.

The transport performs exactly one HTTP exchange per call. It never retries,
never follows redirects and never turns an HTTP status into an exception:
interpreting 3xx/4xx/5xx is left to the caller, because the meaning of a
status depends on the operation (a 404 on HEAD is an answer, not a fault).
Only failures to complete the exchange raise :class:`TransportError`.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Mapping, Optional, Protocol
from urllib.parse import urlparse

import urllib3
from urllib3.exceptions import (
    HTTPError,
    MaxRetryError,
    NewConnectionError,
    ProtocolError,
    SSLError,
    TimeoutError as Urllib3TimeoutError,
)

from s3_probe.core import get_logger, settings
from s3_probe.core.exceptions import ConfigError, TransportError

from .signing import SignedRequest

logger = get_logger(__name__)


@dataclass(frozen=True)
class Endpoint:
    """Where requests are sent and which region they are signed for.

    ``host`` may carry a port (``localhost:9000``).
    """

    host: str
    region: str
    use_path_style: bool = False
    secure: bool = True

    @classmethod
    def from_url(
        cls,
        endpoint_url: Optional[str],
        region: str,
        use_path_style: Optional[bool] = None,
    ) -> "Endpoint":
        """Build an endpoint from an optional override URL.

        Without an override the regional AWS endpoint is used with
        virtual-hosted addressing. Override endpoints (MinIO and other
        S3-compatible services) default to path-style addressing.

        Raises:
            ConfigError: If the region is empty or the URL is not usable
        """
        if not region:
            raise ConfigError("Region must not be empty")

        if not endpoint_url:
            return cls(
                host=f"s3.{region}.amazonaws.com",
                region=region,
                use_path_style=bool(use_path_style),
            )

        url = endpoint_url if "://" in endpoint_url else f"https://{endpoint_url}"
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"Invalid endpoint URL: {endpoint_url}")
        if parsed.path not in ("", "/") or parsed.query:
            raise ConfigError(
                f"Endpoint URL must not contain a path or query: {endpoint_url}"
            )

        return cls(
            host=parsed.netloc,
            region=region,
            use_path_style=True if use_path_style is None else use_path_style,
            secure=parsed.scheme == "https",
        )

    @property
    def scheme(self) -> str:
        return "https" if self.secure else "http"

    def _path_style_for(self, bucket: str) -> bool:
        # Dotted bucket names break wildcard TLS certificates
        return self.use_path_style or "." in bucket

    def host_for(self, bucket: str) -> str:
        """Host header value for requests against ``bucket``."""
        if self._path_style_for(bucket):
            return self.host
        return f"{bucket}.{self.host}"

    def path_for(self, bucket: str, key: Optional[str] = None) -> str:
        """Unencoded resource path for a bucket or an object in it."""
        if self._path_style_for(bucket):
            return f"/{bucket}/{key}" if key is not None else f"/{bucket}"
        return f"/{key}" if key is not None else "/"


@dataclass(frozen=True)
class RawResponse:
    """Status, headers and body of one HTTP exchange."""

    status: int
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes = field(default=b"", repr=False)

    @property
    def is_success(self) -> bool:
        return 200 <= self.status < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status < 400

    def header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """Look up a header by case-insensitive name."""
        wanted = name.lower()
        for key, value in self.headers.items():
            if key.lower() == wanted:
                return value
        return default


class CancellationToken:
    """Thread-safe flag a caller can set to abort an in-flight request."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class Transport(Protocol):
    """Protocol for executing signed requests."""

    def execute(
        self,
        request: SignedRequest,
        timeout: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RawResponse:
        """Perform one HTTP exchange and return the raw response."""
        ...


class HttpTransport(Transport):
    """urllib3-backed transport with a shared connection pool.

    A single instance can be shared by any number of threads; each call
    sends only the headers of its own signed request.
    """

    def __init__(
        self,
        endpoint: Endpoint,
        timeout: Optional[float] = None,
        max_pool_size: Optional[int] = None,
        pool: Optional[urllib3.PoolManager] = None,
        chunk_size: int = 64 * 1024,
    ):
        self.endpoint = endpoint
        self.timeout = settings.http_timeout if timeout is None else timeout
        self.chunk_size = chunk_size
        self._pool = pool or urllib3.PoolManager(
            maxsize=max_pool_size or settings.http_max_pool_size,
            retries=False,
        )
        logger.info(
            "HTTP transport initialized",
            host=endpoint.host,
            secure=endpoint.secure,
            timeout=self.timeout,
        )

    def execute(
        self,
        request: SignedRequest,
        timeout: Optional[float] = None,
        cancel_token: Optional[CancellationToken] = None,
    ) -> RawResponse:
        """Send a signed request and read the full response.

        Args:
            request: Signed request to send unchanged
            timeout: Seconds allowed for this exchange, overriding the default
            cancel_token: Token checked before sending and while reading

        Returns:
            The raw response, whatever its status

        Raises:
            TransportError: If the exchange fails, times out or is cancelled
        """
        url = f"{self.endpoint.scheme}://{request.host}{request.target}"
        limit = self.timeout if timeout is None else timeout

        if cancel_token is not None and cancel_token.cancelled:
            raise TransportError(
                f"{request.method} {url} cancelled before dispatch", reason="cancelled"
            )
        if limit <= 0:
            raise TransportError(
                f"{request.method} {url} deadline exceeded before dispatch",
                reason="timeout",
            )

        started = time.monotonic()
        try:
            response = self._pool.urlopen(
                request.method,
                url,
                body=request.body or None,
                headers=request.header_dict(),
                redirect=False,
                retries=False,
                timeout=urllib3.Timeout(total=limit),
                preload_content=False,
            )
        except HTTPError as e:
            raise self._transport_error(request.method, url, e)

        try:
            chunks = []
            for chunk in response.stream(self.chunk_size):
                if cancel_token is not None and cancel_token.cancelled:
                    response.close()
                    raise TransportError(
                        f"{request.method} {url} cancelled", reason="cancelled"
                    )
                chunks.append(chunk)
            body = b"".join(chunks)
        except HTTPError as e:
            raise self._transport_error(request.method, url, e)
        finally:
            response.release_conn()

        logger.debug(
            "HTTP exchange completed",
            method=request.method,
            host=request.host,
            path=request.path,
            status=response.status,
            elapsed=round(time.monotonic() - started, 3),
        )
        return RawResponse(
            status=response.status,
            headers=dict(response.headers.itermerged()),
            body=body,
        )

    @staticmethod
    def _transport_error(method: str, url: str, error: Exception) -> TransportError:
        """Classify a urllib3 failure."""
        if isinstance(error, MaxRetryError) and error.reason is not None:
            error = error.reason

        # NewConnectionError subclasses ConnectTimeoutError in some urllib3 releases
        if isinstance(error, SSLError):
            reason = "tls"
        elif isinstance(error, NewConnectionError):
            reason = "connection"
        elif isinstance(error, Urllib3TimeoutError):
            reason = "timeout"
        elif isinstance(error, ProtocolError):
            reason = "connection"
        else:
            reason = "protocol"

        logger.warning(
            "HTTP exchange failed", method=method, url=url, reason=reason, error=str(error)
        )
        return TransportError(f"{method} {url} failed ({reason}): {error}", reason=reason)
