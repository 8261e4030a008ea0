"""Exception hierarchy for s3-probe."""

from typing import Optional


class S3ProbeError(Exception):
    """Base exception for all s3-probe errors."""

    pass


class ConfigError(S3ProbeError):
    """Raised when configuration is missing or invalid."""

    pass


class SigningError(S3ProbeError):
    """Raised when a request cannot be signed because its input is malformed."""

    pass


class TransportError(S3ProbeError):
    """Raised when an HTTP exchange could not be completed.

    ``reason`` is one of ``connection``, ``timeout``, ``tls``, ``protocol``
    or ``cancelled``. A non-2xx status is never a transport error.
    """

    def __init__(self, message: str, reason: str = "connection"):
        super().__init__(message)
        self.reason = reason


class FileOpenFailure(S3ProbeError):
    """Raised when a local file cannot be read for upload."""

    def __init__(self, message: str, path: str):
        super().__init__(message)
        self.path = path


class ObjectStoreError(S3ProbeError):
    """Base for errors reported by the object store as an HTTP status."""

    def __init__(
        self,
        operation: str,
        bucket: str,
        key: Optional[str] = None,
        status: Optional[int] = None,
        code: Optional[str] = None,
        excerpt: str = "",
        message: Optional[str] = None,
    ):
        self.operation = operation
        self.bucket = bucket
        self.key = key
        self.status = status
        self.code = code
        self.excerpt = excerpt
        super().__init__(message or self._describe())

    @property
    def is_authentication_failure(self) -> bool:
        return self.status in (401, 403)

    def _describe(self) -> str:
        target = f"{self.bucket}/{self.key}" if self.key else self.bucket
        text = f"{self.operation} failed for '{target}'"
        details = []
        if self.status is not None:
            details.append(f"status {self.status}")
        if self.code:
            details.append(self.code)
        if details:
            text += ": " + ", ".join(details)
        if self.excerpt:
            text += f" ({self.excerpt})"
        return text


class NotFound(ObjectStoreError):
    """Raised when the bucket or key does not exist."""

    pass


class AuthenticationError(ObjectStoreError):
    """Raised when the store rejects the credentials or signature."""

    pass


class ListFailure(ObjectStoreError):
    """Raised when listing a bucket fails."""

    pass


class HeadFailure(ObjectStoreError):
    """Raised when fetching object metadata fails."""

    pass


class UploadFailure(ObjectStoreError):
    """Raised when an object upload is rejected."""

    pass


class DeleteFailure(ObjectStoreError):
    """Raised when an object delete is rejected."""

    pass
