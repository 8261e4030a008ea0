"""Object storage client core for S3-compatible services."""

from .client import ObjectStore, S3ClientConfig, build_object_store
from .credentials import CredentialProvider, Credentials, StaticCredentialProvider
from .models import ObjectMetadata, ObjectSummary
from .signing import RequestDraft, RequestSigner, SignedRequest, canonicalize_headers
from .transport import (
    CancellationToken,
    Endpoint,
    HttpTransport,
    RawResponse,
    Transport,
)

__all__ = [
    "CancellationToken",
    "CredentialProvider",
    "Credentials",
    "Endpoint",
    "HttpTransport",
    "ObjectMetadata",
    "ObjectStore",
    "ObjectSummary",
    "RawResponse",
    "RequestDraft",
    "RequestSigner",
    "S3ClientConfig",
    "SignedRequest",
    "StaticCredentialProvider",
    "Transport",
    "build_object_store",
    "canonicalize_headers",
]
