"""A minimal exerciser for S3-compatible object storage accounts.

This package provides a small, self-contained object storage client (SigV4
signing, pooled HTTP transport and a list/head/put/delete facade) and a
scripted probe that exercises a bucket end to end.

Recommended Usage:
    >>> from s3_probe import load_probe_config, build_object_store, run_probe
    >>> config = load_probe_config("config.toml")
    >>> store = build_object_store(config.to_client_config())
    >>> report = run_probe(store, config.backup_s3_bucket)

Advanced Usage:
    Import the client core directly for individual operations:

    >>> from s3_probe.objectstorage import Endpoint, ObjectStore
"""

__version__ = "0.1.0"

from .core.exceptions import (
    AuthenticationError,
    ConfigError,
    DeleteFailure,
    FileOpenFailure,
    HeadFailure,
    ListFailure,
    NotFound,
    ObjectStoreError,
    S3ProbeError,
    SigningError,
    TransportError,
    UploadFailure,
)
from .objectstorage import (
    ObjectMetadata,
    ObjectStore,
    ObjectSummary,
    S3ClientConfig,
    build_object_store,
)
from .probe import ProbeReport, StepOutcome, run_probe
from .schemas import ProbeConfig, load_probe_config

__all__ = [
    # Configuration
    "ProbeConfig",
    "S3ClientConfig",
    "load_probe_config",
    # Client
    "ObjectMetadata",
    "ObjectStore",
    "ObjectSummary",
    "build_object_store",
    # Probe
    "ProbeReport",
    "StepOutcome",
    "run_probe",
    # Errors
    "AuthenticationError",
    "ConfigError",
    "DeleteFailure",
    "FileOpenFailure",
    "HeadFailure",
    "ListFailure",
    "NotFound",
    "ObjectStoreError",
    "S3ProbeError",
    "SigningError",
    "TransportError",
    "UploadFailure",
]
