"""Test configuration and fixtures for s3-probe."""

from datetime import datetime, timezone

import pytest

from s3_probe.objectstorage import (
    Endpoint,
    ObjectStore,
    RawResponse,
    StaticCredentialProvider,
)

FIXED_TIME = datetime(2024, 1, 15, 12, 30, 45, tzinfo=timezone.utc)

S3_NAMESPACE = "http://s3.amazonaws.com/doc/2006-03-01/"


class ScriptedTransport:
    """Transport double that replays queued responses and records requests."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []
        self.timeouts = []

    def queue(self, *responses):
        self.responses.extend(responses)

    def execute(self, request, timeout=None, cancel_token=None):
        self.requests.append(request)
        self.timeouts.append(timeout)
        if not self.responses:
            raise AssertionError(f"Unexpected request: {request.method} {request.target}")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def list_page(keys, next_token=None, size=10):
    """Build a ListObjectsV2 response for the given keys."""
    contents = "".join(
        f"<Contents><Key>{key}</Key>"
        f"<LastModified>2024-01-01T00:00:00.000Z</LastModified>"
        f'<ETag>"etag-{key}"</ETag><Size>{size}</Size>'
        f"<StorageClass>STANDARD</StorageClass></Contents>"
        for key in keys
    )
    truncated = "true" if next_token else "false"
    token = (
        f"<NextContinuationToken>{next_token}</NextContinuationToken>"
        if next_token
        else ""
    )
    body = (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f'<ListBucketResult xmlns="{S3_NAMESPACE}">'
        f"<Name>test-bucket</Name><Prefix></Prefix><KeyCount>{len(keys)}</KeyCount>"
        f"<MaxKeys>1000</MaxKeys><IsTruncated>{truncated}</IsTruncated>"
        f"{token}{contents}</ListBucketResult>"
    )
    return RawResponse(status=200, headers={"Content-Type": "application/xml"}, body=body.encode())


def error_response(status, code, message="", headers=None):
    """Build an S3 XML error response."""
    body = (
        f'<?xml version="1.0" encoding="UTF-8"?>'
        f"<Error><Code>{code}</Code><Message>{message}</Message>"
        f"<RequestId>REQ123</RequestId></Error>"
    )
    return RawResponse(status=status, headers=headers or {}, body=body.encode())


@pytest.fixture
def endpoint():
    """Path-style endpoint for a local S3-compatible service."""
    return Endpoint.from_url("http://localhost:9000", "us-east-1")


@pytest.fixture
def credentials():
    """Static test credentials."""
    return StaticCredentialProvider("test_key", "test_secret")


@pytest.fixture
def transport():
    """Empty scripted transport; tests queue responses on it."""
    return ScriptedTransport()


@pytest.fixture
def store(endpoint, credentials, transport):
    """Object store wired to the scripted transport and a fixed clock."""
    return ObjectStore(
        endpoint, credentials, transport=transport, clock=lambda: FIXED_TIME
    )
