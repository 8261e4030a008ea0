"""End-to-end tests against a local moto S3 server."""

import uuid

import boto3
import pytest
from moto.server import ThreadedMotoServer

from s3_probe.core.exceptions import NotFound
from s3_probe.objectstorage import S3ClientConfig, build_object_store
from s3_probe.probe import run_probe


@pytest.fixture(scope="module")
def moto_endpoint():
    """Start a moto server on a free port for the duration of the module."""
    server = ThreadedMotoServer(ip_address="127.0.0.1", port=0)
    server.start()
    host, port = server.get_host_and_port()
    yield f"http://{host}:{port}"
    server.stop()


@pytest.fixture
def bucket(moto_endpoint):
    """Create a fresh bucket through boto3."""
    name = f"probe-{uuid.uuid4().hex[:12]}"
    s3_client = boto3.client(
        "s3",
        aws_access_key_id="test_key",
        aws_secret_access_key="test_secret",
        region_name="us-east-1",
        endpoint_url=moto_endpoint,
    )
    s3_client.create_bucket(Bucket=name)
    return name


@pytest.fixture
def s3_client(moto_endpoint):
    return boto3.client(
        "s3",
        aws_access_key_id="test_key",
        aws_secret_access_key="test_secret",
        region_name="us-east-1",
        endpoint_url=moto_endpoint,
    )


@pytest.fixture
def live_store(moto_endpoint):
    """Object store talking HTTP to the moto server."""
    config = S3ClientConfig(
        access_key_id="test_key",
        secret_access_key="test_secret",
        region_name="us-east-1",
        endpoint_url=moto_endpoint,
    )
    return build_object_store(config)


class TestObjectStoreAgainstMoto:
    """Test the object store over real HTTP."""

    def test_empty_bucket_lists_nothing(self, live_store, bucket):
        """Test listing a new bucket."""
        assert live_store.list_objects(bucket) == []

    def test_put_head_list_delete(self, live_store, bucket, s3_client):
        """Test an object round trip."""
        uploaded = live_store.put_object(bucket, "data/file1.txt", b"content1")
        assert uploaded.size == 8

        metadata = live_store.head_object(bucket, "data/file1.txt")
        assert metadata.size == 8
        assert metadata.etag == uploaded.etag

        keys = [summary.key for summary in live_store.list_objects(bucket)]
        assert keys == ["data/file1.txt"]

        stored = s3_client.get_object(Bucket=bucket, Key="data/file1.txt")
        assert stored["Body"].read() == b"content1"

        live_store.delete_object(bucket, "data/file1.txt")
        assert live_store.list_objects(bucket) == []

    def test_list_with_prefix(self, live_store, bucket, s3_client):
        """Test a prefix narrows the listing."""
        s3_client.put_object(Bucket=bucket, Key="data/file1.txt", Body=b"content1")
        s3_client.put_object(Bucket=bucket, Key="other/file2.txt", Body=b"content2")

        objects = live_store.list_objects(bucket, prefix="data/")

        assert [summary.key for summary in objects] == ["data/file1.txt"]
        assert objects[0].size == 8

    def test_head_missing_object(self, live_store, bucket):
        """Test a missing object raises NotFound."""
        with pytest.raises(NotFound):
            live_store.head_object(bucket, "missing.txt")

    def test_key_with_spaces(self, live_store, bucket, s3_client):
        """Test keys needing percent-encoding survive the round trip."""
        live_store.put_object(bucket, "reports/q1 summary.txt", b"abc")

        response = s3_client.head_object(Bucket=bucket, Key="reports/q1 summary.txt")

        assert response["ContentLength"] == 3


class TestProbeAgainstMoto:
    """Test the full probe sequence over real HTTP."""

    def test_run_probe(self, live_store, bucket, s3_client, tmp_path):
        """Test the probe leaves the bucket as it found it."""
        s3_client.put_object(Bucket=bucket, Key="backup-1.tar", Body=b"x")
        source = tmp_path / "test_file.txt"
        source.write_bytes(b"hello")

        report = run_probe(live_store, bucket, source_path=source)

        assert [summary.key for summary in report.objects] == ["backup-1.tar"]
        assert [step.step for step in report.steps] == ["upload", "head", "delete"]
        assert report.ok
        assert report.steps[1].metadata.size == 5

        remaining = s3_client.list_objects_v2(Bucket=bucket)
        assert [item["Key"] for item in remaining["Contents"]] == ["backup-1.tar"]
