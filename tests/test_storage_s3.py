from __future__ import annotations

import io
from datetime import datetime, timezone

import boto3
import pytest
from botocore.exceptions import EndpointConnectionError, ReadTimeoutError
from botocore.response import StreamingBody
from botocore.stub import ANY, Stubber

from wopi_bridge.exceptions import BackendError, BackendUnavailableError, ObjectNotFoundError
from wopi_bridge.storage import S3Storage

BUCKET = "documents"


@pytest.fixture()
def s3_client():
    session = boto3.session.Session(region_name="us-east-1")
    return session.client("s3", aws_access_key_id="testing", aws_secret_access_key="testing")


@pytest.fixture()
def stubber(s3_client):
    with Stubber(s3_client) as stub:
        yield stub
        stub.assert_no_pending_responses()


def test_head_maps_size_and_version(s3_client, stubber):
    modified = datetime(2024, 5, 1, 12, 0, 0, 123000, tzinfo=timezone.utc)
    stubber.add_response(
        "head_object",
        {"ContentLength": 3, "LastModified": modified},
        {"Bucket": BUCKET, "Key": "tenant/reports/q1.xlsx"},
    )
    storage = S3Storage(BUCKET, prefix="/tenant/", client=s3_client)

    head = storage.head("reports/q1.xlsx")

    assert head.size == 3
    assert head.version == str(int(modified.timestamp() * 1000))


def test_head_missing_key(s3_client, stubber):
    stubber.add_client_error("head_object", service_error_code="404", http_status_code=404)
    storage = S3Storage(BUCKET, client=s3_client)
    with pytest.raises(ObjectNotFoundError):
        storage.head("missing.xlsx")


def test_get_content_streams_body(s3_client, stubber):
    stubber.add_response(
        "get_object",
        {"Body": StreamingBody(io.BytesIO(b"ABCDEF"), 6), "ContentLength": 6},
        {"Bucket": BUCKET, "Key": "demo.xlsx"},
    )
    storage = S3Storage(BUCKET, chunk_size=4, client=s3_client)

    chunks = list(storage.get_content("demo.xlsx"))

    assert chunks == [b"ABCD", b"EF"]


def test_get_content_missing_key_raises_on_call(s3_client, stubber):
    stubber.add_client_error("get_object", service_error_code="NoSuchKey", http_status_code=404)
    storage = S3Storage(BUCKET, client=s3_client)
    with pytest.raises(ObjectNotFoundError):
        storage.get_content("missing.xlsx")


def test_put_content_overwrites_key(s3_client, stubber):
    stubber.add_response(
        "put_object",
        {"ETag": '"abc"'},
        {"Bucket": BUCKET, "Key": "demo.xlsx", "Body": ANY, "ContentLength": 3},
    )
    storage = S3Storage(BUCKET, client=s3_client)
    storage.put_content("demo.xlsx", b"ABC", 3)


def test_service_unavailable_maps_to_backend_unavailable(s3_client, stubber):
    stubber.add_client_error("put_object", service_error_code="ServiceUnavailable", http_status_code=503)
    storage = S3Storage(BUCKET, client=s3_client)
    with pytest.raises(BackendUnavailableError):
        storage.put_content("demo.xlsx", b"ABC", 3)


def test_access_denied_maps_to_backend_error(s3_client, stubber):
    stubber.add_client_error("head_object", service_error_code="403", http_status_code=403)
    storage = S3Storage(BUCKET, client=s3_client)
    with pytest.raises(BackendError) as excinfo:
        storage.head("demo.xlsx")
    assert excinfo.value.details["operation"] == "HeadObject"


class _UnreachableClient:
    def head_object(self, **kwargs):
        raise EndpointConnectionError(endpoint_url="https://s3.example")


def test_connection_failure_maps_to_backend_unavailable():
    storage = S3Storage(BUCKET, client=_UnreachableClient())
    with pytest.raises(BackendUnavailableError):
        storage.head("demo.xlsx")


class _BrokenBody:
    closed = False

    def iter_chunks(self, chunk_size):
        yield b"AB"
        raise ReadTimeoutError(endpoint_url="https://s3.example")

    def close(self):
        self.closed = True


class _BrokenStreamClient:
    def __init__(self) -> None:
        self.body = _BrokenBody()

    def get_object(self, **kwargs):
        return {"Body": self.body}


def test_mid_stream_failure_surfaces_and_closes_body():
    client = _BrokenStreamClient()
    storage = S3Storage(BUCKET, client=client)
    chunks = storage.get_content("demo.xlsx")

    assert next(chunks) == b"AB"
    with pytest.raises(BackendUnavailableError):
        next(chunks)
    assert client.body.closed
