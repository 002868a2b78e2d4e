"""Unit tests for the S3 object store wrapper."""

from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from src.core.exceptions import ExternalServiceError, StorageError
from src.services.storage.object_store import S3ObjectStore, parse_s3_url


def _client_error(code: str) -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": code}}, "Operation")


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def object_store(client):
    return S3ObjectStore(bucket="bakbak-test", region="us-east-1", client=client)


@pytest.mark.parametrize(
    "url, expected",
    [
        ("s3://bucket/path/to/file.json", ("bucket", "path/to/file.json")),
        ("https://s3.us-east-1.amazonaws.com/bucket/j1.json", ("bucket", "j1.json")),
        ("https://bucket.s3.us-east-1.amazonaws.com/dir/j1.json", ("bucket", "dir/j1.json")),
        ("https://example.com/file%20name.json", (None, "file name.json")),
    ],
)
def test_parse_s3_url(url, expected):
    assert parse_s3_url(url) == expected


def test_recording_path(object_store):
    assert object_store.get_recording_path("audio/a.mp3") == "s3://bakbak-test/audio/a.mp3"
    assert object_store.get_recording_path("/audio/a.mp3") == "s3://bakbak-test/audio/a.mp3"
    assert object_store.get_recording_path("s3://other/a.mp3") == "s3://other/a.mp3"


def test_missing_bucket(client):
    store = S3ObjectStore(bucket="", client=client)
    store._bucket = ""

    with pytest.raises(StorageError, match="AWS_S3_BUCKET"):
        store.s3_uri("a.mp3")


async def test_upload(object_store, client):
    uri = await object_store.upload("audio/a.mp3", b"data", content_type="audio/mpeg")

    assert uri == "s3://bakbak-test/audio/a.mp3"
    client.put_object.assert_called_once_with(
        Bucket="bakbak-test", Key="audio/a.mp3", Body=b"data", ContentType="audio/mpeg"
    )


async def test_download(object_store, client):
    body = MagicMock()
    body.read.return_value = b"{}"
    client.get_object.return_value = {"Body": body}

    assert await object_store.download("j1.json", bucket="out") == b"{}"
    client.get_object.assert_called_once_with(Bucket="out", Key="j1.json")


async def test_download_missing(object_store, client):
    client.get_object.side_effect = _client_error("NoSuchKey")

    with pytest.raises(StorageError):
        await object_store.download("missing.json")


@pytest.mark.parametrize(
    "error",
    [
        EndpointConnectionError(endpoint_url="https://s3.amazonaws.com"),
        _client_error("SlowDown"),
        _client_error("AccessDenied"),
    ],
)
async def test_download_unreachable_is_external(object_store, client, error):
    client.get_object.side_effect = error

    with pytest.raises(ExternalServiceError):
        await object_store.download("j1.json")


async def test_exists(object_store, client):
    assert await object_store.exists("a.mp3") is True

    client.head_object.side_effect = _client_error("404")
    assert await object_store.exists("a.mp3") is False

    client.head_object.side_effect = _client_error("AccessDenied")
    with pytest.raises(StorageError):
        await object_store.exists("a.mp3")


async def test_delete_error(object_store, client):
    client.delete_object.side_effect = _client_error("AccessDenied")

    with pytest.raises(StorageError):
        await object_store.delete("a.mp3")


async def test_presigned_url(object_store, client):
    client.generate_presigned_url.return_value = "https://signed"

    url = await object_store.presigned_url("audio/a.mp3", expires_in=600)

    assert url == "https://signed"
    client.generate_presigned_url.assert_called_once_with(
        "get_object",
        Params={"Bucket": "bakbak-test", "Key": "audio/a.mp3"},
        ExpiresIn=600,
    )


async def test_presigned_upload_url_signs_content_type(object_store, client):
    client.generate_presigned_url.return_value = "https://signed-put"

    url = await object_store.presigned_upload_url("recordings/u1/abc.webm", "audio/webm", 300)

    assert url == "https://signed-put"
    client.generate_presigned_url.assert_called_once_with(
        "put_object",
        Params={
            "Bucket": "bakbak-test",
            "Key": "recordings/u1/abc.webm",
            "ContentType": "audio/webm",
        },
        ExpiresIn=300,
    )


async def test_presigned_upload_url_error(object_store, client):
    client.generate_presigned_url.side_effect = _client_error("AccessDenied")

    with pytest.raises(StorageError, match="Could not sign upload URL"):
        await object_store.presigned_upload_url("recordings/u1/abc.webm", "audio/webm")
