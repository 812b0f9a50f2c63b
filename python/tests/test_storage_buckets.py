"""Tests for StorageClient bucket operations.

Covered per operation:
- Request method, path, auth headers, and JSON body
- Success body parsed into the typed result
- Non-2xx and non-conforming bodies surface StorageApiError with the raw body

These are pure unit tests: respx mocks every HTTP request.
"""

import json

import pytest
import respx

from supastore.errors import SerializationError, StorageApiError
from supastore.mime import CustomMimeType, MimeType
from tests.helpers import STORAGE_URL, TEST_API_KEY, bucket_body, error_body


def _json(route: respx.Route) -> dict:
    return json.loads(route.calls.last.request.content)


class TestCreateBucket:
    """Tests for create_bucket."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_id_defaults_to_name(self, client):
        """Omitting the id sends the name as id and returns the name."""
        route = respx.post(f"{STORAGE_URL}/bucket").respond(200, json={"name": "cool-bucket"})

        name = await client.create_bucket("cool-bucket")

        assert name == "cool-bucket"
        assert _json(route) == {"id": "cool-bucket", "name": "cool-bucket", "public": False}

    @pytest.mark.asyncio
    @respx.mock
    async def test_explicit_id_and_options(self, client):
        route = respx.post(f"{STORAGE_URL}/bucket").respond(200, json={"name": "pretty name"})

        name = await client.create_bucket(
            "pretty name",
            "0192f3a4-bucket",
            True,
            [MimeType.WAV, MimeType.PNG, CustomMimeType("image/*"), "text/plain"],
            12431243,
        )

        assert name == "pretty name"
        assert _json(route) == {
            "id": "0192f3a4-bucket",
            "name": "pretty name",
            "public": True,
            "allowed_mime_types": ["audio/wav", "image/png", "image/*", "text/plain"],
            "file_size_limit": 12431243,
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_sends_auth_and_json_headers(self, client):
        route = respx.post(f"{STORAGE_URL}/bucket").respond(200, json={"name": "b"})

        await client.create_bucket("b")

        headers = route.calls.last.request.headers
        assert headers["apikey"] == TEST_API_KEY
        assert headers["authorization"] == f"Bearer {TEST_API_KEY}"
        assert headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    async def test_empty_name_rejected_before_request(self, client):
        """No request is made for an empty name."""
        with respx.mock(assert_all_called=False) as mock:
            route = mock.post(f"{STORAGE_URL}/bucket")
            with pytest.raises(SerializationError):
                await client.create_bucket("")
            assert not route.called

    @pytest.mark.asyncio
    async def test_invalid_mime_string_rejected(self, client):
        with pytest.raises(SerializationError, match="Invalid MIME type"):
            await client.create_bucket("b", allowed_mime_types=["not-a-mime"])

    @pytest.mark.asyncio
    @respx.mock
    async def test_conflict_surfaces_status_and_body(self, client):
        body = error_body(409, "The resource already exists", "Duplicate")
        respx.post(f"{STORAGE_URL}/bucket").respond(400, json=body)

        with pytest.raises(StorageApiError) as exc_info:
            await client.create_bucket("b")

        assert exc_info.value.status_code == 400
        assert json.loads(exc_info.value.message) == body

    @pytest.mark.asyncio
    @respx.mock
    async def test_unexpected_success_shape_is_service_error(self, client):
        """A 2xx body without `name` is reported with its raw text."""
        respx.post(f"{STORAGE_URL}/bucket").respond(200, text='{"unexpected": true}')

        with pytest.raises(StorageApiError) as exc_info:
            await client.create_bucket("b")

        assert exc_info.value.status_code == 200
        assert exc_info.value.message == '{"unexpected": true}'


class TestDeleteBucket:
    """Tests for delete_bucket."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_success(self, client):
        route = respx.delete(f"{STORAGE_URL}/bucket/cool-bucket").respond(
            200, json={"message": "Successfully deleted"}
        )

        assert await client.delete_bucket("cool-bucket") is None
        assert route.called

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_bucket_is_service_error(self, client):
        """Deleting a nonexistent bucket surfaces a service error, not a crash."""
        raw = '{"statusCode":"404","error":"Bucket not found","message":"Bucket not found"}'
        respx.delete(f"{STORAGE_URL}/bucket/gone").respond(404, text=raw)

        with pytest.raises(StorageApiError) as exc_info:
            await client.delete_bucket("gone")

        assert exc_info.value.status_code == 404
        assert exc_info.value.message == raw


class TestGetAndListBuckets:
    """Tests for get_bucket and list_buckets."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_bucket(self, client):
        respx.get(f"{STORAGE_URL}/bucket/with-options").respond(
            200,
            json=bucket_body(
                "with-options", file_size_limit=12431243, allowed_mime_types=["audio/wav"]
            ),
        )

        bucket = await client.get_bucket("with-options")

        assert bucket.name == "with-options"
        assert bucket.file_size_limit == 12431243
        assert bucket.allowed_mime_types == ["audio/wav"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_list_buckets_keeps_server_order(self, client):
        respx.get(f"{STORAGE_URL}/bucket").respond(
            200, json=[bucket_body("zeta"), bucket_body("alpha"), bucket_body("mid")]
        )

        buckets = await client.list_buckets()

        assert [bucket.id for bucket in buckets] == ["zeta", "alpha", "mid"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_list_buckets_empty(self, client):
        respx.get(f"{STORAGE_URL}/bucket").respond(200, json=[])
        assert await client.list_buckets() == []

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_bucket_error_object_is_service_error(self, client):
        """An error object where a bucket is expected is reported verbatim."""
        respx.get(f"{STORAGE_URL}/bucket/x").respond(200, json={"error": "nope"})

        with pytest.raises(StorageApiError) as exc_info:
            await client.get_bucket("x")

        assert json.loads(exc_info.value.message) == {"error": "nope"}


class TestUpdateAndEmptyBucket:
    """Tests for update_bucket and empty_bucket."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_update_bucket_omits_unset_options(self, client):
        route = respx.put(f"{STORAGE_URL}/bucket/b").respond(
            200, json={"message": "Successfully updated"}
        )

        message = await client.update_bucket("b", True)

        assert message == "Successfully updated"
        assert _json(route) == {"id": "b", "public": True}
        assert route.calls.last.request.headers["content-type"] == "application/json"

    @pytest.mark.asyncio
    @respx.mock
    async def test_update_bucket_with_options(self, client):
        route = respx.put(f"{STORAGE_URL}/bucket/b").respond(
            200, json={"message": "Successfully updated"}
        )

        await client.update_bucket("b", False, [MimeType.PDF], 0)

        assert _json(route) == {
            "id": "b",
            "public": False,
            "allowed_mime_types": ["application/pdf"],
            "file_size_limit": 0,
        }

    @pytest.mark.asyncio
    @respx.mock
    async def test_update_then_get_reflects_public_flag(self, client):
        respx.put(f"{STORAGE_URL}/bucket/b").respond(200, json={"message": "Successfully updated"})
        respx.get(f"{STORAGE_URL}/bucket/b").respond(200, json=bucket_body("b", public=True))

        await client.update_bucket("b", True)
        bucket = await client.get_bucket("b")

        assert bucket.public is True

    @pytest.mark.asyncio
    @respx.mock
    async def test_empty_bucket(self, client):
        route = respx.post(f"{STORAGE_URL}/bucket/b/empty").respond(
            200, json={"message": "Successfully emptied"}
        )

        assert await client.empty_bucket("b") == "Successfully emptied"
        assert route.calls.last.request.content == b""
