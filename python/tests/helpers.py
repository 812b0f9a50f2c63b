"""Test helpers: fake project constants and response body builders.

Bodies mirror what the Supabase Storage API returns, so tests exercise the
same aliases and shapes as production responses.
"""

TEST_BASE_URL = "https://test.supabase.co"
TEST_API_KEY = "test-api-key"
STORAGE_URL = f"{TEST_BASE_URL}/storage/v1"
TEST_HOST = "test.supabase.co"

TIMESTAMP = "2024-11-05T10:15:30.123Z"


def bucket_body(
    bucket_id: str = "avatars",
    name: str | None = None,
    public: bool = False,
    file_size_limit: int | None = None,
    allowed_mime_types: list[str] | None = None,
) -> dict:
    """Build a bucket record as returned by GET /bucket/{id}."""
    return {
        "id": bucket_id,
        "name": name or bucket_id,
        "owner": "",
        "public": public,
        "file_size_limit": file_size_limit,
        "allowed_mime_types": allowed_mime_types,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
    }


def file_body(name: str, size: int = 11, mimetype: str = "text/plain") -> dict:
    """Build a file entry as returned by POST /object/list/{bucket}."""
    return {
        "name": name,
        "id": "3c4e2a10-8a7b-4c8e-9d1e-1a2b3c4d5e6f",
        "bucket_id": "avatars",
        "owner": None,
        "created_at": TIMESTAMP,
        "updated_at": TIMESTAMP,
        "last_accessed_at": TIMESTAMP,
        "metadata": {
            "eTag": '"5eb63bbbe01eeed093cb22bb8f5acdc3"',
            "size": size,
            "mimetype": mimetype,
            "cacheControl": "max-age=3600",
            "lastModified": TIMESTAMP,
            "contentLength": size,
            "httpStatusCode": 200,
        },
    }


def folder_body(name: str) -> dict:
    """Build a folder placeholder entry: only the name is populated."""
    return {
        "name": name,
        "id": None,
        "updated_at": None,
        "created_at": None,
        "last_accessed_at": None,
        "metadata": None,
    }


def error_body(status: int, message: str, error: str = "Error") -> dict:
    """Build a Supabase Storage error body."""
    return {"statusCode": str(status), "error": error, "message": message}
