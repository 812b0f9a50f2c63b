"""Pytest configuration and fixtures for supastore tests.

Test isolation strategy:
- HTTP is mocked with respx; no test touches the network unless it is
  marked `supabase` (deselected by default, see pyproject.toml)
- Settings are read fresh for every test (the lru_cache is cleared)
- Storage client fixtures use a fixed fake project URL and key
"""

from collections.abc import AsyncGenerator, Generator

import httpx
import pytest
import pytest_asyncio
import structlog

from supastore.client import StorageClient
from supastore.config import clear_settings_cache
from supastore.logging import add_operation_context
from tests.helpers import TEST_API_KEY, TEST_BASE_URL


@pytest.fixture(autouse=True)
def fresh_settings() -> Generator[None, None, None]:
    """Clear cached settings before and after every test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest_asyncio.fixture
async def httpx_client() -> AsyncGenerator[httpx.AsyncClient, None]:
    """Provide an httpx AsyncClient, closed after the test."""
    async with httpx.AsyncClient() as http_client:
        yield http_client


@pytest.fixture
def client(httpx_client: httpx.AsyncClient) -> StorageClient:
    """Provide a StorageClient pointed at the fake project."""
    return StorageClient(TEST_BASE_URL, TEST_API_KEY, http_client=httpx_client)


@pytest.fixture
def log_sink() -> Generator[list[dict], None, None]:
    """Configure structlog to capture events into a list.

    The operation context processor runs first so captured events include it.
    After the test, structlog is reset to its previous configuration.
    """
    events: list[dict] = []
    original_config = structlog.get_config()

    def capture_processor(logger, method_name, event_dict):
        events.append(event_dict.copy())
        raise structlog.DropEvent

    structlog.configure(
        processors=[add_operation_context, capture_processor],
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    yield events

    structlog.configure(**original_config)
