"""Global test configuration and fixtures.

Provides shared fixtures for all test levels: environment isolation, user
records, mocked collaborators of the search processor and small fakes for the
aiohttp session used by the eBay clients.
"""

import os
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from partbot.config import EbayConfig
from partbot.models import KeywordResult, ListingMatch, SearchMode, User
from partbot.storage import CouponRepository, Database, UserRepository

TEST_BOT_TOKEN = "test_bot_token_placeholder"
TEST_ADMIN_ID = 12345
TEST_USER_ID = 1001


@pytest.fixture(autouse=True)
def test_environment():
    """Setup test environment variables for all tests."""
    test_env = {
        "BOT_TOKEN": TEST_BOT_TOKEN,
        "ADMIN_USER_ID": str(TEST_ADMIN_ID),
        "EBAY_CLIENT_ID": "test-client-id",
        "EBAY_CLIENT_SECRET": "test-client-secret",
        "CACHE_ENABLED": "false",
        "LOG_LEVEL": "DEBUG",
    }

    # Store original values
    original_env = {}
    for key, value in test_env.items():
        original_env[key] = os.environ.get(key)
        os.environ[key] = value

    yield

    # Restore original values
    for key, original_value in original_env.items():
        if original_value is None:
            os.environ.pop(key, None)
        else:
            os.environ[key] = original_value


@pytest.fixture
def make_user():
    """Factory for user records with sensible defaults."""

    def _make(
        balance_cents: int = 1000,
        user_id: int = TEST_USER_ID,
        search_mode: SearchMode = SearchMode.SOLD,
    ) -> User:
        return User(
            user_id=user_id,
            username="tester",
            balance_cents=balance_cents,
            search_mode=search_mode,
        )

    return _make


def found(keyword: str, title: str = "Listing", price: str = "9.99") -> KeywordResult:
    return KeywordResult(
        keyword=keyword,
        match=ListingMatch(item_id=f"id-{keyword}", title=title, price_value=price),
    )


def absent(keyword: str) -> KeywordResult:
    return KeywordResult(keyword=keyword)


@pytest.fixture
def balance_store():
    """Balance store double recording every overwrite."""
    store = AsyncMock()
    store.set_balance.return_value = None
    return store


@pytest.fixture
def gateway():
    """Search gateway double; tests set search.return_value or side_effect."""
    return AsyncMock()


@pytest.fixture
def report_generator():
    generator = MagicMock()
    generator.generate.return_value = b"xlsx-bytes"
    return generator


@pytest.fixture
def ebay_config():
    return EbayConfig(
        EBAY_CLIENT_ID="client-id",
        EBAY_CLIENT_SECRET="client-secret",
        EBAY_ENVIRONMENT="production",
    )


class FakeResponse:
    """Minimal stand-in for an aiohttp response context manager."""

    def __init__(self, status: int = 200, payload: Any = None):
        self.status = status
        self.payload = payload

    async def json(self, content_type: str | None = "application/json") -> Any:
        return self.payload

    async def __aenter__(self) -> "FakeResponse":
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        return False


class FakeSession:
    """Records requests and replays queued responses in order."""

    def __init__(self, *responses: FakeResponse):
        self.responses = list(responses)
        self.requests: list[dict[str, Any]] = []
        self.closed = False

    def _next(self, method: str, url: str, **kwargs: Any) -> FakeResponse:
        self.requests.append({"method": method, "url": url, **kwargs})
        return self.responses.pop(0)

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("GET", url, **kwargs)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        return self._next("POST", url, **kwargs)

    async def __aenter__(self) -> "FakeSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        self.closed = True
        return False


@pytest_asyncio.fixture
async def database(tmp_path):
    """Connected SQLite database in a temporary directory."""
    db = Database(str(tmp_path / "data" / "test.sqlite"))
    await db.connect()
    yield db
    await db.disconnect()


@pytest.fixture
def user_repository(database):
    return UserRepository(database)


@pytest.fixture
def coupon_repository(database):
    return CouponRepository(database)
