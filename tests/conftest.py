"""
Shared pytest fixtures and test configuration for ScalpFinder.
"""

import json
import os
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from faker import Faker

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOGGING__LEVEL"] = "WARNING"

from shared.config import Settings  # noqa: E402
from shared.models import Market, OrderBookLevel, OrderBookSnapshot  # noqa: E402

fake = Faker()

FIXTURES_DIR = Path(__file__).parent / "fixtures"

FIXED_NOW = datetime(2026, 1, 15, 12, 0, 0, tzinfo=timezone.utc)  # noqa: UP017


# ============================================================================
# Fixture Loading Helpers
# ============================================================================


def load_fixture(filename: str) -> dict[str, Any]:
    """Load a JSON fixture file."""
    filepath = FIXTURES_DIR / filename
    with open(filepath) as f:
        return json.load(f)


def make_book(
    bids: list[tuple[float, float]],
    asks: list[tuple[float, float]],
    token_id: str = "tok-test",
) -> OrderBookSnapshot:
    """Build a snapshot from (price, size) pairs."""
    return OrderBookSnapshot(
        token_id=token_id,
        bids=[OrderBookLevel(price=p, size=s) for p, s in bids],
        asks=[OrderBookLevel(price=p, size=s) for p, s in asks],
    )


# ============================================================================
# Time Fixtures
# ============================================================================


@pytest.fixture
def fixed_now() -> datetime:
    """Return a fixed, timezone-aware evaluation time."""
    return FIXED_NOW


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def settings() -> Settings:
    """Return default settings in test mode."""
    return Settings()


# ============================================================================
# Market Data Fixtures
# ============================================================================


@pytest.fixture
def raw_markets() -> list[dict[str, Any]]:
    """Load Gamma API market payloads from fixtures."""
    return load_fixture("markets.json")["markets"]


@pytest.fixture
def raw_order_books() -> dict[str, Any]:
    """Load CLOB order book payloads keyed by token id."""
    return load_fixture("order_books.json")


@pytest.fixture
def market_factory() -> Callable[..., Market]:
    """
    Build a market that passes every hard exclusion by default.

    Price 0.50, four weeks to resolution, steady volume, no fees.
    """

    def _make(**overrides: Any) -> Market:
        token = f"tok-{fake.uuid4()}"
        data: dict[str, Any] = {
            "id": str(fake.random_int(min=100000, max=999999)),
            "question": "Will Bitcoin close above $120k on June 30?",
            "slug": fake.slug(),
            "end_date": FIXED_NOW + timedelta(days=28),
            "tick_size": 0.01,
            "fees_enabled": False,
            "liquidity": 50000.0,
            "volume_24h": 10000.0,
            "volume_7d": 70000.0,
            "one_week_price_change": 0.0,
            "outcomes": ["Yes", "No"],
            "outcome_prices": [0.50, 0.50],
            "token_ids": [token, f"{token}-no"],
        }
        data.update(overrides)
        return Market(**data)

    return _make


@pytest.fixture
def tight_book() -> OrderBookSnapshot:
    """One-tick spread around 0.50 with layered, balanced depth."""
    return make_book(
        bids=[(0.49, 500), (0.48, 400), (0.46, 300)],
        asks=[(0.50, 500), (0.51, 400), (0.53, 300)],
    )


@pytest.fixture
def empty_book() -> OrderBookSnapshot:
    """Order book with no levels on either side."""
    return make_book(bids=[], asks=[])


# ============================================================================
# Mock Client Fixtures
# ============================================================================


@pytest.fixture
def mock_polymarket_client() -> MagicMock:
    """Create a mocked Polymarket API client usable as an async context manager."""
    client = MagicMock()
    client.get_markets = AsyncMock(return_value=[])
    client.get_order_book = AsyncMock(return_value=None)
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    return client


@pytest.fixture
def mock_httpx_client() -> MagicMock:
    """Create a mocked httpx async client."""
    client = MagicMock()
    client.get = AsyncMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    return client


@pytest.fixture
def anyio_backend() -> str:
    """Configure anyio backend for async tests."""
    return "asyncio"


# ============================================================================
# Cleanup Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables after each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)
