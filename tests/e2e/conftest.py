"""
Fixtures for end-to-end tests: upstream HTTP is served from JSON fixtures.
"""

import copy
from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest


def json_response(payload: Any, status_code: int = 200) -> MagicMock:
    """Build a mocked httpx response."""
    response = MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    return response


@pytest.fixture
def upstream_markets(raw_markets) -> list[dict[str, Any]]:
    """Gamma payloads with end dates moved relative to the real clock."""
    markets = copy.deepcopy(raw_markets)
    now = datetime.now(timezone.utc)  # noqa: UP017
    for offset, market in enumerate(markets):
        end = now + timedelta(days=30 + offset)
        market["endDate"] = end.strftime("%Y-%m-%dT%H:%M:%SZ")
    return markets


@pytest.fixture
def upstream(upstream_markets, raw_order_books):
    """
    Patch httpx so the Gamma and CLOB endpoints answer from fixtures.

    Yields the AsyncMock standing in for AsyncClient.get.
    """

    async def fake_get(url, params=None):
        if url.endswith("/markets"):
            limit = (params or {}).get("limit", len(upstream_markets))
            return json_response(upstream_markets[:limit])
        if url.endswith("/book"):
            book = raw_order_books.get((params or {}).get("token_id"))
            if book is None:
                return json_response({"error": "No orderbook exists"}, status_code=404)
            return json_response(book)
        return json_response({}, status_code=404)

    mock_get = AsyncMock(side_effect=fake_get)
    with patch.object(httpx.AsyncClient, "get", mock_get):
        yield mock_get
