"""
Polymarket API client for ScalpFinder.

Provides async access to Polymarket's public endpoints:
- Gamma API market listing
- CLOB API order books

No authentication and no retries: a failed request raises
PolymarketAPIError and the caller decides how to degrade.
"""

import json
from datetime import datetime
from typing import Any

import httpx
import structlog

from shared.config import Settings, get_settings
from shared.models import Market, OrderBookLevel, OrderBookSnapshot

logger = structlog.get_logger(__name__)


class PolymarketAPIError(Exception):
    """Custom exception for Polymarket API errors."""

    def __init__(self, message: str, status_code: int | None = None, response: dict | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.response = response


class PolymarketClient:
    """
    Async client for the public Polymarket Gamma and CLOB APIs.

    Can be used as an async context manager; outside one, an HTTP client
    is created lazily on first use.
    """

    def __init__(self, settings: Settings | None = None):
        """
        Initialize Polymarket client.

        Args:
            settings: Settings instance. If None, loads from environment.
        """
        self.settings = settings or get_settings()
        self.gamma_url = self.settings.polymarket.gamma_url.rstrip("/")
        self.clob_url = self.settings.polymarket.clob_url.rstrip("/")
        self.timeout = self.settings.polymarket.request_timeout
        self._client: httpx.AsyncClient | None = None
        self._open_count = 0

    async def __aenter__(self) -> "PolymarketClient":
        """
        Async context manager entry.

        Overlapping entries share one HTTP client, closed when the last exits.
        """
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._get_base_headers(),
            )
        self._open_count += 1
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        self._open_count = max(0, self._open_count - 1)
        if self._open_count == 0:
            await self.close()

    def _get_base_headers(self) -> dict[str, str]:
        """Get base headers for requests."""
        return {
            "Accept": "application/json",
        }

    @property
    def client(self) -> httpx.AsyncClient:
        """Get HTTP client, creating if needed."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers=self._get_base_headers(),
            )
        return self._client

    async def _get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """
        GET a URL and decode the JSON body.

        Raises:
            PolymarketAPIError: On network errors, timeouts or HTTP error status
        """
        logger.debug("polymarket_request", url=url, params=params)

        try:
            response = await self.client.get(url, params=params)
        except httpx.RequestError as e:
            # Timeouts are RequestErrors too
            raise PolymarketAPIError(f"Request failed: {str(e)}")

        if response.status_code >= 400:
            raise PolymarketAPIError(
                f"API request failed: {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise PolymarketAPIError(f"Invalid JSON response: {str(e)}")

    async def get_markets(
        self,
        limit: int = 20,
        offset: int = 0,
        order: str = "volume24hr",
    ) -> list[Market]:
        """
        Get active, open markets ordered by a Gamma field (descending).

        Args:
            limit: Maximum number of markets
            offset: Pagination offset
            order: Gamma field to sort by

        Returns:
            List of Market objects
        """
        params = {
            "limit": limit,
            "offset": offset,
            "active": "true",
            "closed": "false",
            "order": order,
            "ascending": "false",
        }

        try:
            data = await self._get_json(f"{self.gamma_url}/markets", params=params)
        except PolymarketAPIError as e:
            logger.error("get_markets_error", error=str(e))
            raise PolymarketAPIError(
                f"Failed to get markets: {str(e)}", status_code=e.status_code
            )

        if not isinstance(data, list):
            raise PolymarketAPIError("Failed to get markets: unexpected response shape")

        markets = []
        for item in data:
            try:
                market = self._parse_market(item)
                if market:
                    markets.append(market)
            except (KeyError, ValueError, TypeError) as e:
                logger.warning("parse_market_error", market_id=item.get("id"), error=str(e))
                continue

        return markets

    async def get_order_book(self, token_id: str) -> OrderBookSnapshot:
        """
        Get the order book for an outcome token.

        Args:
            token_id: CLOB token id

        Returns:
            Raw, unsorted order book snapshot
        """
        try:
            data = await self._get_json(f"{self.clob_url}/book", params={"token_id": token_id})
            return self._parse_order_book(token_id, data)
        except PolymarketAPIError as e:
            logger.warning("get_order_book_error", token_id=token_id, error=str(e))
            raise PolymarketAPIError(
                f"Failed to get order book: {str(e)}", status_code=e.status_code
            )
        except (KeyError, ValueError, TypeError) as e:
            logger.warning("parse_order_book_error", token_id=token_id, error=str(e))
            raise PolymarketAPIError(f"Failed to parse order book: {str(e)}")

    def _parse_order_book(self, token_id: str, data: Any) -> OrderBookSnapshot:
        """Parse a CLOB /book payload into a snapshot."""
        if not isinstance(data, dict):
            raise ValueError("order book payload is not an object")

        return OrderBookSnapshot(
            token_id=data.get("asset_id") or token_id,
            bids=[OrderBookLevel(price=b["price"], size=b["size"]) for b in data.get("bids") or []],
            asks=[OrderBookLevel(price=a["price"], size=a["size"]) for a in data.get("asks") or []],
        )

    def _parse_json_list(self, market_id: str, field: str, raw: Any) -> list[Any]:
        """Decode a JSON-encoded array field, degrading to an empty list."""
        if raw is None:
            return []
        if isinstance(raw, list):
            return raw
        try:
            parsed = json.loads(raw)
        except (json.JSONDecodeError, TypeError):
            logger.warning("parse_json_field_error", market_id=market_id, field=field)
            return []
        if not isinstance(parsed, list):
            logger.warning("parse_json_field_error", market_id=market_id, field=field)
            return []
        return parsed

    def _parse_market(self, data: dict[str, Any]) -> Market | None:
        """Parse a Gamma API market into a Market model."""
        if not data:
            return None

        market_id = str(data.get("id", ""))

        try:
            outcome_prices = [
                float(p) for p in self._parse_json_list(market_id, "outcomePrices", data.get("outcomePrices"))
            ]
        except (ValueError, TypeError):
            logger.warning("parse_json_field_error", market_id=market_id, field="outcomePrices")
            outcome_prices = []

        token_ids = [
            str(t) for t in self._parse_json_list(market_id, "clobTokenIds", data.get("clobTokenIds"))
        ]
        outcomes = [
            str(o) for o in self._parse_json_list(market_id, "outcomes", data.get("outcomes"))
        ]

        end_date = None
        end_date_str = data.get("endDate")
        if end_date_str:
            try:
                end_date = datetime.fromisoformat(end_date_str.replace("Z", "+00:00"))
            except (ValueError, AttributeError):
                logger.warning("parse_end_date_error", market_id=market_id, end_date=end_date_str)

        return Market(
            id=market_id,
            question=data.get("question") or "",
            slug=data.get("slug") or "",
            end_date=end_date,
            tick_size=data.get("orderPriceMinTickSize") or 0.01,
            fees_enabled=bool(data.get("feesEnabled", False)),
            liquidity=float(data.get("liquidity", 0) or 0),
            volume_24h=float(data.get("volume24hr", 0) or 0),
            volume_7d=float(data.get("volume1wk", 0) or 0),
            one_week_price_change=float(data.get("oneWeekPriceChange", 0) or 0),
            outcomes=outcomes,
            outcome_prices=outcome_prices,
            token_ids=token_ids,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        # Detach before awaiting so a concurrent entry opens a new client
        client, self._client = self._client, None
        if client:
            await client.aclose()
