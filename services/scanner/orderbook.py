"""
Order book analysis for ScalpFinder.

Normalizes raw order book snapshots into best bid/ask, spread and
banded depth. This is the only place books are sorted or aggregated.
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence

from shared.config import Settings, get_settings
from shared.models import BookMetrics, DepthProfile, OrderBookLevel, OrderBookSnapshot

# Float slack when comparing a level against a band boundary
PRICE_EPSILON = 1e-9
# Decimal places kept in spread_in_ticks
TICK_PRECISION = 9


def aggregate_levels(levels: Iterable[OrderBookLevel]) -> dict[float, float]:
    """Sum sizes of levels that share a price."""
    totals: dict[float, float] = defaultdict(float)
    for level in levels:
        totals[level.price] += level.size
    return dict(totals)


def sorted_bids(levels: Iterable[OrderBookLevel]) -> list[OrderBookLevel]:
    """Aggregated bid levels, highest price first."""
    totals = aggregate_levels(levels)
    return [
        OrderBookLevel(price=price, size=size)
        for price, size in sorted(totals.items(), key=lambda item: item[0], reverse=True)
    ]


def sorted_asks(levels: Iterable[OrderBookLevel]) -> list[OrderBookLevel]:
    """Aggregated ask levels, lowest price first."""
    totals = aggregate_levels(levels)
    return [
        OrderBookLevel(price=price, size=size)
        for price, size in sorted(totals.items(), key=lambda item: item[0])
    ]


class OrderBookAnalyzer:
    """
    Derives top-of-book and depth facts from an order book snapshot.

    Depth bands are measured from each side's current best price:
    a bid level counts toward the N-tick band when its price is at least
    best_bid - N * tick_size, an ask level when it is at most
    best_ask + N * tick_size.
    """

    def __init__(self, settings: Settings | None = None, bands: Sequence[int] | None = None):
        """
        Initialize analyzer.

        Args:
            settings: Settings instance. If None, loads from environment.
            bands: Tick distances to measure. Defaults to the configured bands.
        """
        self.settings = settings or get_settings()
        self.bands = tuple(bands) if bands is not None else tuple(self.settings.scanner.depth_bands)
        self.default_tick_size = self.settings.scanner.default_tick_size

    def analyze(self, snapshot: OrderBookSnapshot | None, tick_size: float | None = None) -> BookMetrics:
        """
        Compute book metrics for a snapshot.

        Args:
            snapshot: Raw order book, or None when the fetch failed
            tick_size: Market tick size. Falls back to the configured default.

        Returns:
            BookMetrics; unavailable when the snapshot is missing or one-sided
        """
        if snapshot is None or snapshot.is_empty:
            return BookMetrics.unavailable()

        tick = tick_size or self.default_tick_size
        bids = sorted_bids(snapshot.bids)
        asks = sorted_asks(snapshot.asks)

        best_bid = bids[0].price
        best_ask = asks[0].price
        # Crossed books are passed through as a negative spread
        spread = best_ask - best_bid

        return BookMetrics(
            available=True,
            best_bid=best_bid,
            best_ask=best_ask,
            spread=spread,
            spread_in_ticks=round(spread / tick, TICK_PRECISION),
            bid_top_depth=bids[0].size,
            ask_top_depth=asks[0].size,
            depth=self.depth_profile(bids, asks, tick),
        )

    def depth_profile(
        self,
        bids: list[OrderBookLevel],
        asks: list[OrderBookLevel],
        tick_size: float,
    ) -> DepthProfile:
        """Depth at each configured band for pre-sorted, aggregated sides."""
        profile = DepthProfile()
        if not bids or not asks:
            return profile

        best_bid = bids[0].price
        best_ask = asks[0].price
        for ticks in self.bands:
            bid_limit = best_bid - ticks * tick_size
            ask_limit = best_ask + ticks * tick_size
            profile.bids[ticks] = sum(
                level.size for level in bids if level.price >= bid_limit - PRICE_EPSILON
            )
            profile.asks[ticks] = sum(
                level.size for level in asks if level.price <= ask_limit + PRICE_EPSILON
            )
        return profile
