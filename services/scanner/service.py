"""
Scanner service implementation.

Fetches a market universe, evaluates every market concurrently and ranks
the results by scalping score.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any

import structlog

from services.scanner.fill import fill_likelihood_score
from services.scanner.scoring import ScoringEngine
from shared.config import Settings, get_settings
from shared.models import EvaluationResult, Market, MarketSummary, OrderBookSnapshot
from shared.polymarket_client import PolymarketAPIError, PolymarketClient

logger = structlog.get_logger(__name__)


class RankingPipeline:
    """
    Ranks Polymarket markets for tight-spread market making.

    Each market is evaluated independently from its own snapshot; a failed
    order book fetch degrades that market to an unavailable book and never
    aborts the batch.
    """

    def __init__(
        self,
        polymarket_client: PolymarketClient | None = None,
        scoring_engine: ScoringEngine | None = None,
        settings: Settings | None = None,
    ):
        """
        Initialize ranking pipeline.

        Args:
            polymarket_client: Optional client shared by every pass
            scoring_engine: Optional ScoringEngine instance
            settings: Optional Settings instance
        """
        self.settings = settings or get_settings()
        self.config = self.settings.scanner
        self._polymarket_client = polymarket_client
        self._scoring_engine = scoring_engine or ScoringEngine(self.settings)

    def open_client(self) -> PolymarketClient:
        """
        Client for one ranking pass.

        A fresh client per pass unless one was injected; an injected client
        may be entered by overlapping passes.
        """
        if self._polymarket_client is None:
            return PolymarketClient(self.settings)
        return self._polymarket_client

    @property
    def scoring_engine(self) -> ScoringEngine:
        """Get scoring engine."""
        return self._scoring_engine

    async def get_markets(self, client: PolymarketClient, limit: int) -> list[Market]:
        """Fetch the market universe by 24h volume, empty on failure."""
        try:
            markets = await client.get_markets(limit=limit)
        except PolymarketAPIError as e:
            logger.error("market_universe_error", limit=limit, error=str(e))
            return []

        logger.info("markets_fetched", requested=limit, count=len(markets))
        return markets

    async def fetch_order_book(
        self,
        client: PolymarketClient,
        market: Market,
        semaphore: asyncio.Semaphore,
    ) -> OrderBookSnapshot | None:
        """
        Fetch the primary-token book for a market.

        Returns:
            The snapshot, or None when the market has no token or the fetch failed
        """
        token_id = market.primary_token_id
        if token_id is None:
            return None

        async with semaphore:
            try:
                return await client.get_order_book(token_id)
            except PolymarketAPIError as e:
                logger.warning(
                    "order_book_unavailable",
                    market_id=market.id,
                    token_id=token_id,
                    error=str(e),
                )
                return None

    async def fetch_order_books(
        self,
        client: PolymarketClient,
        markets: list[Market],
    ) -> list[OrderBookSnapshot | None]:
        """Fetch all books concurrently, preserving market order."""
        semaphore = asyncio.Semaphore(max(1, self.config.max_concurrency))
        return await asyncio.gather(
            *(self.fetch_order_book(client, market, semaphore) for market in markets)
        )

    def evaluate_market(
        self,
        market: Market,
        book: OrderBookSnapshot | None,
        now: datetime | None = None,
    ) -> EvaluationResult:
        """Evaluate a single market against its book."""
        return self.scoring_engine.evaluate(market, book, now)

    def rank(
        self,
        markets: list[Market],
        books: list[OrderBookSnapshot | None],
        now: datetime | None = None,
    ) -> list[EvaluationResult]:
        """
        Evaluate markets against their books and sort by descending score.

        Args:
            markets: Market snapshots
            books: Books aligned with markets; None where unavailable
            now: Evaluation time shared by the whole pass

        Returns:
            Results sorted by score, excluded markets last
        """
        now = now or datetime.now(timezone.utc)  # noqa: UP017
        results = [self.evaluate_market(m, b, now) for m, b in zip(markets, books)]
        return sorted(results, key=lambda r: r.score, reverse=True)

    async def rank_markets(self, limit: int = 30) -> list[EvaluationResult]:
        """
        Rank scalping candidates.

        Fetches limit * candidate_oversample markets to make up for
        exclusions, then evaluates and ranks all of them.

        Args:
            limit: Requested number of candidates

        Returns:
            Every evaluated market, sorted by descending score
        """
        pool_size = limit * max(1, self.config.candidate_oversample)
        logger.info("ranking_markets", limit=limit, pool_size=pool_size)

        async with self.open_client() as client:
            markets = await self.get_markets(client, pool_size)
            if not markets:
                return []
            books = await self.fetch_order_books(client, markets)

        results = self.rank(markets, books)
        summary = self.get_ranking_summary(results)

        logger.info(
            "markets_ranked",
            total=summary["total_markets"],
            eligible=summary["eligible"],
            excluded=summary["excluded"],
            books_unavailable=sum(1 for b in books if b is None),
        )

        return results

    async def evaluate_top_markets(self, limit: int = 20) -> list[MarketSummary]:
        """
        Summarize the top markets by 24h volume with fill-likelihood scores.

        Args:
            limit: Number of markets to fetch

        Returns:
            Market summaries in upstream order
        """
        async with self.open_client() as client:
            markets = await self.get_markets(client, limit)
            if not markets:
                return []
            books = await self.fetch_order_books(client, markets)

        analyzer = self.scoring_engine.analyzer
        summaries = []
        for market, book in zip(markets, books):
            metrics = analyzer.analyze(book, market.tick_size)
            summaries.append(
                MarketSummary(
                    id=market.id,
                    question=market.question,
                    slug=market.slug,
                    volume_24h=market.volume_24h,
                    volume_7d=market.volume_7d,
                    outcomes=market.outcomes,
                    outcome_prices=market.outcome_prices,
                    best_bid=metrics.best_bid,
                    best_ask=metrics.best_ask,
                    spread=metrics.spread,
                    best_bid_depth=metrics.bid_top_depth,
                    best_ask_depth=metrics.ask_top_depth,
                    fill_score=fill_likelihood_score(market.volume_24h, metrics),
                    token_id=market.primary_token_id,
                )
            )

        logger.info("top_markets_evaluated", count=len(summaries))
        return summaries

    def get_ranking_summary(self, results: list[EvaluationResult]) -> dict[str, Any]:
        """
        Generate a summary of a ranking pass.

        Args:
            results: Evaluation results

        Returns:
            Summary dictionary with statistics
        """
        eligible = [r for r in results if not r.excluded]
        excluded = [r for r in results if r.excluded]

        exclusion_counts: dict[str, int] = {}
        for result in excluded:
            key = result.exclusion_code.value if result.exclusion_code else "unknown"
            exclusion_counts[key] = exclusion_counts.get(key, 0) + 1

        return {
            "total_markets": len(results),
            "eligible": len(eligible),
            "excluded": len(excluded),
            "eligible_rate": len(eligible) / len(results) * 100 if results else 0,
            "top_score": max((r.score for r in eligible), default=0.0),
            "exclusion_reasons": exclusion_counts,
        }


# Factory function
def get_ranking_pipeline() -> RankingPipeline:
    """Create and return a RankingPipeline instance."""
    return RankingPipeline()
