"""
Scalping score for ScalpFinder.

Combines five weighted component scores into a 0-100 composite and applies
the event-resolution and jump-risk volatility multipliers. The drift
multiplier enters only through the mean-reversion component.
"""

import math
from datetime import datetime, timezone

import structlog

from services.scanner.classifier import Eligible, Excluded, MarketClassifier
from services.scanner.orderbook import OrderBookAnalyzer
from services.scanner.penalties import PenaltyCalculator
from shared.config import Settings, get_settings
from shared.models import (
    BookMetrics,
    ComponentScores,
    EvaluationResult,
    Market,
    OrderBookSnapshot,
    PenaltyMultipliers,
)

logger = structlog.get_logger(__name__)

EXPECTED_DAILY_RATIO = 1 / 7
SPIKE_RATIO = 0.3

# (max spread in ticks, score), checked in order
SPREAD_STEPS: tuple[tuple[float, float], ...] = (
    (1.2, 100.0),
    (2.0, 80.0),
    (3.0, 50.0),
)
WIDE_SPREAD_SCORE = 20.0

# (hours to resolution below, score), checked in order
TIME_STEPS: tuple[tuple[float, float], ...] = (
    (72, 40.0),
    (24 * 7, 70.0),
    (24 * 60, 100.0),
    (24 * 180, 80.0),
)
DISTANT_RESOLUTION_SCORE = 60.0


def spread_score(spread_in_ticks: float) -> float:
    """Step score for spread width in ticks."""
    for max_ticks, score in SPREAD_STEPS:
        if spread_in_ticks <= max_ticks:
            return score
    return WIDE_SPREAD_SCORE


def volume_churn_score(volume_24h: float, volume_7d: float) -> float:
    """
    Reward steady daily turnover over news-driven spikes.

    The ideal 24h volume is one seventh of the 7-day volume. A 24h share
    above 30% is treated as a spike and scored down linearly; otherwise a
    log-scaled volume score is scaled by how close the share is to 1/7.
    """
    volume_24h = max(volume_24h, 0.0)
    actual_ratio = volume_24h / (volume_7d or 1)

    if actual_ratio > SPIKE_RATIO:
        return max(20.0, 100 - (actual_ratio - EXPECTED_DAILY_RATIO) * 150)

    consistency = 1 - abs(actual_ratio - EXPECTED_DAILY_RATIO) * 4
    base = min(100.0, math.log10(volume_24h + 1) * 20)
    return base * max(0.5, min(1.3, consistency))


def mean_reversion_score(price: float, drift_multiplier: float) -> float:
    """Prices near 0.5 oscillate most; scaled by the drift multiplier."""
    return max(0.0, 100 - abs(price - 0.5) * 180) * drift_multiplier


def depth_quality_score(
    bid_depth_1: float,
    ask_depth_1: float,
    bid_depth_5: float,
    ask_depth_5: float,
) -> float:
    """
    Score balanced books with liquidity beyond the top tick.

    log-scaled 5-tick depth, times bid/ask symmetry, times a bonus for size
    resting behind the first tick.
    """
    total = bid_depth_5 + ask_depth_5
    if total <= 0:
        return 0.0
    if bid_depth_1 == 0 or ask_depth_1 == 0:
        return 0.0

    symmetry = 1 - abs(bid_depth_5 - ask_depth_5) / total
    depth = min(100.0, math.log10(total + 1) * 30)
    beyond_top = max(0.0, (bid_depth_5 - bid_depth_1) + (ask_depth_5 - ask_depth_1))
    layer_bonus = min(1.3, 1 + math.log10(beyond_top + 2) * 0.1)

    return depth * symmetry * layer_bonus


def time_safety_score(hours_to_resolution: float) -> float:
    """One to eight weeks out is the sweet spot."""
    for max_hours, score in TIME_STEPS:
        if hours_to_resolution < max_hours:
            return score
    return DISTANT_RESOLUTION_SCORE


class ScoringEngine:
    """
    Evaluates a market end to end.

    Runs the order book analyzer, the hard exclusion ladder and, for
    eligible markets, the weighted component scores and penalties.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        analyzer: OrderBookAnalyzer | None = None,
        classifier: MarketClassifier | None = None,
        penalties: PenaltyCalculator | None = None,
    ):
        """
        Initialize scoring engine.

        Args:
            settings: Settings instance. If None, loads from environment.
            analyzer: Optional OrderBookAnalyzer instance
            classifier: Optional MarketClassifier instance
            penalties: Optional PenaltyCalculator instance
        """
        self.settings = settings or get_settings()
        self.weights = self.settings.scoring_weights
        self.penalties = penalties or PenaltyCalculator()
        self.analyzer = analyzer or OrderBookAnalyzer(self.settings)
        self.classifier = classifier or MarketClassifier(self.settings, self.penalties)

    def evaluate(
        self,
        market: Market,
        book: OrderBookSnapshot | None,
        now: datetime | None = None,
    ) -> EvaluationResult:
        """
        Evaluate one market against its primary-token order book.

        Args:
            market: Market snapshot
            book: Order book snapshot, or None when unavailable
            now: Evaluation time. Pass a fixed value for reproducible results.

        Returns:
            EvaluationResult, excluded with a reason or scored
        """
        now = now or datetime.now(timezone.utc)  # noqa: UP017
        metrics = self.analyzer.analyze(book, market.tick_size)
        verdict = self.classifier.classify(market, metrics, now)

        hours = market.hours_to_resolution(now)
        base = dict(
            market_id=market.id,
            question=market.question,
            slug=market.slug,
            volume_24h=market.volume_24h,
            volume_7d=market.volume_7d,
            end_date=market.end_date,
            tick_size=market.tick_size,
            liquidity=market.liquidity,
            one_week_price_change=market.one_week_price_change,
            days_to_resolution=round(hours / 24, 1) if hours is not None else None,
            book=metrics,
            evaluated_at=now,
        )

        if isinstance(verdict, Excluded):
            logger.debug(
                "market_excluded",
                market_id=market.id,
                code=verdict.code.value,
                reason=verdict.reason,
            )
            return EvaluationResult(
                **base,
                excluded=True,
                exclusion_code=verdict.code,
                exclusion_reason=verdict.reason,
                score=0.0,
            )

        components = self.component_scores(market, metrics, verdict)
        penalties = PenaltyMultipliers(
            event_resolution=self.penalties.event_resolution_penalty(market.question),
            jump_risk_volatility=verdict.jump_risk_multiplier,
            drift=verdict.drift_multiplier,
        )
        score = self.final_score(components.composite, penalties)

        return EvaluationResult(
            **base,
            score=score,
            components=components,
            penalties=penalties,
        )

    def component_scores(
        self,
        market: Market,
        metrics: BookMetrics,
        verdict: Eligible,
    ) -> ComponentScores:
        """Compute the five components and their weighted sum."""
        depth = metrics.depth
        spread = spread_score(metrics.spread_in_ticks or 0.0)
        churn = volume_churn_score(market.volume_24h, market.volume_7d)
        reversion = mean_reversion_score(verdict.price, verdict.drift_multiplier)
        depth_quality = depth_quality_score(
            depth.bid(1) if depth else 0.0,
            depth.ask(1) if depth else 0.0,
            depth.bid(5) if depth else 0.0,
            depth.ask(5) if depth else 0.0,
        )
        time_safety = time_safety_score(verdict.hours_to_resolution)

        composite = (
            spread * self.weights.spread
            + churn * self.weights.volume_churn
            + reversion * self.weights.mean_reversion
            + depth_quality * self.weights.depth_quality
            + time_safety * self.weights.time_safety
        )

        return ComponentScores(
            spread=spread,
            volume_churn=churn,
            mean_reversion=reversion,
            depth_quality=depth_quality,
            time_safety=time_safety,
            composite=composite,
        )

    def final_score(self, composite: float, penalties: PenaltyMultipliers) -> float:
        """Apply multipliers, clamp to 0-100 and round to two decimals."""
        final = composite * penalties.event_resolution * penalties.jump_risk_volatility
        return round(min(100.0, max(0.0, final)), 2)
