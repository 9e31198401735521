"""
Hard exclusion ladder for ScalpFinder.

Applies the checks in a fixed order; the first failing check decides the
reported reason. Markets surviving every check are eligible for scoring.
"""

from dataclasses import dataclass
from datetime import datetime

from services.scanner.penalties import PenaltyCalculator
from services.scanner.taxonomy import find_jump_risk_keyword, find_structural_decay_keyword
from shared.config import Settings, get_settings
from shared.models import BookMetrics, ExclusionCode, Market


@dataclass(frozen=True)
class Excluded:
    """Terminal state: the market is not tradable."""

    code: ExclusionCode
    reason: str

    def __str__(self) -> str:
        return f"EXCLUDED: {self.reason}"


@dataclass(frozen=True)
class Eligible:
    """Terminal state: the market proceeds to scoring."""

    price: float
    hours_to_resolution: float
    drift_multiplier: float
    jump_risk_multiplier: float

    def __str__(self) -> str:
        return "ELIGIBLE"


Classification = Excluded | Eligible


class MarketClassifier:
    """
    Decides hard exclusion for a market and its book metrics.

    Order of checks:
    1. Fees enabled
    2. Spread wider than the maximum tick count (or crossed)
    3. Jump-risk keyword
    4. Structural-decay keyword
    5. Primary price at the edge
    6. Too little time to resolution
    7. One-sided or empty book
    8. Directional drift toward an edge
    9. High weekly volatility
    """

    def __init__(
        self,
        settings: Settings | None = None,
        penalties: PenaltyCalculator | None = None,
    ):
        """
        Initialize classifier.

        Args:
            settings: Settings instance. If None, loads from environment.
            penalties: Penalty calculator for the drift and volatility gates
        """
        self.settings = settings or get_settings()
        self.config = self.settings.scanner
        self.penalties = penalties or PenaltyCalculator()

    def classify(
        self,
        market: Market,
        book: BookMetrics,
        now: datetime | None = None,
    ) -> Classification:
        """
        Run the exclusion ladder.

        Args:
            market: Market snapshot
            book: Metrics derived from the market's primary-token book
            now: Evaluation time, defaults to the current time

        Returns:
            Excluded with a reason, or Eligible with the values scoring needs
        """
        if market.fees_enabled:
            return Excluded(ExclusionCode.FEES_ENABLED, "Fees enabled")

        max_ticks = self.config.max_spread_ticks
        if book.spread_in_ticks is not None and (
            book.spread_in_ticks > max_ticks or book.spread_in_ticks < 0
        ):
            return Excluded(
                ExclusionCode.SPREAD_TOO_WIDE,
                f"Spread too wide ({book.spread_in_ticks:.1f} ticks, max {max_ticks:g})",
            )

        jump_keyword = find_jump_risk_keyword(market.question)
        if jump_keyword:
            return Excluded(
                ExclusionCode.JUMP_RISK_KEYWORD,
                f'Jump risk keyword: "{jump_keyword}"',
            )

        decay_keyword = find_structural_decay_keyword(market.question)
        if decay_keyword:
            return Excluded(
                ExclusionCode.STRUCTURAL_DECAY_KEYWORD,
                f'Structural decay keyword: "{decay_keyword}"',
            )

        price = market.primary_price
        if price < self.config.min_price or price > self.config.max_price:
            return Excluded(
                ExclusionCode.PRICE_AT_EDGE,
                f"Price at edge ({price * 100:.1f}%)",
            )

        hours = market.hours_to_resolution(now)
        min_hours = self.config.min_hours_to_resolution
        if hours is None:
            return Excluded(
                ExclusionCode.INSUFFICIENT_RUNWAY,
                "Insufficient runway (unknown resolution date)",
            )
        if hours < min_hours:
            return Excluded(
                ExclusionCode.INSUFFICIENT_RUNWAY,
                f"Insufficient runway ({hours:.1f}h to resolution, min {min_hours:g}h)",
            )

        if not book.bid_top_depth or not book.ask_top_depth:
            return Excluded(ExclusionCode.EMPTY_BOOK, "One-sided or empty book")

        drift = self.penalties.drift_penalty(price, market.one_week_price_change)
        if drift == 0:
            return Excluded(ExclusionCode.DIRECTIONAL_DRIFT, "Directional drift toward edge")

        jump_risk = self.penalties.jump_risk_penalty(market.question, market.one_week_price_change)
        if jump_risk == 0:
            return Excluded(ExclusionCode.HIGH_VOLATILITY, "High weekly volatility")

        return Eligible(
            price=price,
            hours_to_resolution=hours,
            drift_multiplier=drift,
            jump_risk_multiplier=jump_risk,
        )
