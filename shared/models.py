"""
Pydantic models for ScalpFinder.

Defines the market snapshots, order books and evaluation results shared by
the scanner service and its HTTP layer.
"""

from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)  # noqa: UP017


# =============================================================================
# Enums
# =============================================================================


class ExclusionCode(str, Enum):
    """Reason a market failed the hard exclusion ladder."""

    FEES_ENABLED = "fees_enabled"
    SPREAD_TOO_WIDE = "spread_too_wide"
    JUMP_RISK_KEYWORD = "jump_risk_keyword"
    STRUCTURAL_DECAY_KEYWORD = "structural_decay_keyword"
    PRICE_AT_EDGE = "price_at_edge"
    INSUFFICIENT_RUNWAY = "insufficient_runway"
    EMPTY_BOOK = "empty_book"
    DIRECTIONAL_DRIFT = "directional_drift"
    HIGH_VOLATILITY = "high_volatility"


# =============================================================================
# Market Models
# =============================================================================


class Market(BaseModel):
    """Immutable snapshot of a prediction market, fetched once per pass."""

    model_config = ConfigDict(frozen=True)

    id: str
    question: str = ""
    slug: str = ""
    end_date: datetime | None = None
    tick_size: float = 0.01
    fees_enabled: bool = False
    liquidity: float = 0.0
    volume_24h: float = 0.0
    volume_7d: float = 0.0
    one_week_price_change: float = 0.0
    outcomes: list[str] = Field(default_factory=list)
    outcome_prices: list[float] = Field(default_factory=list)
    token_ids: list[str] = Field(default_factory=list)

    @field_validator("tick_size", mode="before")
    @classmethod
    def default_tick_size(cls, v: float | None) -> float:
        """Missing or zero tick sizes fall back to one cent."""
        if not v:
            return 0.01
        return float(v)

    @field_validator("end_date")
    @classmethod
    def ensure_aware(cls, v: datetime | None) -> datetime | None:
        """Naive end dates are assumed to be UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)  # noqa: UP017
        return v

    @property
    def primary_price(self) -> float:
        """Price of the first outcome, 0.5 when unknown."""
        if not self.outcome_prices:
            return 0.5
        return self.outcome_prices[0]

    @property
    def primary_token_id(self) -> str | None:
        """Token id of the first outcome."""
        if not self.token_ids:
            return None
        return self.token_ids[0] or None

    def hours_to_resolution(self, now: datetime | None = None) -> float | None:
        """Hours until the market resolves; negative once past, None if unknown."""
        if self.end_date is None:
            return None
        now = now or datetime.now(timezone.utc)  # noqa: UP017
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)  # noqa: UP017
        return (self.end_date - now).total_seconds() / 3600


# =============================================================================
# Order Book Models
# =============================================================================


class OrderBookLevel(BaseModel):
    """A single price level. The CLOB sends price and size as decimal strings."""

    model_config = ConfigDict(frozen=True)

    price: float = Field(ge=0.0, le=1.0)
    size: float = Field(ge=0.0)


class OrderBookSnapshot(BaseModel):
    """Raw, unsorted order book for one outcome token."""

    model_config = ConfigDict(frozen=True)

    token_id: str = ""
    bids: list[OrderBookLevel] = Field(default_factory=list)
    asks: list[OrderBookLevel] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=_utc_now)

    @property
    def is_empty(self) -> bool:
        """True when either side has no levels."""
        return not self.bids or not self.asks


class DepthProfile(BaseModel):
    """Aggregate size within N ticks of each side's best price."""

    bids: dict[int, float] = Field(default_factory=dict)
    asks: dict[int, float] = Field(default_factory=dict)

    def bid(self, ticks: int) -> float:
        return self.bids.get(ticks, 0.0)

    def ask(self, ticks: int) -> float:
        return self.asks.get(ticks, 0.0)

    def total(self, ticks: int) -> float:
        """Combined depth on both sides at a band."""
        return self.bid(ticks) + self.ask(ticks)


class BookMetrics(BaseModel):
    """Derived top-of-book facts. Every field is None when the book is unavailable."""

    available: bool = False
    best_bid: float | None = None
    best_ask: float | None = None
    spread: float | None = None
    spread_in_ticks: float | None = None
    bid_top_depth: float | None = None
    ask_top_depth: float | None = None
    depth: DepthProfile | None = None

    @classmethod
    def unavailable(cls) -> "BookMetrics":
        """Metrics for a missing, failed or one-sided book."""
        return cls(available=False)


# =============================================================================
# Evaluation Models
# =============================================================================


class ComponentScores(BaseModel):
    """The five weighted components, each on a 0-100 scale, plus their weighted sum."""

    spread: float = 0.0
    volume_churn: float = 0.0
    mean_reversion: float = 0.0
    depth_quality: float = 0.0
    time_safety: float = 0.0
    composite: float = 0.0


class PenaltyMultipliers(BaseModel):
    """Soft penalty multipliers applied to eligible markets."""

    event_resolution: float = 1.0
    jump_risk_volatility: float = 1.0
    drift: float = 1.0


class EvaluationResult(BaseModel):
    """Outcome of evaluating one market in a ranking pass."""

    market_id: str
    question: str = ""
    slug: str = ""
    volume_24h: float = 0.0
    volume_7d: float = 0.0
    end_date: datetime | None = None
    tick_size: float = 0.01
    liquidity: float = 0.0
    one_week_price_change: float = 0.0
    days_to_resolution: float | None = None
    book: BookMetrics = Field(default_factory=BookMetrics)

    excluded: bool = False
    exclusion_code: ExclusionCode | None = None
    exclusion_reason: str | None = None
    score: float = Field(default=0.0, ge=0.0, le=100.0)
    components: ComponentScores | None = None
    penalties: PenaltyMultipliers | None = None
    evaluated_at: datetime = Field(default_factory=_utc_now)

    @model_validator(mode="after")
    def check_verdict(self) -> "EvaluationResult":
        """An exclusion reason and a numeric score are mutually exclusive."""
        if self.excluded:
            if self.exclusion_reason is None:
                raise ValueError("excluded results must carry a reason")
            if self.score != 0.0 or self.components is not None:
                raise ValueError("excluded results cannot carry a score")
        elif self.exclusion_reason is not None or self.exclusion_code is not None:
            raise ValueError("eligible results cannot carry an exclusion reason")
        return self


class MarketSummary(BaseModel):
    """Top-markets view with a fill-likelihood score instead of the scalping score."""

    id: str
    question: str = ""
    slug: str = ""
    volume_24h: float = 0.0
    volume_7d: float = 0.0
    outcomes: list[str] = Field(default_factory=list)
    outcome_prices: list[float] = Field(default_factory=list)
    best_bid: float | None = None
    best_ask: float | None = None
    spread: float | None = None
    best_bid_depth: float | None = None
    best_ask_depth: float | None = None
    fill_score: float | None = None
    token_id: str | None = None


# =============================================================================
# API Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "healthy"
    version: str = "0.1.0"
    timestamp: datetime = Field(default_factory=_utc_now)


class ScalpingMarketsResponse(BaseModel):
    """Ranked scalping candidates."""

    timestamp: datetime = Field(default_factory=_utc_now)
    count: int = 0
    markets: list[EvaluationResult] = Field(default_factory=list)


class TopMarketsResponse(BaseModel):
    """Top markets by 24h volume with fill-likelihood scores."""

    timestamp: datetime = Field(default_factory=_utc_now)
    count: int = 0
    markets: list[MarketSummary] = Field(default_factory=list)
