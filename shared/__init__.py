"""
ScalpFinder Shared Modules

This package contains configuration, models and the Polymarket client used by the scanner.
"""

from shared.config import Settings, get_settings
from shared.models import (
    BookMetrics,
    ComponentScores,
    DepthProfile,
    EvaluationResult,
    ExclusionCode,
    Market,
    MarketSummary,
    OrderBookLevel,
    OrderBookSnapshot,
    PenaltyMultipliers,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Models
    "Market",
    "OrderBookLevel",
    "OrderBookSnapshot",
    "DepthProfile",
    "BookMetrics",
    "ComponentScores",
    "PenaltyMultipliers",
    "ExclusionCode",
    "EvaluationResult",
    "MarketSummary",
]
