"""
Market Scanner Service

Evaluates Polymarket order books and ranks markets for scalping.
"""

from services.scanner.classifier import Eligible, Excluded, MarketClassifier
from services.scanner.orderbook import OrderBookAnalyzer
from services.scanner.penalties import PenaltyCalculator
from services.scanner.scoring import ScoringEngine
from services.scanner.service import RankingPipeline

__all__ = [
    "OrderBookAnalyzer",
    "MarketClassifier",
    "Eligible",
    "Excluded",
    "PenaltyCalculator",
    "ScoringEngine",
    "RankingPipeline",
]
