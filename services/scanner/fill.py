"""
Fill-likelihood heuristic for the top-markets view.

Independent of the scalping score: estimates how quickly resting
top-of-book orders would fill given hourly volume.
"""

import math

from shared.models import BookMetrics

DEFAULT_SPREAD = 0.1


def fill_likelihood_score(volume_24h: float, book: BookMetrics) -> float | None:
    """
    Ratio of hourly volume to average top-of-book depth, penalized by spread.

    Args:
        volume_24h: 24 hour volume
        book: Metrics for the primary-token book

    Returns:
        Score in [0, 100] with two decimals, or None without book data
    """
    if not book.available:
        return None

    avg_depth = ((book.bid_top_depth or 0.0) + (book.ask_top_depth or 0.0)) / 2
    hourly_volume = max(volume_24h, 0.0) / 24
    # A zero spread also falls back to the default
    spread = book.spread or DEFAULT_SPREAD
    spread_penalty = 1 / (1 + spread) if spread > -1 else 1.0
    raw = max(0.0, hourly_volume / (avg_depth + 1) * spread_penalty)
    score = min(100.0, max(0.0, math.log10(raw + 1) * 50))
    return round(score, 2)
