"""
Soft penalty multipliers for ScalpFinder.

Each function is monotonic in its input and returns a bounded multiplier.
Multipliers combine by multiplication, so a single severe factor dominates.
"""

from services.scanner.taxonomy import (
    COUNTDOWN_PATTERNS,
    SINGLE_EVENT_PATTERNS,
    find_jump_risk_keyword,
)

# Event resolution
COUNTDOWN_PENALTY = 0.3
SINGLE_EVENT_PENALTY = 0.5

# Weekly volatility: (absolute one-week change above, multiplier), checked in order
VOLATILITY_STEPS: tuple[tuple[float, float], ...] = (
    (0.30, 0.2),
    (0.20, 0.5),
    (0.10, 0.8),
)

# Drift
EDGE_LOW = 0.15
EDGE_HIGH = 0.85
DRIFT_THRESHOLD = 0.05
STABLE_THRESHOLD = 0.03
EDGE_PENALTY = 0.5
STABILITY_BONUS = 1.2


class PenaltyCalculator:
    """Computes event-resolution, jump-risk volatility and drift multipliers."""

    def event_resolution_penalty(self, question: str) -> float:
        """
        Penalize questions that resolve at a known decisive moment.

        Returns:
            0.3 for countdown phrasing ("by March", "before 2026"),
            0.5 for single-event phrasing ("will X announce ..."), else 1.0.
            Countdown takes priority.
        """
        lowered = question.lower()

        if any(p.search(lowered) for p in COUNTDOWN_PATTERNS):
            return COUNTDOWN_PENALTY
        if any(p.search(lowered) for p in SINGLE_EVENT_PATTERNS):
            return SINGLE_EVENT_PENALTY
        return 1.0

    def jump_risk_penalty(self, question: str, one_week_price_change: float | None) -> float:
        """
        Penalize jump-risk topics and high weekly volatility.

        Returns:
            0.0 on a jump-risk keyword, otherwise 0.2 / 0.5 / 0.8 for weekly
            moves above 30% / 20% / 10%, else 1.0.
        """
        if find_jump_risk_keyword(question):
            return 0.0

        abs_change = abs(one_week_price_change or 0.0)
        for threshold, multiplier in VOLATILITY_STEPS:
            if abs_change > threshold:
                return multiplier
        return 1.0

    def drift_penalty(self, price: float, one_week_price_change: float | None) -> float:
        """
        Penalize prices trending toward 0 or 1, reward stable prices.

        Returns:
            0.0 for a decaying long-shot or converging certainty, 0.5 for
            any other edge price, 1.2 for a weekly move under 3%, else 1.0.
        """
        change = one_week_price_change or 0.0
        near_zero = price < EDGE_LOW
        near_one = price > EDGE_HIGH

        if near_zero and change < -DRIFT_THRESHOLD:
            return 0.0
        if near_one and change > DRIFT_THRESHOLD:
            return 0.0
        if near_zero or near_one:
            return EDGE_PENALTY
        if abs(change) < STABLE_THRESHOLD:
            return STABILITY_BONUS
        return 1.0
