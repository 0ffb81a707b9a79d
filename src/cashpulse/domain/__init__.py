"""Domain layer for cashpulse application."""

from cashpulse.domain.achievements import AchievementTracker
from cashpulse.domain.alerts import AlertEvaluator
from cashpulse.domain.patterns import detect_patterns

__all__ = [
    "AchievementTracker",
    "AlertEvaluator",
    "detect_patterns",
]
