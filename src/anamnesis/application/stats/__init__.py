# Application Stats Package
from .calculator import DeckStats, EaseDistribution, StatsCalculator

__all__ = ["StatsCalculator", "DeckStats", "EaseDistribution"]
