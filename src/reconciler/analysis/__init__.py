"""
Analysis Package

Pattern mining over rejected match suggestions.
"""

from .patterns import MerchantMismatch, PatternAnalyzer, PatternInsight

__all__ = ["MerchantMismatch", "PatternAnalyzer", "PatternInsight"]
