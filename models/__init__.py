"""Models package"""
from .entities import (
    MATCH_TYPES,
    TMEntry,
    MatchResult,
    Segment,
    Suggestion,
    TMAnalytics,
    SegmentAnalysis,
    clamp_score
)

__all__ = [
    'MATCH_TYPES',
    'TMEntry',
    'MatchResult',
    'Segment',
    'Suggestion',
    'TMAnalytics',
    'SegmentAnalysis',
    'clamp_score'
]
