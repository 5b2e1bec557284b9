"""
Cost and leverage estimation

Converts match quality into projected cost savings and aggregates
project-level leverage:
  • Savings rate per score band (100% / 75% / 50% / 25%)
  • Leverage rate = (exact + 0.7 × fuzzy) / total × 100
  • Project analytics over stored TM entries
"""

from typing import List

import pandas as pd

from models.entities import TMEntry, TMAnalytics
import config


def count_words(text: str) -> int:
    """Whitespace-delimited word count"""
    return len(text.split()) if text else 0


def savings_rate(score: float) -> float:
    """Fraction of the per-word cost saved at a given match score"""
    for min_score, rate in config.SAVINGS_RATES:
        if score >= min_score:
            return rate
    return config.SAVINGS_RATES[-1][1]


def calculate_cost_savings(score: float, word_count: int,
                           cost_per_word: float = config.COST_PER_WORD) -> float:
    """Projected saving for a segment of word_count words matched at score"""
    return word_count * cost_per_word * savings_rate(score)


def calculate_leverage_rate(exact_matches: int, fuzzy_matches: int, total: int) -> float:
    """Share of content (0-100) that existing TM can cover; 0 for no content"""
    if total <= 0:
        return 0.0
    rate = (exact_matches + fuzzy_matches * config.FUZZY_LEVERAGE_WEIGHT) / total * 100
    return max(0.0, min(100.0, rate))


def summarize_entries(entries: List[TMEntry]) -> TMAnalytics:
    """Aggregate stored TM entries into project analytics"""
    if not entries:
        return TMAnalytics()

    df = pd.DataFrame([
        {
            'match_type': e.match_type,
            'quality_score': e.quality_score,
            'confidence_level': e.confidence_level,
        }
        for e in entries
    ])

    total = len(df)
    counts = df['match_type'].value_counts()
    exact = int(counts.get('exact', 0))
    fuzzy = int(counts.get('fuzzy', 0))

    return TMAnalytics(
        total_entries=total,
        exact_matches=exact,
        fuzzy_matches=fuzzy,
        avg_quality=float(df['quality_score'].mean()),
        avg_confidence=float(df['confidence_level'].mean()),
        leverage_rate=calculate_leverage_rate(exact, fuzzy, total)
    )
