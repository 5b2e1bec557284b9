"""
Data models for Translation Memory matching and leverage estimation
TM entries are owned by the persistence layer; match results and
suggestions live only for the duration of one lookup
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, List, Any
import logging

logger = logging.getLogger(__name__)


MATCH_TYPES = ["exact", "fuzzy", "context", "terminology"]


def clamp_score(value: float) -> float:
    """Clamp a score to the 0-100 range"""
    return max(0, min(100, value))


@dataclass
class TMEntry:
    """
    A persisted source/target pair in the Translation Memory

    Created when a reviewer finalizes a translation. Only usage_count
    changes after creation.
    """
    source_text: str
    target_text: str
    source_language: str
    target_language: str
    match_type: str = "exact"
    match_score: float = 100
    quality_score: float = 0
    confidence_level: float = 0
    therapeutic_area: Optional[str] = None
    usage_count: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)

    # Persistence keys
    id: Optional[str] = None
    project_id: Optional[str] = None
    segment_id: Optional[str] = None
    created_at: Optional[str] = None
    last_used: Optional[str] = None

    def __post_init__(self):
        """Clean and validate entry data"""
        if not isinstance(self.source_text, str) or not isinstance(self.target_text, str):
            raise ValueError("source_text and target_text must be strings")
        if not self.source_language or not self.target_language:
            raise ValueError("Language pair cannot be empty")
        if self.match_type not in MATCH_TYPES:
            raise ValueError(f"Invalid match_type: {self.match_type}, must be one of {MATCH_TYPES}")

        self.match_score = clamp_score(self.match_score or 0)
        self.quality_score = clamp_score(self.quality_score or 0)
        self.confidence_level = clamp_score(self.confidence_level or 0)
        self.usage_count = max(0, int(self.usage_count or 0))
        if self.metadata is None:
            self.metadata = {}

    @property
    def segment_type(self) -> Optional[str]:
        return self.metadata.get('segmentType')

    @property
    def complexity(self) -> Optional[str]:
        return self.metadata.get('complexity')

    def __repr__(self):
        src = self.source_text[:40] if self.source_text else "empty"
        tgt = self.target_text[:40] if self.target_text else "empty"
        return (f"TMEntry('{src}' → '{tgt}' "
                f"[{self.source_language}→{self.target_language}, used {self.usage_count}x])")


@dataclass
class MatchResult:
    """Scored TM candidate for one source segment"""
    entry: TMEntry
    similarity: int        # raw edit-distance similarity, 0-100
    match_score: int       # similarity plus context boost, 0-100
    match_type: str
    context_boost: int = 0
    blended_score: float = 0.0

    def __post_init__(self):
        self.similarity = int(clamp_score(self.similarity))
        self.match_score = int(clamp_score(self.match_score))
        self.blended_score = clamp_score(self.blended_score)
        if self.match_type not in MATCH_TYPES:
            raise ValueError(f"Invalid match_type: {self.match_type}, must be one of {MATCH_TYPES}")

    @property
    def source_text(self) -> str:
        return self.entry.source_text

    @property
    def target_text(self) -> str:
        return self.entry.target_text

    @property
    def quality_score(self) -> float:
        return self.entry.quality_score

    @property
    def usage_count(self) -> int:
        return self.entry.usage_count

    @property
    def therapeutic_area(self) -> Optional[str]:
        return self.entry.therapeutic_area

    def __repr__(self):
        return f"MatchResult('{self.source_text[:40]}' [{self.match_type} {self.match_score}%])"


@dataclass
class Segment:
    """A source segment submitted for TM lookup"""
    id: str
    text: str
    type: Optional[str] = None
    complexity: Optional[str] = None
    therapeutic_area: Optional[str] = None

    def __post_init__(self):
        if not self.id:
            raise ValueError("Segment ID cannot be empty")
        if not isinstance(self.text, str):
            raise ValueError(f"Segment text must be a string, got {type(self.text).__name__}")


@dataclass
class Suggestion:
    """TM suggestion for one segment, as shown to the reviewer"""
    segment_id: str
    matches: List[MatchResult] = field(default_factory=list)
    best_match: Optional[MatchResult] = None
    leverage_score: int = 0
    cost_savings: float = 0.0
    reasoning: List[str] = field(default_factory=list)
    error: Optional[str] = None
    source_text: str = ""

    @property
    def has_match(self) -> bool:
        return self.best_match is not None

    @property
    def word_count(self) -> int:
        return len(self.source_text.split())

    def __repr__(self):
        status = "ERROR" if self.error else f"{self.leverage_score}%"
        return f"Suggestion({self.segment_id}, {len(self.matches)} matches, {status})"


@dataclass
class TMAnalytics:
    """Project-level TM statistics"""
    total_entries: int = 0
    exact_matches: int = 0
    fuzzy_matches: int = 0
    avg_quality: float = 0.0
    avg_confidence: float = 0.0
    leverage_rate: float = 0.0


@dataclass
class SegmentAnalysis:
    """Summary of a suggestion batch"""
    total_segments: int = 0
    total_words: int = 0
    by_type: Dict[str, Dict[str, int]] = field(default_factory=dict)
    total_cost_savings: float = 0.0
    leverage_rate: float = 0.0
    failed_segments: int = 0
    suggestions: List[Suggestion] = field(default_factory=list)

    def __repr__(self):
        return (f"SegmentAnalysis({self.total_segments} segments, "
                f"leverage {self.leverage_rate:.1f}%, savings ${self.total_cost_savings:.2f})")
