"""
TM MATCHER
Translation Memory matching and leverage suggestions for localization projects

Core functionality:
  • Edit distance similarity (Levenshtein), 0-100
  • Context boost from segment metadata agreement
  • Fixed-threshold classification (exact / fuzzy / context / terminology)
  • Ranking by blended match and quality score
  • Per-segment suggestions with cost savings and reasoning

Lookups never raise: store failures are logged and reported through the
error flag so the review screen can show them.
"""

import math
import logging
from typing import Dict, List, Optional, Union

from models.entities import (
    TMEntry, MatchResult, Segment, Suggestion, TMAnalytics, SegmentAnalysis
)
from services.tm_store import TMStore
from services.leverage import (
    calculate_cost_savings, calculate_leverage_rate, count_words, summarize_entries
)
import config

logger = logging.getLogger(__name__)


class SegmentTooLongError(ValueError):
    """Input exceeds the edit distance length limit"""


# ═════════════════════════════════════════════════════════════════════════════════
# EDIT DISTANCE (Levenshtein)
# ═════════════════════════════════════════════════════════════════════════════════

def levenshtein_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance"""
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)
    if len(s2) == 0:
        return len(s1)

    previous_row = range(len(s2) + 1)
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def calculate_similarity(s1: str, s2: str, max_length: int = config.MAX_SEGMENT_LENGTH) -> int:
    """
    Normalized similarity between two segments (0-100)

    Compared case-insensitively. Identical strings, and two empty strings,
    score 100.

    Raises:
        TypeError: if either input is not a string
        SegmentTooLongError: if either input is longer than max_length
    """
    if not isinstance(s1, str) or not isinstance(s2, str):
        raise TypeError("Similarity inputs must be strings")
    if s1 == s2:
        return 100

    longer = max(len(s1), len(s2))
    if longer == 0:
        return 100
    if longer > max_length:
        raise SegmentTooLongError(
            f"Segment of {longer} characters exceeds limit of {max_length}"
        )

    distance = levenshtein_distance(s1.lower(), s2.lower())
    score = (longer - distance) / longer * 100
    # Round half up
    return int(math.floor(score + 0.5))


# ═════════════════════════════════════════════════════════════════════════════════
# CONTEXT BOOST, CLASSIFICATION, RANKING
# ═════════════════════════════════════════════════════════════════════════════════

def apply_context_boost(score: float,
                        segment_type_match: bool = False,
                        therapeutic_area_match: bool = False,
                        complexity_match: bool = False) -> int:
    """Add metadata agreement bonuses to a base score, capped at 100"""
    boosted = score
    if segment_type_match:
        boosted += config.SEGMENT_TYPE_BONUS
    if therapeutic_area_match:
        boosted += config.THERAPEUTIC_AREA_BONUS
    if complexity_match:
        boosted += config.COMPLEXITY_BONUS
    return int(max(0, min(100, boosted)))


def classify_match_type(score: float) -> str:
    """Classify a score using fixed thresholds"""
    if score >= config.EXACT_THRESHOLD:
        return "exact"
    elif score >= config.FUZZY_THRESHOLD:
        return "fuzzy"
    elif score >= config.CONTEXT_THRESHOLD:
        return "context"
    else:
        return "terminology"


def blended_score(match_score: float, quality_score: float) -> float:
    """Ranking metric combining match and historical quality"""
    return (match_score * config.MATCH_SCORE_WEIGHT +
            quality_score * config.QUALITY_SCORE_WEIGHT)


def generate_reasoning(best_match: Optional[MatchResult], source_text: str) -> List[str]:
    """Human-readable reasons behind a suggestion"""
    reasons = []

    if best_match is None:
        reasons.append("No TM matches found - will require new translation")
        return reasons

    if best_match.match_score >= 95:
        reasons.append("Exact or near-exact match found")
    elif best_match.match_score >= 85:
        reasons.append("High-quality fuzzy match available")
    elif best_match.match_score >= 75:
        reasons.append("Moderate match found - will need review")

    if best_match.quality_score >= config.EXCELLENT_QUALITY_SCORE:
        reasons.append("Excellent historical quality rating")

    if best_match.usage_count > config.FREQUENT_USAGE_COUNT:
        reasons.append(f"Frequently used translation ({best_match.usage_count} times)")

    if best_match.therapeutic_area:
        reasons.append(f"Therapeutic area match: {best_match.therapeutic_area}")

    if count_words(source_text) > config.COMPLEX_SEGMENT_WORDS:
        reasons.append("Complex segment - careful review recommended")

    return reasons


def score_entry(source_text: str,
                entry: TMEntry,
                segment_type: Optional[str] = None,
                complexity: Optional[str] = None,
                therapeutic_area: Optional[str] = None) -> MatchResult:
    """Score, boost and classify one TM entry against a source segment"""
    similarity = calculate_similarity(source_text, entry.source_text)
    match_score = apply_context_boost(
        similarity,
        segment_type_match=bool(segment_type) and entry.segment_type == segment_type,
        therapeutic_area_match=bool(therapeutic_area) and entry.therapeutic_area == therapeutic_area,
        complexity_match=bool(complexity) and entry.complexity == complexity,
    )

    return MatchResult(
        entry=entry,
        similarity=similarity,
        match_score=match_score,
        # Classified on raw similarity; the boost only affects ranking
        match_type=classify_match_type(similarity),
        context_boost=match_score - similarity,
        blended_score=blended_score(match_score, entry.quality_score),
    )


# ═════════════════════════════════════════════════════════════════════════════════
# CORE TM MATCHER
# ═════════════════════════════════════════════════════════════════════════════════

class TMatcher:
    """
    TM matcher bound to a store and a language pair

    Usage:
        matcher = TMatcher(store, 'en', 'es', therapeutic_area='oncology')
        suggestions = matcher.get_suggestions([{'id': 's1', 'text': 'Take once daily'}])
    """

    def __init__(self,
                 store: TMStore,
                 source_language: str = config.DEFAULT_SOURCE_LANGUAGE,
                 target_language: str = config.DEFAULT_TARGET_LANGUAGE,
                 therapeutic_area: Optional[str] = None,
                 project_id: Optional[str] = None,
                 run_logger=None):
        """
        Args:
            store: TM store to query
            source_language: Source language code
            target_language: Target language code
            therapeutic_area: Restrict lookups to this area (optional)
            project_id: Project used for saves and analytics (optional)
            run_logger: SuggestionLogger for a readable run log (optional)
        """
        self.store = store
        self.source_language = source_language
        self.target_language = target_language
        self.therapeutic_area = therapeutic_area
        self.project_id = project_id
        self.run_logger = run_logger

        # Last lookup failure, None when the last call succeeded
        self.error: Optional[str] = None

    def find_matches(self,
                     source_text: str,
                     segment_type: Optional[str] = None,
                     complexity: Optional[str] = None,
                     therapeutic_area: Optional[str] = None) -> List[MatchResult]:
        """
        Ranked TM matches for one source segment

        The therapeutic area bonus uses the segment's own area and applies
        only when the matcher does not already restrict candidates to an
        area. Stored entries too long to score are skipped.

        Returns an empty list and sets self.error if the store fails or
        the input cannot be scored.
        """
        self.error = None
        # Every candidate already shares the filter area
        boost_area = None if self.therapeutic_area else therapeutic_area

        try:
            if not isinstance(source_text, str):
                raise TypeError("Similarity inputs must be strings")
            if len(source_text) > config.MAX_SEGMENT_LENGTH:
                raise SegmentTooLongError(
                    f"Segment of {len(source_text)} characters exceeds limit of "
                    f"{config.MAX_SEGMENT_LENGTH}"
                )

            entries = self.store.fetch_candidates(
                self.source_language,
                self.target_language,
                therapeutic_area=self.therapeutic_area,
                min_match_score=config.MIN_STORED_MATCH_SCORE,
                limit=config.MAX_CANDIDATES
            )

            matches = []
            for entry in entries:
                try:
                    matches.append(
                        score_entry(source_text, entry, segment_type, complexity, boost_area)
                    )
                except SegmentTooLongError as e:
                    logger.warning(f"Skipping TM entry {entry.id}: {e}")
        except Exception as e:
            self.error = str(e) or e.__class__.__name__
            logger.error(f"TM lookup failed: {self.error}", exc_info=True)
            return []

        matches.sort(key=lambda m: m.blended_score, reverse=True)
        logger.debug(f"{len(matches)} TM matches for: {str(source_text)[:50]}")
        return matches

    def get_suggestions(self, segments: List[Union[Segment, Dict]]) -> List[Suggestion]:
        """
        Suggestions for a batch of segments

        Segments are processed independently; a failed lookup yields a
        suggestion with no matches and its error message.
        """
        suggestions = []
        last_error = None

        for raw in segments:
            suggestion = self._suggest(raw)
            if suggestion.error:
                last_error = suggestion.error
            suggestions.append(suggestion)

        self.error = last_error
        return suggestions

    def _suggest(self, raw: Union[Segment, Dict]) -> Suggestion:
        try:
            segment = raw if isinstance(raw, Segment) else Segment(**raw)
        except (TypeError, ValueError) as e:
            segment_id = raw.get('id', '') if isinstance(raw, dict) else ''
            logger.warning(f"Invalid segment {segment_id!r}: {e}")
            if self.run_logger:
                self.run_logger.log_lookup_error(segment_id, str(e))
            return Suggestion(segment_id=segment_id, error=str(e),
                              reasoning=generate_reasoning(None, ''))

        if self.run_logger:
            self.run_logger.log_segment_content(segment.id, segment.text)

        matches = self.find_matches(segment.text, segment.type, segment.complexity,
                                    segment.therapeutic_area)
        if self.error:
            if self.run_logger:
                self.run_logger.log_lookup_error(segment.id, self.error)
            return Suggestion(segment_id=segment.id, error=self.error,
                              reasoning=generate_reasoning(None, segment.text),
                              source_text=segment.text)

        best_match = matches[0] if matches else None
        leverage_score = best_match.match_score if best_match else 0

        if self.run_logger:
            if best_match:
                self.run_logger.log_segment_match(segment.id, best_match.match_score, best_match.match_type)
            else:
                self.run_logger.log_segment_no_match(segment.id)

        return Suggestion(
            segment_id=segment.id,
            matches=matches[:config.SUGGESTION_TOP_N],
            best_match=best_match,
            leverage_score=leverage_score,
            cost_savings=calculate_cost_savings(leverage_score, count_words(segment.text)),
            reasoning=generate_reasoning(best_match, segment.text),
            source_text=segment.text
        )

    def save_tm(self,
                segment_id: str,
                source_text: str,
                target_text: str,
                metadata: Optional[Dict] = None) -> Optional[TMEntry]:
        """
        Store a finalized translation as a new TM entry

        Returns the stored entry, or None if the write failed.
        """
        try:
            entry = TMEntry(
                project_id=self.project_id,
                segment_id=segment_id,
                source_text=source_text,
                target_text=target_text,
                source_language=self.source_language,
                target_language=self.target_language,
                match_type="exact",
                match_score=config.DEFAULT_MATCH_SCORE,
                quality_score=config.DEFAULT_QUALITY_SCORE,
                confidence_level=config.DEFAULT_CONFIDENCE_LEVEL,
                therapeutic_area=self.therapeutic_area,
                metadata=metadata or {},
                usage_count=1
            )
            stored = self.store.insert_entry(entry)
            logger.info(f"Saved TM entry for segment {segment_id}")
            return stored
        except Exception as e:
            logger.error(f"Failed to save TM entry for segment {segment_id}: {e}", exc_info=True)
            return None

    def record_usage(self, entry_id: str) -> bool:
        """Count one reuse of a TM entry; failures are logged only"""
        try:
            self.store.increment_usage(entry_id)
            return True
        except Exception as e:
            logger.warning(f"Failed to update TM usage for {entry_id}: {e}")
            return False

    def get_analytics(self, project_id: Optional[str] = None) -> Optional[TMAnalytics]:
        """Project-level TM statistics, None if the store is unavailable"""
        project_id = project_id or self.project_id
        try:
            entries = self.store.list_project_entries(project_id)
        except Exception as e:
            logger.error(f"Failed to load TM analytics for {project_id}: {e}", exc_info=True)
            return None
        return summarize_entries(entries)

    # ═════════════════════════════════════════════════════════════════════════════
    # BATCH ANALYSIS
    # ═════════════════════════════════════════════════════════════════════════════

    def analyze_segments(self, segments: List[Union[Segment, Dict]]) -> SegmentAnalysis:
        """Suggestions for a batch plus distribution, savings and leverage"""
        if self.run_logger:
            self.run_logger.init_run(len(segments), self.source_language,
                                     self.target_language, self.therapeutic_area)

        suggestions = self.get_suggestions(segments)

        by_type: Dict[str, Dict[str, int]] = {}
        total_words = 0
        failed = 0

        for suggestion in suggestions:
            words = suggestion.word_count
            total_words += words

            if suggestion.error:
                failed += 1
                level = 'error'
            elif suggestion.best_match is None:
                level = 'no_match'
            else:
                level = suggestion.best_match.match_type

            if level not in by_type:
                by_type[level] = {'segments': 0, 'words': 0}
            by_type[level]['segments'] += 1
            by_type[level]['words'] += words

        analysis = SegmentAnalysis(
            total_segments=len(suggestions),
            total_words=total_words,
            by_type=by_type,
            total_cost_savings=sum(s.cost_savings for s in suggestions),
            leverage_rate=calculate_leverage_rate(
                by_type.get('exact', {}).get('segments', 0),
                by_type.get('fuzzy', {}).get('segments', 0),
                len(suggestions)
            ),
            failed_segments=failed,
            suggestions=suggestions
        )

        if self.run_logger:
            self.run_logger.log_summary(analysis)
        return analysis
