"""
Suggestion run logger
Readable, timestamped log of a TM suggestion batch for reviewers
"""

from datetime import datetime
from typing import List, Optional
import logging

logger = logging.getLogger(__name__)


class SuggestionLogger:
    """Run log with per-segment match decisions and a closing summary"""

    def __init__(self):
        """Initialize run logger"""
        self.logs = []
        self.start_time = datetime.now()
        self.total_segments = 0
        self.matched_count = 0
        self.unmatched_count = 0
        self.error_count = 0

    def log(self, message: str):
        """Add timestamped log entry"""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        entry = f"{timestamp} | {message}"
        self.logs.append(entry)
        logger.info(message)

    # ===== INITIALIZATION =====

    def init_run(self, total_segments: int, src_lang: str, tgt_lang: str,
                 therapeutic_area: Optional[str] = None):
        """Log run initialization"""
        self.total_segments = total_segments
        self.log(f"Started TM lookup for {total_segments} segments.")
        self.log(f"Source: {src_lang} | Target: {tgt_lang}")
        if therapeutic_area:
            self.log(f"Therapeutic area: {therapeutic_area}")

    # ===== SEGMENT DETAILS =====

    def log_segment_content(self, segment_id: str, source_text: str, limit: int = 100):
        """Log segment content before lookup"""
        truncated = source_text[:limit] + "..." if len(source_text) > limit else source_text
        self.log(f"[{segment_id}] Source: {truncated}")

    def log_segment_match(self, segment_id: str, match_score: int, match_type: str):
        """Log best match for a segment"""
        self.log(f"[{segment_id}] Best match: {match_score}% ({match_type})")
        self.matched_count += 1

    def log_segment_no_match(self, segment_id: str):
        """Log a segment with no TM candidates"""
        self.log(f"[{segment_id}] No matches found → new translation")
        self.unmatched_count += 1

    def log_lookup_error(self, segment_id: str, error_msg: str):
        """Log a degraded lookup"""
        self.log(f"ERROR - [{segment_id}] {error_msg}")
        self.error_count += 1

    # ===== SUMMARY LOGGING =====

    def log_summary(self, analysis):
        """Log final batch summary from a SegmentAnalysis"""
        self.log("=" * 80)
        self.log("SUMMARY")
        self.log("=" * 80)
        self.log(f"Total Segments: {analysis.total_segments} ({analysis.total_words} words)")

        for level, data in sorted(analysis.by_type.items()):
            self.log(f"  {level}: {data['segments']} segments, {data['words']} words")

        self.log(f"Leverage: {analysis.leverage_rate:.1f}%")
        self.log(f"Projected savings: ${analysis.total_cost_savings:.2f}")

        if analysis.failed_segments:
            self.log(f"⚠️ {analysis.failed_segments} segments could not be looked up")

        duration = (datetime.now() - self.start_time).total_seconds()
        self.log(f"Duration: {duration:.1f}s")
        self.log("=" * 80)

    # ===== UTILITY METHODS =====

    def get_content(self) -> str:
        """Get all log content as string"""
        return "\n".join(self.logs)

    def get_log_lines(self) -> List[str]:
        """Get all log lines as list"""
        return self.logs

    def save_to_file(self, filepath: str):
        """Save logs to file"""
        try:
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write(self.get_content())
            logger.info(f"Logs saved to {filepath}")
        except OSError as e:
            logger.error(f"Failed to save logs: {e}")

    def clear(self):
        """Clear all logs"""
        self.logs = []
        self.matched_count = 0
        self.unmatched_count = 0
        self.error_count = 0
