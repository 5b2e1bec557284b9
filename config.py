# Configuration for the Translation Memory Leverage Assistant

import os
import logging

logger = logging.getLogger(__name__)

# Supported languages for localization projects
# Format: 'language_code': 'Language Name'
SUPPORTED_LANGUAGES = {
    'en': 'English',
    'es': 'Spanish',
    'fr': 'French',
    'de': 'German',
    'it': 'Italian',
    'pt': 'Portuguese',
    'nl': 'Dutch',
    'pl': 'Polish',
    'sv': 'Swedish',
    'da': 'Danish',
    'fi': 'Finnish',
    'el': 'Greek',
    'cs': 'Czech',
    'hu': 'Hungarian',
    'ro': 'Romanian',
    'tr': 'Turkish',
    'ru': 'Russian',
    'ja': 'Japanese',
    'zh': 'Chinese (Simplified)',
    'ko': 'Korean',
    'ar': 'Arabic',
}

# Therapeutic areas used to scope TM lookups
THERAPEUTIC_AREAS = [
    'cardiology',
    'diabetes',
    'endocrinology',
    'immunology',
    'neurology',
    'oncology',
    'respiratory',
]

# Default values
DEFAULT_SOURCE_LANGUAGE = 'en'
DEFAULT_TARGET_LANGUAGE = 'es'

# Match classification thresholds (score 0-100)
EXACT_THRESHOLD = 95
FUZZY_THRESHOLD = 80
CONTEXT_THRESHOLD = 70

# Candidate lookup
MIN_STORED_MATCH_SCORE = 70   # only rows stored at or above this score are candidates
MAX_CANDIDATES = 10           # rows fetched per segment
SUGGESTION_TOP_N = 5          # matches kept per suggestion

# Context boost bonuses (added to raw similarity, capped at 100)
SEGMENT_TYPE_BONUS = 10
THERAPEUTIC_AREA_BONUS = 5
COMPLEXITY_BONUS = 5

# Ranking weights (blended score)
MATCH_SCORE_WEIGHT = 0.6
QUALITY_SCORE_WEIGHT = 0.4

# Edit distance is O(n*m); longer inputs are rejected
MAX_SEGMENT_LENGTH = 5000

# Cost calculation
COST_PER_WORD = 0.15
# (minimum score, savings rate), checked top-down
SAVINGS_RATES = [
    (95, 1.0),
    (85, 0.75),
    (75, 0.50),
    (0, 0.25),
]
FUZZY_LEVERAGE_WEIGHT = 0.7

# Defaults for newly saved TM entries
DEFAULT_MATCH_SCORE = 100
DEFAULT_QUALITY_SCORE = 85
DEFAULT_CONFIDENCE_LEVEL = 90

# Reasoning heuristics
FREQUENT_USAGE_COUNT = 5
EXCELLENT_QUALITY_SCORE = 90
COMPLEX_SEGMENT_WORDS = 50

# Persistence
TM_TABLE = "glocal_tm_intelligence"
DEFAULT_REQUEST_TIMEOUT = 30

# App name
APP_NAME = "TM Leverage Assistant"

# UI Settings
LAYOUT = "wide"


def load_supabase_settings() -> dict:
    """Read backend connection settings from the environment"""
    verify = os.environ.get('SUPABASE_VERIFY_SSL', 'true').strip().lower()

    raw_timeout = os.environ.get('SUPABASE_TIMEOUT', DEFAULT_REQUEST_TIMEOUT)
    try:
        timeout = int(raw_timeout)
    except ValueError:
        logger.warning(f"Invalid SUPABASE_TIMEOUT {raw_timeout!r}, using {DEFAULT_REQUEST_TIMEOUT}s")
        timeout = DEFAULT_REQUEST_TIMEOUT

    return {
        'url': os.environ.get('SUPABASE_URL', ''),
        'api_key': os.environ.get('SUPABASE_KEY', ''),
        'timeout': timeout,
        'verify_ssl': verify not in ('0', 'false', 'no'),
    }
