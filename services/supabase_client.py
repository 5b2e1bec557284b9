"""
Supabase REST client for the Translation Memory table
Handles authentication headers, PostgREST filters, and normalization of rows
"""

import requests
import logging
from datetime import datetime, timezone
from typing import List, Dict, Optional, Any

from models.entities import TMEntry
from services.tm_store import TMStore, TMStoreError
import config

logger = logging.getLogger(__name__)


# ===== NORMALIZATION FUNCTIONS =====

def normalize_tm_row(row: Dict[str, Any]) -> TMEntry:
    """
    Convert one table row to a TMEntry

    Raises:
        ValueError: if the row cannot form a valid entry
    """
    return TMEntry(
        id=row.get('id'),
        source_text=row.get('tm_source_text') or '',
        target_text=row.get('tm_target_text') or '',
        source_language=row.get('source_language') or '',
        target_language=row.get('target_language') or '',
        match_type=row.get('match_type') or 'exact',
        match_score=row.get('match_score') or 0,
        quality_score=row.get('quality_score') or 0,
        confidence_level=row.get('confidence_level') or 0,
        therapeutic_area=row.get('therapeutic_area'),
        usage_count=row.get('usage_count') or 0,
        metadata=row.get('tm_metadata') or {},
        project_id=row.get('project_id'),
        segment_id=row.get('segment_id'),
        created_at=row.get('created_at'),
        last_used=row.get('last_used'),
    )


def normalize_tm_rows(rows: Any) -> List[TMEntry]:
    """
    Convert a PostgREST response to TMEntry objects

    Handles:
        - A list of rows or a single row object
        - Rows with missing or invalid fields (skipped with a warning)
    """
    if isinstance(rows, dict):
        rows = [rows]
    elif not isinstance(rows, list):
        logger.warning(f"Unexpected TM response type: {type(rows)}")
        return []

    entries = []
    for row in rows:
        if not isinstance(row, dict):
            continue
        try:
            entries.append(normalize_tm_row(row))
        except ValueError as e:
            logger.warning(f"Skipping invalid TM row {row.get('id')}: {e}")
    return entries


def entry_to_row(entry: TMEntry) -> Dict[str, Any]:
    """Convert a TMEntry to the table's column layout"""
    row = {
        'project_id': entry.project_id,
        'segment_id': entry.segment_id,
        'tm_source_text': entry.source_text,
        'tm_target_text': entry.target_text,
        'source_language': entry.source_language,
        'target_language': entry.target_language,
        'match_type': entry.match_type,
        'match_score': entry.match_score,
        'quality_score': entry.quality_score,
        'confidence_level': entry.confidence_level,
        'therapeutic_area': entry.therapeutic_area,
        'tm_metadata': entry.metadata,
        'usage_count': entry.usage_count,
    }
    if entry.id:
        row['id'] = entry.id
    return row


# ===== SUPABASE CLIENT =====

class SupabaseTMStore(TMStore):
    """
    TM store backed by a Supabase (PostgREST) table

    Handles:
    - API key authentication
    - Equality / range filters and ordering
    - Error mapping to TMStoreError
    """

    def __init__(self,
                 base_url: str,
                 api_key: str,
                 table: str = config.TM_TABLE,
                 timeout: int = config.DEFAULT_REQUEST_TIMEOUT,
                 verify_ssl: bool = True):
        """
        Initialize the client

        Args:
            base_url: Project URL (e.g., https://xyz.supabase.co)
            api_key: anon or service-role key
            table: TM table name
            timeout: Request timeout in seconds
            verify_ssl: Whether to verify SSL certificates
        """
        if not base_url:
            raise ValueError("Supabase URL cannot be empty")

        self.base_url = base_url.rstrip('/')
        self.table = table
        self.timeout = timeout
        self.verify_ssl = verify_ssl

        self.session = requests.Session()
        self.session.headers.update({
            'apikey': api_key,
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
            'Accept': 'application/json'
        })

        logger.info(f"SupabaseTMStore initialized: {self.base_url} ({self.table})")

    @classmethod
    def from_settings(cls, settings: Optional[Dict] = None) -> "SupabaseTMStore":
        """Build a client from config.load_supabase_settings()"""
        settings = settings or config.load_supabase_settings()
        return cls(
            base_url=settings['url'],
            api_key=settings['api_key'],
            timeout=settings.get('timeout', config.DEFAULT_REQUEST_TIMEOUT),
            verify_ssl=settings.get('verify_ssl', True)
        )

    def _make_request(self,
                      method: str,
                      params: Optional[Dict] = None,
                      body: Optional[Dict] = None,
                      headers: Optional[Dict] = None) -> Any:
        """
        Make HTTP request to the TM table endpoint

        Args:
            method: HTTP method (GET, POST, PATCH)
            params: PostgREST query parameters
            body: JSON body for POST/PATCH
            headers: Extra request headers

        Returns:
            Response JSON (None for empty bodies)

        Raises:
            TMStoreError: On network or API errors
        """
        url = f"{self.base_url}/rest/v1/{self.table}"

        if method not in ("GET", "POST", "PATCH"):
            raise ValueError(f"Unsupported method: {method}")

        try:
            logger.debug(f"{method} {url} {params}")
            response = self.session.request(
                method,
                url,
                params=params,
                json=body,
                headers=headers,
                timeout=self.timeout,
                verify=self.verify_ssl
            )
            response.raise_for_status()

            if not response.content:
                return None
            result = response.json()
            logger.debug(f"Response: {len(str(result))} chars")
            return result

        except requests.exceptions.Timeout as e:
            error_msg = f"Request timeout: {url}"
            logger.error(error_msg)
            raise TMStoreError(error_msg) from e

        except requests.exceptions.ConnectionError as e:
            error_msg = f"Connection error: {url} - {str(e)}"
            logger.error(error_msg)
            raise TMStoreError(error_msg) from e

        except requests.exceptions.HTTPError as e:
            error_msg = f"HTTP {response.status_code}: {url} - {response.text[:200]}"
            logger.error(error_msg)
            raise TMStoreError(error_msg) from e

        except ValueError as e:
            error_msg = f"Invalid JSON from {url}: {e}"
            logger.error(error_msg)
            raise TMStoreError(error_msg) from e

        except requests.exceptions.RequestException as e:
            error_msg = f"Request failed: {str(e)}"
            logger.error(error_msg)
            raise TMStoreError(error_msg) from e

    def test_connection(self) -> bool:
        """
        Test connection to the TM table

        Returns:
            True if connection successful, False otherwise
        """
        try:
            self._make_request("GET", params={'select': 'id', 'limit': 1})
            logger.info("✓ Supabase TM table reachable")
            return True
        except TMStoreError as e:
            logger.error(f"✗ Supabase connection failed: {e}")
            return False

    def fetch_candidates(self,
                         source_language: str,
                         target_language: str,
                         therapeutic_area: Optional[str] = None,
                         min_match_score: int = config.MIN_STORED_MATCH_SCORE,
                         limit: int = config.MAX_CANDIDATES) -> List[TMEntry]:
        params = {
            'select': '*',
            'source_language': f'eq.{source_language}',
            'target_language': f'eq.{target_language}',
            'match_score': f'gte.{min_match_score}',
            'order': 'match_score.desc',
            'limit': limit,
        }
        if therapeutic_area:
            params['therapeutic_area'] = f'eq.{therapeutic_area}'

        rows = self._make_request("GET", params=params)
        entries = normalize_tm_rows(rows or [])
        logger.info(f"Fetched {len(entries)} TM candidates ({source_language}→{target_language})")
        return entries

    def insert_entry(self, entry: TMEntry) -> TMEntry:
        rows = self._make_request(
            "POST",
            body=entry_to_row(entry),
            headers={'Prefer': 'return=representation'}
        )
        stored = normalize_tm_rows(rows or [])
        if not stored:
            raise TMStoreError("Insert returned no row")
        logger.info(f"Inserted TM entry {stored[0].id}")
        return stored[0]

    def increment_usage(self, entry_id: str) -> None:
        # PostgREST has no atomic increment without an RPC; read then update
        rows = self._make_request(
            "GET",
            params={'select': 'usage_count', 'id': f'eq.{entry_id}'}
        )
        if not rows:
            raise TMStoreError(f"TM entry not found: {entry_id}")

        now = datetime.now(timezone.utc).isoformat()
        self._make_request(
            "PATCH",
            params={'id': f'eq.{entry_id}'},
            body={
                'usage_count': (rows[0].get('usage_count') or 0) + 1,
                'last_used': now,
                'updated_at': now
            }
        )

    def list_project_entries(self, project_id: Optional[str]) -> List[TMEntry]:
        params = {'select': '*'}
        params['project_id'] = f'eq.{project_id}' if project_id else 'is.null'
        rows = self._make_request("GET", params=params)
        return normalize_tm_rows(rows or [])
