"""
Translation Memory storage
Defines the store contract used by the matcher and a process-local store
for offline use and seeding from TMX/CSV exports
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import List, Optional, Dict

from models.entities import TMEntry
import config

logger = logging.getLogger(__name__)


class TMStoreError(Exception):
    """Raised when the persistence layer cannot serve a request"""


class TMStore:
    """
    Store contract for TM entries

    Implementations raise TMStoreError on failure. Callers decide whether to
    degrade or propagate.
    """

    def fetch_candidates(self,
                         source_language: str,
                         target_language: str,
                         therapeutic_area: Optional[str] = None,
                         min_match_score: int = config.MIN_STORED_MATCH_SCORE,
                         limit: int = config.MAX_CANDIDATES) -> List[TMEntry]:
        """Entries for a language pair, best stored score first"""
        raise NotImplementedError

    def insert_entry(self, entry: TMEntry) -> TMEntry:
        """Append a new entry and return it as stored"""
        raise NotImplementedError

    def increment_usage(self, entry_id: str) -> None:
        """Add one to an entry's usage_count"""
        raise NotImplementedError

    def list_project_entries(self, project_id: Optional[str]) -> List[TMEntry]:
        """All entries belonging to a project"""
        raise NotImplementedError


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class InMemoryTMStore(TMStore):
    """Process-local TM store with the same filtering as the remote table"""

    def __init__(self, entries: Optional[List[TMEntry]] = None):
        self._entries: Dict[str, TMEntry] = {}
        for entry in entries or []:
            self.insert_entry(entry)

    def __len__(self):
        return len(self._entries)

    def fetch_candidates(self,
                         source_language: str,
                         target_language: str,
                         therapeutic_area: Optional[str] = None,
                         min_match_score: int = config.MIN_STORED_MATCH_SCORE,
                         limit: int = config.MAX_CANDIDATES) -> List[TMEntry]:
        candidates = [
            entry for entry in self._entries.values()
            if entry.source_language == source_language
            and entry.target_language == target_language
            and entry.match_score >= min_match_score
            and (not therapeutic_area or entry.therapeutic_area == therapeutic_area)
        ]
        # sorted() is stable, so insertion order breaks ties
        candidates = sorted(candidates, key=lambda e: e.match_score, reverse=True)
        return candidates[:limit]

    def insert_entry(self, entry: TMEntry) -> TMEntry:
        if entry.id is None:
            entry.id = str(uuid.uuid4())
        if entry.created_at is None:
            entry.created_at = _now()
        self._entries[entry.id] = entry
        logger.debug(f"Stored TM entry {entry.id}: {entry.source_text[:50]}")
        return entry

    def increment_usage(self, entry_id: str) -> None:
        entry = self._entries.get(entry_id)
        if entry is None:
            raise TMStoreError(f"TM entry not found: {entry_id}")
        entry.usage_count += 1
        entry.last_used = _now()

    def list_project_entries(self, project_id: Optional[str]) -> List[TMEntry]:
        return [e for e in self._entries.values() if e.project_id == project_id]

    def add_entries(self, entries: List[TMEntry]) -> int:
        """Bulk insert, returns number of entries added"""
        for entry in entries:
            self.insert_entry(entry)
        logger.info(f"Loaded {len(entries)} TM entries into memory store")
        return len(entries)

    def clear(self):
        self._entries.clear()
