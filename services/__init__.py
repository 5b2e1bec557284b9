"""Services package"""
from .tm_store import TMStore, TMStoreError, InMemoryTMStore
from .supabase_client import SupabaseTMStore, normalize_tm_rows
from .tm_matcher import TMatcher, SegmentTooLongError

__all__ = [
    'TMStore',
    'TMStoreError',
    'InMemoryTMStore',
    'SupabaseTMStore',
    'normalize_tm_rows',
    'TMatcher',
    'SegmentTooLongError'
]
