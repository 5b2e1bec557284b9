"""Shared fixtures for TM matcher tests."""

import pytest

from models.entities import TMEntry
from services.tm_store import InMemoryTMStore, TMStore, TMStoreError
from services.tm_matcher import TMatcher


def make_entry(source, target, **kwargs):
    """TMEntry with en→es defaults."""
    kwargs.setdefault("source_language", "en")
    kwargs.setdefault("target_language", "es")
    kwargs.setdefault("quality_score", 85)
    kwargs.setdefault("confidence_level", 90)
    return TMEntry(source_text=source, target_text=target, **kwargs)


class FailingStore(TMStore):
    """Store whose every call fails like an unreachable backend."""

    def __init__(self, message="connection refused"):
        self.message = message

    def fetch_candidates(self, *args, **kwargs):
        raise TMStoreError(self.message)

    def insert_entry(self, entry):
        raise TMStoreError(self.message)

    def increment_usage(self, entry_id):
        raise TMStoreError(self.message)

    def list_project_entries(self, project_id):
        raise TMStoreError(self.message)


@pytest.fixture
def store():
    """Empty in-memory store."""
    return InMemoryTMStore()


@pytest.fixture
def seeded_store():
    """Store holding the dosage instruction used across tests."""
    return InMemoryTMStore([
        make_entry("Take once daily", "Toma una vez al día", id="tm-1"),
    ])


@pytest.fixture
def matcher(seeded_store):
    return TMatcher(seeded_store, "en", "es", project_id="p1")


@pytest.fixture
def failing_matcher():
    return TMatcher(FailingStore(), "en", "es", project_id="p1")
