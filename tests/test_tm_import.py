"""
Tests for TM seeding from TMX/CSV exports and segment splitting.
"""

from services.tm_store import InMemoryTMStore
from services.tm_matcher import TMatcher
from utils.text_processor import normalize_text, split_segments
from utils.tm_import import load_csv, load_tmx, parse_tmx


TMX = """<?xml version="1.0" encoding="UTF-8"?>
<tmx version="1.4">
  <header srclang="en-US" datatype="plaintext"/>
  <body>
    <tu>
      <tuv xml:lang="en-US"><seg>Take once daily</seg></tuv>
      <tuv xml:lang="es-ES"><seg>Toma una vez al día</seg></tuv>
    </tu>
    <tu>
      <tuv xml:lang="en-US"><seg>Store below <ph>25</ph> °C</seg></tuv>
      <tuv xml:lang="es-ES"><seg>Conservar por debajo de <ph>25</ph> °C</seg></tuv>
    </tu>
    <tu>
      <tuv xml:lang="en-US"><seg>Orphan unit</seg></tuv>
    </tu>
    <tu>
      <tuv xml:lang="en-US"><seg>Do not crush</seg></tuv>
      <tuv xml:lang="fr-FR"><seg>Ne pas écraser</seg></tuv>
    </tu>
  </body>
</tmx>
"""


class TestTMX:
    def test_parse_units(self):
        units = parse_tmx(TMX.encode("utf-8"))
        # the single-tuv unit is skipped
        assert len(units) == 3
        assert units[0] == {"en-us": "Take once daily", "es-es": "Toma una vez al día"}

    def test_inline_tags_flattened(self):
        units = parse_tmx(TMX.encode("utf-8"))
        assert units[1]["en-us"] == "Store below 25 °C"

    def test_utf16(self):
        content = TMX.replace('encoding="UTF-8"', 'encoding="UTF-16"').encode("utf-16")
        assert len(parse_tmx(content)) == 3

    def test_undecodable(self):
        assert parse_tmx(b"not xml at all") == []

    def test_load_language_pair(self):
        entries = load_tmx(TMX.encode("utf-8"), "en", "es", therapeutic_area="oncology",
                           project_id="p1")
        assert [e.source_text for e in entries] == ["Take once daily", "Store below 25 °C"]
        assert all(e.therapeutic_area == "oncology" for e in entries)
        assert all(e.project_id == "p1" for e in entries)
        assert entries[0].quality_score == 85
        assert entries[0].match_score == 100

    def test_other_pair(self):
        entries = load_tmx(TMX.encode("utf-8"), "en", "fr")
        assert [e.target_text for e in entries] == ["Ne pas écraser"]

    def test_loaded_entries_are_matchable(self):
        store = InMemoryTMStore(load_tmx(TMX.encode("utf-8"), "en", "es"))
        best = TMatcher(store, "en", "es").find_matches("Take once daily")[0]
        assert best.match_type == "exact"


class TestCSV:
    def test_named_columns(self):
        content = (
            "target,source,quality_score,therapeutic_area\n"
            "Toma una vez al día,Take once daily,95,oncology\n"
            "No triturar,Do not crush,,\n"
        ).encode("utf-8")
        entries = load_csv(content, "en", "es", therapeutic_area="cardiology")

        assert entries[0].source_text == "Take once daily"
        assert entries[0].target_text == "Toma una vez al día"
        assert entries[0].quality_score == 95
        assert entries[0].therapeutic_area == "oncology"
        assert entries[1].quality_score == 85
        assert entries[1].therapeutic_area == "cardiology"

    def test_first_two_columns(self):
        content = "en,es\nTake once daily,Toma una vez al día\n".encode("utf-8")
        entries = load_csv(content, "en", "es")
        assert len(entries) == 1
        assert entries[0].source_language == "en"

    def test_skips_blank_rows(self):
        content = "source,target\nTake once daily,\n,Toma\n".encode("utf-8")
        assert load_csv(content, "en", "es") == []

    def test_invalid_quality_falls_back(self):
        content = "source,target,quality_score\nA,B,high\n".encode("utf-8")
        assert load_csv(content, "en", "es")[0].quality_score == 85

    def test_empty(self):
        assert load_csv(b"", "en", "es") == []

    def test_single_column(self):
        assert load_csv(b"source\nA\n", "en", "es") == []

    def test_cp1252_export(self):
        content = "source,target\nCosts 5€ daily,Cuesta 5€ al día\n".encode("cp1252")
        entries = load_csv(content, "en", "es")
        assert entries[0].source_text == "Costs 5€ daily"
        assert entries[0].target_text == "Cuesta 5€ al día"

    def test_utf16_export(self):
        content = "source,target\nTake once daily,Toma una vez al día\n".encode("utf-16")
        entries = load_csv(content, "en", "es")
        assert entries[0].target_text == "Toma una vez al día"


class TestTextProcessor:
    def test_normalize(self):
        assert normalize_text("Take once   daily ") == "Take once daily"
        assert normalize_text(None) == ""

    def test_split_segments(self):
        segments = split_segments("Take once daily\n\n  Do not crush  \n")
        assert segments == [
            {"id": "seg-1", "text": "Take once daily"},
            {"id": "seg-2", "text": "Do not crush"},
        ]
