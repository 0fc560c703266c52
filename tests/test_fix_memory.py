"""Tests for fix memory, its registry and the JSON store."""

import json
import logging
import threading
from unittest.mock import Mock

import pytest

from domain.diagnostics import ErrorAnalyzer, ErrorCategory, FixMemory, FixMemoryEntry, FixMemoryRegistry
from domain.exceptions import FixMemoryStoreError
from domain.services.fix_memory_store import FixMemoryStore
from infrastructure.persistence import InMemoryFixMemoryStore, JsonFileFixMemoryStore


def make_entry(signature, category=ErrorCategory.NETWORK, verified=True, fix="retry", index=0):
    return FixMemoryEntry(
        id=f"FIX-{index}",
        timestamp=f"2026-01-01T00:00:{index:02d}+00:00",
        signature=signature,
        category=category,
        root_cause="cause",
        fix_applied=fix,
        verified=verified,
    )


@pytest.fixture
def analyzer():
    return ErrorAnalyzer(FixMemoryRegistry(lambda workspace: InMemoryFixMemoryStore()))


@pytest.fixture
def store():
    return InMemoryFixMemoryStore()


@pytest.fixture
def memory(store):
    return FixMemory(store)


def resolved(analyzer, message, fix="Restart the service", verified=True, code=None):
    analysis = analyzer.analyze({"message": message, "code": code}, "ws")
    analysis.resolve(fix, verified=verified)
    return analysis


class TestRecord:

    def test_unverified_resolution_is_ignored(self, analyzer, memory):
        analysis = resolved(analyzer, "connect ETIMEDOUT", verified=False)

        assert memory.record(analysis) is None
        assert memory.entries() == []

    def test_pending_analysis_is_ignored(self, analyzer, memory):
        assert memory.record(analyzer.analyze("connect ETIMEDOUT", "ws")) is None
        assert memory.entries() == []

    def test_recording_twice_is_idempotent(self, analyzer, memory):
        analysis = resolved(analyzer, "connect ETIMEDOUT 10.0.0.1:443", code="ETIMEDOUT")

        memory.record(analysis)
        memory.record(analysis)

        assert len(memory.entries()) == 1

    def test_same_signature_replaces_in_place(self, analyzer, memory):
        first = memory.record(resolved(analyzer, "File /a/b.txt not found", fix="create it", code="ENOENT"))
        memory.record(resolved(analyzer, "Other failure", fix="unrelated"))
        second = memory.record(resolved(analyzer, "File /c/d.txt not found", fix="mkdir -p", code="ENOENT"))

        entries = memory.entries()
        assert [e.fix_applied for e in entries] == ["mkdir -p", "unrelated"]
        assert second.id == first.id

    def test_entry_fields(self, analyzer, memory):
        analysis = resolved(analyzer, "connect ETIMEDOUT", code="ETIMEDOUT")

        entry = memory.record(analysis)

        assert entry.signature == "ETIMEDOUT:connect etimedout"
        assert entry.category == ErrorCategory.NETWORK
        assert entry.root_cause == analysis.decomposition.root_cause
        assert entry.verified is True

    def test_fifo_eviction(self, analyzer, store):
        memory = FixMemory(store, max_entries=3)

        for word in ("alpha", "beta", "gamma", "delta", "epsilon"):
            memory.record(resolved(analyzer, f"{word} failed"))

        assert [e.signature for e in memory.entries()] == [
            "UNKNOWN:gamma failed",
            "UNKNOWN:delta failed",
            "UNKNOWN:epsilon failed",
        ]

    def test_store_failure_propagates(self, analyzer):
        store = Mock(spec=FixMemoryStore)
        store.load.return_value = []
        store.save.side_effect = FixMemoryStoreError("disk full")

        with pytest.raises(FixMemoryStoreError):
            FixMemory(store).record(resolved(analyzer, "connect ETIMEDOUT"))

    def test_concurrent_records_are_not_lost(self, analyzer, memory):
        analyses = [resolved(analyzer, f"failure {chr(97 + i)} happened") for i in range(20)]
        threads = [threading.Thread(target=memory.record, args=(a,)) for a in analyses]

        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(memory.entries()) == 20


class TestFindSimilar:

    def test_exact_matches_include_unverified(self, store, memory):
        store.save([make_entry("SIG:a", verified=False), make_entry("SIG:b", index=1)])

        matches = memory.find_similar("SIG:a", ErrorCategory.NETWORK)

        assert [m.signature for m in matches] == ["SIG:a"]
        assert matches[0].verified is False

    def test_falls_back_to_recent_verified_of_same_category(self, store, memory):
        entries = [make_entry(f"SIG:{i}", index=i) for i in range(7)]
        entries.append(make_entry("SIG:unverified", verified=False, index=7))
        entries.append(make_entry("SIG:auth", category=ErrorCategory.AUTH, index=8))
        store.save(entries)

        matches = memory.find_similar("SIG:new", ErrorCategory.NETWORK)

        assert [m.signature for m in matches] == ["SIG:6", "SIG:5", "SIG:4", "SIG:3", "SIG:2"]

    def test_fallback_ranks_by_timestamp_not_position(self, store, memory):
        store.save([make_entry("SIG:late", index=9), make_entry("SIG:early", index=1), make_entry("SIG:mid", index=5)])

        matches = memory.find_similar("SIG:new", ErrorCategory.NETWORK)

        assert [m.signature for m in matches] == ["SIG:late", "SIG:mid", "SIG:early"]

    def test_re_recorded_fix_ranks_first(self, analyzer, memory, monkeypatch):
        clock = iter(f"2026-01-01T00:00:{s:02d}+00:00" for s in range(10))
        monkeypatch.setattr("domain.diagnostics.fix_memory.utc_now_iso", lambda: next(clock))
        memory.record(resolved(analyzer, "connect ECONNRESET", fix="fix A", code="ECONNRESET"))
        memory.record(resolved(analyzer, "connect ETIMEDOUT", fix="fix B", code="ETIMEDOUT"))
        memory.record(resolved(analyzer, "connect ECONNRESET", fix="fix A v2", code="ECONNRESET"))

        matches = memory.find_similar("OTHER:x", ErrorCategory.NETWORK)

        assert [m.fix_applied for m in matches] == ["fix A v2", "fix B"]

    def test_no_matches(self, memory):
        assert memory.find_similar("SIG:x", ErrorCategory.STATE) == []

    def test_unavailable_store_degrades_to_no_matches(self, caplog):
        store = Mock(spec=FixMemoryStore)
        store.load.side_effect = FixMemoryStoreError("unreadable")

        with caplog.at_level(logging.WARNING):
            assert FixMemory(store).find_similar("SIG:x", ErrorCategory.NETWORK) == []
        assert "unavailable" in caplog.text


class TestJsonFileFixMemoryStore:

    def test_missing_file_is_empty(self, tmp_path):
        assert JsonFileFixMemoryStore(str(tmp_path), "memory.json").load() == []

    def test_round_trip_through_disk(self, tmp_path, analyzer):
        path = ".nova/knowledge/debug-memory.json"
        analysis = resolved(analyzer, "connect ETIMEDOUT 10.0.0.1:443", code="ETIMEDOUT")
        FixMemory(JsonFileFixMemoryStore(str(tmp_path), path)).record(analysis)

        reloaded = FixMemory(JsonFileFixMemoryStore(str(tmp_path), path))
        matches = reloaded.find_similar("ETIMEDOUT:connect etimedout N.N.N.N:N", ErrorCategory.NETWORK)

        assert len(matches) == 1
        assert matches[0].fix_applied == "Restart the service"
        raw = json.loads((tmp_path / path).read_text())
        assert raw[0]["fixApplied"] == "Restart the service"
        assert raw[0]["category"] == "NETWORK"

    def test_no_temp_files_left_behind(self, tmp_path):
        store = JsonFileFixMemoryStore(str(tmp_path), "memory.json")

        store.save([make_entry("SIG:a")])

        assert [p.name for p in tmp_path.iterdir()] == ["memory.json"]

    def test_corrupt_file_is_treated_as_empty(self, tmp_path, caplog):
        (tmp_path / "memory.json").write_text("{not json")

        with caplog.at_level(logging.WARNING):
            assert JsonFileFixMemoryStore(str(tmp_path), "memory.json").load() == []
        assert "unreadable" in caplog.text

    def test_reads_legacy_keys(self, tmp_path):
        (tmp_path / "memory.json").write_text(json.dumps([{
            "id": "FIX-1",
            "timestamp": "2025-01-01T00:00:00Z",
            "errorSignature": "ENOENT:file P not found",
            "category": "RESOURCE",
            "rootCause": "missing file",
            "fixApplied": "create the file",
            "verified": True,
            "similarErrors": ["FIX-0"],
        }]))

        entry = JsonFileFixMemoryStore(str(tmp_path), "memory.json").load()[0]

        assert entry.signature == "ENOENT:file P not found"
        assert entry.related_ids == ["FIX-0"]
        assert entry.category == ErrorCategory.RESOURCE

    def test_write_failure_raises_store_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        store = JsonFileFixMemoryStore(str(tmp_path), "blocker/memory.json")

        with pytest.raises(FixMemoryStoreError):
            store.save([make_entry("SIG:a")])


class TestFixMemoryRegistry:

    def test_one_memory_per_workspace(self, tmp_path):
        factory = Mock(side_effect=lambda workspace: InMemoryFixMemoryStore())
        registry = FixMemoryRegistry(factory)

        first = registry.get(str(tmp_path / "a"))
        again = registry.get(str(tmp_path / "a"))
        other = registry.get(str(tmp_path / "b"))

        assert first is again
        assert first is not other
        assert factory.call_count == 2

    def test_settings_are_passed_on(self):
        registry = FixMemoryRegistry(lambda ws: InMemoryFixMemoryStore(), max_entries=7, max_category_matches=2)

        memory = registry.get("ws")

        assert memory.max_entries == 7
        assert memory.max_category_matches == 2
