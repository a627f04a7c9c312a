"""Tests for the RunLedger — append-only, hash-chained, tamper-evident."""

from __future__ import annotations

import sqlite3

import pytest

from pagesmith.core.run_ledger import LedgerIntegrityError, RunLedger
from pagesmith.models.ledger import LedgerEntry


def _entry(run_id: str = "run-1", stage_id: str = "resolve", transition: str = "not_started->running", **kw) -> LedgerEntry:
    return LedgerEntry(run_id=run_id, stage_id=stage_id, state_transition=transition, **kw)


class TestRunLedger:
    def test_append_sets_entry_hash(self, ledger: RunLedger):
        sealed = ledger.append(_entry())
        assert sealed.entry_hash != ""
        assert sealed.previous_entry_hash == ""  # first entry

    def test_hash_chain_links(self, ledger: RunLedger):
        e1 = ledger.append(_entry())
        e2 = ledger.append(_entry(transition="running->passed"))
        assert e2.previous_entry_hash == e1.entry_hash

    def test_chains_are_per_run(self, ledger: RunLedger):
        ledger.append(_entry(run_id="run-1"))
        first_of_run2 = ledger.append(_entry(run_id="run-2"))
        assert first_of_run2.previous_entry_hash == ""

    def test_verify_chain_valid(self, ledger: RunLedger):
        ledger.append(_entry())
        ledger.append(_entry(transition="running->passed", output_hash="abc"))
        assert ledger.verify_chain("run-1") is True

    def test_verify_chain_empty(self, ledger: RunLedger):
        assert ledger.verify_chain("nonexistent") is True

    def test_tampered_entry_detected(self, ledger: RunLedger, tmp_path):
        ledger.append(_entry())
        ledger.append(_entry(transition="running->failed", detail="boom"))
        with sqlite3.connect(tmp_path / "test_ledger.db") as conn:
            conn.execute("UPDATE run_ledger SET detail = 'fine' WHERE detail = 'boom'")
        with pytest.raises(LedgerIntegrityError, match="Tampered"):
            ledger.verify_chain("run-1")

    def test_round_trip_fields(self, ledger: RunLedger):
        sealed = ledger.append(
            _entry(
                transition="running->passed",
                input_hash="in",
                output_hash="out",
                artifact_references=["sha256:abc"],
                build_version="1a2b3c4",
                generator_version="0.121.2",
            )
        )
        (stored,) = ledger.get_run_entries("run-1")
        assert stored == sealed

    def test_get_all_run_ids_most_recent_first(self, ledger: RunLedger):
        ledger.append(_entry(run_id="run-1"))
        ledger.append(_entry(run_id="run-2"))
        ledger.append(_entry(run_id="run-1", transition="running->passed"))
        assert ledger.get_all_run_ids() == ["run-1", "run-2"]
        assert ledger.get_latest_run_id() == "run-1"

    def test_latest_run_id_empty(self, ledger: RunLedger):
        assert ledger.get_latest_run_id() is None

    def test_stage_output_hashes(self, ledger: RunLedger):
        ledger.append(_entry(run_id="run-1", stage_id="generate", transition="running->passed", output_hash="h1"))
        ledger.append(_entry(run_id="run-2", stage_id="generate", transition="running->failed"))
        ledger.append(_entry(run_id="run-3", stage_id="generate", transition="running->passed", output_hash="h1"))
        assert ledger.get_stage_output_hashes("generate") == {"run-1": "h1", "run-3": "h1"}
