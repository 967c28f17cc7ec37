"""Unit tests for JSONL snapshot export and import.

Every test writes into pytest's ``tmp_path``; nothing touches the project tree.
"""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from proof_ledger.ledger import Ledger, RecordModel, SnapshotError, dump_jsonl, load_jsonl


def _lines(path: Path) -> list[dict]:
    return [json.loads(l) for l in path.read_text(encoding="utf-8").splitlines() if l.strip()]


def _rewrite(path: Path, lines: list[dict]) -> None:
    path.write_text(
        "\n".join(json.dumps(l, ensure_ascii=False, sort_keys=True) for l in lines) + "\n",
        encoding="utf-8",
    )


@pytest.fixture
def snapshot(populated_ledger: Ledger, tmp_path: Path) -> Path:
    return dump_jsonl(populated_ledger, tmp_path / "snapshots" / "chain.jsonl")


@pytest.mark.unit
class TestDumpJsonl:
    def test_creates_parent_directories(self, snapshot: Path) -> None:
        assert snapshot.exists()

    def test_one_line_per_record(self, populated_ledger: Ledger, snapshot: Path) -> None:
        assert len(_lines(snapshot)) == len(populated_ledger)

    def test_lines_hold_record_fields(self, populated_ledger: Ledger, snapshot: Path) -> None:
        assert _lines(snapshot) == populated_ledger.to_dicts()

    def test_keys_are_sorted(self, snapshot: Path) -> None:
        first = snapshot.read_text(encoding="utf-8").splitlines()[0]
        keys = list(json.loads(first))
        assert keys == sorted(keys)

    def test_unwritable_path_raises_snapshot_error(
        self, populated_ledger: Ledger, tmp_path: Path
    ) -> None:
        # A plain file where the parent directory should be blocks mkdir.
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(SnapshotError, match="Failed to write"):
            dump_jsonl(populated_ledger, blocker / "chain.jsonl")


@pytest.mark.unit
class TestLoadJsonl:
    def test_round_trip_preserves_records(self, populated_ledger: Ledger, snapshot: Path) -> None:
        loaded = load_jsonl(snapshot, difficulty=1)

        assert loaded.records == populated_ledger.records
        assert loaded.verify()

    def test_loaded_ledger_accepts_appends(self, snapshot: Path) -> None:
        loaded = load_jsonl(snapshot, difficulty=1)
        record = loaded.append("after import")

        assert record.index == 6
        assert loaded.verify()

    def test_unicode_payload_survives(self, ledger: Ledger, tmp_path: Path) -> None:
        ledger.append("humidité élevée ✓")
        path = dump_jsonl(ledger, tmp_path / "u.jsonl")

        assert load_jsonl(path, difficulty=1).payloads()[-1] == "humidité élevée ✓"

    def test_tampered_snapshot_loads_but_fails_verify(self, snapshot: Path) -> None:
        lines = _lines(snapshot)
        lines[2]["payload"] = "X"
        _rewrite(snapshot, lines)

        result = load_jsonl(snapshot, difficulty=1).verify()

        assert result.status == "digest_mismatch"
        assert result.failed_index == 2

    def test_blank_lines_ignored(self, snapshot: Path) -> None:
        snapshot.write_text(snapshot.read_text(encoding="utf-8") + "\n\n", encoding="utf-8")
        assert len(load_jsonl(snapshot, difficulty=1)) == 6

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(SnapshotError, match="Failed to read"):
            load_jsonl(tmp_path / "absent.jsonl")

    def test_empty_file_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.jsonl"
        path.write_text("\n", encoding="utf-8")

        with pytest.raises(SnapshotError, match="no records"):
            load_jsonl(path)

    def test_malformed_json_reports_line_number(self, snapshot: Path) -> None:
        lines = snapshot.read_text(encoding="utf-8").splitlines()
        lines[1] = lines[1][:-5]
        snapshot.write_text("\n".join(lines) + "\n", encoding="utf-8")

        with pytest.raises(SnapshotError, match=r"chain\.jsonl:2:"):
            load_jsonl(snapshot)

    @pytest.mark.parametrize(
        ("field_name", "value"),
        [
            ("nonce", -1),
            ("index", "3"),
            ("timestamp", 1.5),
            ("payload", None),
        ],
    )
    def test_schema_violation_raises(self, snapshot: Path, field_name: str, value: object) -> None:
        lines = _lines(snapshot)
        lines[0][field_name] = value
        _rewrite(snapshot, lines)

        with pytest.raises(SnapshotError, match=r":1: invalid record"):
            load_jsonl(snapshot)

    def test_unknown_key_rejected(self, snapshot: Path) -> None:
        lines = _lines(snapshot)
        lines[3]["signature"] = "abc"
        _rewrite(snapshot, lines)

        with pytest.raises(SnapshotError, match=r":4: invalid record"):
            load_jsonl(snapshot)

    def test_missing_key_rejected(self, snapshot: Path) -> None:
        lines = _lines(snapshot)
        del lines[0]["digest"]
        _rewrite(snapshot, lines)

        with pytest.raises(SnapshotError):
            load_jsonl(snapshot)


@pytest.mark.unit
class TestRecordModel:
    def test_to_record_matches_source(self, populated_ledger: Ledger) -> None:
        source = populated_ledger[3]
        model = RecordModel.model_validate(source.to_dict())

        assert model.to_record() == source
