"""Tests for the JSON report writer."""

import json

from exchange_bounce_analyzer.modules.report import FIELD_KEYS, report_path, write_report


class TestWriteReport:
    def test_empty_list_writes_nothing(self, tmp_path):
        assert write_report(tmp_path, "main", []) is None
        assert list(tmp_path.iterdir()) == []

    def test_rows_are_reduced_to_known_keys(self, tmp_path):
        path = write_report(tmp_path / "logs", "main", [{"recipient": "kijitora@example.co.jp", "junk": 1}])
        assert path == report_path(tmp_path / "logs", "main")
        rows = json.loads(path.read_text(encoding="utf-8"))
        assert len(rows) == 1
        assert list(rows[0]) == FIELD_KEYS
        assert rows[0]["recipient"] == "kijitora@example.co.jp"
        assert rows[0]["reason"] == ""

    def test_appends_to_existing_report(self, tmp_path):
        write_report(tmp_path, "main", [{"recipient": "a@example.jp"}])
        path = write_report(tmp_path, "main", [{"recipient": "b@example.jp"}])
        rows = json.loads(path.read_text(encoding="utf-8"))
        assert [r["recipient"] for r in rows] == ["a@example.jp", "b@example.jp"]

    def test_unreadable_report_is_replaced(self, tmp_path):
        report_path(tmp_path, "main").write_text("garbage", encoding="utf-8")
        path = write_report(tmp_path, "main", [{"recipient": "a@example.jp"}])
        rows = json.loads(path.read_text(encoding="utf-8"))
        assert [r["recipient"] for r in rows] == ["a@example.jp"]

    def test_file_name(self, tmp_path):
        name = report_path(tmp_path, "main").name
        assert name.endswith("_main_exchange.json")
        assert name[:8].isdigit()
