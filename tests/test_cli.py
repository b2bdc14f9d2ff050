"""Tests for the command-line workflows (IMAP and Ollama are faked)."""

import email
import io
import json
import logging

import pytest

from samples import BOUNCE_EML, PLAIN_EML

from exchange_bounce_analyzer import main as main_module
from exchange_bounce_analyzer.modules import cli
from exchange_bounce_analyzer.modules.config import AccountConfig, AppConfig, OllamaConfig
from exchange_bounce_analyzer.modules.report import report_path
from exchange_bounce_analyzer.utils.reasons import REASONS


class FakeImapClient:
    """Stands in for ImapClient; serves the same two messages for every folder."""

    def __init__(self, account):
        self.account = account

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        return False

    def iter_messages(self, folder, days):
        yield "1", email.message_from_string(BOUNCE_EML)
        yield "2", email.message_from_string(PLAIN_EML)


class FakeOllama:
    def __init__(self, base_url, model):
        self.calls = []

    def test_connection(self):
        return True

    def suggest_reason(self, record):
        self.calls.append(record.recipient)
        return {"reason": "filtered", "comment": "guess"}


def _account():
    return AccountConfig(name="main", host="imap.example.jp", port=993, username="u", password="p")


class TestRunFiles:
    def test_prints_json_results(self, bounce_file, plain_file, tmp_path):
        out = io.StringIO()
        missing = tmp_path / "missing.eml"
        parsed = cli.run_files(AppConfig(), [bounce_file, plain_file, missing], out)

        assert parsed == 1
        results = json.loads(out.getvalue())
        assert [r["status"] for r in results] == ["parsed", "not-recognized", "unreadable"]
        assert results[0]["file"] == str(bounce_file)
        assert results[0]["records"][0]["reason"] == "userunknown"
        assert results[0]["rfc822"].startswith("Message-ID: <original-0001@example.jp>\n")
        assert results[1]["records"] == []

    def test_hints_only_for_unclassified_records(self, bounce_file, monkeypatch):
        monkeypatch.setattr(cli, "OllamaClient", FakeOllama)
        config = AppConfig(ollama=OllamaConfig(enabled=True))
        out = io.StringIO()
        cli.run_files(config, [bounce_file], out)

        record = json.loads(out.getvalue())[0]["records"][0]
        assert record["reason"] == "userunknown"
        assert record["ai_reason"] == ""


class TestRunAccounts:
    def test_writes_report_for_exchange_bounces(self, tmp_path, monkeypatch):
        monkeypatch.setattr(cli, "ImapClient", FakeImapClient)
        config = AppConfig(log_dir=str(tmp_path), accounts={"main": _account()})

        summary = cli.run_accounts(config, 30)

        assert summary == {"main": 1}
        rows = json.loads(report_path(tmp_path, "main").read_text(encoding="utf-8"))
        assert len(rows) == 1
        row = rows[0]
        assert row["folder"] == "INBOX"
        assert row["message_id"] == "1"
        assert row["recipient"] == "kijitora@example.co.jp"
        assert row["reason"] == "userunknown"
        assert row["reason_description"] == REASONS["userunknown"]["description"]
        assert row["original_from"] == "shironeko@example.jp"
        assert row["original_subject"] == "test"

    def test_connection_failure_is_logged(self, tmp_path, monkeypatch):
        class BrokenClient(FakeImapClient):
            def __enter__(self):
                raise OSError("connection refused")

        monkeypatch.setattr(cli, "ImapClient", BrokenClient)
        config = AppConfig(log_dir=str(tmp_path), accounts={"main": _account()})

        assert cli.run_accounts(config, 30) == {}
        assert not report_path(tmp_path, "main").exists()


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.mark.usefixtures("restore_logging")
class TestMain:
    def test_file_mode(self, bounce_file, tmp_path, capsys):
        code = main_module.main(["-c", str(tmp_path / "absent.json"), str(bounce_file)])
        assert code == 0
        results = json.loads(capsys.readouterr().out)
        assert results[0]["status"] == "parsed"

    def test_file_mode_without_bounces(self, plain_file, tmp_path, capsys):
        code = main_module.main(["-c", str(tmp_path / "absent.json"), str(plain_file)])
        assert code == 1
        assert json.loads(capsys.readouterr().out)[0]["status"] == "not-recognized"
