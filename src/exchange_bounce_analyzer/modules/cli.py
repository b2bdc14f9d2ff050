"""CLI command implementations for Exchange Bounce Analyzer."""

import imaplib
import json
import logging

from .exchange import scan_message
from .imap_client import ImapClient
from .ollama_client import OllamaClient
from .report import write_report
from ..utils.date_utils import format_email_date
from ..utils.email_utils import get_header, load_message, rfc822_field
from ..utils.reasons import REASONS

logger = logging.getLogger(__name__)


def run_files(config, paths, out):
    """Scan local message files and write a JSON array of results to *out*.

    Unreadable files are reported with status ``"unreadable"``.

    Returns
    -------
    int
        Number of files parsed as Exchange bounces.
    """
    ollama = _make_ollama(config)
    results = []
    parsed_count = 0

    for path in paths:
        try:
            msg = load_message(path)
        except OSError as exc:
            logger.warning("Failed to read %s: %s", path, exc)
            results.append({"file": str(path), "status": "unreadable", "records": [], "rfc822": ""})
            continue

        result = scan_message(msg)
        entry = {"file": str(path), **result.as_dict()}
        if result:
            parsed_count += 1
            if ollama:
                for rec_dict, record in zip(entry["records"], result.records):
                    rec_dict.update(_hint(ollama, record))
        logger.debug("%s: %s", path, result.status.value)
        results.append(entry)

    json.dump(results, out, ensure_ascii=False, indent=2)
    out.write("\n")
    logger.info("%d of %d file(s) parsed as Exchange bounces", parsed_count, len(paths))
    return parsed_count


def run_accounts(config, days):
    """Scan every configured IMAP account and write per-account reports.

    Returns
    -------
    dict[str, int]
        Number of bounce records written, by account name.
    """
    ollama = _make_ollama(config)
    summary = {}
    for account_name, account_config in config.accounts.items():
        logger.debug("--- Processing account: %s ---", account_name)
        count = _process_account(account_name, account_config, days, ollama, config.log_dir)
        if count:
            summary[account_name] = count

    _log_summary(summary)
    return summary


# ------------------------------------------------------------------
# Internal helpers
# ------------------------------------------------------------------


def _make_ollama(config):
    """Return an OllamaClient when hints are enabled and the server answers."""
    if not config.ollama.enabled:
        return None
    client = OllamaClient(config.ollama.base_url, config.ollama.model)
    if not client.test_connection():
        logger.warning("Ollama model '%s' unavailable; reason hints disabled", config.ollama.model)
        return None
    return client


def _hint(ollama, record):
    """Return AI hint fields for *record*; empty unless its reason is unknown."""
    if record.reason:
        return {"ai_reason": "", "ai_comment": ""}
    suggestion = ollama.suggest_reason(record)
    return {"ai_reason": suggestion["reason"], "ai_comment": suggestion["comment"]}


def _process_account(account_name, account_config, days, ollama, log_dir):
    """Fetch one account's folders, scan each message, and write its report."""
    rows = []
    scanned = 0
    try:
        with ImapClient(account_config) as client:
            for folder in account_config.check:
                for msg_id, msg in client.iter_messages(folder, days):
                    scanned += 1
                    result = scan_message(msg)
                    if not result:
                        continue
                    for record in result.records:
                        rows.append(_build_row(msg, msg_id, folder, result, record, ollama))
    except (imaplib.IMAP4.error, OSError):
        logger.error("IMAP error on account '%s'", account_name, exc_info=True)

    write_report(log_dir, account_name, rows)
    logger.info(
        "Account '%s': %d message(s) scanned, %d Exchange bounce record(s)",
        account_name,
        scanned,
        len(rows),
    )
    return len(rows)


def _build_row(msg, msg_id, folder, result, record, ollama):
    """Flatten a record and its message context into a report row."""
    row = {
        "date": format_email_date(get_header(msg, "Date")),
        "folder": folder,
        "message_id": msg_id,
        **record.as_dict(),
        "reason_description": REASONS.get(record.reason, {}).get("description", ""),
        "original_from": rfc822_field(result.rfc822, "From"),
        "original_subject": rfc822_field(result.rfc822, "Subject"),
        "original_date": format_email_date(rfc822_field(result.rfc822, "Date")),
    }
    if ollama:
        row.update(_hint(ollama, record))
    return row


def _log_summary(summary):
    """Log bounce record counts per account."""
    if not summary:
        logger.info("No Exchange bounce records found across all accounts.")
        return

    logger.info("=== Exchange bounce summary ===")
    for account_name, count in summary.items():
        logger.info("  %s: %d record(s)", account_name, count)
    if len(summary) > 1:
        logger.info("  Grand total: %d", sum(summary.values()))
