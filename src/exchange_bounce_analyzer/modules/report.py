"""JSON report writer for parsed Exchange bounces."""

import json
import logging
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

FIELD_KEYS = [
    "date",
    "folder",
    "message_id",
    "recipient",
    "reason",
    "reason_description",
    "status",
    "action",
    "diagnosis",
    "spec",
    "lhost",
    "rhost",
    "agent",
    "ai_reason",
    "ai_comment",
    "original_from",
    "original_subject",
    "original_date",
]


def report_path(log_dir, account_name, when=None):
    """Return the report file path for *account_name* on the day of *when*."""
    date_str = (when or datetime.now()).strftime("%Y%m%d")
    return Path(log_dir) / f"{date_str}_{account_name}_exchange.json"


def write_report(log_dir, account_name, records):
    """Append bounce records to the account's date-stamped JSON file.

    Records are reduced to :data:`FIELD_KEYS`; missing keys become ``""``.
    Nothing is written for an empty list.

    Returns
    -------
    pathlib.Path or None
        The file written, if any.
    """
    if not records:
        logger.debug("No records for account '%s'; skipping report output.", account_name)
        return None

    path = report_path(log_dir, account_name)
    path.parent.mkdir(parents=True, exist_ok=True)

    rows = [{key: rec.get(key, "") for key in FIELD_KEYS} for rec in records]
    _append_json(path, rows)
    logger.debug("Report: %s (%d records)", path, len(rows))
    return path


def _append_json(path, rows):
    """Write *rows* to *path*, keeping rows already stored there by an earlier run."""
    existing = []
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                existing = json.load(f)
        except (json.JSONDecodeError, OSError) as exc:
            logger.warning("Ignoring unreadable report %s: %s", path, exc)
            existing = []
    with open(path, "w", encoding="utf-8") as f:
        json.dump(existing + rows, f, ensure_ascii=False, indent=2)
