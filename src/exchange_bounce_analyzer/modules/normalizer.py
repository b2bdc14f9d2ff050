"""Finalize raw Exchange delivery-status records."""

import logging
import re
from types import MappingProxyType

from ..utils import smtp_status
from ..utils.email_utils import sweep
from ..utils.rfc5322 import received_hosts
from .body_parser import DeliveryStatus

logger = logging.getLogger(__name__)

AGENT = "Exchange"

# Internal error codes printed in MSEXCH lines, by bounce reason
ERROR_CODE_TABLE = MappingProxyType(
    {
        "onhold": frozenset(
            (
                "000B099C",  # Host Unknown, Message exceeds size limit, ...
                "000B09AA",  # Unable to relay for, Message exceeds size limit, ...
                "000B09B6",  # Error messages by remote MTA
            )
        ),
        "userunknown": frozenset(("000C05A6",)),  # Unknown Recipient
        "systemerror": frozenset(
            (
                "00010256",  # Too many recipients
                "000D06B5",  # No proxy for recipient (non-smtp mail?)
            )
        ),
        "networkerror": frozenset(("00120270",)),  # Too Many Hops
        "contenterr": frozenset(("00050311", "000502CC")),  # Conversion to Internet format failed
        "securityerr": frozenset(("000B0981",)),  # 502 Server does not support AUTH
        "filtered": frozenset(("000C0595",)),  # Ambiguous Recipient
    }
)

# MSEXCH:IMS:KIJITORA CAT:EXAMPLE:EXCHANGE 0 (000C05A6) Unknown Recipient
_RE_MSEXCH_CODE = re.compile(r"MSEXCH:.+\s*\(([0-9A-F]{8})\)\s*(.*)\Z")


def classify_code(code):
    """Return the reason whose error codes include *code*, or ``""``."""
    for reason, codes in ERROR_CODE_TABLE.items():
        if code in codes:
            return reason
    return ""


def normalize(record, received=()):
    """Resolve reason, status and the derived fields of a single record.

    Parameters
    ----------
    record : DeliveryStatus
        Record produced by the body parser.  Parser-only fields
        (``msexch``, ``alterrors``) are consumed when present.
    received : sequence of str
        ``Received`` headers of the bounce itself, in message order.

    Returns
    -------
    DeliveryStatus
        A new record; every field is a string.
    """
    result = DeliveryStatus(
        recipient=record.recipient or "",
        diagnosis=record.diagnosis or "",
        reason=record.reason or "",
        status=record.status or "",
        action=record.action or "",
        lhost=record.lhost or "",
        rhost=record.rhost or "",
    )

    if received:
        if not result.lhost:
            hosts = received_hosts(received[0])
            result.lhost = hosts[0] if hosts else ""
        if not result.rhost:
            hosts = received_hosts(received[-1])
            result.rhost = hosts[-1] if hosts else ""

    result.diagnosis = sweep(result.diagnosis)

    match = _RE_MSEXCH_CODE.match(result.diagnosis)
    if match:
        code, message = match.groups()
        reason = classify_code(code)
        if reason:
            result.reason = reason
            status = smtp_status.code(reason)
            if status:
                result.status = status
        else:
            logger.debug("Unknown MSEXCH code %s for %s", code, result.recipient)
        result.diagnosis = message

    alterrors = getattr(record, "alterrors", "")
    if not result.reason and alterrors:
        result.diagnosis = sweep(alterrors + " " + result.diagnosis)

    result.spec = "X-UNIX" if result.reason == "mailererror" else "SMTP"
    if result.status[:1] in ("4", "5"):
        result.action = "failed"
    result.agent = AGENT
    return result


def fallback_rfc822(connection):
    """Build a minimal header block from the headers echoed in the bounce text.

    Used when the bounce does not carry the original message.  The echoed
    ``To:`` value goes into ``From:``.
    """
    return f"From: {connection.to}\nDate: {connection.date}\nSubject: {connection.subject}\n"
