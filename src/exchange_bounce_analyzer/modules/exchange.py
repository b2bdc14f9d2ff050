"""Microsoft Exchange Server bounce scanner.

Ties together header detection, the body state machine and record
normalization.  :func:`scan` never raises for malformed or foreign
input; it reports the outcome through :class:`ScanStatus` instead so
that callers can move on to another bounce format.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..utils.email_utils import get_body_text, header_bag
from .body_parser import parse_body
from .detector import is_exchange
from .normalizer import AGENT, fallback_rfc822, normalize

logger = logging.getLogger(__name__)

__all__ = ["AGENT", "ScanResult", "ScanStatus", "scan", "scan_message"]


class ScanStatus(Enum):
    """Outcome of a scan."""

    PARSED = "parsed"
    INVALID_INPUT = "invalid-input"
    NOT_RECOGNIZED = "not-recognized"
    NO_RECIPIENTS = "no-recipients"


@dataclass
class ScanResult:
    """Records and original headers extracted from one bounce."""

    status: ScanStatus
    records: list = field(default_factory=list)
    rfc822: str = ""

    def __bool__(self):
        return self.status is ScanStatus.PARSED

    def as_dict(self):
        """Return a JSON-serialisable view of the result."""
        return {
            "status": self.status.value,
            "records": [r.as_dict() for r in self.records],
            "rfc822": self.rfc822,
        }


def scan(headers, body):
    """Parse an Exchange bounce body.

    Parameters
    ----------
    headers : dict
        HeaderBag of the bounce: lower-cased names, ``received`` a list.
    body : str
        Raw body text.

    Returns
    -------
    ScanResult
        ``PARSED`` with one normalized record per failed recipient, or a
        failure status with no records.
    """
    if headers is None or not body:
        return ScanResult(ScanStatus.INVALID_INPUT)

    if not is_exchange(headers):
        return ScanResult(ScanStatus.NOT_RECOGNIZED)

    parsed = parse_body(body.splitlines())
    if not parsed.recipients:
        logger.debug("Exchange headers found but no recipient lines in body")
        return ScanResult(ScanStatus.NO_RECIPIENTS)

    received = headers.get("received") or []
    records = [normalize(record, received) for record in parsed.records]

    rfc822 = parsed.rfc822 or fallback_rfc822(parsed.connection)
    logger.debug("Exchange bounce: %s", ", ".join(f"{r.recipient} [{r.reason or '-'}]" for r in records))
    return ScanResult(ScanStatus.PARSED, records, rfc822)


def scan_message(msg):
    """Scan an ``email.message.Message``."""
    return scan(header_bag(msg), get_body_text(msg))
