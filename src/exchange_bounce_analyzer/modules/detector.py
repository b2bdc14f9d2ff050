"""Header based detection of Microsoft Exchange bounce messages."""

import logging
import re

logger = logging.getLogger(__name__)

# X-Mailer: Internet Mail Service (5.0.1461.28)
# X-Mailer: Microsoft Exchange Server Internet Mail Connector Version 4.0.994.63
_RE_X_MAILER = re.compile(
    r"(?:Internet Mail Service \([\d.]+\)\Z|Microsoft Exchange Server Internet Mail Connector)",
)
# X-MimeOLE: Produced By Microsoft Exchange V6.5
_RE_X_MIMEOLE = re.compile(r"Produced By Microsoft Exchange")
# Received: by ***.**.** with Internet Mail Service (5.5.2657.72)
_RE_RECEIVED = re.compile(r"by .+ with Internet Mail Service \([\d.]+\)")


def is_exchange(headers):
    """Return True if *headers* look like those of an Exchange bounce.

    Signals are checked in order of reliability and the first one found
    decides: the ``X-MS-Embedded-Report`` marker, the ``X-Mailer`` name of
    the connector, the ``X-MimeOLE`` banner, then a ``Received`` line
    added by Internet Mail Service.

    Parameters
    ----------
    headers : dict
        HeaderBag with lower-cased keys; ``received`` is a list.
    """
    if headers.get("x-ms-embedded-report"):
        logger.debug("Exchange detected by X-MS-Embedded-Report")
        return True

    if _RE_X_MAILER.match(headers.get("x-mailer") or ""):
        logger.debug("Exchange detected by X-Mailer: %s", headers["x-mailer"])
        return True

    if _RE_X_MIMEOLE.match(headers.get("x-mimeole") or ""):
        logger.debug("Exchange detected by X-MimeOLE: %s", headers["x-mimeole"])
        return True

    received = headers.get("received") or []
    for line in received:
        if _RE_RECEIVED.match(line):
            logger.debug("Exchange detected by Received: %s", line)
            return True

    return False
