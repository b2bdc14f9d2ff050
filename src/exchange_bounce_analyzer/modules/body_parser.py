"""Line oriented state machine for Microsoft Exchange bounce bodies.

A typical body looks like::

    Your message

      To:      shironeko@example.jp
      Subject: test
      Sent:    Thu, 29 Apr 2010 18:14:35 +0000

    did not reach the following recipient(s):

    kijitora@example.co.jp on Thu, 29 Apr 2010 18:14:40 +0000
        The recipient name is not recognized
        MSEXCH:IMS:KIJITORA CAT:EXAMPLE:EXCHANGE 0 (000C05A6) Unknown Recipient

followed, optionally, by a ``message/rfc822`` part holding the original
message.
"""

import logging
import re
from dataclasses import asdict, dataclass, field
from enum import Enum

from ..utils.rfc5322 import is_header_field, is_long_field

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Regex patterns
# ---------------------------------------------------------------------------

_RE_BEGIN = re.compile(r"Your message")
_RE_RFC822 = re.compile(r"Content-Type: message/rfc822")

# Echo of the original message headers
_RE_ECHO_TO = re.compile(r"\s+To:\s+(.+)\Z")
_RE_ECHO_SUBJECT = re.compile(r"\s+Subject:\s+(.+)\Z")
_RE_ECHO_SENT = (
    # Sent:    Thu, 29 Apr 2010 18:14:35 +0000
    re.compile(r"\s+Sent:\s+([A-Z][a-z]{2},.+[-+]\d{4})\Z"),
    # Sent:    4/29/99 9:19:59 AM
    re.compile(r"\s+Sent:\s+(\d+/\d+/\d+\s+\d+:\d+:\d+\s.+)"),
)

# kijitora@example.co.jp on Thu, 29 Apr 2007 16:51:51 -0500
#   Kijitora Cat SMTP=kijitora@example.com on 4/29/99 9:19:59 AM
_RE_RECIPIENT = (
    re.compile(r"\s*([^ ]+@[^ ]+) on\s*.*"),
    re.compile(r"\s*.+(?:SMTP|smtp)=([^ ]+@[^ ]+) on\s*.*"),
)
_RE_MSEXCH_LINE = re.compile(r"\s+(MSEXCH:.+)\Z")
_RE_MSEXCH = re.compile(r"MSEXCH:.+")

# Header line inside the message/rfc822 part
_RE_FIELD = re.compile(r"([-0-9A-Za-z]+?):[ ]*.+\Z")
_RE_CONTINUATION = re.compile(r"\s+")


class ParserState(Enum):
    """Position of the parser within a bounce body."""

    PREAMBLE = "preamble"
    HEADER_ECHO = "header-echo"
    PER_RECIPIENT = "per-recipient"
    STATUSPART_CLOSED = "statuspart-closed"
    ORIGINAL_HEADERS = "original-headers"


@dataclass
class DeliveryStatus:  # pylint: disable=too-many-instance-attributes
    """Delivery failure of a single recipient."""

    recipient: str = ""
    diagnosis: str = ""
    reason: str = ""
    status: str = ""
    action: str = ""
    spec: str = ""
    lhost: str = ""
    rhost: str = ""
    agent: str = ""

    def as_dict(self):
        """Return the record as a plain dict."""
        return asdict(self)


@dataclass
class PendingStatus(DeliveryStatus):
    """A DeliveryStatus still being filled in by the parser."""

    msexch: bool = False
    alterrors: str = ""


@dataclass
class ConnectionHeader:
    """Headers of the original message echoed in the bounce text."""

    to: str = ""
    date: str = ""
    subject: str = ""

    @property
    def filled(self):
        """Number of slots holding a value."""
        return sum(1 for value in (self.to, self.date, self.subject) if value)

    @property
    def complete(self):
        return self.filled == 3

    def set_once(self, name, value):
        """Store *value* in slot *name* unless it already has one."""
        if not getattr(self, name):
            setattr(self, name, value)


@dataclass
class ParsedBody:
    """Raw output of the state machine, before normalization."""

    records: list = field(default_factory=list)
    rfc822: str = ""
    connection: ConnectionHeader = field(default_factory=ConnectionHeader)
    recipients: int = 0


class BodyParser:
    """Consume a bounce body one line at a time.

    Usage::

        parser = BodyParser()
        for line in body.splitlines():
            parser.feed(line)
        parsed = parser.finish()
    """

    def __init__(self):
        self.state = ParserState.PREAMBLE
        self.connection = ConnectionHeader()
        self.recipients = 0
        self._records = []
        self._current = PendingStatus()
        self._rfc822_lines = []
        self._field = ""
        self._closed_fields = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def feed(self, line):
        """Advance the state machine by one body line."""
        if self.state is ParserState.PREAMBLE and _RE_BEGIN.match(line):
            self._enter(ParserState.HEADER_ECHO)
            return

        if self.state is not ParserState.ORIGINAL_HEADERS and _RE_RFC822.match(line):
            self._enter(ParserState.ORIGINAL_HEADERS)
            return

        if self.state is ParserState.ORIGINAL_HEADERS:
            self._capture_header(line)
        elif self.state is ParserState.HEADER_ECHO:
            self._read_echo(line)
        elif self.state is ParserState.PER_RECIPIENT:
            self._read_recipient(line)

    def finish(self):
        """Return the records and header text collected so far."""
        records = list(self._records)
        if self._current.recipient:
            records.append(self._current)
        return ParsedBody(
            records=records,
            rfc822="".join(self._rfc822_lines),
            connection=self.connection,
            recipients=self.recipients,
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _enter(self, state):
        logger.debug("Body parser: %s -> %s", self.state.value, state.value)
        self.state = state

    def _capture_header(self, line):
        match = _RE_FIELD.match(line)
        if match:
            name = match.group(1).lower()
            self._field = ""
            if not is_header_field(name):
                return
            self._field = name
            self._rfc822_lines.append(line + "\n")

        elif _RE_CONTINUATION.match(line):
            if self._field in self._closed_fields:
                return
            if is_long_field(self._field):
                self._rfc822_lines.append(line + "\n")

        elif is_long_field(self._field) and not line:
            # A blank line ends the header block
            self._closed_fields.add(self._field)

    def _read_echo(self, line):
        match = _RE_ECHO_TO.match(line)
        if match:
            self.connection.set_once("to", match.group(1))
        else:
            match = _RE_ECHO_SUBJECT.match(line)
            if match:
                self.connection.set_once("subject", match.group(1))
            else:
                for pattern in _RE_ECHO_SENT:
                    match = pattern.match(line)
                    if match:
                        self.connection.set_once("date", match.group(1))
                        break

        if self.connection.complete:
            self._enter(ParserState.PER_RECIPIENT)

    def _read_recipient(self, line):
        current = self._current

        for pattern in _RE_RECIPIENT:
            match = pattern.match(line)
            if match:
                if current.recipient:
                    # More than one recipient in this bounce
                    self._records.append(current)
                    current = self._current = PendingStatus()
                current.recipient = match.group(1)
                current.msexch = False
                self.recipients += 1
                return

        match = _RE_MSEXCH_LINE.match(line)
        if match:
            current.diagnosis += match.group(1)
            current.msexch = True
            return

        if current.msexch:
            return

        if _RE_MSEXCH.match(current.diagnosis):
            # Continuation of the MSEXCH message
            current.msexch = True
            current.diagnosis += " " + line
            self._enter(ParserState.STATUSPART_CLOSED)
        else:
            current.alterrors += " " + line


def parse_body(lines):
    """Run the state machine over *lines* and return a ParsedBody.

    Parameters
    ----------
    lines : iterable of str
        Body lines without line terminators.
    """
    parser = BodyParser()
    for line in lines:
        parser.feed(line)
    parsed = parser.finish()
    logger.debug(
        "Body parsed: %d recipient(s), %d header byte(s), state=%s",
        parsed.recipients,
        len(parsed.rfc822),
        parser.state.value,
    )
    return parsed
