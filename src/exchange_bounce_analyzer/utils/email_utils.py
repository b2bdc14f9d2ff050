"""Email parsing utilities."""

import email
import re

from email.header import decode_header as _decode_header

# Headers copied into a HeaderBag besides the Received list
_BAG_HEADERS = (
    "From",
    "Date",
    "Subject",
    "X-Mailer",
    "X-MimeOLE",
    "X-MS-Embedded-Report",
)

_RE_FOLD = re.compile(r"\r?\n[ \t]+")
_RE_BOUNDARY_TAIL = re.compile(r" -{2,}[^ \t].+\Z")


def decode_header_value(value):
    """Decode a MIME-encoded email header value."""
    if not value:
        return ""
    decoded_parts = []
    for part, charset in _decode_header(str(value)):
        if isinstance(part, bytes):
            charset = charset or "utf-8"
            try:
                decoded_parts.append(part.decode(charset, errors="replace"))
            except (LookupError, UnicodeDecodeError):
                decoded_parts.append(part.decode("utf-8", errors="replace"))
        else:
            decoded_parts.append(part)
    return " ".join(decoded_parts)


def get_header(msg, name, default=""):
    """Get a decoded header value from an email message."""
    raw = msg.get(name, default)
    return decode_header_value(raw)


def unfold(value):
    """Join a folded header value onto a single line."""
    return _RE_FOLD.sub(" ", str(value)).strip()


def header_bag(msg):
    """Build the lower-cased header mapping used by the bounce scanner.

    ``received`` is always present and holds every ``Received`` header in
    message order, unfolded.  The other keys are only set when the message
    carries the header.
    """
    bag = {"received": [unfold(v) for v in msg.get_all("Received", [])]}
    for name in _BAG_HEADERS:
        if name in msg:
            bag[name.lower()] = get_header(msg, name)
    return bag


def get_body_text(msg):
    """Return the decoded body of *msg* as the text the bounce scanner reads.

    Text parts are decoded with their transfer encoding and charset, as
    8-bit and quoted-printable bounces are common.  An attached
    ``message/rfc822`` part is rendered as a ``Content-Type: message/rfc822``
    marker line followed by the headers of the attached message.
    """
    return "\n".join(_body_lines(msg))


def _body_lines(part):
    if part.get_content_type() == "message/rfc822":
        lines = ["Content-Type: message/rfc822", ""]
        for inner in part.get_payload():
            for name, value in inner.items():
                lines.extend(f"{name}: {value}".replace("\r\n", "\n").split("\n"))
            lines.append("")
        return lines

    if part.is_multipart():
        lines = []
        for sub in part.get_payload():
            lines.extend(_body_lines(sub))
        return lines

    if part.get_content_maintype() != "text":
        return []
    payload = part.get_payload(decode=True)
    if not payload:
        return []
    return _decode_payload(part, payload).splitlines()


def _decode_payload(part, payload):
    """Decode a byte payload using the part's charset."""
    charset = part.get_content_charset() or "utf-8"
    try:
        return payload.decode(charset, errors="replace")
    except (LookupError, UnicodeDecodeError):
        return payload.decode("utf-8", errors="replace")


def load_message(path):
    """Read an RFC 822 message from *path*."""
    with open(path, "rb") as f:
        return email.message_from_bytes(f.read())


def rfc822_field(headers, name):
    """Return the first value of header *name* in an RFC822 header blob."""
    match = re.search(rf"^{re.escape(name)}:[ \t]*(.*)$", headers, re.MULTILINE | re.IGNORECASE)
    return match.group(1).strip() if match else ""


def sweep(text):
    """Clean up a diagnostic string.

    - Runs of whitespace (newlines included) collapse to a single space.
    - Leading and trailing whitespace is removed.
    - Everything from the first MIME boundary fragment (`` --boundary``)
      to the end is dropped.
    """
    if not text:
        return ""
    text = re.sub(r"\s+", " ", text).strip()
    return _RE_BOUNDARY_TAIL.sub("", text)
