"""RFC 5322 header helpers used when reading bounced messages."""

import re

# Header fields retained from the embedded original message, grouped by role.
_HEADER_TABLE = {
    "messageid": ("Message-Id",),
    "subject": ("Subject",),
    "listid": ("List-Id",),
    "date": ("Date", "Posted-Date", "Posted", "Resent-Date"),
    "addresser": (
        "From",
        "Return-Path",
        "Reply-To",
        "Errors-To",
        "Reverse-Path",
        "X-Postfix-Sender",
        "Envelope-From",
        "X-Envelope-From",
    ),
    "recipient": (
        "To",
        "Delivered-To",
        "Forward-Path",
        "Envelope-To",
        "X-Envelope-To",
        "Resent-To",
        "Apparently-To",
    ),
}

HEADER_FIELDS = frozenset(name.lower() for names in _HEADER_TABLE.values() for name in names)

# Fields whose values may be folded onto continuation lines.
LONG_FIELDS = frozenset(("to", "from", "subject", "message-id"))

_RE_HOSTNAME = re.compile(r"\A[-.0-9A-Za-z]+\.[A-Za-z]{2,}\Z")
_RE_IPV4 = re.compile(r"\A(?:\d{1,3}\.){3}\d{1,3}\Z")
_RE_COMMENT = re.compile(r"\(([^)]*)\)")


def is_header_field(name):
    """Return True if the lower-cased header *name* is kept from the original message."""
    return name in HEADER_FIELDS


def is_long_field(name):
    """Return True if continuation lines of header *name* are kept."""
    return name in LONG_FIELDS


def received_hosts(received):
    """Extract host names from a single ``Received`` header value.

    The sending host (after ``from``) comes first and the receiving host
    (after ``by``) comes last.  When the ``from`` token is not a host name
    the parenthesised comment that follows it is searched for a host name
    or a bracketed IPv4 address instead.

    Parameters
    ----------
    received : str
        Unfolded ``Received`` header value.

    Returns
    -------
    list[str]
        Zero, one or two host names.
    """
    tokens = received.split()
    from_host = ""
    by_host = ""

    for i, token in enumerate(tokens[:-1]):
        keyword = token.lower()
        value = tokens[i + 1].strip(";")
        if keyword == "from" and not from_host:
            from_host = _hostname(value) or _from_comment(received)
        elif keyword == "by" and not by_host:
            by_host = _hostname(value)

    return [h for h in (from_host, by_host) if h]


def _hostname(token):
    token = token.strip("[]<>")
    if _RE_IPV4.match(token):
        return token
    if _RE_HOSTNAME.match(token):
        return token.lower()
    return ""


def _from_comment(received):
    """Look inside the comments after ``from`` for a usable host."""
    head = re.split(r"\sby\s", received, maxsplit=1)[0]
    for comment in _RE_COMMENT.findall(head):
        for token in comment.replace("[", " [").split():
            host = _hostname(token)
            if host:
                return host
    return ""
