"""Pseudo SMTP status codes for bounce reasons.

The codes follow the ``class.subject.detail`` shape of RFC 3463 but use a
``9xx`` detail so that they can never be confused with a status code
actually reported by a remote MTA.
"""

_PERMANENT = {
    "blocked": "5.7.910",
    "contenterror": "5.6.910",
    "exceedlimit": "5.2.923",
    "expired": "5.4.7",
    "filtered": "5.2.924",
    "hasmoved": "5.1.916",
    "hostunknown": "5.1.912",
    "mailboxfull": "5.2.922",
    "mailererror": "5.3.913",
    "mesgtoobig": "5.3.914",
    "networkerror": "5.4.916",
    "norelaying": "5.3.917",
    "notaccept": "5.3.918",
    "onhold": "5.0.919",
    "rejected": "5.0.918",
    "securityerror": "5.7.916",
    "spamdetected": "5.7.917",
    "suspend": "5.2.921",
    "syntaxerror": "5.5.0",
    "systemerror": "5.3.911",
    "systemfull": "5.3.920",
    "toomanyconn": "5.3.921",
    "userunknown": "5.1.922",
}

_TEMPORARY = {
    "blocked": "4.7.910",
    "contenterror": "4.3.910",
    "exceedlimit": "4.2.923",
    "expired": "4.4.7",
    "filtered": "4.2.924",
    "hasmoved": "4.1.916",
    "hostunknown": "4.1.912",
    "mailboxfull": "4.2.922",
    "mailererror": "4.3.913",
    "mesgtoobig": "4.3.914",
    "networkerror": "4.4.916",
    "norelaying": "4.3.917",
    "notaccept": "4.3.918",
    "onhold": "4.0.919",
    "rejected": "4.0.918",
    "securityerror": "4.7.916",
    "spamdetected": "4.7.917",
    "suspend": "4.2.921",
    "syntaxerror": "4.5.0",
    "systemerror": "4.3.911",
    "systemfull": "4.3.920",
    "toomanyconn": "4.3.921",
    "userunknown": "4.0.922",
}


def code(reason, temporary=False):
    """Return the pseudo status code for *reason*, or ``""`` if none is defined."""
    if not reason:
        return ""
    table = _TEMPORARY if temporary else _PERMANENT
    return table.get(reason, "")
