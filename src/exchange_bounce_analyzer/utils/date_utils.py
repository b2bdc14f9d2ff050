"""Date string formatting utilities."""

from datetime import datetime
from email.utils import parsedate_to_datetime

# "Sent:" values of older Exchange releases, e.g. ``4/29/99 9:19:59 AM``
_SENT_FORMATS = (
    "%m/%d/%y %I:%M:%S %p",
    "%m/%d/%Y %I:%M:%S %p",
)


def format_email_date(raw_date):
    """Format an email date as local time ``yyyy-MM-dd HH:mm:ss``.

    Parameters
    ----------
    raw_date : str
        RFC 2822 date (e.g. ``Thu, 29 Apr 2010 18:14:35 +0000``) or an
        Exchange ``M/D/Y h:m:s AM`` date.  The latter carries no zone and
        is taken as local time.

    Returns
    -------
    str
        Formatted local-time string, or *raw_date* unchanged on parse failure.
    """
    if not raw_date:
        return ""
    try:
        dt = parsedate_to_datetime(raw_date)
        return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")
    except (ValueError, TypeError):
        pass
    for fmt in _SENT_FORMATS:
        try:
            return datetime.strptime(raw_date.strip(), fmt).strftime("%Y-%m-%d %H:%M:%S")
        except ValueError:
            continue
    return raw_date
