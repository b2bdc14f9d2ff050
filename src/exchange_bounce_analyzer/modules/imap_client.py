"""IMAP mailbox reader for bounce messages."""

import email
import imaplib
import logging
from datetime import datetime, timedelta

logger = logging.getLogger(__name__)


class ImapClient:
    """Read-only access to the folders of one IMAP account.

    Can be used as a context manager::

        with ImapClient(account) as client:
            for msg_id, msg in client.iter_messages("INBOX", 30):
                ...
    """

    def __init__(self, account):
        self.account = account
        self._conn = None

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc, tb):
        self.disconnect()

    def connect(self):
        """Open the connection and log in."""
        security = self.account.security.lower()
        host = self.account.host
        port = self.account.port

        if security == "ssl":
            self._conn = imaplib.IMAP4_SSL(host, port)
        else:
            self._conn = imaplib.IMAP4(host, port)
            if security == "starttls":
                self._conn.starttls()

        self._conn.login(self.account.username, self.account.password)
        logger.info("Connected to %s as %s", host, self.account.username)

    def iter_messages(self, folder, days):
        """Yield ``(message_id, email.message.Message)`` for mail newer than *days* days.

        Messages are fetched with ``BODY.PEEK[]`` so their ``\\Seen`` flag
        is left alone.  A folder that cannot be selected yields nothing.
        """
        if not self._conn:
            raise RuntimeError("Not connected. Call connect() first.")

        try:
            status, _ = self._conn.select(folder, readonly=True)
        except imaplib.IMAP4.error as exc:
            logger.warning("Failed to select folder %s: %s", folder, exc)
            return
        if status != "OK":
            logger.warning("Failed to select folder: %s", folder)
            return

        since = (datetime.now() - timedelta(days=days)).strftime("%d-%b-%Y")
        status, data = self._conn.search(None, f'(SINCE "{since}")')
        if status != "OK" or not data[0]:
            logger.info("No messages in %s since %s", folder, since)
            return

        msg_ids = data[0].split()
        logger.info("Found %d message(s) in %s since %s", len(msg_ids), folder, since)

        for msg_id in msg_ids:
            status, msg_data = self._conn.fetch(msg_id, "(BODY.PEEK[])")
            if status != "OK" or not msg_data or msg_data[0] is None:
                logger.warning("Failed to fetch message %s from %s", msg_id.decode(), folder)
                continue
            yield msg_id.decode(), email.message_from_bytes(msg_data[0][1])

    def disconnect(self):
        """Close the selected folder and log out, ignoring server errors."""
        if not self._conn:
            return
        for step in (self._conn.close, self._conn.logout):
            try:
                step()
            except (imaplib.IMAP4.error, OSError):
                pass
        self._conn = None
        logger.info("Disconnected from %s", self.account.host)
