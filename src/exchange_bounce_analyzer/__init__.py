"""Extract delivery failures from Microsoft Exchange Server bounce mails."""
