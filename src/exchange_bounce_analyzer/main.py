"""CLI entry point for Exchange Bounce Analyzer."""

import argparse
import logging
import sys

from .modules.cli import run_accounts, run_files
from .modules.config import load_config
from .utils.logger import setup_logging

logger = logging.getLogger(__name__)

_DEFAULT_DAYS = 30


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="exchange-bounce-analyzer",
        description=(
            "Extract per-recipient failures from Microsoft Exchange bounce mails, "
            "either from local message files or from IMAP accounts."
        ),
    )
    parser.add_argument(
        "files",
        nargs="*",
        metavar="FILE",
        help="Message files to scan; results are printed as JSON. Without files, IMAP accounts are scanned.",
    )
    parser.add_argument("-c", "--config", default="config.json", help="Path to config JSON file (default: config.json)")
    parser.add_argument("--days", type=int, default=None, help="Override fetch days (default: value from config)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    return parser.parse_args(argv)


def main(argv=None):
    """Application entry point."""
    args = parse_args(argv)
    # Keep stdout clean for the JSON output of file mode
    setup_logging(args.verbose, stream=sys.stderr if args.files else sys.stdout)

    if args.files:
        config = load_config(args.config, require_accounts=False)
        parsed = run_files(config, args.files, sys.stdout)
        return 0 if parsed else 1

    config = load_config(args.config)
    days = args.days or config.default_days or _DEFAULT_DAYS
    logger.debug("Fetch window: %d day(s)", days)
    run_accounts(config, days)
    return 0


if __name__ == "__main__":
    sys.exit(main())
