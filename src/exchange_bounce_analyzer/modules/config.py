"""Configuration loading and validation."""

import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class OllamaConfig:
    """Ollama API settings for reason hints."""

    enabled: bool = False
    base_url: str = "http://localhost:11434"
    model: str = "gemma3:4b"


@dataclass
class AccountConfig:
    """Single IMAP mailbox holding Exchange bounces."""

    name: str
    host: str
    port: int
    username: str
    password: str
    security: str = "ssl"
    check: list[str] = field(default_factory=lambda: ["INBOX"])


@dataclass
class AppConfig:
    """Application configuration."""

    default_days: int | None = None
    log_dir: str = "logs"
    ollama: OllamaConfig = field(default_factory=OllamaConfig)
    accounts: dict[str, AccountConfig] = field(default_factory=dict)


def load_config(config_path, require_accounts=True):
    """Load and validate configuration from a JSON file.

    When *require_accounts* is False a missing file yields the defaults,
    which is enough for scanning local message files.  Otherwise the
    process exits if the file is missing, unreadable or lists no accounts.
    """
    path = Path(config_path).resolve()
    if not path.exists():
        if not require_accounts:
            logger.debug("Config file not found, using defaults: %s", config_path)
            return AppConfig()
        logger.error("Config file not found: %s", config_path)
        sys.exit(1)

    try:
        with open(path, encoding="utf-8") as f:
            raw = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        logger.error("Failed to read config %s: %s", config_path, exc)
        sys.exit(1)

    ollama_raw = raw.get("ollama", {})
    ollama = OllamaConfig(
        enabled=bool(ollama_raw.get("enabled", False)),
        base_url=ollama_raw.get("base_url", "http://localhost:11434"),
        model=ollama_raw.get("model", "gemma3:4b"),
    )

    accounts = {}
    required_fields = ("host", "port", "username", "password")
    for name, acc_raw in raw.get("accounts", {}).items():
        missing = [key for key in required_fields if key not in acc_raw]
        if missing:
            logger.error("Account '%s' missing required field(s): %s", name, ", ".join(missing))
            sys.exit(1)
        accounts[name] = AccountConfig(
            name=name,
            host=acc_raw["host"],
            port=int(acc_raw["port"]),
            username=acc_raw["username"],
            password=acc_raw["password"],
            security=acc_raw.get("security", "ssl"),
            check=acc_raw.get("check", ["INBOX"]),
        )

    if require_accounts and not accounts:
        logger.error("No accounts configured")
        sys.exit(1)

    return AppConfig(
        default_days=raw.get("default_days"),
        log_dir=str(path.parent / raw.get("log_dir", "logs")),
        ollama=ollama,
        accounts=accounts,
    )
