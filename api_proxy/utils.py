"""Utility functions for the API proxy."""

import os
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict

import yaml

logger = logging.getLogger(__name__)

REDACTED = "***"


def setup_logging(level: str = "INFO", log_file: str = "", fmt: str = '%(asctime)s [%(levelname)s] %(message)s',
                  datefmt: str = '%Y-%m-%d %H:%M:%S', max_bytes: int = 5 * 1024 * 1024,
                  backup_count: int = 3) -> None:
    """Log to stderr, plus a rotating file when log_file is set."""
    logging.basicConfig(level=getattr(logging, level, logging.INFO), format=fmt, datefmt=datefmt)
    if log_file:
        from logging.handlers import RotatingFileHandler
        handler = RotatingFileHandler(log_file, maxBytes=max_bytes, backupCount=backup_count)
        handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))
        logging.getLogger().addHandler(handler)


def load_env_file(filepath: Path) -> None:
    """Load KEY=VALUE lines from a .env file without overriding the environment."""
    if not filepath.exists():
        return
    for line in filepath.read_text().splitlines():
        line = line.strip()
        if line and not line.startswith("#") and "=" in line:
            key, _, value = line.partition("=")
            os.environ.setdefault(key.strip(), value.strip().strip('"').strip("'"))


def load_yaml_settings(filepath: Path) -> Dict[str, Any]:
    """Load a YAML mapping of settings, returning {} when missing or invalid."""
    if not filepath.exists():
        return {}
    try:
        with open(filepath) as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, IOError) as e:
        logger.warning(f"Failed to load settings from {filepath}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring {filepath}: expected a mapping, got {type(data).__name__}")
        return {}
    return data


def redact_secret(text: str, secret: str) -> str:
    """Replace every occurrence of secret in text."""
    if not secret:
        return text
    return text.replace(secret, REDACTED)


def is_blank(value: Any) -> bool:
    """True for values a loose truthiness check treats as missing.

    None, False, 0 and "" are blank. Empty objects and arrays are not.
    """
    if value is None or value is False:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value == 0
    return False


def _reject_constant(name: str):
    raise ValueError(f"Unexpected token {name} in JSON")


def parse_json(text):
    """Strict JSON parse: NaN, Infinity and -Infinity are rejected."""
    return json.loads(text, parse_constant=_reject_constant)


def dump_json(data) -> str:
    """Compact JSON with non-ASCII text left as is, e.g. {"err":"busy"}."""
    return json.dumps(data, separators=(",", ":"), ensure_ascii=False)


class SecretRedactingFilter(logging.Filter):
    """Rewrites records so the current secret never reaches a handler."""

    def __init__(self, secret_func: Callable[[], str]):
        super().__init__()
        self.secret_func = secret_func

    def filter(self, record: logging.LogRecord) -> bool:
        secret = self.secret_func()
        if secret:
            message = record.getMessage()
            if secret in message:
                record.msg = redact_secret(message, secret)
                record.args = ()
        return True
