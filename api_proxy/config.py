"""Configuration constants and paths for the API proxy."""

import os
from pathlib import Path

from .utils import load_env_file, load_yaml_settings

# Base directories
PROXY_DIR = Path(__file__).parent.parent

# Load .env file for API keys (real environment wins)
load_env_file(PROXY_DIR / ".env")

# Optional YAML settings: host, port, cors_origin, log_level, log_file
CONFIG_FILE = Path(os.environ.get("API_PROXY_CONFIG", PROXY_DIR / "proxy.yaml"))
SETTINGS = load_yaml_settings(CONFIG_FILE)

# Name of the environment variable holding the upstream secret.
# The value itself is read per request, see get_api_key().
API_KEY_ENV = "GOOGLE_API_KEY"

# Upstream generative-language API
DEFAULT_UPSTREAM_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
UPSTREAM_BASE_URL = os.environ.get("GENERATIVE_API_BASE_URL", DEFAULT_UPSTREAM_BASE_URL).rstrip("/")

# Server configuration
DEFAULT_HOST = os.environ.get("API_PROXY_HOST", SETTINGS.get("host", "0.0.0.0"))
DEFAULT_PORT = int(os.environ.get("API_PROXY_PORT", SETTINGS.get("port", 8888)))

# Paths answered by the relay. The Netlify path keeps existing frontends working.
PROXY_PATHS = ("/api/proxy", "/.netlify/functions/api-proxy")
HEALTH_PATH = "/api/health"

CORS_ORIGIN = os.environ.get("API_PROXY_CORS_ORIGIN", SETTINGS.get("cors_origin", "*"))

# Logging
LOG_LEVEL = os.environ.get("API_PROXY_LOG_LEVEL", SETTINGS.get("log_level", "INFO")).upper()
LOG_FILE = os.environ.get("API_PROXY_LOG_FILE", SETTINGS.get("log_file") or "")
LOG_FORMAT = '%(asctime)s [%(levelname)s] %(message)s'
LOG_DATEFMT = '%Y-%m-%d %H:%M:%S'
LOG_MAX_BYTES = 5 * 1024 * 1024  # 5MB
LOG_BACKUP_COUNT = 3


def get_api_key() -> str:
    """Read the upstream secret from the environment. Empty string if unset."""
    return os.environ.get(API_KEY_ENV, "")
