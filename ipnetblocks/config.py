"""Endpoint, credentials, and HTTP settings."""

from __future__ import annotations

import os
from pathlib import Path

from platformdirs import user_config_dir

APP_NAME = "ipnetblocks"

# IP Netblocks API
DEFAULT_BASE_URL = "https://ip-netblocks.whoisxmlapi.com/api/v2"
BASE_URL_ENV = "IPNETBLOCKS_BASE_URL"
API_KEY_ENV = "IPNETBLOCKS_API_KEY"

# Local storage
CONFIG_DIR = Path(user_config_dir(APP_NAME))
API_KEY_FILE = CONFIG_DIR / "api_key"

# HTTP
USER_AGENT = "ipnetblocks-python/0.1.0"
REQUEST_TIMEOUT = 30  # seconds


def load_api_key() -> str | None:
    """Return the API key from the environment or the key file, if any."""
    key = os.environ.get(API_KEY_ENV, "").strip()
    if key:
        return key

    if API_KEY_FILE.exists():
        key = API_KEY_FILE.read_text(encoding="utf-8").strip()
        if key:
            return key

    return None


def save_api_key(key: str) -> Path:
    """Store the API key for later runs and return the file path."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    API_KEY_FILE.write_text(key.strip() + "\n", encoding="utf-8")
    API_KEY_FILE.chmod(0o600)
    return API_KEY_FILE


def load_base_url() -> str:
    return os.environ.get(BASE_URL_ENV, "").strip() or DEFAULT_BASE_URL
