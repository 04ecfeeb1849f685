"""Application configuration loaded from the environment.

Values come from environment variables, with a local ``.env`` file loaded
first through python-dotenv so development setups need no exported shell
variables.
"""

import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv


DEFAULT_STORE_PATH = "./data/settings"
DEFAULT_HTTP_TIMEOUT = 30.0

DEATHBYCAPTCHA_URL = "http://api.dbcapi.me/api"
DECAPTCHER_URL = "http://poster.decaptcher.com/"
ANTICAPTCHA_URL = "https://api.anti-captcha.com"


@dataclass
class AppConfig:
    """Runtime configuration of the settings server.

    Attributes:
        store_backend: "encrypted" for the on-disk store, "memory" for a
            throwaway in-process store.
        store_path: Directory holding the encrypted settings document.
        encryption_key: Optional Fernet key. Generated and saved beside the
            store when not provided.
        http_timeout: Request timeout in seconds for captcha service calls.
        deathbycaptcha_url: Base URL of the DeathByCaptcha HTTP API.
        decaptcher_url: Endpoint of the Decaptcher poster API.
        anticaptcha_url: Base URL of the Anti-Captcha JSON API.
        log_level: Minimum log level name.
        server_name: Name announced by the MCP server.
    """
    store_backend: str = "encrypted"
    store_path: str = DEFAULT_STORE_PATH
    encryption_key: Optional[str] = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    deathbycaptcha_url: str = DEATHBYCAPTCHA_URL
    decaptcher_url: str = DECAPTCHER_URL
    anticaptcha_url: str = ANTICAPTCHA_URL
    log_level: str = "INFO"
    server_name: str = "settings-admin"


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value


def load_app_config(env_file: Optional[str] = None) -> AppConfig:
    """Build the application configuration.

    Args:
        env_file: Optional path of a dotenv file. When omitted python-dotenv
            searches for a ``.env`` file in the enclosing directories.
            Variables already present in the environment win.

    Returns:
        AppConfig populated from the environment.

    Raises:
        ValueError: If a variable holds a value of the wrong kind.
    """
    load_dotenv(env_file)

    backend = os.getenv("SETTINGS_STORE", "encrypted").strip().lower()
    if backend not in ("encrypted", "memory"):
        raise ValueError(f"SETTINGS_STORE must be 'encrypted' or 'memory', got {backend!r}")

    return AppConfig(
        store_backend=backend,
        store_path=os.getenv("SETTINGS_STORE_PATH", DEFAULT_STORE_PATH),
        encryption_key=os.getenv("SETTINGS_ENCRYPTION_KEY") or None,
        http_timeout=_get_float("CAPTCHA_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
        deathbycaptcha_url=os.getenv("DEATHBYCAPTCHA_URL", DEATHBYCAPTCHA_URL),
        decaptcher_url=os.getenv("DECAPTCHER_URL", DECAPTCHER_URL),
        anticaptcha_url=os.getenv("ANTICAPTCHA_URL", ANTICAPTCHA_URL),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        server_name=os.getenv("MCP_SERVER_NAME", "settings-admin"),
    )
