"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from connector.core.errors import ConfigurationError

SECRETS_DIR = "/run/secrets"
ALLOWED_SCHEMES = ("http", "https")


def _load_secret(secret_name: str, env_var: str, env: Mapping[str, str]) -> str:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Environment variable name to check as fallback
        env: Environment mapping

    Returns:
        Secret value or "" if not found
    """
    secret_file = Path(SECRETS_DIR) / secret_name

    # Priority 1: Read from /run/secrets
    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                print(f"[settings] ✓ Loaded {secret_name} from {SECRETS_DIR}")
                return secret_value
        except OSError as e:
            print(f"[settings] ✗ Failed to read {SECRETS_DIR}/{secret_name}: {e}")

    # Priority 2: Fallback to environment variable
    return env.get(env_var, "")


@dataclass(frozen=True)
class AppConfig:
    """Application configuration container.

    Built once at startup and shared read-only by every request.
    """
    # Opal
    opal_signing_secret: str

    # Authentik
    authentik_token: str
    authentik_host: str = "localhost:9000"
    authentik_scheme: str = "https"
    authentik_request_timeout: float = 10.0

    # Cloudflare Access (optional pair in front of Authentik)
    cf_access_client_id: str = ""
    cf_access_client_secret: str = ""

    # Logging
    debug: bool = False
    log_level: str = "INFO"

    @property
    def authentik_base_url(self) -> str:
        """Authentik origin, e.g. ``https://authentik.example.com``."""
        return f"{self.authentik_scheme}://{self.authentik_host}"

    @property
    def edge_proxy_enabled(self) -> bool:
        """True when Cloudflare Access credentials are configured."""
        return bool(self.cf_access_client_id or self.cf_access_client_secret)

    def __repr__(self) -> str:
        # Keep secrets out of logs and tracebacks
        return (
            f"AppConfig(authentik_base_url={self.authentik_base_url!r}, "
            f"edge_proxy_enabled={self.edge_proxy_enabled}, debug={self.debug})"
        )


def _require(name: str, value: Optional[str]) -> str:
    if not value:
        raise ConfigurationError(f"Environment variable {name} is required.")
    return value


def _parse_timeout(raw: str) -> float:
    try:
        timeout = float(raw)
    except ValueError:
        raise ConfigurationError(f"AUTHENTIK_REQUEST_TIMEOUT must be a number, got '{raw}'")
    if timeout <= 0:
        raise ConfigurationError("AUTHENTIK_REQUEST_TIMEOUT must be positive")
    return timeout


def load_settings(environ: Optional[Mapping[str, str]] = None) -> AppConfig:
    """Load application settings from /run/secrets and the environment.

    Args:
        environ: Mapping to read plain settings from (defaults to os.environ)

    Raises:
        ConfigurationError: If a required secret is missing or a value is invalid
    """
    env = os.environ if environ is None else environ

    opal_signing_secret = _require(
        "OPAL_SIGNING_SECRET",
        _load_secret("opal_signing_secret", "OPAL_SIGNING_SECRET", env),
    )
    authentik_token = _require(
        "AUTHENTIK_TOKEN",
        _load_secret("authentik_token", "AUTHENTIK_TOKEN", env),
    )

    cf_access_client_id = _load_secret("cf_access_client_id", "CF_ACCESS_CLIENT_ID", env)
    cf_access_client_secret = _load_secret("cf_access_client_secret", "CF_ACCESS_CLIENT_SECRET", env)
    if bool(cf_access_client_id) != bool(cf_access_client_secret):
        raise ConfigurationError(
            "Cloudflare Access credentials are incomplete: set both "
            "CF_ACCESS_CLIENT_ID and CF_ACCESS_CLIENT_SECRET, or neither."
        )

    authentik_host = env.get("AUTHENTIK_HOST", "localhost:9000").strip().rstrip("/")
    if not authentik_host:
        raise ConfigurationError("AUTHENTIK_HOST must not be empty")

    authentik_scheme = env.get("AUTHENTIK_SCHEME", "https").strip().lower() or "https"
    if authentik_scheme not in ALLOWED_SCHEMES:
        raise ConfigurationError(f"AUTHENTIK_SCHEME must be one of {ALLOWED_SCHEMES}, got '{authentik_scheme}'")

    timeout = _parse_timeout(env.get("AUTHENTIK_REQUEST_TIMEOUT", "10"))

    debug = env.get("DEBUG", "") not in ("", "0", "false", "False")
    log_level = "DEBUG" if debug else env.get("LOG_LEVEL", "INFO").upper()


    print(
        f"[settings] authentik={authentik_scheme}://{authentik_host}; "
        f"cloudflare_access={'on' if cf_access_client_id else 'off'}; log_level={log_level}"
    )

    return AppConfig(
        opal_signing_secret=opal_signing_secret,
        authentik_token=authentik_token,
        authentik_host=authentik_host,
        authentik_scheme=authentik_scheme,
        authentik_request_timeout=timeout,
        cf_access_client_id=cf_access_client_id,
        cf_access_client_secret=cf_access_client_secret,
        debug=debug,
        log_level=log_level,
    )
