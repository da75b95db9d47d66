"""
Relay configuration, read once from the environment at startup.
Required: GITHUB_CLIENT_ID, GITHUB_CLIENT_SECRET, FRONTEND_URL. Everything else has a default.
"""
import os
from dataclasses import dataclass
from typing import Mapping
from urllib.parse import urlsplit

DEFAULT_PORT = 4000
DEFAULT_HOST = "127.0.0.1"
DEFAULT_HTTP_TIMEOUT = 10.0

# Local SPA dev server; always allowed alongside the configured front end
DEV_ORIGINS = ("http://localhost:8080",)

LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")

REQUIRED_VARS = ("GITHUB_CLIENT_ID", "GITHUB_CLIENT_SECRET", "FRONTEND_URL")


class ConfigError(Exception):
    """Missing or malformed configuration; the process must not start."""


@dataclass(frozen=True)
class Settings:
    client_id: str
    client_secret: str
    frontend_url: str
    allowed_origins: tuple[str, ...]
    port: int = DEFAULT_PORT
    host: str = DEFAULT_HOST
    callback_base_url: str | None = None
    http_timeout: float = DEFAULT_HTTP_TIMEOUT
    log_level: str = "INFO"

    def __repr__(self) -> str:
        # client_secret stays out of logs and tracebacks
        return (
            f"Settings(client_id={self.client_id!r}, frontend_url={self.frontend_url!r}, "
            f"allowed_origins={self.allowed_origins!r}, host={self.host!r}, port={self.port})"
        )


def origin_of(url: str) -> str:
    """scheme://host[:port] part of a URL (CORS compares origins, not full URLs)."""
    parts = urlsplit(url)
    if not parts.scheme or not parts.netloc:
        return url.rstrip("/")
    return f"{parts.scheme}://{parts.netloc}"


def build_allowed_origins(frontend_url: str, extra: str = "") -> tuple[str, ...]:
    """Front-end origin first, then dev origins, then ALLOWED_ORIGINS entries. No duplicates."""
    candidates = [origin_of(frontend_url), *DEV_ORIGINS]
    candidates += [origin_of(o.strip()) for o in extra.split(",") if o.strip()]
    seen: list[str] = []
    for origin in candidates:
        if origin not in seen:
            seen.append(origin)
    return tuple(seen)


def _get(environ: Mapping[str, str], name: str) -> str:
    return (environ.get(name) or "").strip()


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """
    Build Settings from environ (defaults to os.environ).
    Raises ConfigError naming every missing required variable, or the first malformed optional one.
    """
    if environ is None:
        environ = os.environ

    missing = [name for name in REQUIRED_VARS if not _get(environ, name)]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    port_raw = _get(environ, "PORT") or str(DEFAULT_PORT)
    try:
        port = int(port_raw)
    except ValueError:
        raise ConfigError(f"PORT must be an integer, got {port_raw!r}") from None
    if not 0 < port < 65536:
        raise ConfigError(f"PORT out of range: {port}")

    timeout_raw = _get(environ, "GITHUB_HTTP_TIMEOUT") or str(DEFAULT_HTTP_TIMEOUT)
    try:
        http_timeout = float(timeout_raw)
    except ValueError:
        raise ConfigError(f"GITHUB_HTTP_TIMEOUT must be a number, got {timeout_raw!r}") from None
    if http_timeout <= 0:
        raise ConfigError("GITHUB_HTTP_TIMEOUT must be positive")

    log_level = (_get(environ, "LOG_LEVEL") or "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

    frontend_url = _get(environ, "FRONTEND_URL").rstrip("/")
    callback_base_url = _get(environ, "OAUTH_CALLBACK_BASE_URL").rstrip("/") or None

    return Settings(
        client_id=_get(environ, "GITHUB_CLIENT_ID"),
        client_secret=_get(environ, "GITHUB_CLIENT_SECRET"),
        frontend_url=frontend_url,
        allowed_origins=build_allowed_origins(frontend_url, _get(environ, "ALLOWED_ORIGINS")),
        port=port,
        host=_get(environ, "HOST") or DEFAULT_HOST,
        callback_base_url=callback_base_url,
        http_timeout=http_timeout,
        log_level=log_level,
    )
