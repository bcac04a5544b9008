# process-wide configuration: provider base urls, timeouts, server and logging knobs
# values come from the environment, a local .env is honoured for development

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional, Tuple
from dotenv import load_dotenv

from .errors import ConfigurationError

load_dotenv()  # in production, environment variables are injected by docker, kubernetes, cloud provider

DEFAULT_GEOCODING_BASE_URL = "https://geocoding-api.open-meteo.com"
DEFAULT_ARCHIVE_BASE_URL = "https://archive-api.open-meteo.com"
DEFAULT_TIMEOUT = 10.0
DEFAULT_PORT = 3000


def _number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number (got {raw!r})") from exc
    if value <= 0:
        raise ConfigurationError(f"{name} must be positive (got {raw!r})")
    return value


def _flag(raw: Optional[str], default: bool) -> bool:
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    geocoding_base_url: str = DEFAULT_GEOCODING_BASE_URL
    archive_base_url: str = DEFAULT_ARCHIVE_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    cors_origins: Tuple[str, ...] = ()
    port: int = DEFAULT_PORT
    log_level: str = "INFO"
    log_json: bool = True

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        origins = tuple(o.strip() for o in env.get("CORS_ORIGIN", "").split(",") if o.strip())
        return cls(
            geocoding_base_url=env.get("GEOCODING_BASE_URL", DEFAULT_GEOCODING_BASE_URL).rstrip("/"),
            archive_base_url=env.get("ARCHIVE_BASE_URL", DEFAULT_ARCHIVE_BASE_URL).rstrip("/"),
            timeout=_number(env, "HTTP_TIMEOUT", DEFAULT_TIMEOUT, float),
            cors_origins=origins,
            port=_number(env, "PORT", DEFAULT_PORT, int),
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            log_json=_flag(env.get("LOG_JSON"), True),
        )
