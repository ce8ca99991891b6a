"""Runtime settings for the TrendGal recommendation service.

Settings come from an optional per-environment file
(``config/environments/<APP_ENV>.yaml`` or ``APP_CONFIG_PATH``) overlaid by
environment variables, so deployments keep secrets out of the file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash-exp"
DEFAULT_PERSONA = "kurisu"
DEFAULT_SEARCH_TIMEOUT = 10.0
DEFAULT_CONFIG_DIR = "config/environments"

# Config field -> environment variable. File keys use the field name.
ENVIRONMENT_VARIABLES: Dict[str, str] = {
    "gemini_api_key": "GEMINI_API_KEY",
    "model": "MODEL",
    "yahoo_client_id": "YAHOO_CLIENT_ID",
    "google_api_key": "GOOGLE_API_KEY",
    "google_credentials_path": "GOOGLE_APPLICATION_CREDENTIALS",
    "default_persona": "DEFAULT_PERSONA",
    "search_timeout_seconds": "SEARCH_TIMEOUT_SECONDS",
}
_FILE_ALIASES = {"google_application_credentials": "google_credentials_path"}


class ConfigurationError(RuntimeError):
    """Raised when a collaborator cannot be built because settings are missing."""


@dataclass
class AppConfig:
    """Settings for the recommendation pipeline.

    Every credential is optional so detection-only deployments and tests can
    build a config without secrets. The ``require_*`` accessors fail with
    :class:`ConfigurationError` once a collaborator actually needs one.
    """

    gemini_api_key: Optional[str] = None
    model: str = DEFAULT_GEMINI_MODEL
    yahoo_client_id: Optional[str] = None
    google_api_key: Optional[str] = None
    google_credentials_path: Optional[str] = None
    default_persona: str = DEFAULT_PERSONA
    search_timeout_seconds: float = DEFAULT_SEARCH_TIMEOUT
    environment: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        environ = os.environ if environ is None else environ
        env_name = environ.get("APP_ENV")
        settings = _read_settings_file(_settings_path(environ, env_name))
        for field_name, variable in ENVIRONMENT_VARIABLES.items():
            if environ.get(variable):
                settings[field_name] = environ[variable]

        raw_timeout = settings.get("search_timeout_seconds") or DEFAULT_SEARCH_TIMEOUT
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise ConfigurationError(f"search_timeout_seconds must be numeric, got {raw_timeout!r}") from exc

        return cls(
            gemini_api_key=settings.get("gemini_api_key"),
            model=settings.get("model") or DEFAULT_GEMINI_MODEL,
            yahoo_client_id=settings.get("yahoo_client_id"),
            google_api_key=settings.get("google_api_key"),
            google_credentials_path=settings.get("google_credentials_path"),
            default_persona=settings.get("default_persona") or DEFAULT_PERSONA,
            search_timeout_seconds=timeout,
            environment=env_name,
        )

    def require_yahoo_client_id(self) -> str:
        if not self.yahoo_client_id:
            raise ConfigurationError("YAHOO_CLIENT_ID environment variable is not set")
        return self.yahoo_client_id

    def require_vision_credentials(self) -> None:
        if not self.google_api_key and not self.google_credentials_path:
            raise ConfigurationError(
                "Either GOOGLE_API_KEY or GOOGLE_APPLICATION_CREDENTIALS must be set for image analysis"
            )


def _settings_path(environ: Mapping[str, str], env_name: str | None) -> Optional[Path]:
    if environ.get("APP_CONFIG_PATH"):
        return Path(environ["APP_CONFIG_PATH"])
    if env_name:
        return Path(environ.get("TRENDGAL_CONFIG_DIR", DEFAULT_CONFIG_DIR)) / f"{env_name}.yaml"
    return None


def _read_settings_file(path: Optional[Path]) -> Dict[str, str]:
    """Read flat ``key: value`` lines; comments and blank lines are skipped."""

    if path is None or not path.exists():
        return {}
    settings: Dict[str, str] = {}
    for line in path.read_text(encoding="utf-8").splitlines():
        key, separator, value = line.partition(":")
        key = key.strip()
        if not separator or not key or key.startswith("#"):
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
            value = value[1:-1]
        settings[_FILE_ALIASES.get(key, key)] = value
    return settings


__all__ = ["AppConfig", "ConfigurationError", "DEFAULT_GEMINI_MODEL", "DEFAULT_PERSONA"]
