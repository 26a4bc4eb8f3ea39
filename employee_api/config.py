"""Configuration management for the employee records service."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Dict, Mapping, Optional

import yaml

from .database import DEFAULT_BUSY_TIMEOUT, resolve_database_path

_ENV_OVERRIDES = {
    "database_path": "EMPLOYEES_DB_PATH",
    "host": "EMPLOYEES_HOST",
    "port": "EMPLOYEES_PORT",
    "log_level": "EMPLOYEES_LOG_LEVEL",
    "api_prefix": "EMPLOYEES_API_PREFIX",
    "busy_timeout": "EMPLOYEES_BUSY_TIMEOUT",
}

_LOG_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the HTTP service and its database."""

    database_path: Path
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    api_prefix: str = ""
    busy_timeout: float = DEFAULT_BUSY_TIMEOUT

    @property
    def numeric_log_level(self) -> int:
        return getattr(logging, self.log_level)

    @staticmethod
    def from_dict(data: Mapping[str, object], base_path: Path | None = None) -> "Settings":
        """Create :class:`Settings` from raw configuration values."""
        known = {item.name for item in fields(Settings)}
        unknown = set(data.keys()) - known
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

        raw_path = data.get("database_path")
        if raw_path:
            candidate = Path(str(raw_path)).expanduser()
            if not candidate.is_absolute() and base_path is not None:
                candidate = base_path / candidate
            database_path = resolve_database_path(str(candidate))
        else:
            database_path = resolve_database_path(None)

        try:
            port = int(data.get("port", 8080))  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValueError(f"port must be an integer, got {data.get('port')!r}") from exc
        if not 1 <= port <= 65535:
            raise ValueError(f"port must be between 1 and 65535, got {port}")

        try:
            busy_timeout = float(data.get("busy_timeout", DEFAULT_BUSY_TIMEOUT))  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValueError(
                f"busy_timeout must be a number, got {data.get('busy_timeout')!r}"
            ) from exc
        if busy_timeout <= 0:
            raise ValueError("busy_timeout must be positive")

        log_level = str(data.get("log_level", "INFO")).strip().upper()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {', '.join(sorted(_LOG_LEVELS))}")

        api_prefix = str(data.get("api_prefix") or "").strip().rstrip("/")
        if api_prefix and not api_prefix.startswith("/"):
            api_prefix = f"/{api_prefix}"

        return Settings(
            database_path=database_path,
            host=str(data.get("host", "0.0.0.0")).strip() or "0.0.0.0",
            port=port,
            log_level=log_level,
            api_prefix=api_prefix,
            busy_timeout=busy_timeout,
        )


def _read_config_file(config_path: Path) -> Dict[str, object]:
    if not config_path.is_file():
        return {}
    with config_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")
    return raw


def load_settings(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load settings from an optional YAML file, then apply environment overrides."""
    env = os.environ if environ is None else environ
    if config_path is None:
        config_path = resolve_config_path(env.get("EMPLOYEES_CONFIG"))

    data = _read_config_file(config_path)
    base_path: Path | None = config_path.parent if data.get("database_path") else None

    for key, variable in _ENV_OVERRIDES.items():
        value = env.get(variable)
        if value is None or value == "":
            continue
        data[key] = value
        if key == "database_path":
            # Environment paths are relative to the working directory, not the file.
            base_path = None

    return Settings.from_dict(data, base_path=base_path)


def resolve_config_path(env_value: Optional[str]) -> Path:
    """Resolve the path to the configuration file."""
    if env_value:
        candidate = Path(env_value).expanduser().resolve(strict=False)
    else:
        candidate = (Path(__file__).resolve().parent.parent / "config" / "employees.yaml").resolve(strict=False)
    return candidate


__all__ = ["Settings", "load_settings", "resolve_config_path"]
