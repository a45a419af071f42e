from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping
import os
import re


DEFAULT_APP_ENV = "development"
DEFAULT_FIRESTORE_DATABASE = "(default)"

EMULATOR_HOST_PATTERN = re.compile(r"^[A-Za-z0-9.\-\[\]:]+:\d{1,5}$")


class SettingsError(ValueError):
    """Raised when settings values are invalid."""


@dataclass(frozen=True)
class StoreSettings:
    app_env: str
    firestore_project_id: str
    firestore_database: str
    firestore_emulator_host: str


def _read_dotenv(dotenv_path: Path) -> dict[str, str]:
    values: dict[str, str] = {}
    if not dotenv_path.exists():
        return values

    for raw_line in dotenv_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip("'").strip('"')
        if key:
            values[key] = value
    return values


def _get_str(values: Mapping[str, str], key: str, default: str) -> str:
    value = values.get(key, default).strip()
    if not value:
        raise SettingsError(f"{key} must not be empty.")
    return value


def _get_optional_str(values: Mapping[str, str], key: str) -> str:
    return values.get(key, "").strip()


def _get_emulator_host(values: Mapping[str, str], key: str) -> str:
    value = _get_optional_str(values, key)
    if value and not EMULATOR_HOST_PATTERN.match(value):
        raise SettingsError(f"{key} must be host:port: {value}")
    return value


def load_settings(
    *,
    env: Mapping[str, str] | None = None,
    dotenv_path: str | Path = ".env",
) -> StoreSettings:
    """Load settings from .env and environment variables.

    Priority: OS environment > .env > default.
    """

    env_values = dict(env) if env is not None else dict(os.environ)
    dotenv_values = _read_dotenv(Path(dotenv_path))
    merged: dict[str, str] = {**dotenv_values, **env_values}

    return StoreSettings(
        app_env=_get_str(merged, "APP_ENV", DEFAULT_APP_ENV),
        firestore_project_id=_get_optional_str(merged, "FIRESTORE_PROJECT_ID"),
        firestore_database=_get_str(merged, "FIRESTORE_DATABASE", DEFAULT_FIRESTORE_DATABASE),
        firestore_emulator_host=_get_emulator_host(merged, "FIRESTORE_EMULATOR_HOST"),
    )
