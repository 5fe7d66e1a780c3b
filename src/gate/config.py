# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Settings loaded from the environment.

Secrets (session signing key, password pepper) are required in production.
Outside production a missing secret is replaced by a random per-process value
and a warning is logged; sessions and password hashes made with it do not
survive a restart.
"""

from __future__ import annotations

import logging
import os
import secrets
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from gate.auth.session import COOKIE_NAME, DEFAULT_MAX_AGE_SECONDS
from gate.errors import ConfigurationMissing

logger = logging.getLogger(__name__)

# Anchor the default data directory to the project root, not the CWD.
BASE_DIR = Path(__file__).resolve().parents[2]

_TRUE = {"1", "true", "yes", "y"}


def _env(*names: str, default: str = "") -> str:
    for name in names:
        value = os.getenv(name)
        if value:
            return value.strip()
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUE


def _split_csv(raw: str) -> Tuple[str, ...]:
    return tuple(p.strip().lower() for p in (raw or "").split(",") if p.strip())


@dataclass(frozen=True)
class Settings:
    environment: str
    secret_key: str
    password_pepper: str
    accounts_path: Path
    cookie_name: str = COOKIE_NAME
    session_max_age: int = DEFAULT_MAX_AGE_SECONDS
    cookie_secure: bool = False
    allowed_domains: Tuple[str, ...] = field(default_factory=tuple)
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def _require_secret(label: str, value: str, *, production: bool) -> str:
    if value:
        return value
    if production:
        raise ConfigurationMissing(f"{label} must be set when GATE_ENV=production")
    logger.warning("%s is not set; using a temporary random value (development only)", label)
    return secrets.token_urlsafe(48)


def load_settings() -> Settings:
    """Read settings from the environment. Raises ConfigurationMissing in production."""
    environment = _env("GATE_ENV", default="development").lower()
    production = environment == "production"

    secret_key = _require_secret(
        "GATE_SECRET_KEY",
        _env("GATE_SECRET_KEY", "SECRET_KEY"),
        production=production,
    )
    pepper = _require_secret(
        "GATE_PASSWORD_PEPPER",
        _env("GATE_PASSWORD_PEPPER", "PASSWORD_PEPPER"),
        production=production,
    )

    accounts_path = Path(
        _env("GATE_ACCOUNTS_PATH", default=str(BASE_DIR / "data" / "accounts.yml"))
    ).resolve()

    try:
        max_age = int(_env("GATE_SESSION_MAX_AGE", default=str(DEFAULT_MAX_AGE_SECONDS)))
    except ValueError as exc:
        raise ConfigurationMissing("GATE_SESSION_MAX_AGE must be an integer") from exc

    log_file = _env("GATE_LOG_FILE")

    return Settings(
        environment=environment,
        secret_key=secret_key,
        password_pepper=pepper,
        accounts_path=accounts_path,
        cookie_name=_env("GATE_COOKIE_NAME", default=COOKIE_NAME),
        session_max_age=max_age,
        cookie_secure=_env_bool("GATE_COOKIE_SECURE", production),
        allowed_domains=_split_csv(_env("GATE_ALLOWED_DOMAINS")),
        log_level=_env("GATE_LOG_LEVEL", default="INFO").upper(),
        log_file=Path(log_file).resolve() if log_file else None,
    )
