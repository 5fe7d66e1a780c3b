# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

from gate.errors import ConfigurationMissing

COOKIE_NAME = "gate_session"
DEFAULT_MAX_AGE_SECONDS = 3600  # 1 hour
SESSION_SALT = "gate.session.v1"


def _serializer(secret: str) -> URLSafeTimedSerializer:
    if not secret:
        raise ConfigurationMissing("Session secret key is not configured")
    return URLSafeTimedSerializer(secret_key=secret, salt=SESSION_SALT)


@dataclass(frozen=True)
class SessionData:
    email: str
    name: str


def sign_session(email: str, name: str, *, secret: str) -> str:
    s = _serializer(secret)
    return s.dumps({"e": email, "n": name})


def verify_session(token: str, *, secret: str, max_age: int = DEFAULT_MAX_AGE_SECONDS) -> Optional[SessionData]:
    if not token:
        return None
    s = _serializer(secret)
    try:
        data = s.loads(token, max_age=max_age)
    except (BadSignature, BadTimeSignature):
        return None
    if not isinstance(data, dict):
        return None
    email = str(data.get("e") or "").strip()
    if not email:
        return None
    return SessionData(email=email, name=str(data.get("n") or ""))
