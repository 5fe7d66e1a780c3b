# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Input sanitization for submitted form fields.

Display text is trimmed and HTML-escaped so it can be rendered back into a
page. Password-bearing fields are only trimmed: their exact content goes into
the credential hash.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Mapping, Optional

from markupsafe import Markup, escape


class FieldKind(str, Enum):
    PASSWORD_BEARING = "password_bearing"
    DISPLAY_TEXT = "display_text"


# Static field table; anything not listed is display text.
FIELD_KINDS: Dict[str, FieldKind] = {
    "password": FieldKind.PASSWORD_BEARING,
    "confirmPassword": FieldKind.PASSWORD_BEARING,
}


def field_kind(name: str, kinds: Optional[Mapping[str, FieldKind]] = None) -> FieldKind:
    table = FIELD_KINDS if kinds is None else kinds
    return table.get(name, FieldKind.DISPLAY_TEXT)


def escape_text(value: str) -> str:
    """Trim and escape ``& < > " '``.

    The value is unescaped first, so feeding an already escaped string back in
    returns it unchanged.
    """
    plain = Markup(value.strip()).unescape().strip()
    return str(escape(plain))


def sanitize_value(value: Any, kind: FieldKind) -> Any:
    if not isinstance(value, str):
        return value
    if kind is FieldKind.PASSWORD_BEARING:
        return value.strip()
    return escape_text(value)


def sanitize(raw: Optional[Mapping[str, Any]], kinds: Optional[Mapping[str, FieldKind]] = None) -> Dict[str, Any]:
    """Return a new dict with every string value sanitized according to its field kind."""
    out: Dict[str, Any] = {}
    for key, value in (raw or {}).items():
        out[key] = sanitize_value(value, field_kind(key, kinds))
    return out
