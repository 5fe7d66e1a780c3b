# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Form validation: required fields, email, password policy and custom rules.

``validate`` never raises for bad input. Every category of check runs and
appends its messages; the outcome is valid only when no message was produced.
"""

from __future__ import annotations

import re
from collections.abc import Sized
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Pattern, Protocol, Sequence, Tuple, Union

from email_validator import EmailNotValidError, validate_email as _check_email_syntax

from gate.core.password_policy import DEFAULT_POLICY, POLICY_MESSAGE, PasswordPolicy
from gate.core.sanitize import sanitize

RuleResult = Union[bool, str]

DEFAULT_REQUIRED_FIELDS: Tuple[str, ...] = ("email", "password")
NAME_FIELD = "nama"


class FieldRule(Protocol):
    """A per-field check. Returns ``True`` on success or an error message."""

    def __call__(self, value: Any, data: Mapping[str, Any]) -> RuleResult: ...


@dataclass(frozen=True)
class ValidationSettings:
    validate_password: bool = True
    validate_email: bool = True
    password_match_field: Optional[str] = None
    custom_validators: Mapping[str, FieldRule] = field(default_factory=dict)
    allowed_domains: Tuple[str, ...] = ()
    policy: PasswordPolicy = DEFAULT_POLICY


@dataclass(frozen=True)
class ValidationOutcome:
    messages: List[str]
    data: Dict[str, Any]

    @property
    def is_valid(self) -> bool:
        return not self.messages


def format_field(name: str) -> str:
    """Upper-case the first character, leave the rest alone."""
    return name[:1].upper() + name[1:]


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (bool, int, float)):
        return not value
    if isinstance(value, Sized):
        return len(value) == 0
    return False


def _as_text(value: Any) -> str:
    return value if isinstance(value, str) else str(value)


def _email_syntax_ok(email: str) -> bool:
    try:
        _check_email_syntax(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def resolve_required_fields(raw: Mapping[str, Any], required_fields: Optional[Sequence[str]]) -> List[str]:
    """Explicit fields win; otherwise email and password, plus the name field if submitted at all."""
    if required_fields:
        return list(required_fields)
    fields = list(DEFAULT_REQUIRED_FIELDS)
    if NAME_FIELD in raw:
        fields.append(NAME_FIELD)
    return fields


def validate(
    raw: Optional[Mapping[str, Any]],
    required_fields: Optional[Sequence[str]] = None,
    settings: Optional[ValidationSettings] = None,
) -> ValidationOutcome:
    raw = raw or {}
    settings = settings or ValidationSettings()
    messages: List[str] = []
    data = sanitize(raw)

    for name in resolve_required_fields(raw, required_fields):
        if _is_blank(data.get(name)):
            messages.append(f"{format_field(name)} is required")

    # Present values are checked as text whatever their type.
    email = data.get("email")
    if settings.validate_email and not _is_blank(email):
        email = _as_text(email)
        if not _email_syntax_ok(email):
            messages.append("Invalid email format")

        if settings.allowed_domains:
            allowed = [d.lower() for d in settings.allowed_domains]
            parts = email.split("@")
            domain = parts[1].lower() if len(parts) > 1 else ""
            if domain not in allowed:
                messages.append(
                    "Email must use one of the following domains: " + ", ".join(settings.allowed_domains)
                )

    password = data.get("password")
    if settings.validate_password and not _is_blank(password):
        password = _as_text(password)
        if not settings.policy.is_strong(password):
            messages.append(POLICY_MESSAGE)

        match_field = settings.password_match_field
        confirmation = data.get(match_field) if match_field else None
        if not _is_blank(confirmation) and _as_text(confirmation) != password:
            messages.append("Password confirmation does not match")

    for name, rule in settings.custom_validators.items():
        if name not in data:
            continue
        result = rule(data[name], data)
        if result is not True:
            messages.append(result if isinstance(result, str) else f"{format_field(name)} is invalid")

    return ValidationOutcome(messages=messages, data=data)


def create_field_validator(
    field_name: str,
    *,
    min_length: Optional[int] = None,
    max_length: Optional[int] = None,
    pattern: Union[str, Pattern[str], None] = None,
    message: Optional[str] = None,
    custom: Optional[Callable[[Any, Mapping[str, Any]], RuleResult]] = None,
) -> FieldRule:
    """Build a rule from common length/pattern checks; the first failure wins."""
    regex = re.compile(pattern) if isinstance(pattern, str) else pattern

    def _rule(value: Any, data: Mapping[str, Any]) -> RuleResult:
        text = "" if value is None else str(value)
        if min_length and len(text) < min_length:
            return f"{field_name} must be at least {min_length} characters"
        if max_length and len(text) > max_length:
            return f"{field_name} cannot exceed {max_length} characters"
        if regex is not None and not regex.search(text):
            return message or f"{field_name} is invalid"
        if custom is not None:
            result = custom(value, data)
            if result is not True:
                return result
        return True

    return _rule
