# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Password strength rules.

A password is strong when it passes every rule. Callers report a single
combined message (``POLICY_MESSAGE``) rather than the individual rule names.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import FrozenSet, List

POLICY_MESSAGE = "Password must be at least 8 characters, include uppercase, lowercase, number, and symbol"

WEAK_PASSWORDS: FrozenSet[str] = frozenset({"Password123!", "Passw0rd!", "12345678!Aa"})

_UPPER = re.compile(r"[A-Z]")
_LOWER = re.compile(r"[a-z]")
_DIGIT = re.compile(r"[0-9]")
_SYMBOL = re.compile(r"[^A-Za-z0-9\s]")
_SPACE = re.compile(r"\s")


@dataclass(frozen=True)
class PasswordPolicy:
    min_length: int = 8
    max_length: int = 100
    blacklist: FrozenSet[str] = field(default_factory=lambda: WEAK_PASSWORDS)

    def violations(self, password: str) -> List[str]:
        """Names of the rules ``password`` fails, in rule order."""
        failed: List[str] = []
        if len(password) < self.min_length:
            failed.append("min")
        if len(password) > self.max_length:
            failed.append("max")
        if not _UPPER.search(password):
            failed.append("uppercase")
        if not _LOWER.search(password):
            failed.append("lowercase")
        if not _DIGIT.search(password):
            failed.append("digits")
        if not _SYMBOL.search(password):
            failed.append("symbols")
        if _SPACE.search(password):
            failed.append("spaces")
        if password in self.blacklist:
            failed.append("oneOf")
        return failed

    def is_strong(self, password: str) -> bool:
        return not self.violations(password)


DEFAULT_POLICY = PasswordPolicy()
