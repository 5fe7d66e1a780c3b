# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Exceptions raised by the credential and storage layers.

Form validation problems are not exceptions: they come back as messages in a
``ValidationOutcome``.
"""

from __future__ import annotations


class GateError(Exception):
    """Base class for gate errors."""


class InvalidInput(GateError, ValueError):
    """A caller passed something the credential layer cannot work with."""


class ConfigurationMissing(GateError, RuntimeError):
    """A required secret is not configured."""


class DuplicateEmail(GateError, ValueError):
    """An account with this email already exists."""

    def __init__(self, email: str):
        super().__init__(f"Account already exists: {email}")
        self.email = email
