# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""gate: sign-up, login and a protected page behind a signed session cookie."""

__version__ = "0.1.0"
