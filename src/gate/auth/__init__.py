# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification (HMAC pepper + argon2)
- Sign-up and login flows over the account store
- Signed session cookies (itsdangerous)
"""
