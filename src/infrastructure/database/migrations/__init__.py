# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Alembic migrations for the enrollment store.

Usage:
    DB_URL=postgresql+asyncpg://... alembic upgrade head
"""
