# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for the workshop pairing service.

Example:
    >>> from src.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.pairing.lock_timeout_seconds
    10.0
"""

from src.core.config.settings import (
    DatabaseSettings,
    NotificationSettings,
    PairingSettings,
    Settings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "PairingSettings",
    "NotificationSettings",
]
