# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Common enums shared by the ORM models and the pairing domain."""

from __future__ import annotations

from enum import Enum

# Spellings found in user profiles for each role
_ROLE_ALIASES = {
    "leader": "leader",
    "lead": "leader",
    "lider": "leader",
    "líder": "leader",
    "follower": "follower",
    "follow": "follower",
}


class DanceRole(str, Enum):
    """Dance role of a participant."""

    LEADER = "leader"
    FOLLOWER = "follower"

    @property
    def complement(self) -> DanceRole:
        """Return the role this one is paired with."""
        if self is DanceRole.LEADER:
            return DanceRole.FOLLOWER
        return DanceRole.LEADER

    @classmethod
    def parse(cls, value: str | DanceRole) -> DanceRole:
        """Parse a role from a profile value, case-insensitively.

        Raises:
            ValueError: If the value names no known role.
        """
        if isinstance(value, DanceRole):
            return value
        normalized = _ROLE_ALIASES.get(value.strip().lower())
        if normalized is None:
            raise ValueError(f"Unknown dance role: {value!r}")
        return cls(normalized)


class PairingStatus(str, Enum):
    """Pairing status of an enrollment record."""

    WAITING = "waiting"
    CONFIRMED = "confirmed"
