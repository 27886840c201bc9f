# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for the workshop pairing service.

Importing this package registers every table on ``Base.metadata``.
"""

from src.infrastructure.database.models.base import Base, TimestampMixin
from src.infrastructure.database.models.enrollment import EnrollmentRecord
from src.infrastructure.database.models.user import User
from src.infrastructure.database.models.workshop import Workshop

__all__ = [
    "Base",
    "TimestampMixin",
    "EnrollmentRecord",
    "User",
    "Workshop",
]
