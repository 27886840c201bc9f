# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""User profile model.

Users are owned by the account subsystem. The pairing core only reads
them through the user directory.
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    """Registered user with a dance role."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))
    surname: Mapped[str] = mapped_column(String(150), default="")
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    phone: Mapped[str | None] = mapped_column(String(30), nullable=True)
    # Free text as entered at registration, parsed with DanceRole.parse
    dance_role: Mapped[str] = mapped_column(String(20))

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r}>"
