# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Workshop model."""

import datetime as dt

from sqlalchemy import JSON, Date, String, Time
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import Base, TimestampMixin


class Workshop(Base, TimestampMixin):
    """A scheduled dance session with a fixed date, time and location."""

    __tablename__ = "workshops"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200))
    modality: Mapped[str | None] = mapped_column(String(100), nullable=True)
    instructors: Mapped[list[str]] = mapped_column(JSON, default=list)
    date: Mapped[dt.date | None] = mapped_column(Date, nullable=True)
    time: Mapped[dt.time | None] = mapped_column(Time, nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Workshop id={self.id} name={self.name!r}>"
