# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial enrollment store schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-06-02

Creates the users, workshops and enrollment_records tables.
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    """Create the enrollment store tables."""
    # ==========================================================================
    # 1. users table
    # ==========================================================================
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("surname", sa.String(150), nullable=False, server_default=""),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("dance_role", sa.String(20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_users"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ==========================================================================
    # 2. workshops table
    # ==========================================================================
    op.create_table(
        "workshops",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("modality", sa.String(100), nullable=True),
        sa.Column("instructors", sa.JSON, nullable=False),
        sa.Column("date", sa.Date, nullable=True),
        sa.Column("time", sa.Time, nullable=True),
        sa.Column("location", sa.String(255), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_workshops"),
    )

    # ==========================================================================
    # 3. enrollment_records table
    # ==========================================================================
    op.create_table(
        "enrollment_records",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("workshop_id", sa.Integer, nullable=False),
        sa.Column("user_id", sa.Integer, nullable=False),
        sa.Column("sequence", sa.Integer, nullable=False),
        sa.Column("role", sa.Enum("leader", "follower", name="dance_role"), nullable=False),
        sa.Column(
            "status",
            sa.Enum("waiting", "confirmed", name="pairing_status"),
            nullable=False,
        ),
        sa.Column("partner_id", sa.Integer, nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_enrollment_records"),
        sa.ForeignKeyConstraint(
            ["workshop_id"],
            ["workshops.id"],
            name="fk_enrollment_records_workshop_id_workshops",
            ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["user_id"],
            ["users.id"],
            name="fk_enrollment_records_user_id_users",
            ondelete="CASCADE",
        ),
        sa.UniqueConstraint(
            "workshop_id", "user_id", name="uq_enrollment_records_workshop_user"
        ),
    )
    op.create_index(
        "ix_enrollment_records_workshop_sequence",
        "enrollment_records",
        ["workshop_id", "sequence"],
    )


def downgrade() -> None:
    """Drop the enrollment store tables."""
    op.drop_index("ix_enrollment_records_workshop_sequence", table_name="enrollment_records")
    op.drop_table("enrollment_records")
    op.drop_table("workshops")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    sa.Enum(name="pairing_status").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="dance_role").drop(op.get_bind(), checkfirst=True)
