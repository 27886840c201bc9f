# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Workshop change notifications."""

from src.domains.workshop.changes import cancellation_delta, describe_changes
from src.domains.workshop.service import PropagationReport, WorkshopChangeService

__all__ = [
    "WorkshopChangeService",
    "PropagationReport",
    "describe_changes",
    "cancellation_delta",
]
