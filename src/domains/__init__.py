# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for the workshop pairing service.

Domains:
    pairing: Enrollment, partner matching and sign-out re-pairing.
    workshop: Notifying members when a workshop changes or is cancelled.
"""
