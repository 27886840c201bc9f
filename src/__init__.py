"""Workshop Pairing Backend.

Enrollment of members into dance workshops with automatic leader and
follower partner matching, waitlists and re-pairing on sign-out.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
