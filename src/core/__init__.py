# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for the workshop pairing service.

This package contains application-wide concerns:
- config: Application configuration and settings
- container: Service wiring used at startup and shutdown
"""
