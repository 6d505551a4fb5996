# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Infrastructure layer for the admissions notification engine.

This package contains:
- notifications: Templates, fan-out, channels and notification stores
- events: In-memory event bus for admissions lifecycle events
"""
