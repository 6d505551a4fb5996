# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTTP layer for the admissions notification engine.

This module provides the FastAPI application and the guardian-facing
notification endpoints.
"""

from src.api.app import create_app

__all__ = ["create_app"]
