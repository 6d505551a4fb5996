"""Admissions Notification Engine.

Template-driven, multi-channel (in-app, email, SMS) notifier that fans
school admissions lifecycle events out to every eligible guardian and
tracks per-channel delivery and read state.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
