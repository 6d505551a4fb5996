# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Event infrastructure for the admissions pipeline.

Components:
- EventBus: In-memory pub/sub with wildcard matching
- EventTypes: Admissions event name constants
- EventPatterns: Wildcard subscriptions over event groups

Quick Start:
    from src.infrastructure.events import get_event_bus
    from src.infrastructure.notifications import AdmissionsNotifier

    notifier = AdmissionsNotifier(service)
    notifier.subscribe(get_event_bus())
"""

from src.infrastructure.events.bus import (
    EventBus,
    EventData,
    EventHandler,
    get_event_bus,
    reset_event_bus,
)
from src.infrastructure.events.types import EventPatterns, EventTypes

__all__ = [
    "EventBus",
    "EventData",
    "EventHandler",
    "EventPatterns",
    "EventTypes",
    "get_event_bus",
    "reset_event_bus",
]
