# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Centralized event type definitions for the admissions pipeline.

Using constants instead of string literals keeps publishers and
subscribers in sync.
"""


class EventTypes:
    """All event types organized by domain."""

    class Admissions:
        """Admissions lifecycle events."""

        LEAD_CREATED = "admissions.lead.created"
        LEAD_CONTACTED = "admissions.lead.contacted"
        APPLICATION_SUBMITTED = "admissions.application.submitted"
        DOCUMENTS_PENDING = "admissions.documents.pending"
        DOCUMENTS_COMPLETE = "admissions.documents.complete"
        TEST_SCHEDULED = "admissions.test.scheduled"
        TEST_COMPLETED = "admissions.test.completed"
        INTERVIEW_SCHEDULED = "admissions.interview.scheduled"
        INTERVIEW_COMPLETED = "admissions.interview.completed"
        UNDER_REVIEW = "admissions.application.under_review"
        DECISION_ACCEPTED = "admissions.decision.accepted"
        DECISION_WAITLISTED = "admissions.decision.waitlisted"
        DECISION_REJECTED = "admissions.decision.rejected"
        ENROLLMENT_COMPLETE = "admissions.enrollment.complete"


class EventPatterns:
    """Wildcard patterns for subscribing to groups of events."""

    ALL_ADMISSIONS = "admissions.*"
    ALL_DECISIONS = "admissions.decision.*"
