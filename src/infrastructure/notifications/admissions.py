# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admissions lifecycle triggers.

One method per lifecycle milestone. Each assembles the stage-specific
template values and hands the event to NotificationService.notify_guardians.
The same milestones can be driven through the event bus: subscribe() maps
every EventTypes.Admissions event to its stage.

Example:
    notifier = AdmissionsNotifier(service)
    await notifier.notify_decision(
        subject,
        decision="accept",
        grade="Grade 6",
        academic_year="2026-2027",
        enrollment_deadline=date(2026, 3, 15),
    )
"""

from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any

from src.infrastructure.events.bus import EventBus, EventData
from src.infrastructure.events.types import EventTypes
from src.infrastructure.notifications.service import FanOutResult, NotificationService
from src.infrastructure.notifications.types import (
    AdmissionsSubject,
    Guardian,
    Locale,
    NotificationStage,
)
from src.utils.datetime import format_display_date
from src.utils.logging import get_logger, log_context

logger = get_logger(__name__)

DateLike = date | datetime | str

ADMISSIONS_EVENT_STAGES: dict[str, NotificationStage] = {
    EventTypes.Admissions.LEAD_CREATED: NotificationStage.LEAD_CREATED,
    EventTypes.Admissions.LEAD_CONTACTED: NotificationStage.LEAD_CONTACTED,
    EventTypes.Admissions.APPLICATION_SUBMITTED: NotificationStage.APPLICATION_SUBMITTED,
    EventTypes.Admissions.DOCUMENTS_PENDING: NotificationStage.DOCUMENTS_PENDING,
    EventTypes.Admissions.DOCUMENTS_COMPLETE: NotificationStage.DOCUMENTS_COMPLETE,
    EventTypes.Admissions.TEST_SCHEDULED: NotificationStage.TEST_SCHEDULED,
    EventTypes.Admissions.TEST_COMPLETED: NotificationStage.TEST_COMPLETED,
    EventTypes.Admissions.INTERVIEW_SCHEDULED: NotificationStage.INTERVIEW_SCHEDULED,
    EventTypes.Admissions.INTERVIEW_COMPLETED: NotificationStage.INTERVIEW_COMPLETED,
    EventTypes.Admissions.UNDER_REVIEW: NotificationStage.UNDER_REVIEW,
    EventTypes.Admissions.DECISION_ACCEPTED: NotificationStage.DECISION_ACCEPTED,
    EventTypes.Admissions.DECISION_WAITLISTED: NotificationStage.DECISION_WAITLISTED,
    EventTypes.Admissions.DECISION_REJECTED: NotificationStage.DECISION_REJECTED,
    EventTypes.Admissions.ENROLLMENT_COMPLETE: NotificationStage.ENROLLMENT_COMPLETE,
}

DECISION_STAGES: dict[str, NotificationStage] = {
    "accept": NotificationStage.DECISION_ACCEPTED,
    "waitlist": NotificationStage.DECISION_WAITLISTED,
    "reject": NotificationStage.DECISION_REJECTED,
}

DEFAULT_TEST_SCORE = "N/A"
DEFAULT_MAX_SCORE = "100"


def subject_from_payload(payload: Mapping[str, Any]) -> AdmissionsSubject:
    """Build an AdmissionsSubject from an event payload.

    The payload's "subject" is either an AdmissionsSubject or a mapping
    with student_name, guardians, application_id and lead_id. Guardians
    may be Guardian instances or mappings of their fields.

    Args:
        payload: Event payload.

    Returns:
        The admissions subject.

    Raises:
        ValueError: If the payload carries no subject.
    """
    raw = payload.get("subject")
    if isinstance(raw, AdmissionsSubject):
        return raw
    if not isinstance(raw, Mapping):
        raise ValueError("Admissions event payload has no subject")

    guardians = []
    for item in raw.get("guardians", []):
        if isinstance(item, Guardian):
            guardians.append(item)
            continue
        guardians.append(Guardian(**item))

    return AdmissionsSubject(
        student_name=raw["student_name"],
        guardians=guardians,
        application_id=raw.get("application_id"),
        lead_id=raw.get("lead_id"),
    )


class AdmissionsNotifier:
    """Lifecycle-specific entry points over NotificationService.

    Attributes:
        service: Service that performs the fan-out.
    """

    def __init__(self, service: NotificationService) -> None:
        self.service = service

    async def _notify(
        self,
        subject: AdmissionsSubject,
        stage: NotificationStage,
        context: Mapping[str, str] | None = None,
    ) -> FanOutResult:
        values = {"applicationId": subject.application_id or ""}
        if context:
            values.update(context)
        return await self.service.notify_guardians(subject, stage, values)

    async def notify_lead_created(
        self,
        guardian_name: str,
        guardian_email: str | None,
        guardian_phone: str | None,
        student_name: str,
        lead_id: str,
        locale: Locale | None = None,
    ) -> FanOutResult:
        """Welcome the contact person of a new lead.

        Leads have no guardian records yet, so the contact becomes a single
        guardian whose recipient ID is the lead ID.

        Args:
            guardian_name: Contact name.
            guardian_email: Contact email.
            guardian_phone: Contact phone.
            student_name: Prospective student's name.
            lead_id: Lead identifier.
            locale: Contact's preferred locale.

        Returns:
            FanOutResult for the single contact.
        """
        contact = Guardian(
            id=lead_id,
            full_name=guardian_name,
            email=guardian_email,
            phone=guardian_phone,
            locale=locale,
        )
        subject = AdmissionsSubject(
            student_name=student_name,
            guardians=[contact],
            lead_id=lead_id,
        )
        return await self.service.notify_guardians(subject, NotificationStage.LEAD_CREATED)

    async def notify_lead_contacted(self, subject: AdmissionsSubject) -> FanOutResult:
        return await self._notify(subject, NotificationStage.LEAD_CONTACTED)

    async def notify_application_submitted(self, subject: AdmissionsSubject) -> FanOutResult:
        return await self._notify(subject, NotificationStage.APPLICATION_SUBMITTED)

    async def notify_documents_pending(
        self,
        subject: AdmissionsSubject,
        missing_documents: Sequence[str],
    ) -> FanOutResult:
        """Ask guardians for the documents still missing.

        Args:
            subject: Application the documents belong to.
            missing_documents: Missing document types, in display order.
        """
        return await self._notify(
            subject,
            NotificationStage.DOCUMENTS_PENDING,
            {"missingDocuments": ", ".join(missing_documents)},
        )

    async def notify_documents_complete(self, subject: AdmissionsSubject) -> FanOutResult:
        return await self._notify(subject, NotificationStage.DOCUMENTS_COMPLETE)

    async def notify_test_scheduled(
        self,
        subject: AdmissionsSubject,
        test_type: str,
        test_date: DateLike,
        test_time: str,
        test_location: str,
    ) -> FanOutResult:
        """Announce an entrance test slot."""
        return await self._notify(
            subject,
            NotificationStage.TEST_SCHEDULED,
            {
                "testType": test_type,
                "testDate": format_display_date(test_date),
                "testTime": test_time,
                "testLocation": test_location,
            },
        )

    async def notify_test_completed(
        self,
        subject: AdmissionsSubject,
        test_type: str,
        score: float | str | None = None,
        max_score: float | str | None = None,
    ) -> FanOutResult:
        """Share an entrance test result.

        A missing score renders as "N/A" and a missing maximum as "100".
        """
        return await self._notify(
            subject,
            NotificationStage.TEST_COMPLETED,
            {
                "testType": test_type,
                "testScore": DEFAULT_TEST_SCORE if score is None else str(score),
                "maxScore": DEFAULT_MAX_SCORE if max_score is None else str(max_score),
            },
        )

    async def notify_interview_scheduled(
        self,
        subject: AdmissionsSubject,
        interview_date: DateLike,
        interview_time: str,
        interviewer: str,
        interview_location: str,
    ) -> FanOutResult:
        return await self._notify(
            subject,
            NotificationStage.INTERVIEW_SCHEDULED,
            {
                "interviewDate": format_display_date(interview_date),
                "interviewTime": interview_time,
                "interviewer": interviewer,
                "interviewLocation": interview_location,
            },
        )

    async def notify_interview_completed(self, subject: AdmissionsSubject) -> FanOutResult:
        return await self._notify(subject, NotificationStage.INTERVIEW_COMPLETED)

    async def notify_under_review(self, subject: AdmissionsSubject) -> FanOutResult:
        return await self._notify(subject, NotificationStage.UNDER_REVIEW)

    async def notify_decision(
        self,
        subject: AdmissionsSubject,
        decision: str,
        grade: str,
        academic_year: str,
        reason: str = "",
        enrollment_deadline: DateLike | None = None,
        waitlist_position: int | str | None = None,
    ) -> FanOutResult:
        """Communicate the admission decision.

        "accept" and "waitlist" select their own stages; any other
        decision is treated as a rejection.

        Args:
            subject: Application the decision is about.
            decision: "accept", "waitlist" or "reject".
            grade: Grade the student applied for.
            academic_year: Academic year, e.g. "2026-2027".
            reason: Decision reason shown on rejections.
            enrollment_deadline: Deadline to confirm an accepted seat.
            waitlist_position: Position on the waitlist.

        Returns:
            FanOutResult for the decision stage.
        """
        stage = DECISION_STAGES.get(decision, NotificationStage.DECISION_REJECTED)
        context = {
            "grade": grade,
            "academicYear": academic_year,
            "reason": reason,
        }
        if stage == NotificationStage.DECISION_ACCEPTED and enrollment_deadline is not None:
            context["enrollmentDeadline"] = format_display_date(enrollment_deadline)
        if stage == NotificationStage.DECISION_WAITLISTED and waitlist_position is not None:
            context["waitlistPosition"] = str(waitlist_position)
        return await self._notify(subject, stage, context)

    async def notify_enrollment_complete(
        self,
        subject: AdmissionsSubject,
        grade: str,
        section: str,
        academic_year: str,
        start_date: DateLike,
    ) -> FanOutResult:
        return await self._notify(
            subject,
            NotificationStage.ENROLLMENT_COMPLETE,
            {
                "grade": grade,
                "section": section,
                "academicYear": academic_year,
                "startDate": format_display_date(start_date),
            },
        )

    async def handle_event(self, event: EventData) -> FanOutResult:
        """Fan out one admissions event received from the bus.

        The payload carries "subject" and an optional "context" mapping
        of template values.

        Args:
            event: Published admissions event.

        Returns:
            FanOutResult for the event's stage.

        Raises:
            ValueError: If the event name is not an admissions event or
                the payload has no subject.
        """
        stage = ADMISSIONS_EVENT_STAGES.get(event.event_type)
        if stage is None:
            raise ValueError(f"Not an admissions event: {event.event_type}")

        subject = subject_from_payload(event.payload)
        context = {k: str(v) for k, v in (event.payload.get("context") or {}).items()}

        with log_context(event_id=event.event_id, event_type=event.event_type):
            logger.debug("Handling admissions event", stage=stage.value)
            return await self._notify(subject, stage, context)

    def subscribe(self, bus: EventBus) -> None:
        """Subscribe handle_event to every admissions event on a bus."""
        for event_type in ADMISSIONS_EVENT_STAGES:
            bus.subscribe(event_type, self.handle_event)
        logger.info("Admissions notifier subscribed", events=len(ADMISSIONS_EVENT_STAGES))

    def unsubscribe(self, bus: EventBus) -> None:
        """Undo subscribe()."""
        for event_type in ADMISSIONS_EVENT_STAGES:
            bus.unsubscribe(event_type, self.handle_event)
