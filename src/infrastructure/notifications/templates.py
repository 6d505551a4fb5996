# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Template registry for admissions notifications.

Every lifecycle stage maps to exactly one bilingual bundle holding the
in-app title and body, the email subject and the SMS text in English and
Arabic, plus the channels the stage fires on and its priority.

Placeholders use the {name} syntax understood by
src.infrastructure.notifications.rendering. The variables available to
every stage are studentName, applicationId, leadId, guardianName,
schoolName and schoolPhone; stage-specific variables are supplied by the
admissions triggers.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from functools import lru_cache
from types import MappingProxyType

from src.infrastructure.notifications.errors import (
    TemplateConfigurationError,
    UnknownStageError,
)
from src.infrastructure.notifications.types import (
    ChannelType,
    Locale,
    NotificationPriority,
    NotificationStage,
)

logger = logging.getLogger(__name__)

ALL_CHANNELS = (ChannelType.IN_APP, ChannelType.EMAIL, ChannelType.SMS)
IN_APP_AND_EMAIL = (ChannelType.IN_APP, ChannelType.EMAIL)


@dataclass(frozen=True)
class LocalizedContent:
    """Template strings for one locale.

    Attributes:
        title: In-app title.
        message: In-app body, also used as the email body.
        email_subject: Email subject line.
        sms_message: SMS text.
    """

    title: str
    message: str
    email_subject: str
    sms_message: str


@dataclass(frozen=True)
class TemplateBundle:
    """All content and routing for one lifecycle stage.

    Attributes:
        stage: Stage this bundle belongs to.
        content: Template strings per locale.
        channels: Channels this stage fires on, in dispatch order.
        priority: Notification priority.
    """

    stage: NotificationStage
    content: Mapping[Locale, LocalizedContent]
    channels: tuple[ChannelType, ...]
    priority: NotificationPriority

    def for_locale(self, locale: Locale) -> LocalizedContent:
        """Return the template strings for a locale.

        Args:
            locale: Requested locale.

        Returns:
            Localized content, English when the locale is missing.
        """
        return self.content.get(locale) or self.content[Locale.EN]


def _bundle(
    stage: NotificationStage,
    en: LocalizedContent,
    ar: LocalizedContent,
    channels: tuple[ChannelType, ...],
    priority: NotificationPriority,
) -> TemplateBundle:
    return TemplateBundle(
        stage=stage,
        content=MappingProxyType({Locale.EN: en, Locale.AR: ar}),
        channels=channels,
        priority=priority,
    )


ADMISSIONS_TEMPLATES: Mapping[NotificationStage, TemplateBundle] = MappingProxyType({
    NotificationStage.LEAD_CREATED: _bundle(
        NotificationStage.LEAD_CREATED,
        en=LocalizedContent(
            title="Thank You for Your Interest",
            message=(
                "Thank you for your interest in our school. We have received your inquiry "
                "for {studentName} and our admissions team will contact you shortly."
            ),
            email_subject="Thank You for Your Interest - {schoolName}",
            sms_message=(
                "Thank you for your interest in {schoolName}. We will contact you soon "
                "regarding {studentName}'s admission."
            ),
        ),
        ar=LocalizedContent(
            title="شكراً لاهتمامك",
            message=(
                "شكراً لاهتمامك بمدرستنا. لقد استلمنا استفسارك عن {studentName} "
                "وسيتواصل معك فريق القبول قريباً."
            ),
            email_subject="شكراً لاهتمامك - {schoolName}",
            sms_message="شكراً لاهتمامك بـ {schoolName}. سنتواصل معك قريباً بخصوص قبول {studentName}.",
        ),
        channels=ALL_CHANNELS,
        priority=NotificationPriority.MEDIUM,
    ),
    NotificationStage.LEAD_CONTACTED: _bundle(
        NotificationStage.LEAD_CONTACTED,
        en=LocalizedContent(
            title="Follow-up on Your Inquiry",
            message=(
                "Our admissions team has attempted to contact you regarding {studentName}'s "
                "application. Please check your email or phone for our message."
            ),
            email_subject="Follow-up: {studentName}'s Admission Inquiry",
            sms_message=(
                "We tried to reach you about {studentName}'s admission. "
                "Please call us at {schoolPhone}."
            ),
        ),
        ar=LocalizedContent(
            title="متابعة استفسارك",
            message=(
                "حاول فريق القبول التواصل معك بخصوص طلب {studentName}. "
                "يرجى التحقق من بريدك الإلكتروني أو هاتفك."
            ),
            email_subject="متابعة: استفسار قبول {studentName}",
            sms_message="حاولنا التواصل معك بخصوص قبول {studentName}. يرجى الاتصال بنا على {schoolPhone}.",
        ),
        channels=ALL_CHANNELS,
        priority=NotificationPriority.MEDIUM,
    ),
    NotificationStage.APPLICATION_SUBMITTED: _bundle(
        NotificationStage.APPLICATION_SUBMITTED,
        en=LocalizedContent(
            title="Application Received Successfully",
            message=(
                "We have successfully received the application for {studentName} "
                "(Application ID: {applicationId}). Our team will review it and contact "
                "you with next steps."
            ),
            email_subject="Application Received - {studentName} ({applicationId})",
            sms_message=(
                "Application {applicationId} for {studentName} received successfully. "
                "We will contact you soon."
            ),
        ),
        ar=LocalizedContent(
            title="تم استلام الطلب بنجاح",
            message=(
                "لقد استلمنا طلب {studentName} بنجاح (رقم الطلب: {applicationId}). "
                "سيقوم فريقنا بمراجعته والتواصل معك بالخطوات التالية."
            ),
            email_subject="تم استلام الطلب - {studentName} ({applicationId})",
            sms_message="تم استلام الطلب {applicationId} لـ {studentName} بنجاح. سنتواصل معك قريباً.",
        ),
        channels=ALL_CHANNELS,
        priority=NotificationPriority.HIGH,
    ),
    NotificationStage.DOCUMENTS_PENDING: _bundle(
        NotificationStage.DOCUMENTS_PENDING,
        en=LocalizedContent(
            title="Documents Required",
            message=(
                "To proceed with {studentName}'s application ({applicationId}), please upload "
                "the following documents: {missingDocuments}. You can upload them through "
                "your parent portal."
            ),
            email_subject="Action Required: Documents Needed - {applicationId}",
            sms_message=(
                "Documents needed for {studentName}'s application. "
                "Please check your email or parent portal."
            ),
        ),
        ar=LocalizedContent(
            title="مستندات مطلوبة",
            message=(
                "لمتابعة طلب {studentName} ({applicationId})، يرجى تحميل المستندات التالية: "
                "{missingDocuments}. يمكنك تحميلها عبر بوابة أولياء الأمور."
            ),
            email_subject="إجراء مطلوب: مستندات مطلوبة - {applicationId}",
            sms_message="مستندات مطلوبة لطلب {studentName}. يرجى التحقق من بريدك الإلكتروني أو بوابة أولياء الأمور.",
        ),
        channels=ALL_CHANNELS,
        priority=NotificationPriority.HIGH,
    ),
    NotificationStage.DOCUMENTS_COMPLETE: _bundle(
        NotificationStage.DOCUMENTS_COMPLETE,
        en=LocalizedContent(
            title="All Documents Received",
            message=(
                "Thank you! We have received all required documents for {studentName}'s "
                "application ({applicationId}). Your application is now under review."
            ),
            email_subject="Documents Complete - {studentName} ({applicationId})",
            sms_message="All documents received for {studentName}. Application now under review.",
        ),
        ar=LocalizedContent(
            title="تم استلام جميع المستندات",
            message=(
                "شكراً! لقد استلمنا جميع المستندات المطلوبة لطلب {studentName} "
                "({applicationId}). طلبك الآن قيد المراجعة."
            ),
            email_subject="اكتملت المستندات - {studentName} ({applicationId})",
            sms_message="تم استلام جميع المستندات لـ {studentName}. الطلب قيد المراجعة.",
        ),
        channels=IN_APP_AND_EMAIL,
        priority=NotificationPriority.MEDIUM,
    ),
    NotificationStage.TEST_SCHEDULED: _bundle(
        NotificationStage.TEST_SCHEDULED,
        en=LocalizedContent(
            title="Placement Test Scheduled",
            message=(
                "{studentName}'s {testType} test has been scheduled for {testDate} at "
                "{testTime}. Location: {testLocation}. Please arrive 15 minutes early."
            ),
            email_subject="Test Scheduled - {studentName} ({applicationId})",
            sms_message=(
                "{studentName}'s test: {testDate} at {testTime}, {testLocation}. "
                "Arrive 15 min early."
            ),
        ),
        ar=LocalizedContent(
            title="تم جدولة اختبار تحديد المستوى",
            message=(
                "تم جدولة اختبار {testType} لـ {studentName} في {testDate} الساعة {testTime}. "
                "الموقع: {testLocation}. يرجى الحضور قبل 15 دقيقة."
            ),
            email_subject="تم جدولة الاختبار - {studentName} ({applicationId})",
            sms_message="اختبار {studentName}: {testDate} الساعة {testTime}، {testLocation}. احضر قبل 15 دقيقة.",
        ),
        channels=ALL_CHANNELS,
        priority=NotificationPriority.HIGH,
    ),
    NotificationStage.TEST_COMPLETED: _bundle(
        NotificationStage.TEST_COMPLETED,
        en=LocalizedContent(
            title="Test Completed",
            message=(
                "{studentName} has completed the {testType} test. Score: {testScore}/{maxScore}. "
                "The admissions team will review the results."
            ),
            email_subject="Test Results - {studentName} ({applicationId})",
            sms_message="{studentName} completed {testType}. Score: {testScore}/{maxScore}.",
        ),
        ar=LocalizedContent(
            title="تم إكمال الاختبار",
            message=(
                "أكمل {studentName} اختبار {testType}. النتيجة: {testScore}/{maxScore}. "
                "سيقوم فريق القبول بمراجعة النتائج."
            ),
            email_subject="نتائج الاختبار - {studentName} ({applicationId})",
            sms_message="أكمل {studentName} {testType}. النتيجة: {testScore}/{maxScore}.",
        ),
        channels=IN_APP_AND_EMAIL,
        priority=NotificationPriority.MEDIUM,
    ),
    NotificationStage.INTERVIEW_SCHEDULED: _bundle(
        NotificationStage.INTERVIEW_SCHEDULED,
        en=LocalizedContent(
            title="Interview Scheduled",
            message=(
                "An interview has been scheduled for {studentName} on {interviewDate} at "
                "{interviewTime}. Interviewer: {interviewer}. Location: {interviewLocation}."
            ),
            email_subject="Interview Scheduled - {studentName} ({applicationId})",
            sms_message=(
                "Interview for {studentName}: {interviewDate} at {interviewTime}, "
                "{interviewLocation}."
            ),
        ),
        ar=LocalizedContent(
            title="تم جدولة المقابلة",
            message=(
                "تم جدولة مقابلة لـ {studentName} في {interviewDate} الساعة {interviewTime}. "
                "المقابل: {interviewer}. الموقع: {interviewLocation}."
            ),
            email_subject="تم جدولة المقابلة - {studentName} ({applicationId})",
            sms_message="مقابلة {studentName}: {interviewDate} الساعة {interviewTime}، {interviewLocation}.",
        ),
        channels=ALL_CHANNELS,
        priority=NotificationPriority.HIGH,
    ),
    NotificationStage.INTERVIEW_COMPLETED: _bundle(
        NotificationStage.INTERVIEW_COMPLETED,
        en=LocalizedContent(
            title="Interview Completed",
            message=(
                "Thank you for attending the interview for {studentName}. The admissions "
                "committee will review all materials and notify you of the decision soon."
            ),
            email_subject="Interview Complete - {studentName} ({applicationId})",
            sms_message="Interview completed for {studentName}. Decision will be communicated soon.",
        ),
        ar=LocalizedContent(
            title="تم إكمال المقابلة",
            message=(
                "شكراً لحضور مقابلة {studentName}. ستقوم لجنة القبول بمراجعة جميع المواد "
                "وإخطارك بالقرار قريباً."
            ),
            email_subject="اكتملت المقابلة - {studentName} ({applicationId})",
            sms_message="اكتملت مقابلة {studentName}. سيتم إبلاغك بالقرار قريباً.",
        ),
        channels=IN_APP_AND_EMAIL,
        priority=NotificationPriority.MEDIUM,
    ),
    NotificationStage.UNDER_REVIEW: _bundle(
        NotificationStage.UNDER_REVIEW,
        en=LocalizedContent(
            title="Application Under Review",
            message=(
                "{studentName}'s application ({applicationId}) is now under review by our "
                "admissions committee. We will notify you of the decision within 5-7 "
                "business days."
            ),
            email_subject="Application Under Review - {studentName} ({applicationId})",
            sms_message="{studentName}'s application under review. Decision in 5-7 business days.",
        ),
        ar=LocalizedContent(
            title="الطلب قيد المراجعة",
            message=(
                "طلب {studentName} ({applicationId}) الآن قيد المراجعة من قبل لجنة القبول. "
                "سنخطرك بالقرار خلال 5-7 أيام عمل."
            ),
            email_subject="الطلب قيد المراجعة - {studentName} ({applicationId})",
            sms_message="طلب {studentName} قيد المراجعة. القرار خلال 5-7 أيام عمل.",
        ),
        channels=IN_APP_AND_EMAIL,
        priority=NotificationPriority.MEDIUM,
    ),
    NotificationStage.DECISION_ACCEPTED: _bundle(
        NotificationStage.DECISION_ACCEPTED,
        en=LocalizedContent(
            title="🎉 Congratulations! Application Accepted",
            message=(
                "Congratulations! We are pleased to inform you that {studentName} has been "
                "accepted for {grade} for the {academicYear} academic year. Please complete "
                "the enrollment process by {enrollmentDeadline}."
            ),
            email_subject="🎉 Acceptance Letter - {studentName} ({applicationId})",
            sms_message=(
                "Congratulations! {studentName} accepted for {grade}. "
                "Complete enrollment by {enrollmentDeadline}."
            ),
        ),
        ar=LocalizedContent(
            title="🎉 مبروك! تم قبول الطلب",
            message=(
                "مبروك! يسعدنا إبلاغك بأنه تم قبول {studentName} في {grade} للعام الدراسي "
                "{academicYear}. يرجى إكمال عملية التسجيل قبل {enrollmentDeadline}."
            ),
            email_subject="🎉 خطاب القبول - {studentName} ({applicationId})",
            sms_message="مبروك! تم قبول {studentName} في {grade}. أكمل التسجيل قبل {enrollmentDeadline}.",
        ),
        channels=ALL_CHANNELS,
        priority=NotificationPriority.HIGH,
    ),
    NotificationStage.DECISION_WAITLISTED: _bundle(
        NotificationStage.DECISION_WAITLISTED,
        en=LocalizedContent(
            title="Application Waitlisted",
            message=(
                "{studentName}'s application for {grade} has been placed on our waitlist. "
                "We will notify you if a spot becomes available. "
                "Your position: {waitlistPosition}."
            ),
            email_subject="Waitlist Status - {studentName} ({applicationId})",
            sms_message=(
                "{studentName} waitlisted for {grade}. Position: {waitlistPosition}. "
                "We'll notify if spot opens."
            ),
        ),
        ar=LocalizedContent(
            title="الطلب في قائمة الانتظار",
            message=(
                "تم وضع طلب {studentName} لـ {grade} في قائمة الانتظار. سنخطرك إذا أصبح هناك "
                "مكان متاح. موقعك: {waitlistPosition}."
            ),
            email_subject="حالة قائمة الانتظار - {studentName} ({applicationId})",
            sms_message="{studentName} في قائمة الانتظار لـ {grade}. الموقع: {waitlistPosition}. سنخطرك إذا توفر مكان.",
        ),
        channels=ALL_CHANNELS,
        priority=NotificationPriority.HIGH,
    ),
    NotificationStage.DECISION_REJECTED: _bundle(
        NotificationStage.DECISION_REJECTED,
        en=LocalizedContent(
            title="Application Decision",
            message=(
                "Thank you for your interest in our school. After careful review, we regret "
                "to inform you that we are unable to offer admission to {studentName} for "
                "{grade} at this time. {reason}"
            ),
            email_subject="Application Decision - {studentName} ({applicationId})",
            sms_message=(
                "Application decision for {studentName} has been made. "
                "Please check your email for details."
            ),
        ),
        ar=LocalizedContent(
            title="قرار الطلب",
            message=(
                "شكراً لاهتمامك بمدرستنا. بعد المراجعة الدقيقة، نأسف لإبلاغك بأننا غير قادرين "
                "على قبول {studentName} في {grade} في الوقت الحالي. {reason}"
            ),
            email_subject="قرار الطلب - {studentName} ({applicationId})",
            sms_message="تم اتخاذ قرار بشأن طلب {studentName}. يرجى التحقق من بريدك الإلكتروني للتفاصيل.",
        ),
        channels=IN_APP_AND_EMAIL,
        priority=NotificationPriority.HIGH,
    ),
    NotificationStage.ENROLLMENT_COMPLETE: _bundle(
        NotificationStage.ENROLLMENT_COMPLETE,
        en=LocalizedContent(
            title="🎓 Enrollment Complete - Welcome!",
            message=(
                "Welcome to our school family! {studentName} is now enrolled in {grade}, "
                "Section {section} for the {academicYear} academic year. "
                "School starts on {startDate}."
            ),
            email_subject="🎓 Welcome to {schoolName} - {studentName}",
            sms_message=(
                "Welcome! {studentName} enrolled in {grade}, Section {section}. "
                "School starts {startDate}."
            ),
        ),
        ar=LocalizedContent(
            title="🎓 اكتمل التسجيل - مرحباً بك!",
            message=(
                "مرحباً بك في عائلة مدرستنا! {studentName} الآن مسجل في {grade}، القسم {section} "
                "للعام الدراسي {academicYear}. تبدأ المدرسة في {startDate}."
            ),
            email_subject="🎓 مرحباً بك في {schoolName} - {studentName}",
            sms_message="مرحباً! {studentName} مسجل في {grade}، القسم {section}. تبدأ المدرسة {startDate}.",
        ),
        channels=ALL_CHANNELS,
        priority=NotificationPriority.HIGH,
    ),
})


class TemplateRegistry:
    """Resolves lifecycle stages to template bundles.

    The default registry covers every NotificationStage. A registry
    built over a custom mapping may cover fewer stages; resolving a
    missing one raises UnknownStageError.
    """

    def __init__(
        self,
        bundles: Mapping[NotificationStage, TemplateBundle] | None = None,
    ) -> None:
        """Initialize the registry.

        Args:
            bundles: Stage to bundle mapping, defaults to ADMISSIONS_TEMPLATES.

        Raises:
            TemplateConfigurationError: If a bundle is malformed or the
                default registry misses a stage.
        """
        use_defaults = bundles is None
        self._bundles: Mapping[NotificationStage, TemplateBundle] = MappingProxyType(
            dict(ADMISSIONS_TEMPLATES if use_defaults else bundles)
        )

        for stage, bundle in self._bundles.items():
            self._validate(stage, bundle)

        if use_defaults:
            missing = [s.value for s in NotificationStage if s not in self._bundles]
            if missing:
                raise TemplateConfigurationError(
                    f"Stages without a template bundle: {', '.join(missing)}"
                )

    @staticmethod
    def _validate(stage: NotificationStage, bundle: TemplateBundle) -> None:
        if bundle.stage != stage:
            raise TemplateConfigurationError(
                f"Bundle for {stage.value} is labelled {bundle.stage.value}"
            )
        if not bundle.channels:
            raise TemplateConfigurationError(f"Bundle for {stage.value} has no channels")
        if any(not isinstance(channel, ChannelType) for channel in bundle.channels):
            raise TemplateConfigurationError(
                f"Bundle for {stage.value} uses an unknown channel: {bundle.channels!r}"
            )
        if len(set(bundle.channels)) != len(bundle.channels):
            raise TemplateConfigurationError(f"Bundle for {stage.value} repeats a channel")
        missing_locales = [loc.value for loc in Locale if loc not in bundle.content]
        if missing_locales:
            raise TemplateConfigurationError(
                f"Bundle for {stage.value} has no content for: {', '.join(missing_locales)}"
            )

    @property
    def stages(self) -> list[NotificationStage]:
        """Stages this registry can resolve."""
        return list(self._bundles)

    def resolve(self, stage: NotificationStage | str) -> TemplateBundle:
        """Get the bundle for a stage.

        Args:
            stage: Stage enum member or its string value.

        Returns:
            The stage's template bundle.

        Raises:
            UnknownStageError: If the stage has no registered bundle.
        """
        try:
            key = NotificationStage(stage)
        except ValueError:
            raise UnknownStageError(stage) from None

        bundle = self._bundles.get(key)
        if bundle is None:
            raise UnknownStageError(key)
        return bundle


@lru_cache(maxsize=1)
def get_template_registry() -> TemplateRegistry:
    """Get the shared default template registry.

    Returns:
        TemplateRegistry over ADMISSIONS_TEMPLATES.
    """
    registry = TemplateRegistry()
    logger.debug("Template registry loaded with %d stages", len(registry.stages))
    return registry
