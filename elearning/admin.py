"""
E-Learning Application Django Admin Configuration

This module provides the Django admin interface configuration for the course
test and certification models.

The admin interface is organized into logical sections:
- Course Management: Courses and enrollments
- Examination System: Tests, questions, options, attempts and answers
- Certification: Issued certificates with revoke/renew actions
- Activity: Read-only learner activity history

Attempts, answers and activity entries are created exclusively through the
API so the attempt lifecycle and scoring stay consistent.

Author: DSP Development Team
Version: 1.0.0
"""

from typing import Optional
from django.contrib import admin, messages
from django.utils.translation import gettext_lazy as _
from django.db.models import Count, QuerySet
from django.http import HttpRequest

# Import all models from the central models registry
from .models import (
    Course,
    Enrollment,
    CourseTest,
    TestQuestion,
    TestQuestionOption,
    TestAttempt,
    TestAnswer,
    Certificate,
    ActivityLog,
)
from .services.attempts import AttemptService
from .services.certificates import CertificateIssuer
from .services.exceptions import AssessmentException

# --- Course Management Administration ---


@admin.register(Course)
class CourseAdmin(admin.ModelAdmin):
    list_display = ("title", "category", "difficulty", "created_at")
    list_filter = ("category", "difficulty")
    search_fields = ("title",)


@admin.register(Enrollment)
class EnrollmentAdmin(admin.ModelAdmin):
    list_display = ("learner", "course", "progress", "status", "test_passed", "enrolled_at")
    list_filter = ("status", "test_passed", "course")
    search_fields = ("learner__username", "learner__email", "course__title")
    autocomplete_fields = ("learner", "course")

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        """Optimize queryset with related object selection."""
        return super().get_queryset(request).select_related("learner", "course")


# --- Examination System Administration ---


class TestQuestionInline(admin.TabularInline):
    """Inline admin for question management within a test."""

    model = TestQuestion
    extra = 1
    fields = ("question_text", "question_type", "points", "order", "is_active")
    show_change_link = True


@admin.register(CourseTest)
class CourseTestAdmin(admin.ModelAdmin):
    """
    Administration interface for course tests.

    Passing score, time limit and attempt limit are configured per test;
    questions are edited inline.
    """

    list_display = (
        "title",
        "course",
        "passing_score",
        "time_limit_minutes",
        "max_attempts",
        "question_count",
        "is_active",
    )
    list_filter = ("is_active", "course")
    search_fields = ("title", "course__title")
    inlines = [TestQuestionInline]

    fieldsets = (
        (_("Basic Information"), {"fields": ("course", "title", "description", "instructions")}),
        (
            _("Configuration"),
            {"fields": ("passing_score", "time_limit_minutes", "max_attempts", "is_active", "order")},
        ),
    )

    @admin.display(description=_("Questions"))
    def question_count(self, obj: CourseTest) -> int:
        return obj.question_total

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        """Optimize queryset with question counts."""
        return (
            super()
            .get_queryset(request)
            .select_related("course")
            .annotate(question_total=Count("questions"))
        )


class TestQuestionOptionInline(admin.TabularInline):
    model = TestQuestionOption
    extra = 2
    fields = ("option_text", "is_correct", "order")


@admin.register(TestQuestion)
class TestQuestionAdmin(admin.ModelAdmin):
    list_display = ("__str__", "test", "question_type", "points", "order", "is_active")
    list_filter = ("question_type", "is_active", "test")
    search_fields = ("question_text", "test__title")
    inlines = [TestQuestionOptionInline]


class TestAnswerInline(admin.TabularInline):
    """Read-only answers of an attempt."""

    model = TestAnswer
    extra = 0
    fields = ("question", "selected_option", "answer_text", "is_correct", "points_earned")
    readonly_fields = fields
    can_delete = False

    def has_add_permission(self, request: HttpRequest, obj: Optional[TestAttempt] = None) -> bool:
        return False


@admin.register(TestAttempt)
class TestAttemptAdmin(admin.ModelAdmin):
    """
    Administration interface for test attempts.

    Attempts are read-only; open attempts can be abandoned via admin action.
    """

    list_display = (
        "learner",
        "test",
        "attempt_number",
        "status",
        "score",
        "started_at",
        "completed_at",
    )
    list_filter = ("status", "test")
    search_fields = ("learner__username", "learner__email", "test__title")
    readonly_fields = (
        "test",
        "learner",
        "attempt_number",
        "status",
        "started_at",
        "completed_at",
        "total_points",
        "earned_points",
        "score",
        "time_taken_minutes",
    )
    inlines = [TestAnswerInline]
    actions = ["abandon_attempts"]

    def has_add_permission(self, request: HttpRequest) -> bool:
        """
        Prevent manual creation of test attempts.

        Test attempts should only be created through the API to ensure
        proper workflow and data integrity.
        """
        return False

    @admin.action(description=_("Abandon selected open attempts"))
    def abandon_attempts(self, request: HttpRequest, queryset: QuerySet) -> None:
        service = AttemptService()
        abandoned = 0
        for attempt in queryset.filter(status=TestAttempt.Status.IN_PROGRESS):
            try:
                service.abandon_attempt(attempt.pk)
                abandoned += 1
            except AssessmentException as e:
                self.message_user(request, e.message, messages.WARNING)
        self.message_user(request, _("%d attempt(s) abandoned.") % abandoned, messages.SUCCESS)

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        """Optimize queryset with related object selection."""
        return super().get_queryset(request).select_related("learner", "test")


# --- Certification Administration ---


@admin.register(Certificate)
class CertificateAdmin(admin.ModelAdmin):
    list_display = (
        "certificate_number",
        "learner",
        "course",
        "issued_date",
        "expiry_date",
        "is_valid",
    )
    list_filter = ("is_valid", "course", "issued_date")
    search_fields = ("certificate_number", "verification_code", "learner__username", "course__title")
    readonly_fields = (
        "learner",
        "course",
        "test_attempt",
        "certificate_number",
        "verification_code",
        "issued_date",
        "is_valid",
        "metadata",
        "created_at",
        "updated_at",
    )
    actions = ["revoke_certificates", "renew_certificates"]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    @admin.action(description=_("Revoke selected certificates"))
    def revoke_certificates(self, request: HttpRequest, queryset: QuerySet) -> None:
        issuer = CertificateIssuer()
        for certificate in queryset:
            issuer.revoke(certificate.pk)
        self.message_user(request, _("%d certificate(s) revoked.") % queryset.count(), messages.SUCCESS)

    @admin.action(description=_("Renew selected certificates"))
    def renew_certificates(self, request: HttpRequest, queryset: QuerySet) -> None:
        issuer = CertificateIssuer()
        for certificate in queryset:
            issuer.renew(certificate.pk)
        self.message_user(request, _("%d certificate(s) renewed.") % queryset.count(), messages.SUCCESS)

    def get_queryset(self, request: HttpRequest) -> QuerySet:
        return super().get_queryset(request).select_related("learner", "course")


# --- Activity Administration ---


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ("learner", "activity_type", "title", "points_earned", "created_at")
    list_filter = ("activity_type", "created_at")
    search_fields = ("learner__username", "title")
    readonly_fields = [f.name for f in ActivityLog._meta.fields]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def has_change_permission(self, request: HttpRequest, obj: Optional[ActivityLog] = None) -> bool:
        return False
