"""
E-Learning Course & Enrollment Models

This module defines the course catalogue entries and learner enrollments the
test-taking engine reads from. Course content itself (chapters, media) is
authored elsewhere; only the fields the certification workflow depends on are
modelled here.

Models:
- Course: A course learners enroll in and get certified for
- Enrollment: A learner's enrollment including course progress

Author: DSP Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.utils.translation import gettext_lazy as _


class Course(models.Model):
    """
    A course that owns graded tests and for which certificates are issued.

    Attributes:
        title: Unique course title, snapshotted into certificates
        category: Free-form category label
        difficulty: Difficulty label shown in listings
    """

    title = models.CharField(
        max_length=255,
        unique=True,
        verbose_name=_("Course Title"),
        help_text=_("The unique title of the course"),
    )
    category = models.CharField(max_length=100, blank=True, verbose_name=_("Category"))
    difficulty = models.CharField(
        max_length=50, blank=True, verbose_name=_("Difficulty")
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.title

    class Meta:
        verbose_name = _("Course")
        verbose_name_plural = _("Courses")
        ordering = ["title"]
        db_table = "elearning_course"


class Enrollment(models.Model):
    """
    A learner's enrollment in a course.

    ``progress`` is maintained by the chapter-tracking side of the platform; the
    certification engine only reads it and flips the enrollment to completed once
    the course test has been passed.
    """

    class Status(models.TextChoices):
        ACTIVE = "active", _("Aktiv")
        COMPLETED = "completed", _("Abgeschlossen")
        DROPPED = "dropped", _("Abgebrochen")

    learner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="enrollments",
        verbose_name=_("Learner"),
    )
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="enrollments",
        verbose_name=_("Course"),
    )
    status = models.CharField(
        max_length=15, choices=Status.choices, default=Status.ACTIVE
    )
    progress = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        default=0,
        validators=[MinValueValidator(0), MaxValueValidator(100)],
        verbose_name=_("Progress"),
        help_text=_("Course completion in percent (0-100)."),
    )
    test_passed = models.BooleanField(default=False, verbose_name=_("Test Passed"))
    enrolled_at = models.DateTimeField(auto_now_add=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    def __str__(self) -> str:
        return f"{self.learner} in {self.course} ({self.progress}%)"

    class Meta:
        verbose_name = _("Enrollment")
        verbose_name_plural = _("Enrollments")
        ordering = ["-enrolled_at"]
        db_table = "elearning_enrollment"
        constraints = [
            models.UniqueConstraint(
                fields=["learner", "course"], name="uniq_enrollment_learner_course"
            ),
        ]
