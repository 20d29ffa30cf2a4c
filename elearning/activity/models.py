"""
E-Learning Activity Log Model

Append-only history of learner activities (test attempts, passes, certificates).
Entries are advisory: business decisions never read from this table.

Author: DSP Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class ActivityLog(models.Model):
    """A single immutable activity entry of a learner."""

    class ActivityType(models.TextChoices):
        ENROLLMENT = "enrollment", _("Enrollment")
        CHAPTER_COMPLETED = "chapter_completed", _("Chapter completed")
        COURSE_COMPLETED = "course_completed", _("Course completed")
        TEST_ATTEMPTED = "test_attempted", _("Test attempted")
        TEST_PASSED = "test_passed", _("Test passed")
        CERTIFICATE_EARNED = "certificate_earned", _("Certificate earned")

    learner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="activities",
        verbose_name=_("Learner"),
    )
    activity_type = models.CharField(max_length=30, choices=ActivityType.choices)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)
    course = models.ForeignKey(
        "elearning.Course",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    test = models.ForeignKey(
        "elearning.CourseTest",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    points_earned = models.IntegerField(default=0)
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)

    class Meta:
        verbose_name = _("Activity Log")
        verbose_name_plural = _("Activity Logs")
        ordering = ["-created_at", "-id"]
        db_table = "elearning_activity_log"
        indexes = [
            models.Index(fields=["learner", "created_at"], name="activity_learner_created"),
            models.Index(fields=["activity_type"], name="activity_type_idx"),
        ]

    def __str__(self) -> str:
        return f"{self.learner} - {self.activity_type}: {self.title}"
