"""
E-Learning Certificate Model

Certificates are issued per learner and course (not per test) once a course test
has been passed. Course, learner and score details are snapshotted into
``metadata`` at issuance so later course edits never alter an issued certificate.

Storage-level guarantees:
- at most one certificate per (learner, course)
- globally unique certificate number
- globally unique public verification code

Author: DSP Development Team
Version: 1.0.0
"""

from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from ..courses.models import Course
from ..final_exam.models import TestAttempt


class CertificateQuerySet(models.QuerySet):
    def currently_valid(self, now=None):
        """Nicht gesperrt und nicht abgelaufen."""
        now = now or timezone.now()
        return self.filter(is_valid=True).filter(
            models.Q(expiry_date__isnull=True) | models.Q(expiry_date__gt=now)
        )


class Certificate(models.Model):
    """
    A course certificate owned by the platform, readable by its learner.

    Attributes:
        learner: Certified learner
        course: Certified course
        test_attempt: Qualifying attempt (optional back-reference)
        certificate_number: Internal unique number
        verification_code: Short public token for third-party verification
        issued_date: Issue timestamp
        expiry_date: Optional expiry
        is_valid: False once revoked, True again after renewal
            (currently valid = is_valid and not past expiry_date)
        metadata: Snapshot of course name, learner name, score and passing score
    """

    learner = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="certificates",
        verbose_name=_("Learner"),
    )
    course = models.ForeignKey(
        Course,
        on_delete=models.CASCADE,
        related_name="certificates",
        verbose_name=_("Course"),
    )
    test_attempt = models.ForeignKey(
        TestAttempt,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="certificates",
        verbose_name=_("Qualifying Attempt"),
    )
    certificate_number = models.CharField(
        max_length=100,
        unique=True,
        verbose_name=_("Certificate Number"),
    )
    verification_code = models.CharField(
        max_length=50,
        unique=True,
        verbose_name=_("Verification Code"),
        help_text=_("Public token used to verify the certificate"),
    )
    issued_date = models.DateTimeField(default=timezone.now, verbose_name=_("Issued"))
    expiry_date = models.DateTimeField(null=True, blank=True, verbose_name=_("Expires"))
    is_valid = models.BooleanField(default=True, verbose_name=_("Valid"))
    metadata = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = CertificateQuerySet.as_manager()

    class Meta:
        verbose_name = _("Certificate")
        verbose_name_plural = _("Certificates")
        ordering = ["-issued_date"]
        db_table = "elearning_certificate"
        constraints = [
            models.UniqueConstraint(
                fields=["learner", "course"], name="uniq_certificate_learner_course"
            ),
        ]
        indexes = [
            models.Index(fields=["is_valid"], name="certificate_is_valid"),
        ]

    def __str__(self) -> str:
        return f"{self.certificate_number} ({self.course.title})"

    @property
    def is_expired(self) -> bool:
        return self.expiry_date is not None and self.expiry_date <= timezone.now()

    @property
    def is_currently_valid(self) -> bool:
        return self.is_valid and not self.is_expired

    def revoke(self) -> None:
        self.is_valid = False
        self.save(update_fields=["is_valid", "updated_at"])

    def renew(self, expiry_date=None) -> None:
        self.is_valid = True
        if self.is_expired:
            self.expiry_date = expiry_date
        self.save(update_fields=["is_valid", "expiry_date", "updated_at"])
