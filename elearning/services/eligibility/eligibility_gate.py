"""
Eligibility Gate für DSP E-Learning Platform

Entscheidet rein lesend, ob ein Lernender einen Testversuch starten (oder
fortsetzen) darf. Die Regeln werden in fester Reihenfolge geprüft, die erste
verletzte Regel bestimmt den Ablehnungsgrund:

1. TestInactive
2. NotEnrolled
3. PrerequisitesIncomplete
4. AlreadyCertified
5. AlreadyPassed
6. AttemptLimitReached

Die Prüfung wird bei jedem Start erneut ausgeführt, auch beim Fortsetzen
eines offenen Versuchs.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from django.conf import settings

from ...certificates.models import Certificate
from ...final_exam.models import CourseTest, TestAttempt
from ..enrollment import EnrollmentService
from ..exceptions import AttemptDeniedException, DenialReason, NotFoundException
from ..scoring import is_passing

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EligibilityDecision:
    """Ergebnis der Zulassungsprüfung: Allow oder Deny(reason)."""

    allowed: bool
    reason: Optional[DenialReason] = None
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def allow(cls) -> "EligibilityDecision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: DenialReason, message: Optional[str] = None, **details) -> "EligibilityDecision":
        return cls(
            allowed=False,
            reason=reason,
            message=message or str(reason.label),
            details=details,
        )

    def raise_if_denied(self) -> None:
        if not self.allowed:
            raise AttemptDeniedException(self.reason, self.message, self.details)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allowed": self.allowed,
            "reason": self.reason.value if self.reason else None,
            "message": self.message,
            "details": self.details,
        }


class EligibilityGate:
    """
    Zulassungsprüfung für Testversuche.

    Hat keine Seiteneffekte; alle Daten werden bei jedem Aufruf frisch gelesen.
    """

    def __init__(self, enrollment_service: Optional[EnrollmentService] = None):
        self.enrollment_service = enrollment_service or EnrollmentService()
        self.logger = logger

    def get_test(self, test_id: int) -> CourseTest:
        test = CourseTest.objects.select_related("course").filter(pk=test_id).first()
        if test is None:
            raise NotFoundException("Test not found")
        return test

    def can_start(self, learner_id: int, test_id: int) -> EligibilityDecision:
        """
        Prüft, ob der Lernende einen Versuch für den Test starten darf.

        Args:
            learner_id: ID des Lernenden
            test_id: ID des Tests

        Returns:
            EligibilityDecision (allowed oder mit Ablehnungsgrund)
        """
        return self.evaluate(learner_id, self.get_test(test_id))

    def evaluate(self, learner_id: int, test: CourseTest) -> EligibilityDecision:
        if not test.is_active:
            return EligibilityDecision.deny(DenialReason.TEST_INACTIVE)

        enrollment = self.enrollment_service.get_enrollment(learner_id, test.course_id)
        if enrollment is None:
            return EligibilityDecision.deny(DenialReason.NOT_ENROLLED)

        required = settings.ASSESSMENT_REQUIRED_PROGRESS
        if enrollment.progress_percent < required:
            return EligibilityDecision.deny(
                DenialReason.PREREQUISITES_INCOMPLETE,
                progress=float(enrollment.progress_percent),
                required=required,
            )

        decision = self._check_prior_results(learner_id, test)
        if decision is not None:
            return decision

        if test.max_attempts:
            used = TestAttempt.objects.filter(
                learner_id=learner_id,
                test=test,
                status__in=[TestAttempt.Status.COMPLETED, TestAttempt.Status.ABANDONED],
            ).count()
            if used >= test.max_attempts:
                return EligibilityDecision.deny(
                    DenialReason.ATTEMPT_LIMIT_REACHED,
                    f"You have reached the maximum number of attempts ({test.max_attempts})",
                    max_attempts=test.max_attempts,
                    attempts_used=used,
                )

        return EligibilityDecision.allow()

    def can_view_questions(self, learner_id: int, test: CourseTest) -> EligibilityDecision:
        """
        Prüft, ob dem Lernenden die Fragen eines Tests angezeigt werden dürfen.

        Enthält nur die Regeln, die einen Neustart endgültig ausschließen
        (inaktiver Test, bereits zertifiziert, bereits bestanden).
        """
        if not test.is_active:
            return EligibilityDecision.deny(DenialReason.TEST_INACTIVE)
        return self._check_prior_results(learner_id, test) or EligibilityDecision.allow()

    def _check_prior_results(self, learner_id: int, test: CourseTest) -> Optional[EligibilityDecision]:
        has_certificate = (
            Certificate.objects.currently_valid()
            .filter(learner_id=learner_id, course_id=test.course_id)
            .exists()
        )
        if has_certificate:
            return EligibilityDecision.deny(DenialReason.ALREADY_CERTIFIED)

        completed = TestAttempt.objects.filter(
            learner_id=learner_id, test=test, status=TestAttempt.Status.COMPLETED
        ).values_list("earned_points", "total_points")
        for earned, total in completed:
            if is_passing(earned, total, test.passing_score):
                return EligibilityDecision.deny(DenialReason.ALREADY_PASSED)
        return None

