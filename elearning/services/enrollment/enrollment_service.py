"""
Enrollment Service für DSP E-Learning Platform

Schmale Schnittstelle zum Einschreibungs- und Fortschrittssystem. Das
Prüfungssystem liest hierüber nur den Kursfortschritt und markiert nach
bestandenem Test den Kurs als abgeschlossen.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from django.utils import timezone

from ...courses.models import Enrollment

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EnrollmentSnapshot:
    """Read-only view of an enrollment as seen by the certification engine."""

    enrollment_id: int
    progress_percent: Decimal
    status: str
    test_passed: bool


class EnrollmentService:
    """
    Service für Einschreibungs-Operationen.

    Kapselt den Zugriff auf ``Enrollment``, damit Gate und Zustandsautomat
    nicht direkt vom Fortschritts-Tracking abhängen.
    """

    def __init__(self):
        self.logger = logger

    def get_enrollment(self, learner_id: int, course_id: int) -> Optional[EnrollmentSnapshot]:
        """
        Holt die Einschreibung eines Lernenden in einem Kurs.

        Args:
            learner_id: ID des Lernenden
            course_id: ID des Kurses

        Returns:
            EnrollmentSnapshot oder None, falls nicht eingeschrieben
        """
        enrollment = Enrollment.objects.filter(
            learner_id=learner_id, course_id=course_id
        ).first()
        if enrollment is None:
            return None
        return EnrollmentSnapshot(
            enrollment_id=enrollment.pk,
            progress_percent=Decimal(enrollment.progress),
            status=enrollment.status,
            test_passed=enrollment.test_passed,
        )

    def lock_enrollment(self, learner_id: int, course_id: int) -> Optional[Enrollment]:
        """
        Sperrt die Einschreibungszeile bis zum Ende der laufenden Transaktion.

        Serialisiert konkurrierende Starts desselben Lernenden im selben Kurs.
        Muss innerhalb von ``transaction.atomic()`` aufgerufen werden.
        """
        return (
            Enrollment.objects.select_for_update()
            .filter(learner_id=learner_id, course_id=course_id)
            .first()
        )

    def mark_course_completed(self, learner_id: int, course_id: int) -> bool:
        """
        Markiert den Kurs nach bestandenem Test als abgeschlossen.

        Returns:
            True, wenn eine Einschreibung aktualisiert wurde
        """
        updated = Enrollment.objects.filter(
            learner_id=learner_id, course_id=course_id
        ).update(
            test_passed=True,
            status=Enrollment.Status.COMPLETED,
            completed_at=timezone.now(),
        )
        if updated:
            self.logger.info(
                f"Kurs {course_id} für Lernenden {learner_id} als abgeschlossen markiert"
            )
        else:
            self.logger.warning(
                f"Keine Einschreibung für Lernenden {learner_id} in Kurs {course_id} gefunden"
            )
        return bool(updated)
