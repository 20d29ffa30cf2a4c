"""
Certificate Issuer für DSP E-Learning Platform

Stellt pro Lernendem und Kurs höchstens ein Zertifikat aus. Die Ausstellung
ist idempotent: existiert bereits ein Zertifikat, wird dieses unverändert
zurückgegeben, auch wenn es gesperrt ist. Konkurrierende Ausstellungen
werden über die Unique-Constraints der Datenbank aufgelöst; Kollisionen bei
Zertifikatsnummer oder Verifizierungscode führen zu einer begrenzten Anzahl
neuer Versuche.

Muss innerhalb der Transaktion des Testabschlusses aufgerufen werden, damit
ein fehlgeschlagener Abschluss kein Zertifikat hinterlässt.

Author: DSP Development Team
Version: 1.0.0
"""

import logging
import string
import time
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Dict, Optional

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from django.utils.crypto import get_random_string

from ...certificates.models import Certificate
from ...courses.models import Course
from ...final_exam.models import CourseTest, TestAttempt
from ..exceptions import (
    IssuanceExhaustedException,
    MissingCourseDataException,
    NotFoundException,
)
from ..scoring import whole_percent

logger = logging.getLogger(__name__)

VERIFICATION_CODE_ALPHABET = string.ascii_uppercase + string.digits


@dataclass(frozen=True)
class IssuanceResult:
    certificate: Certificate
    created: bool


class CertificateIssuer:
    """
    Service für die Ausstellung, Sperrung, Erneuerung und Verifizierung
    von Kurszertifikaten.
    """

    def __init__(self):
        self.logger = logger

    # ------------------------------------------------------------------
    # Identifikatoren
    # ------------------------------------------------------------------

    def generate_certificate_number(self, learner_id: int, course_id: int) -> str:
        timestamp = int(time.time() * 1000)
        suffix = get_random_string(4, VERIFICATION_CODE_ALPHABET)
        return f"CERT-{learner_id}-{course_id}-{timestamp}-{suffix}"

    def generate_verification_code(self) -> str:
        return get_random_string(
            settings.CERTIFICATE_VERIFICATION_CODE_LENGTH, VERIFICATION_CODE_ALPHABET
        )

    # ------------------------------------------------------------------
    # Ausstellung
    # ------------------------------------------------------------------

    def issue(self, learner, test: CourseTest, attempt: Optional[TestAttempt] = None) -> IssuanceResult:
        """
        Stellt das Kurszertifikat für einen bestandenen Test aus.

        Args:
            learner: Lernender (User)
            test: Bestandener Test; das Zertifikat gilt für dessen Kurs
            attempt: Qualifizierender Versuch (für Punktzahl im Snapshot)

        Returns:
            IssuanceResult mit dem Zertifikat und ob es neu erstellt wurde

        Raises:
            MissingCourseDataException: Kursdaten fehlen
            IssuanceExhaustedException: Keine eindeutigen Identifikatoren gefunden
        """
        course = self._resolve_course(test)
        metadata = self._build_metadata(learner, course, test, attempt)

        existing = self._find_existing(learner.pk, course.pk)
        if existing is not None:
            # Auch gesperrte oder abgelaufene Zertifikate bleiben unverändert;
            # wieder gültig nur über renew()
            self.logger.info(
                f"Zertifikat {existing.certificate_number} existiert bereits für "
                f"Lernenden {learner.pk} in Kurs {course.pk}"
            )
            return IssuanceResult(certificate=existing, created=False)

        max_retries = settings.CERTIFICATE_ISSUANCE_MAX_RETRIES
        for retry in range(1, max_retries + 1):
            issued_at = timezone.now()
            try:
                with transaction.atomic():
                    certificate = Certificate.objects.create(
                        learner=learner,
                        course=course,
                        test_attempt=attempt,
                        certificate_number=self.generate_certificate_number(learner.pk, course.pk),
                        verification_code=self.generate_verification_code(),
                        issued_date=issued_at,
                        expiry_date=self._expiry_from(issued_at),
                        metadata=metadata,
                    )
            except IntegrityError:
                # Paralleler Abschluss hat das Zertifikat bereits angelegt
                existing = self._find_existing(learner.pk, course.pk)
                if existing is not None:
                    self.logger.info(
                        f"Zertifikat für Lernenden {learner.pk} in Kurs {course.pk} "
                        f"wurde parallel ausgestellt"
                    )
                    return IssuanceResult(certificate=existing, created=False)
                self.logger.warning(
                    f"Kollision bei Zertifikatsnummer/Verifizierungscode "
                    f"(Versuch {retry}/{max_retries})"
                )
                continue

            self.logger.info(
                f"Zertifikat {certificate.certificate_number} ausgestellt für "
                f"Lernenden {learner.pk} in Kurs {course.pk}"
            )
            return IssuanceResult(certificate=certificate, created=True)

        self.logger.error(
            f"Zertifikatsausstellung für Lernenden {learner.pk} in Kurs {course.pk} "
            f"nach {max_retries} Versuchen abgebrochen"
        )
        raise IssuanceExhaustedException(
            "Could not generate a unique certificate identifier",
            details={"retries": max_retries},
        )

    def _find_existing(self, learner_id: int, course_id: int) -> Optional[Certificate]:
        return Certificate.objects.filter(learner_id=learner_id, course_id=course_id).first()

    def _resolve_course(self, test: CourseTest) -> Course:
        course = Course.objects.filter(pk=test.course_id).first()
        if course is None or not (course.title or "").strip():
            raise MissingCourseDataException(
                "Course information missing",
                details={"test_id": test.pk, "course_id": test.course_id},
            )
        return course

    def _build_metadata(self, learner, course: Course, test: CourseTest, attempt: Optional[TestAttempt]) -> Dict[str, Any]:
        score = None
        if attempt is not None and attempt.score is not None:
            score = whole_percent(attempt.score)
        return {
            "courseName": course.title,
            "studentName": learner.get_full_name() or learner.get_username(),
            "score": score,
            "passingScore": test.passing_score,
            "testTitle": test.title,
        }

    def _expiry_from(self, issued_at):
        validity_days = getattr(settings, "CERTIFICATE_VALIDITY_DAYS", None)
        if not validity_days:
            return None
        return issued_at + timedelta(days=validity_days)

    # ------------------------------------------------------------------
    # Verwaltung
    # ------------------------------------------------------------------

    def get_certificate(self, certificate_id: int) -> Certificate:
        certificate = (
            Certificate.objects.select_related("course", "learner")
            .filter(pk=certificate_id)
            .first()
        )
        if certificate is None:
            raise NotFoundException("Certificate not found")
        return certificate

    def revoke(self, certificate_id: int) -> Certificate:
        certificate = self.get_certificate(certificate_id)
        certificate.revoke()
        self.logger.info(f"Zertifikat {certificate.certificate_number} gesperrt")
        return certificate

    def renew(self, certificate_id: int) -> Certificate:
        certificate = self.get_certificate(certificate_id)
        certificate.renew(expiry_date=self._expiry_from(timezone.now()))
        self.logger.info(f"Zertifikat {certificate.certificate_number} erneuert")
        return certificate

    def verify(self, verification_code: str) -> Dict[str, Any]:
        """
        Öffentliche Verifizierung über den Verifizierungscode.

        Returns:
            Öffentliche Zertifikatsdaten inkl. Gültigkeit

        Raises:
            NotFoundException: Unbekannter Code
        """
        code = (verification_code or "").strip().upper()
        certificate = (
            Certificate.objects.select_related("course", "learner")
            .filter(verification_code=code)
            .first()
        )
        if certificate is None:
            raise NotFoundException("Certificate not found or invalid verification code")

        metadata = certificate.metadata or {}
        return {
            "certificateNumber": certificate.certificate_number,
            "learnerName": metadata.get("studentName")
            or certificate.learner.get_full_name()
            or certificate.learner.get_username(),
            "courseName": metadata.get("courseName") or certificate.course.title,
            "issuedDate": certificate.issued_date.isoformat(),
            "expiryDate": certificate.expiry_date.isoformat() if certificate.expiry_date else None,
            "isValid": certificate.is_currently_valid,
        }
