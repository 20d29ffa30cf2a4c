"""
Attempt Service für DSP E-Learning Platform

Zustandsautomat eines Testversuchs:

    in_progress --finalize--> completed
    in_progress --abandon---> abandoned

Beide Zielzustände sind endgültig. Der Service koordiniert Zulassungsprüfung,
Antwort-Zwischenspeicherung, Bewertung, Kursabschluss, Zertifikatsausstellung
und Aktivitätsprotokoll.

Author: DSP Development Team
Version: 1.0.0
"""

import datetime
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

from django.db import IntegrityError, transaction
from django.db.models import Max
from django.utils import timezone

from ...certificates.models import Certificate
from ...final_exam.models import (
    CourseTest,
    TestAnswer,
    TestAttempt,
    TestQuestion,
    TestQuestionOption,
)
from ..activity import ActivityRecorder
from ..certificates import CertificateIssuer
from ..eligibility import EligibilityGate
from ..enrollment import EnrollmentService
from ..exceptions import (
    InvalidStateException,
    NotFoundException,
    UnauthorizedAttemptException,
)
from ..scoring import ScoreResult, ScoringEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartResult:
    attempt: TestAttempt
    resumed: bool


@dataclass(frozen=True)
class FinalizeResult:
    attempt: TestAttempt
    score: ScoreResult
    certificate: Optional[Certificate] = None
    certificate_created: bool = False

    @property
    def passed(self) -> bool:
        return self.score.is_passed

    def to_dict(self) -> Dict[str, Any]:
        certificate = None
        if self.certificate is not None:
            certificate = {
                "id": self.certificate.pk,
                "certificate_number": self.certificate.certificate_number,
                "verification_code": self.certificate.verification_code,
                "issued_date": self.certificate.issued_date.isoformat(),
            }
        return {
            "attempt_id": self.attempt.pk,
            "attempt_number": self.attempt.attempt_number,
            "score": str(self.score.score_percent),
            "passed": self.passed,
            "passing_score": self.score.passing_score,
            "total_points": self.score.total_points,
            "earned_points": self.score.earned_points,
            "correct_answers": self.score.correct_answers,
            "incorrect_answers": self.score.incorrect_answers,
            "pending_manual_grading": self.score.pending_manual_grading,
            "time_taken_minutes": self.attempt.time_taken_minutes,
            "certificate_issued": self.certificate is not None,
            "certificate": certificate,
        }


def elapsed_minutes(started_at, completed_at) -> int:
    """Bearbeitungszeit in Minuten, kaufmännisch gerundet."""
    seconds = max(0, int((completed_at - started_at).total_seconds()))
    return (seconds + 30) // 60


class AttemptService:
    """
    Service für den Lebenszyklus von Testversuchen.

    Alle Kollaborateure sind injizierbar; ohne Angabe werden die
    Standard-Implementierungen verwendet.
    """

    def __init__(
        self,
        gate: Optional[EligibilityGate] = None,
        enrollment_service: Optional[EnrollmentService] = None,
        scoring_engine: Optional[ScoringEngine] = None,
        certificate_issuer: Optional[CertificateIssuer] = None,
        activity_recorder: Optional[ActivityRecorder] = None,
    ):
        self.enrollment_service = enrollment_service or EnrollmentService()
        self.gate = gate or EligibilityGate(self.enrollment_service)
        self.scoring_engine = scoring_engine or ScoringEngine()
        self.certificate_issuer = certificate_issuer or CertificateIssuer()
        self.activity_recorder = activity_recorder or ActivityRecorder()
        self.logger = logger

    # ------------------------------------------------------------------
    # Start / Resume
    # ------------------------------------------------------------------

    def start_attempt(self, learner, test_id: int) -> StartResult:
        """
        Startet einen neuen Versuch oder setzt den offenen Versuch fort.

        Raises:
            NotFoundException: Test existiert nicht
            AttemptDeniedException: Zulassungsprüfung verweigert den Start
        """
        test = self.gate.get_test(test_id)

        with transaction.atomic():
            # Serialisiert parallele Starts desselben Lernenden im Kurs
            self.enrollment_service.lock_enrollment(learner.pk, test.course_id)
            self.gate.evaluate(learner.pk, test).raise_if_denied()

            open_attempt = self._open_attempt(learner.pk, test.pk)
            if open_attempt is not None:
                self.logger.info(
                    f"Versuch #{open_attempt.attempt_number} für Test {test.pk} "
                    f"von Lernendem {learner.pk} fortgesetzt"
                )
                return StartResult(attempt=open_attempt, resumed=True)

            last_number = TestAttempt.objects.filter(
                learner_id=learner.pk, test_id=test.pk
            ).aggregate(last=Max("attempt_number"))["last"] or 0

            try:
                with transaction.atomic():
                    attempt = TestAttempt.objects.create(
                        test=test,
                        learner=learner,
                        attempt_number=last_number + 1,
                        status=TestAttempt.Status.IN_PROGRESS,
                        started_at=timezone.now(),
                    )
            except IntegrityError:
                # Paralleler Start hat gewonnen, dessen Versuch wird fortgesetzt
                open_attempt = self._open_attempt(learner.pk, test.pk)
                if open_attempt is None:
                    raise
                self.logger.info(
                    f"Paralleler Start für Test {test.pk} von Lernendem {learner.pk} "
                    f"aufgelöst, Versuch #{open_attempt.attempt_number} fortgesetzt"
                )
                return StartResult(attempt=open_attempt, resumed=True)

        self.logger.info(
            f"Versuch #{attempt.attempt_number} für Test {test.pk} von Lernendem {learner.pk} gestartet"
        )
        return StartResult(attempt=attempt, resumed=False)

    def _open_attempt(self, learner_id: int, test_id: int) -> Optional[TestAttempt]:
        return (
            TestAttempt.objects.select_related("test")
            .filter(learner_id=learner_id, test_id=test_id, status=TestAttempt.Status.IN_PROGRESS)
            .first()
        )

    # ------------------------------------------------------------------
    # Fragen
    # ------------------------------------------------------------------

    def get_questions_for_attempt(self, user, test_id: int) -> Tuple[CourseTest, List[TestQuestion]]:
        """
        Liefert Test und aktive Fragen. Lernende müssen die Zulassung zur
        Ansicht haben; Mitarbeitende sehen die Fragen immer.
        """
        test = self.gate.get_test(test_id)
        if not user.is_staff:
            self.gate.can_view_questions(user.pk, test).raise_if_denied()
        return test, list(test.active_questions())

    # ------------------------------------------------------------------
    # Antwort-Zwischenspeicherung
    # ------------------------------------------------------------------

    def submit_answer(
        self,
        learner,
        attempt_id: int,
        question_id: int,
        selected_option_id: Optional[int] = None,
        answer_text: Optional[str] = None,
    ) -> TestAnswer:
        """
        Speichert die aktuelle Auswahl eines Lernenden zu einer Frage.

        Die gespeicherte Korrektheit ist nur Anzeige-Status und wird bei der
        Abgabe neu berechnet.
        """
        attempt = self._get_attempt(attempt_id)
        if attempt.learner_id != learner.pk:
            raise UnauthorizedAttemptException()
        if attempt.status != TestAttempt.Status.IN_PROGRESS:
            raise InvalidStateException("Test attempt is not in progress", attempt.status)

        question = TestQuestion.objects.filter(
            pk=question_id, test_id=attempt.test_id, is_active=True
        ).first()
        if question is None:
            raise NotFoundException("Question not found for this test")

        option = None
        if selected_option_id is not None:
            option = TestQuestionOption.objects.filter(
                pk=selected_option_id, question=question
            ).first()

        answer, _created = TestAnswer.objects.update_or_create(
            attempt=attempt,
            question=question,
            defaults={
                "selected_option": option,
                "answer_text": option.option_text if option else (answer_text or "").strip(),
                "is_correct": False,
                "points_earned": 0,
            },
        )
        self.logger.debug(
            f"Antwort für Frage {question.pk} in Versuch {attempt.pk} zwischengespeichert"
        )
        return answer

    # ------------------------------------------------------------------
    # Abgabe
    # ------------------------------------------------------------------

    def finalize_attempt(self, learner, attempt_id: int, submitted_choices: Optional[Mapping[Any, Any]]) -> FinalizeResult:
        """
        Gibt einen Versuch ab und bewertet ihn.

        Antworten, Zustandswechsel, Kursabschluss und Zertifikat werden in
        einer Transaktion geschrieben. Das Aktivitätsprotokoll folgt danach.

        Args:
            learner: Abgebender Lernender
            attempt_id: ID des Versuchs
            submitted_choices: Mapping Frage-ID -> Options-ID (bzw. Text)

        Raises:
            NotFoundException: Versuch existiert nicht
            UnauthorizedAttemptException: Versuch gehört einem anderen Lernenden
            InvalidStateException: Versuch ist nicht mehr in Bearbeitung
            DataIntegrityException: Fragen oder Kursdaten inkonsistent
        """
        with transaction.atomic():
            attempt = (
                TestAttempt.objects.select_for_update(of=("self",))
                .select_related("test")
                .filter(pk=attempt_id)
                .first()
            )
            if attempt is None:
                raise NotFoundException("Test attempt not found")
            if attempt.learner_id != learner.pk:
                raise UnauthorizedAttemptException()
            if attempt.status != TestAttempt.Status.IN_PROGRESS:
                raise InvalidStateException("Test attempt is not in progress", attempt.status)

            test = attempt.test
            questions = self.scoring_engine.prepare(test.active_questions())
            result = self.scoring_engine.score(questions, submitted_choices, test.passing_score)

            for item in result.per_question:
                TestAnswer.objects.update_or_create(
                    attempt=attempt,
                    question_id=item.question_id,
                    defaults={
                        "selected_option_id": item.selected_option_id,
                        "answer_text": item.answer_text,
                        "is_correct": item.is_correct,
                        "points_earned": item.points_earned,
                    },
                )

            now = timezone.now()
            attempt.status = TestAttempt.Status.COMPLETED
            attempt.completed_at = now
            attempt.time_taken_minutes = elapsed_minutes(attempt.started_at, now)
            attempt.total_points = result.total_points
            attempt.earned_points = result.earned_points
            attempt.score = result.score_percent
            attempt.save(
                update_fields=[
                    "status",
                    "completed_at",
                    "time_taken_minutes",
                    "total_points",
                    "earned_points",
                    "score",
                ]
            )

            certificate = None
            certificate_created = False
            if result.is_passed:
                self.enrollment_service.mark_course_completed(learner.pk, test.course_id)
                issuance = self.certificate_issuer.issue(learner, test, attempt)
                certificate = issuance.certificate
                certificate_created = issuance.created

        self.logger.info(
            f"Versuch {attempt.pk} abgegeben: {result.score_percent}% "
            f"({'bestanden' if result.is_passed else 'nicht bestanden'})"
        )

        self.activity_recorder.record_test_result(
            learner, test, attempt, result.correct_answers, len(result.per_question)
        )
        if certificate_created:
            self.activity_recorder.record_certificate_earned(learner, certificate)

        return FinalizeResult(
            attempt=attempt,
            score=result,
            certificate=certificate,
            certificate_created=certificate_created,
        )

    # ------------------------------------------------------------------
    # Abbruch
    # ------------------------------------------------------------------

    def abandon_attempt(self, attempt_id: int) -> TestAttempt:
        """Administrativer Abbruch eines offenen Versuchs."""
        with transaction.atomic():
            attempt = (
                TestAttempt.objects.select_for_update()
                .filter(pk=attempt_id)
                .first()
            )
            if attempt is None:
                raise NotFoundException("Test attempt not found")
            if attempt.status != TestAttempt.Status.IN_PROGRESS:
                raise InvalidStateException("Test attempt is not in progress", attempt.status)
            self._mark_abandoned(attempt, timezone.now())
        self.logger.info(f"Versuch {attempt.pk} abgebrochen")
        return attempt

    def abandon_stale_attempts(self, grace_minutes: int, now=None, dry_run: bool = False) -> List[TestAttempt]:
        """
        Bricht offene Versuche ab, deren Zeitlimit plus Karenzzeit abgelaufen ist.

        Returns:
            Liste der (ggf. nur ermittelten) abgelaufenen Versuche
        """
        now = now or timezone.now()
        grace = datetime.timedelta(minutes=grace_minutes)
        candidates = TestAttempt.objects.select_related("test").filter(
            status=TestAttempt.Status.IN_PROGRESS,
            test__time_limit_minutes__isnull=False,
        )
        stale = [a for a in candidates if a.due_at + grace < now]
        if dry_run:
            return stale

        abandoned = []
        for attempt in stale:
            # nur Versuche, die noch in Bearbeitung sind
            updated = TestAttempt.objects.filter(
                pk=attempt.pk, status=TestAttempt.Status.IN_PROGRESS
            ).update(
                status=TestAttempt.Status.ABANDONED,
                completed_at=now,
                time_taken_minutes=elapsed_minutes(attempt.started_at, now),
            )
            if updated:
                abandoned.append(attempt)
        self.logger.info(f"{len(abandoned)} abgelaufene Versuche abgebrochen")
        return abandoned

    def _mark_abandoned(self, attempt: TestAttempt, now) -> None:
        attempt.status = TestAttempt.Status.ABANDONED
        attempt.completed_at = now
        attempt.time_taken_minutes = elapsed_minutes(attempt.started_at, now)
        attempt.save(update_fields=["status", "completed_at", "time_taken_minutes"])

    # ------------------------------------------------------------------
    # Lesen
    # ------------------------------------------------------------------

    def _get_attempt(self, attempt_id: int) -> TestAttempt:
        attempt = (
            TestAttempt.objects.select_related("test", "test__course")
            .filter(pk=attempt_id)
            .first()
        )
        if attempt is None:
            raise NotFoundException("Test attempt not found")
        return attempt

    def get_attempt(self, user, attempt_id: int) -> TestAttempt:
        """Versuch für Besitzer oder Mitarbeitende."""
        attempt = self._get_attempt(attempt_id)
        if attempt.learner_id != user.pk and not user.is_staff:
            raise UnauthorizedAttemptException()
        return attempt

    def test_history(self, learner, test_id: int) -> Tuple[CourseTest, List[TestAttempt]]:
        test = self.gate.get_test(test_id)
        attempts = list(
            TestAttempt.objects.select_related("test")
            .filter(learner_id=learner.pk, test=test)
            .order_by("-started_at", "-id")
        )
        return test, attempts

    def my_attempts(self, learner) -> List[TestAttempt]:
        return list(
            TestAttempt.objects.select_related("test", "test__course")
            .filter(learner_id=learner.pk)
            .order_by("-started_at", "-id")
        )

    # ------------------------------------------------------------------
    # Audit
    # ------------------------------------------------------------------

    def rescore_attempt(self, attempt_id: int) -> Dict[str, Any]:
        """
        Bewertet einen abgeschlossenen Versuch aus den gespeicherten Antworten
        erneut und vergleicht mit dem gespeicherten Ergebnis.
        """
        attempt = self._get_attempt(attempt_id)
        if attempt.status != TestAttempt.Status.COMPLETED:
            raise InvalidStateException("Only completed attempts can be re-scored", attempt.status)

        choices = {}
        for answer in attempt.answers.all():
            if answer.selected_option_id is not None:
                choices[answer.question_id] = answer.selected_option_id
            elif answer.answer_text:
                choices[answer.question_id] = answer.answer_text

        questions = self.scoring_engine.prepare(attempt.test.active_questions())
        result = self.scoring_engine.score(questions, choices, attempt.test.passing_score)
        matches = (
            result.total_points == attempt.total_points
            and result.earned_points == attempt.earned_points
            and result.score_percent == attempt.score
        )
        if not matches:
            self.logger.warning(
                f"Neubewertung von Versuch {attempt.pk} weicht vom gespeicherten Ergebnis ab"
            )
        return {
            "attempt_id": attempt.pk,
            "stored": {
                "score": str(attempt.score),
                "total_points": attempt.total_points,
                "earned_points": attempt.earned_points,
                "passed": attempt.is_passed,
            },
            "recomputed": {
                "score": str(result.score_percent),
                "total_points": result.total_points,
                "earned_points": result.earned_points,
                "passed": result.is_passed,
            },
            "matches": matches,
        }

    # ------------------------------------------------------------------
    # Zertifikat nachträglich
    # ------------------------------------------------------------------

    def issue_certificate_for_attempt(self, learner, attempt_id: int):
        """
        Stellt das Zertifikat für einen bestandenen Versuch (idempotent) aus.

        Returns:
            IssuanceResult
        """
        attempt = self._get_attempt(attempt_id)
        if attempt.learner_id != learner.pk:
            raise UnauthorizedAttemptException()
        if attempt.status != TestAttempt.Status.COMPLETED:
            raise InvalidStateException("Test attempt is not completed", attempt.status)
        if not attempt.is_passed:
            raise InvalidStateException("Test attempt was not passed", attempt.status)

        with transaction.atomic():
            issuance = self.certificate_issuer.issue(learner, attempt.test, attempt)
        if issuance.created:
            self.activity_recorder.record_certificate_earned(learner, issuance.certificate)
        return issuance
