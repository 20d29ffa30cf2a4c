import datetime
from decimal import Decimal
from unittest import mock

from django.test import TestCase
from django.utils import timezone

from elearning.models import ActivityLog, Certificate, Enrollment, TestAnswer, TestAttempt
from elearning.services.attempts import AttemptService
from elearning.services.exceptions import (
    AttemptDeniedException,
    DenialReason,
    InvalidStateException,
    IssuanceExhaustedException,
    NotFoundException,
    UnauthorizedAttemptException,
)
from elearning.tests.helpers import (
    add_choice_question,
    add_short_answer_question,
    create_course,
    create_learner,
    create_staff,
    create_test,
    enroll,
)


class AttemptTestBase(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.learner = create_learner(first_name="Max", last_name="Mustermann")
        cls.other = create_learner("erika")
        cls.course = create_course()
        cls.test = create_test(cls.course, passing_score=70)
        cls.question, cls.options = add_choice_question(cls.test, points=10)
        cls.correct, cls.wrong = cls.options[0], cls.options[1]
        enroll(cls.learner, cls.course)
        enroll(cls.other, cls.course)

    def setUp(self):
        self.service = AttemptService()

    def start(self, learner=None):
        return self.service.start_attempt(learner or self.learner, self.test.pk).attempt


class StartAttemptTests(AttemptTestBase):
    def test_start_creates_first_attempt(self):
        result = self.service.start_attempt(self.learner, self.test.pk)
        self.assertFalse(result.resumed)
        self.assertEqual(result.attempt.attempt_number, 1)
        self.assertEqual(result.attempt.status, TestAttempt.Status.IN_PROGRESS)
        self.assertIsNone(result.attempt.score)

    def test_start_twice_resumes_same_attempt(self):
        first = self.service.start_attempt(self.learner, self.test.pk)
        second = self.service.start_attempt(self.learner, self.test.pk)
        self.assertTrue(second.resumed)
        self.assertEqual(first.attempt.pk, second.attempt.pk)
        self.assertEqual(first.attempt.started_at, second.attempt.started_at)
        self.assertEqual(second.attempt.attempt_number, 1)
        self.assertEqual(TestAttempt.objects.count(), 1)

    def test_attempt_numbers_increase_after_failed_and_abandoned_attempts(self):
        first = self.start()
        self.service.finalize_attempt(self.learner, first.pk, {})
        second = self.start()
        self.assertEqual(second.attempt_number, 2)
        self.service.abandon_attempt(second.pk)
        third = self.start()
        self.assertEqual(third.attempt_number, 3)

    def test_attempts_are_numbered_per_learner(self):
        self.start()
        self.assertEqual(self.start(self.other).attempt_number, 1)

    def test_concurrent_start_resumes_winning_attempt(self):
        winner = self.start()
        real_lookup = self.service._open_attempt
        # Erste Prüfung sieht den parallelen Versuch noch nicht
        with mock.patch.object(
            self.service, "_open_attempt", side_effect=[None, real_lookup(self.learner.pk, self.test.pk)]
        ):
            result = self.service.start_attempt(self.learner, self.test.pk)
        self.assertTrue(result.resumed)
        self.assertEqual(result.attempt.pk, winner.pk)
        self.assertEqual(TestAttempt.objects.filter(learner=self.learner).count(), 1)

    def test_start_denied_without_enrollment(self):
        stranger = create_learner("fremd")
        with self.assertRaises(AttemptDeniedException) as ctx:
            self.service.start_attempt(stranger, self.test.pk)
        self.assertEqual(ctx.exception.reason, DenialReason.NOT_ENROLLED)
        self.assertFalse(TestAttempt.objects.filter(learner=stranger).exists())

    def test_resume_re_evaluates_eligibility(self):
        self.start()
        self.test.is_active = False
        self.test.save()
        with self.assertRaises(AttemptDeniedException) as ctx:
            self.start()
        self.assertEqual(ctx.exception.reason, DenialReason.TEST_INACTIVE)


class SubmitAnswerTests(AttemptTestBase):
    def test_answer_is_buffered_without_correctness(self):
        attempt = self.start()
        answer = self.service.submit_answer(self.learner, attempt.pk, self.question.pk, self.correct.pk)
        self.assertEqual(answer.selected_option, self.correct)
        self.assertEqual(answer.answer_text, "A")
        self.assertFalse(answer.is_correct)
        self.assertEqual(answer.points_earned, 0)

    def test_answer_is_updated_in_place(self):
        attempt = self.start()
        self.service.submit_answer(self.learner, attempt.pk, self.question.pk, self.correct.pk)
        self.service.submit_answer(self.learner, attempt.pk, self.question.pk, self.wrong.pk)
        answers = TestAnswer.objects.filter(attempt=attempt)
        self.assertEqual(answers.count(), 1)
        self.assertEqual(answers.get().selected_option, self.wrong)

    def test_option_of_other_question_is_ignored(self):
        _question, foreign_options = add_choice_question(self.test, order=1)
        attempt = self.start()
        answer = self.service.submit_answer(self.learner, attempt.pk, self.question.pk, foreign_options[0].pk)
        self.assertIsNone(answer.selected_option)

    def test_question_of_other_test_is_not_found(self):
        other_test = create_test(create_course("SQL Grundlagen"))
        foreign_question, _options = add_choice_question(other_test)
        attempt = self.start()
        with self.assertRaises(NotFoundException):
            self.service.submit_answer(self.learner, attempt.pk, foreign_question.pk, None)

    def test_foreign_attempt_is_unauthorized(self):
        attempt = self.start()
        with self.assertRaises(UnauthorizedAttemptException):
            self.service.submit_answer(self.other, attempt.pk, self.question.pk, self.correct.pk)

    def test_completed_attempt_rejects_answers(self):
        attempt = self.start()
        self.service.finalize_attempt(self.learner, attempt.pk, {})
        with self.assertRaises(InvalidStateException):
            self.service.submit_answer(self.learner, attempt.pk, self.question.pk, self.correct.pk)


class FinalizeAttemptTests(AttemptTestBase):
    def test_passing_attempt_end_to_end(self):
        attempt = self.start()
        self.service.submit_answer(self.learner, attempt.pk, self.question.pk, self.correct.pk)
        result = self.service.finalize_attempt(
            self.learner, attempt.pk, {str(self.question.pk): self.correct.pk}
        )

        self.assertEqual(result.score.score_percent, Decimal("100.00"))
        self.assertTrue(result.passed)
        self.assertTrue(result.certificate_created)
        self.assertEqual(Certificate.objects.count(), 1)
        self.assertEqual(result.certificate.metadata["score"], 100)
        self.assertEqual(result.certificate.metadata["studentName"], "Max Mustermann")
        self.assertEqual(result.certificate.metadata["courseName"], self.course.title)

        attempt.refresh_from_db()
        self.assertEqual(attempt.status, TestAttempt.Status.COMPLETED)
        self.assertIsNotNone(attempt.completed_at)
        self.assertEqual(attempt.earned_points, 10)
        self.assertEqual(attempt.total_points, 10)

        enrollment = Enrollment.objects.get(learner=self.learner, course=self.course)
        self.assertTrue(enrollment.test_passed)
        self.assertEqual(enrollment.status, Enrollment.Status.COMPLETED)

        with self.assertRaises(InvalidStateException):
            self.service.finalize_attempt(self.learner, attempt.pk, {})
        with self.assertRaises(AttemptDeniedException) as ctx:
            self.start()
        self.assertEqual(ctx.exception.reason, DenialReason.ALREADY_CERTIFIED)

    def test_unanswered_question_fails_without_certificate(self):
        attempt = self.start()
        result = self.service.finalize_attempt(self.learner, attempt.pk, {})
        self.assertEqual(result.score.score_percent, Decimal("0.00"))
        self.assertFalse(result.passed)
        self.assertIsNone(result.certificate)
        self.assertFalse(Certificate.objects.exists())
        attempt.refresh_from_db()
        self.assertEqual(attempt.status, TestAttempt.Status.COMPLETED)
        answer = TestAnswer.objects.get(attempt=attempt)
        self.assertFalse(answer.is_correct)
        self.assertIsNone(answer.selected_option)

    def test_buffered_answers_are_not_trusted(self):
        attempt = self.start()
        self.service.submit_answer(self.learner, attempt.pk, self.question.pk, self.correct.pk)
        TestAnswer.objects.filter(attempt=attempt).update(is_correct=True, points_earned=10)
        result = self.service.finalize_attempt(self.learner, attempt.pk, {self.question.pk: self.wrong.pk})
        self.assertEqual(result.score.earned_points, 0)
        answer = TestAnswer.objects.get(attempt=attempt)
        self.assertEqual(answer.selected_option, self.wrong)
        self.assertFalse(answer.is_correct)
        self.assertEqual(answer.points_earned, 0)

    def test_foreign_learner_cannot_finalize(self):
        attempt = self.start()
        with self.assertRaises(UnauthorizedAttemptException):
            self.service.finalize_attempt(self.other, attempt.pk, {self.question.pk: self.correct.pk})
        attempt.refresh_from_db()
        self.assertEqual(attempt.status, TestAttempt.Status.IN_PROGRESS)

    def test_unknown_attempt(self):
        with self.assertRaises(NotFoundException):
            self.service.finalize_attempt(self.learner, 999999, {})

    def test_failed_issuance_rolls_back_everything(self):
        attempt = self.start()
        with mock.patch.object(
            self.service.certificate_issuer,
            "issue",
            side_effect=IssuanceExhaustedException("exhausted"),
        ):
            with self.assertRaises(IssuanceExhaustedException):
                self.service.finalize_attempt(self.learner, attempt.pk, {self.question.pk: self.correct.pk})

        attempt.refresh_from_db()
        self.assertEqual(attempt.status, TestAttempt.Status.IN_PROGRESS)
        self.assertIsNone(attempt.score)
        self.assertFalse(TestAnswer.objects.filter(attempt=attempt).exists())
        self.assertFalse(Enrollment.objects.get(learner=self.learner, course=self.course).test_passed)
        self.assertFalse(ActivityLog.objects.exists())

        # Versuch kann danach erneut abgegeben werden
        result = self.service.finalize_attempt(self.learner, attempt.pk, {self.question.pk: self.correct.pk})
        self.assertTrue(result.passed)

    def test_time_taken_is_rounded_minutes(self):
        attempt = self.start()
        TestAttempt.objects.filter(pk=attempt.pk).update(
            started_at=timezone.now() - datetime.timedelta(minutes=10, seconds=40)
        )
        result = self.service.finalize_attempt(self.learner, attempt.pk, {})
        self.assertEqual(result.attempt.time_taken_minutes, 11)

    def test_short_answer_counts_towards_total(self):
        add_short_answer_question(self.test, points=5, order=1)
        attempt = self.start()
        result = self.service.finalize_attempt(self.learner, attempt.pk, {self.question.pk: self.correct.pk})
        self.assertEqual(result.score.total_points, 15)
        self.assertEqual(result.score.earned_points, 10)
        self.assertEqual(result.score.score_percent, Decimal("66.67"))
        self.assertFalse(result.passed)
        self.assertEqual(result.to_dict()["pending_manual_grading"], 1)

    def test_inactive_questions_are_ignored(self):
        inactive, options = add_choice_question(self.test, points=90, order=1)
        inactive.is_active = False
        inactive.save()
        attempt = self.start()
        result = self.service.finalize_attempt(self.learner, attempt.pk, {self.question.pk: self.correct.pk})
        self.assertEqual(result.score.total_points, 10)
        self.assertTrue(result.passed)

    def test_finalize_response_fields(self):
        attempt = self.start()
        data = self.service.finalize_attempt(self.learner, attempt.pk, {self.question.pk: self.wrong.pk}).to_dict()
        self.assertEqual(data["score"], "0.00")
        self.assertFalse(data["passed"])
        self.assertEqual(data["passing_score"], 70)
        self.assertEqual(data["correct_answers"], 0)
        self.assertEqual(data["incorrect_answers"], 1)
        self.assertFalse(data["certificate_issued"])
        self.assertIsNone(data["certificate"])


class AbandonAttemptTests(AttemptTestBase):
    def test_abandon_open_attempt(self):
        attempt = self.start()
        abandoned = self.service.abandon_attempt(attempt.pk)
        self.assertEqual(abandoned.status, TestAttempt.Status.ABANDONED)
        self.assertIsNotNone(abandoned.completed_at)

    def test_abandoned_attempt_cannot_be_finalized(self):
        attempt = self.start()
        self.service.abandon_attempt(attempt.pk)
        with self.assertRaises(InvalidStateException):
            self.service.finalize_attempt(self.learner, attempt.pk, {})

    def test_completed_attempt_cannot_be_abandoned(self):
        attempt = self.start()
        self.service.finalize_attempt(self.learner, attempt.pk, {})
        with self.assertRaises(InvalidStateException):
            self.service.abandon_attempt(attempt.pk)

    def test_stale_attempts_respect_time_limit_and_grace(self):
        self.test.time_limit_minutes = 30
        self.test.save()
        stale = self.start()
        fresh = self.start(self.other)
        now = timezone.now()
        TestAttempt.objects.filter(pk=stale.pk).update(started_at=now - datetime.timedelta(minutes=120))
        TestAttempt.objects.filter(pk=fresh.pk).update(started_at=now - datetime.timedelta(minutes=80))

        abandoned = self.service.abandon_stale_attempts(grace_minutes=60, now=now)

        self.assertEqual([a.pk for a in abandoned], [stale.pk])
        self.assertEqual(TestAttempt.objects.get(pk=stale.pk).status, TestAttempt.Status.ABANDONED)
        self.assertEqual(TestAttempt.objects.get(pk=fresh.pk).status, TestAttempt.Status.IN_PROGRESS)

    def test_attempts_without_time_limit_never_go_stale(self):
        attempt = self.start()
        TestAttempt.objects.filter(pk=attempt.pk).update(
            started_at=timezone.now() - datetime.timedelta(days=30)
        )
        self.assertEqual(self.service.abandon_stale_attempts(grace_minutes=0), [])


class ReadAttemptTests(AttemptTestBase):
    def test_owner_and_staff_can_read(self):
        attempt = self.start()
        self.assertEqual(self.service.get_attempt(self.learner, attempt.pk).pk, attempt.pk)
        self.assertEqual(self.service.get_attempt(create_staff(), attempt.pk).pk, attempt.pk)
        with self.assertRaises(UnauthorizedAttemptException):
            self.service.get_attempt(self.other, attempt.pk)

    def test_history_lists_newest_first(self):
        first = self.start()
        self.service.finalize_attempt(self.learner, first.pk, {})
        second = self.start()
        _test, attempts = self.service.test_history(self.learner, self.test.pk)
        self.assertEqual([a.pk for a in attempts], [second.pk, first.pk])
        self.assertEqual([a.pk for a in self.service.my_attempts(self.other)], [])

    def test_rescore_reproduces_stored_result(self):
        attempt = self.start()
        self.service.finalize_attempt(self.learner, attempt.pk, {self.question.pk: self.correct.pk})
        report = self.service.rescore_attempt(attempt.pk)
        self.assertTrue(report["matches"])
        self.assertEqual(report["recomputed"]["score"], "100.00")
        self.assertTrue(report["stored"]["passed"])

    def test_rescore_requires_completed_attempt(self):
        attempt = self.start()
        with self.assertRaises(InvalidStateException):
            self.service.rescore_attempt(attempt.pk)


class ActivityRecordingTests(AttemptTestBase):
    def test_pass_records_test_and_certificate_activity(self):
        attempt = self.start()
        self.service.finalize_attempt(self.learner, attempt.pk, {self.question.pk: self.correct.pk})
        types = set(ActivityLog.objects.filter(learner=self.learner).values_list("activity_type", flat=True))
        self.assertEqual(
            types,
            {ActivityLog.ActivityType.TEST_PASSED, ActivityLog.ActivityType.CERTIFICATE_EARNED},
        )
        passed = ActivityLog.objects.get(activity_type=ActivityLog.ActivityType.TEST_PASSED)
        self.assertEqual(passed.points_earned, 25)
        self.assertEqual(passed.metadata["score"], 100)

    def test_failure_records_attempt_activity(self):
        attempt = self.start()
        self.service.finalize_attempt(self.learner, attempt.pk, {})
        entry = ActivityLog.objects.get(learner=self.learner)
        self.assertEqual(entry.activity_type, ActivityLog.ActivityType.TEST_ATTEMPTED)
        self.assertEqual(entry.points_earned, 5)
        self.assertEqual(entry.title, f"Attempted {self.test.title}")

    def test_activity_failure_does_not_affect_finalize(self):
        attempt = self.start()
        with mock.patch.object(ActivityLog.objects, "create", side_effect=RuntimeError("db down")):
            with self.assertLogs("elearning.services.activity.activity_recorder", level="ERROR"):
                result = self.service.finalize_attempt(
                    self.learner, attempt.pk, {self.question.pk: self.correct.pk}
                )
        self.assertTrue(result.passed)
        self.assertEqual(Certificate.objects.count(), 1)
        self.assertFalse(ActivityLog.objects.exists())
        attempt.refresh_from_db()
        self.assertEqual(attempt.status, TestAttempt.Status.COMPLETED)
