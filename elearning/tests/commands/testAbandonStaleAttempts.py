import datetime
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase, override_settings
from django.utils import timezone

from elearning.models import TestAttempt
from elearning.tests.helpers import create_course, create_learner, create_test


class AbandonStaleAttemptsCommandTests(TestCase):
    @classmethod
    def setUpTestData(cls):
        cls.learner = create_learner()
        cls.test = create_test(create_course(), time_limit_minutes=30)
        cls.attempt = TestAttempt.objects.create(
            test=cls.test,
            learner=cls.learner,
            attempt_number=1,
            started_at=timezone.now() - datetime.timedelta(hours=3),
        )

    def run_command(self, *args):
        out = StringIO()
        call_command("abandon_stale_attempts", *args, stdout=out)
        return out.getvalue()

    def test_dry_run_changes_nothing(self):
        output = self.run_command("--dry-run")
        self.assertIn("Trockenlauf", output)
        self.attempt.refresh_from_db()
        self.assertEqual(self.attempt.status, TestAttempt.Status.IN_PROGRESS)

    def test_abandons_stale_attempt(self):
        output = self.run_command()
        self.assertIn("1 Versuche abgebrochen", output)
        self.attempt.refresh_from_db()
        self.assertEqual(self.attempt.status, TestAttempt.Status.ABANDONED)
        self.assertIsNotNone(self.attempt.completed_at)

    @override_settings(STALE_ATTEMPT_GRACE_MINUTES=600)
    def test_grace_period_from_settings(self):
        output = self.run_command()
        self.assertIn("Keine abgelaufenen Versuche", output)

    def test_grace_period_option_overrides_settings(self):
        self.run_command("--grace-minutes", "0")
        self.attempt.refresh_from_db()
        self.assertEqual(self.attempt.status, TestAttempt.Status.ABANDONED)

    def test_negative_grace_is_rejected(self):
        with self.assertRaises(CommandError):
            self.run_command("--grace-minutes", "-5")
