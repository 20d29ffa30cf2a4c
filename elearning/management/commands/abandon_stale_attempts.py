"""
Abandon Stale Attempts Management Command - DSP (Digital Solutions Platform)

Dieses Management Command bricht Testversuche ab, die noch in Bearbeitung sind,
deren Zeitlimit plus Karenzzeit aber bereits abgelaufen ist.

Features:
- Zeitgesteuerter Übergang in_progress -> abandoned
- Konfigurierbare Karenzzeit über STALE_ATTEMPT_GRACE_MINUTES oder --grace-minutes
- Trockenlauf mit --dry-run
- Detaillierte Ausgabe für Monitoring

Author: DSP Development Team
Version: 1.0.0
"""

from django.core.management.base import BaseCommand, CommandError
from django.conf import settings
import logging

from ...services.attempts import AttemptService

# Logger einrichten
logger = logging.getLogger(__name__)


class Command(BaseCommand):
    """
    Django Management Command für den Abbruch abgelaufener Testversuche.

    Versuche ohne Zeitlimit werden nie automatisch abgebrochen.
    """

    help = "Bricht offene Testversuche ab, deren Zeitlimit plus Karenzzeit abgelaufen ist."

    def add_arguments(self, parser):
        parser.add_argument(
            "--grace-minutes",
            type=int,
            default=None,
            help="Karenzzeit in Minuten nach Ablauf des Zeitlimits (Standard: STALE_ATTEMPT_GRACE_MINUTES)",
        )
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Nur anzeigen, welche Versuche abgebrochen würden",
        )

    def handle(self, *args, **options):
        grace_minutes = options["grace_minutes"]
        if grace_minutes is None:
            grace_minutes = settings.STALE_ATTEMPT_GRACE_MINUTES
        if grace_minutes < 0:
            raise CommandError("--grace-minutes darf nicht negativ sein")

        dry_run = options["dry_run"]
        self.stdout.write(
            f"Suche nach offenen Versuchen, deren Zeitlimit seit mehr als {grace_minutes} Minuten abgelaufen ist..."
        )

        try:
            attempts = AttemptService().abandon_stale_attempts(grace_minutes, dry_run=dry_run)
        except Exception as e:
            logger.error(f"Fehler beim Ausführen von abandon_stale_attempts: {e}", exc_info=True)
            raise CommandError(f"Ein Fehler ist aufgetreten: {e}")

        if not attempts:
            self.stdout.write(self.style.SUCCESS("Keine abgelaufenen Versuche gefunden."))
            return

        for attempt in attempts:
            self.stdout.write(
                f"  - Versuch {attempt.pk} (#{attempt.attempt_number}, Test {attempt.test_id}, "
                f"Lernender {attempt.learner_id}), gestartet am {attempt.started_at.strftime('%Y-%m-%d %H:%M:%S')}"
            )

        if dry_run:
            self.stdout.write(
                self.style.WARNING(f"{len(attempts)} Versuche würden abgebrochen (Trockenlauf).")
            )
        else:
            self.stdout.write(self.style.SUCCESS(f"{len(attempts)} Versuche abgebrochen."))
